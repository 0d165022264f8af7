"""Tests for the matching board: sections of pairs, each on its own engine."""

import random

import pytest

from lexistack_app.core.error_handlers import EmptyContentError
from lexistack_app.modules.learning.variants import MatchingBoard


def cards_set(count):
    return {'questions': [{'question': f'word{n}', 'answer': f'nghĩa {n}'} for n in range(count)]}


def pair_uids(board):
    """Unmatched (question uid, answer uid) pairs on the current board."""
    section = board.section
    pairs = []
    for pair_id in range(section.pairs):
        q, a = f'q-{pair_id}', f'a-{pair_id}'
        if q not in section.matched:
            pairs.append((q, a))
    return pairs


def wrong_pick(board):
    pairs = pair_uids(board)
    return pairs[0][0], pairs[1][1]


@pytest.fixture
def board(clock):
    return MatchingBoard(rng=random.Random(11), clock=clock)


class TestMatchingBoard:

    def test_sections_of_five(self, board):
        board.start(cards_set(12))
        assert [len(chunk) for chunk in board.chunks] == [5, 5, 2]
        assert board.total_pairs == 12
        snapshot = board.snapshot()
        assert len(snapshot['board']['cards']) == 10
        assert snapshot['sections'] == 3

    def test_cards_show_both_sides(self, board):
        board.start(cards_set(2))
        contents = {card['content'] for card in board.snapshot()['board']['cards']}
        assert contents == {'word0', 'word1', 'nghĩa 0', 'nghĩa 1'}

    def test_empty_set_raises(self, board):
        with pytest.raises(EmptyContentError):
            board.start({'questions': []})

    def test_correct_pair_is_matched(self, board):
        board.start(cards_set(3))
        first, second = pair_uids(board)[0]
        outcome = board.pick(second, first)
        assert outcome.status == 'correct'
        assert outcome.first_attempt is True
        assert {first, second} <= board.section.matched

    def test_wrong_pair_is_not_requeued(self, board, clock):
        board.start(cards_set(3))
        first, second = wrong_pick(board)
        outcome = board.pick(first, second)
        assert outcome.status == 'incorrect'
        assert outcome.requeued is False
        assert board.snapshot()['board']['selected'] == [first, second]
        clock.advance(1.0)
        assert board.snapshot()['board']['selected'] == []
        assert len(board.section.engine.queue) == 3

    def test_same_side_and_same_card_are_rejected(self, board):
        board.start(cards_set(3))
        assert board.pick('q-0', 'q-0').reason == 'same_card'
        assert board.pick('q-0', 'zz').reason == 'unknown_card'
        outcome = board.pick('q-0', 'q-1')
        assert outcome.status == 'incorrect'

    def test_matched_cards_cannot_be_picked_again(self, board, clock):
        board.start(cards_set(3))
        board.pick('q-0', 'a-0')
        clock.advance(0.3)
        assert board.pick('q-0', 'a-0').reason == 'already_matched'

    def test_next_section_loads_after_all_pairs_matched(self, board, clock):
        board.start(cards_set(7))
        assert board.section.number == 0
        for first, second in pair_uids(board):
            board.pick(first, second)
            clock.advance(0.3)
        assert board.finished is False
        assert board.section.number == 1
        assert board.section.pairs == 2

    def test_full_run_scores_first_try_pairs_only(self, board, clock):
        board.start(cards_set(6))
        board.pick(*wrong_pick(board))
        clock.advance(1.0)
        while not board.finished:
            first, second = pair_uids(board)[0]
            board.pick(first, second)
            clock.advance(0.3)
        result = board.result()
        assert result.finished is True
        assert result.total_items == 6
        # the first match after the wrong pick earns nothing
        assert result.score == 5
        snapshot = board.snapshot()
        assert snapshot['status'] == 'finished'
        assert board.pick('q-0', 'a-0').reason == 'finished'

    def test_close(self, board):
        board.start(cards_set(2))
        board.close()
        assert board.pick('q-0', 'a-0').reason == 'closed'
        assert board.snapshot()['status'] == 'closed'
