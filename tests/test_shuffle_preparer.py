"""Tests for the shuffle utility and the session data preparer."""

import random

from lexistack_app.modules.learning.engine import SessionQueueEntry, build_queue, collect_questions, shuffled


def _entry(item, index, is_retry):
    return SessionQueueEntry(entry_id=f'e{index}', item_index=index, is_retry=is_retry)


class TestShuffled:

    def test_returns_permutation_without_mutating(self):
        source = [1, 2, 3, 4, 5, 6]
        result = shuffled(source, random.Random(1))
        assert sorted(result) == source
        assert source == [1, 2, 3, 4, 5, 6]
        assert result is not source

    def test_same_seed_same_order(self):
        assert shuffled(range(10), random.Random(42)) == shuffled(range(10), random.Random(42))

    def test_empty_and_single(self):
        assert shuffled([]) == []
        assert shuffled(['only']) == ['only']

    def test_every_order_reachable(self):
        rng = random.Random(0)
        seen = {tuple(shuffled('abc', rng)) for _ in range(300)}
        assert len(seen) == 6


class TestCollectQuestions:

    def test_single_set(self):
        items = collect_questions({'id': 's', 'questions': [{'question': 'a'}, {'question': 'b'}]})
        assert [i['question'] for i in items] == ['a', 'b']

    def test_merges_list_of_sets_in_order(self):
        raw = [{'questions': [{'question': 'a'}]}, {'questions': [{'question': 'b'}, {'question': 'c'}]}]
        assert [i['question'] for i in collect_questions(raw)] == ['a', 'b', 'c']

    def test_drops_malformed_parts(self):
        raw = [{'questions': 'oops'}, 'junk', {'questions': [{'question': 'ok'}, 'nope', None]}]
        assert collect_questions(raw) == [{'question': 'ok'}]

    def test_none_and_missing_questions(self):
        assert collect_questions(None) == []
        assert collect_questions({'id': 'x'}) == []
        assert collect_questions(42) == []

    def test_items_are_copies(self):
        source = {'questions': [{'question': 'a'}]}
        items = collect_questions(source)
        items[0]['question'] = 'changed'
        assert source['questions'][0]['question'] == 'a'


class TestBuildQueue:

    def test_arena_keeps_source_order_queue_is_shuffled(self):
        items = [{'id': n} for n in range(8)]
        arena, queue = build_queue(items, _entry, rng=random.Random(3))
        assert [i['id'] for i in arena] == list(range(8))
        assert sorted(e.item_index for e in queue) == list(range(8))
        assert not any(e.is_retry for e in queue)

    def test_unusable_items_are_filtered(self):
        items = [{'id': 1, 'ok': True}, {'id': 2, 'ok': False}, {'id': 3, 'ok': True}]
        arena, queue = build_queue(items, _entry, rng=random.Random(0), is_usable=lambda i: i['ok'])
        assert [i['id'] for i in arena] == [1, 3]
        assert len(queue) == 2

    def test_make_entry_receives_item(self):
        seen = []

        def make_entry(item, index, is_retry):
            seen.append((item['id'], index))
            return _entry(item, index, is_retry)

        build_queue([{'id': 'a'}, {'id': 'b'}], make_entry, rng=random.Random(0))
        assert sorted(seen) == [('a', 0), ('b', 1)]
