"""
Tests for the Retry-Queue Session Engine

Tests cover:
- Queue construction and the empty-content failure
- First-attempt scoring and the at-most-once re-queue
- Advance policies (auto-delay, manual, acknowledge, continue)
- Teardown of pending delayed transitions
- Completion signal and reported result
"""

import random

import pytest

from lexistack_app.core.error_handlers import EmptyContentError
from lexistack_app.core.signals import answer_submitted, session_completed
from lexistack_app.modules.learning.engine import RetryQueueEngine
from lexistack_app.modules.learning.variants import DefenseVariant, MatchingVariant, QuizVariant


def quiz_set(*ids):
    return {
        'id': 'quiz-1',
        'questions': [
            {'id': item_id, 'text': f'Question {item_id}', 'options': [f'{item_id}-ok', f'{item_id}-no'],
             'correctAnswer': f'{item_id}-ok'}
            for item_id in ids
        ],
    }


def right(engine):
    return engine.current_item['correctAnswer']


def wrong(engine):
    return engine.current_item['correctAnswer'].replace('-ok', '-no')


@pytest.fixture
def make_engine(clock):
    def _make(variant=None, seed=7):
        return RetryQueueEngine(variant or QuizVariant(), rng=random.Random(seed), clock=clock)
    return _make


class TestSessionStart:

    def test_queue_holds_every_item_once(self, make_engine):
        engine = make_engine().start(quiz_set('A', 'B', 'C', 'D', 'E'))
        assert len(engine.queue) == 5
        assert sorted(entry.item_index for entry in engine.queue) == [0, 1, 2, 3, 4]
        assert engine.position == 0
        assert engine.score == 0
        assert engine.status == 'active'

    def test_entries_get_distinct_identities(self, make_engine):
        engine = make_engine().start(quiz_set('A', 'B', 'C'))
        ids = {entry.entry_id for entry in engine.queue}
        assert len(ids) == 3
        assert not any(entry.is_retry for entry in engine.queue)

    def test_options_are_a_permutation(self, make_engine):
        engine = make_engine().start(quiz_set('A'))
        entry = engine.current_entry
        assert sorted(entry.options) == ['A-no', 'A-ok']

    def test_merges_several_sets(self, make_engine):
        content = [quiz_set('A', 'B'), quiz_set('C')]
        engine = make_engine().start(content)
        assert engine.total_items == 3

    @pytest.mark.parametrize('content', [{'questions': []}, {}, None, [], 'not a set'])
    def test_empty_content_refuses_to_start(self, make_engine, content):
        engine = make_engine()
        with pytest.raises(EmptyContentError) as exc:
            engine.start(content)
        assert exc.value.code == 'NO_QUESTIONS'
        assert engine.status == 'idle'
        assert engine.queue == []
        assert engine.finished is False

    def test_unusable_items_are_dropped(self, make_engine):
        content = quiz_set('A', 'B')
        content['questions'].append({'id': 'X', 'text': 'bad', 'options': ['p', 'q'], 'correctAnswer': 'r'})
        engine = make_engine().start(content)
        assert engine.total_items == 2


class TestScoring:

    def test_first_attempt_correct_scores_once(self, make_engine, clock):
        engine = make_engine().start(quiz_set('A'))
        outcome = engine.submit_answer(right(engine))
        assert outcome.status == 'correct'
        assert outcome.first_attempt is True
        assert engine.score == 1
        clock.advance(0.5)
        assert engine.status == 'finished'
        assert len(engine.queue) == 1

    def test_wrong_then_right_scores_zero_and_appears_twice(self, make_engine):
        engine = make_engine().start(quiz_set('A'))
        outcome = engine.submit_answer(wrong(engine))
        assert outcome.status == 'incorrect'
        assert outcome.requeued is True
        assert outcome.reveal == {'answer': 'A-ok'}
        assert engine.acknowledge() is True

        retry = engine.current_entry
        assert retry.is_retry is True
        outcome = engine.submit_answer(right(engine))
        assert outcome.status == 'correct'
        assert outcome.first_attempt is False
        assert engine.score == 0
        assert engine.occurrences(0) == 2

    def test_failed_retry_is_not_requeued_again(self, make_engine):
        engine = make_engine().start(quiz_set('A'))
        engine.submit_answer(wrong(engine))
        engine.acknowledge()
        outcome = engine.submit_answer(wrong(engine))
        assert outcome.requeued is False
        engine.acknowledge()
        assert len(engine.queue) == 2
        assert engine.status == 'finished'

    def test_quiz_scenario_three_items(self, make_engine, clock):
        engine = make_engine().start(quiz_set('A', 'B', 'C'))
        failed_b = False
        while engine.status == 'active':
            if engine.current_item['id'] == 'B' and not failed_b:
                engine.submit_answer(wrong(engine))
                failed_b = True
                engine.acknowledge()
            else:
                engine.submit_answer(right(engine))
                clock.advance(0.5)

        result = engine.result()
        assert result.score == 2
        assert result.entries_processed == 4
        assert result.total_items == 3
        assert result.finished is True
        assert result.retried_items == 1

    def test_score_never_exceeds_items_and_never_decreases(self, make_engine):
        chooser = random.Random(99)
        engine = make_engine(seed=3).start(quiz_set('A', 'B', 'C', 'D', 'E', 'F'))
        last_score = 0
        while engine.status == 'active':
            answer = right(engine) if chooser.random() < 0.5 else wrong(engine)
            engine.submit_answer(answer)
            assert last_score <= engine.score <= engine.total_items
            last_score = engine.score
            engine.continue_session()

    def test_termination_within_twice_the_items(self, make_engine):
        chooser = random.Random(5)
        engine = make_engine().start(quiz_set(*'ABCDEFGH'))
        steps = 0
        while engine.status == 'active':
            steps += 1
            assert steps <= 100
            answer = wrong(engine) if chooser.random() < 0.6 else right(engine)
            engine.submit_answer(answer)
            engine.continue_session()
        assert engine.entries_processed <= 2 * engine.total_items
        assert len(engine.queue) <= 2 * engine.total_items

    def test_queue_only_grows(self, make_engine):
        engine = make_engine().start(quiz_set('A', 'B', 'C'))
        lengths = [len(engine.queue)]
        while engine.status == 'active':
            engine.submit_answer(wrong(engine))
            engine.continue_session()
            lengths.append(len(engine.queue))
        assert lengths == sorted(lengths)
        assert lengths[-1] == 6

    def test_unrecognized_candidates_are_incorrect(self, make_engine):
        engine = make_engine().start(quiz_set('A'))
        for candidate in (None, 42, {'x': 1}, ['A-ok'], 'a-ok'):
            engine.restart(quiz_set('A'))
            assert engine.submit_answer(candidate).status == 'incorrect'
            assert engine.score == 0

    def test_judge_errors_count_as_incorrect(self, make_engine):
        engine = make_engine(MatchingVariant()).start({'questions': [{'question': 'dog', 'answer': 'chó'}]})
        outcome = engine.submit_answer('not a pair')
        assert outcome.status == 'incorrect'


class TestAdvancePolicy:

    def test_correct_answer_waits_for_delay(self, make_engine, clock):
        engine = make_engine().start(quiz_set('A', 'B'))
        engine.submit_answer(right(engine))
        assert engine.awaiting == 'delay'
        assert engine.position == 0
        clock.advance(0.4)
        assert engine.position == 0
        clock.advance(0.2)
        assert engine.awaiting == 'answer'
        assert engine.position == 1

    def test_answers_during_reveal_are_ignored(self, make_engine):
        engine = make_engine().start(quiz_set('A', 'B'))
        engine.submit_answer(wrong(engine))
        outcome = engine.submit_answer(right(engine))
        assert outcome.status == 'ignored'
        assert outcome.reason == 'awaiting_transition'
        assert engine.awaiting == 'continue'

    def test_acknowledge_is_a_noop_without_pending_failure(self, make_engine):
        engine = make_engine().start(quiz_set('A', 'B'))
        assert engine.acknowledge() is False
        assert engine.acknowledge() is False
        assert engine.position == 0
        assert engine.score == 0

        engine.submit_answer(right(engine))
        # success reveal on an auto-delay variant: acknowledge must not advance
        assert engine.acknowledge() is False
        assert engine.position == 0
        assert engine.score == 1

    def test_continue_fires_pending_delay(self, make_engine):
        engine = make_engine().start(quiz_set('A', 'B'))
        engine.submit_answer(right(engine))
        assert engine.continue_session() is True
        assert engine.position == 1
        assert engine.awaiting == 'answer'

    def test_incorrect_auto_delay_keeps_entry(self, make_engine, clock):
        content = {'questions': [{'question': 'dog', 'options': ['chó', 'mèo'], 'correctAnswer': 'chó'}]}
        engine = make_engine(DefenseVariant()).start(content)
        outcome = engine.submit_answer('mèo')
        assert outcome.requeued is False
        assert engine.awaiting == 'delay'
        clock.advance(1.0)
        assert engine.awaiting == 'answer'
        assert engine.position == 0

        outcome = engine.submit_answer('chó')
        assert outcome.status == 'correct'
        assert outcome.first_attempt is False
        # zero delay advances at once
        assert engine.status == 'finished'
        assert engine.score == 0
        assert len(engine.queue) == 1

    def test_close_cancels_pending_transition(self, make_engine, clock):
        engine = make_engine().start(quiz_set('A', 'B'))
        engine.submit_answer(right(engine))
        engine.close()
        clock.advance(10)
        assert engine.position == 0
        assert engine.status == 'closed'
        assert engine.submit_answer('A-ok').reason == 'closed'

    def test_restart_resets_everything(self, make_engine):
        engine = make_engine().start(quiz_set('A', 'B'))
        engine.submit_answer(wrong(engine))
        engine.acknowledge()
        engine.restart(quiz_set('A', 'B'))
        assert len(engine.queue) == 2
        assert engine.position == 0
        assert engine.score == 0
        assert engine.reveal is None
        assert engine.status == 'active'


class TestCompletion:

    def test_finished_signal_fires_once(self, make_engine):
        engine = make_engine().start(quiz_set('A'))
        received = []

        def receiver(sender, **kwargs):
            received.append(kwargs['result'])

        with session_completed.connected_to(receiver, sender=engine):
            engine.submit_answer(wrong(engine))
            engine.acknowledge()
            engine.submit_answer(wrong(engine))
            engine.acknowledge()
            engine.acknowledge()
            engine.continue_session()
        assert len(received) == 1
        assert received[0]['score'] == 0
        assert received[0]['total'] == 1

    def test_answer_signal_reports_retry_flag(self, make_engine):
        engine = make_engine().start(quiz_set('A'))
        seen = []

        def receiver(sender, **kwargs):
            seen.append((kwargs['is_correct'], kwargs['is_retry']))

        with answer_submitted.connected_to(receiver, sender=engine):
            engine.submit_answer(wrong(engine))
            engine.acknowledge()
            engine.submit_answer(right(engine))
        assert seen == [(False, False), (True, True)]

    def test_answers_after_finish_are_ignored(self, make_engine):
        engine = make_engine().start(quiz_set('A'))
        engine.submit_answer(right(engine))
        engine.skip_delay()
        outcome = engine.submit_answer('A-ok')
        assert outcome.status == 'ignored'
        assert outcome.reason == 'finished'
        assert engine.score == 1

    def test_progress_counts_distinct_items(self, make_engine):
        engine = make_engine().start(quiz_set('A', 'B'))
        engine.submit_answer(wrong(engine))
        engine.acknowledge()
        snapshot = engine.snapshot()
        # the failed item still has its retry ahead
        assert snapshot['cleared'] == 0
        assert snapshot['progress'] == 0
        engine.submit_answer(right(engine))
        engine.skip_delay()
        assert engine.snapshot()['progress'] == 50

    def test_snapshot_reveals_answer_after_failure(self, make_engine):
        engine = make_engine().start(quiz_set('A'))
        engine.submit_answer(wrong(engine))
        current = engine.snapshot()['current']
        assert current['reveal'] == 'incorrect'
        assert current['answer'] == {'answer': 'A-ok'}
        assert sorted(current['choices']) == ['A-no', 'A-ok']

    def test_finished_snapshot_carries_result(self, make_engine):
        engine = make_engine().start(quiz_set('A', 'B'))
        while engine.status == 'active':
            engine.submit_answer(right(engine))
            engine.skip_delay()
        snapshot = engine.snapshot()
        assert snapshot['status'] == 'finished'
        assert snapshot['result']['score'] == 2
        assert snapshot['result']['score_on_ten'] == '10'
        assert 'current' not in snapshot
