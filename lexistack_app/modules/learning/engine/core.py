# Retry-Queue Session Engine
# One engine instance drives one learning session for any activity variant.

import logging
import random
import time
import uuid
from typing import Any, Callable, Dict, List, Optional, Set

from lexistack_app.core.error_handlers import EmptyContentError
from lexistack_app.core.signals import answer_submitted, session_completed, session_started

from .preparer import build_queue, collect_questions
from .schemas import AUTO_DELAY, MANUAL, SessionQueueEntry, SessionResult, SubmitOutcome
from .timers import DelayedTransition

logger = logging.getLogger(__name__)

STATUS_IDLE = 'idle'
STATUS_ACTIVE = 'active'
STATUS_FINISHED = 'finished'
STATUS_CLOSED = 'closed'


class RetryQueueEngine:
    """
    State machine shared by every session type.

    Items are drawn in random order; an item answered wrongly on its first
    occurrence is appended to the end of the queue once, and only answers
    given without any prior failure count toward the score. The session ends
    when the position runs past the (growing) queue.

    The variant decides how answers are judged and displayed, whether a failed
    item is re-queued, and how the engine moves on after each answer.
    """

    def __init__(self, variant, rng: Optional[random.Random] = None,
                 clock: Optional[Callable[[], float]] = None,
                 session_id: Optional[str] = None):
        self.variant = variant
        self.session_id = session_id or uuid.uuid4().hex
        self._rng = rng or random.Random()
        self._clock = clock or time.monotonic
        self.closed = False
        self._reset()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def _reset(self) -> None:
        self.items: List[Dict[str, Any]] = []
        self.queue: List[SessionQueueEntry] = []
        self.position = 0
        self.first_attempt_failed = False
        self.score = 0
        self.finished = False
        self.started = False
        self.entries_processed = 0
        self.reveal: Optional[str] = None
        self._requeued: Set[int] = set()
        self._pending: Optional[DelayedTransition] = None

    def start(self, content: Any) -> 'RetryQueueEngine':
        """Build a fresh shuffled queue from ``content`` and reset all counters.

        Raises ``EmptyContentError`` when no usable item remains; the engine is
        then left idle with an empty queue.
        """
        self._cancel_pending()
        self._reset()

        raw_items = collect_questions(content)
        arena, queue = build_queue(
            raw_items,
            self._make_entry,
            rng=self._rng,
            is_usable=self.variant.is_usable,
        )
        if not queue:
            logger.info("Session %s refused to start: no questions found", self.session_id)
            raise EmptyContentError('No questions found.', resource=self.variant.key)

        self.items = arena
        self.queue = queue
        self.started = True
        logger.debug("Session %s started (%s): %d items", self.session_id, self.variant.key, len(arena))
        session_started.send(self, session_id=self.session_id, variant=self.variant.key,
                             total_items=len(arena))
        return self

    def restart(self, content: Any) -> 'RetryQueueEngine':
        """Equivalent to ``start`` with a fresh shuffle; nothing carries over."""
        return self.start(content)

    def close(self) -> None:
        """Tear the session down; pending delayed transitions never fire."""
        self._cancel_pending()
        self.closed = True

    def _make_entry(self, item: Dict[str, Any], item_index: int, is_retry: bool) -> SessionQueueEntry:
        # options/masks are drawn per entry, so a retry never reuses the old layout
        entry = SessionQueueEntry(entry_id=uuid.uuid4().hex[:12], item_index=item_index, is_retry=is_retry)
        self.variant.prepare_entry(item, entry, self._rng)
        return entry

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def status(self) -> str:
        self._poll()
        if self.closed:
            return STATUS_CLOSED
        if not self.started:
            return STATUS_IDLE
        return STATUS_FINISHED if self.finished else STATUS_ACTIVE

    @property
    def total_items(self) -> int:
        return len(self.items)

    @property
    def current_entry(self) -> Optional[SessionQueueEntry]:
        self._poll()
        if not self.started or self.finished:
            return None
        return self.queue[self.position]

    @property
    def current_item(self) -> Optional[Dict[str, Any]]:
        entry = self.current_entry
        return self.items[entry.item_index] if entry else None

    @property
    def awaiting(self) -> Optional[str]:
        """What the engine waits for: 'delay', 'continue', 'answer' or None."""
        self._poll()
        if not self.started or self.finished or self.closed:
            return None
        if self._pending is not None:
            return 'delay'
        if self.reveal is not None:
            return 'continue'
        return 'answer'

    def occurrences(self, item_index: int) -> int:
        return sum(1 for entry in self.queue if entry.item_index == item_index)

    def items_cleared(self) -> int:
        """Distinct items whose last queued occurrence lies behind the position."""
        last_seen: Dict[int, int] = {}
        for index, entry in enumerate(self.queue):
            last_seen[entry.item_index] = index
        return sum(1 for last in last_seen.values() if last < self.position)

    def result(self) -> SessionResult:
        self._poll()
        return self.result_snapshot()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def submit_answer(self, candidate: Any) -> SubmitOutcome:
        """Judge ``candidate`` against the current entry.

        Never raises: anything the judge cannot make sense of is incorrect,
        and calls outside an answerable state are reported as ignored.
        """
        self._poll()
        if self.closed:
            return SubmitOutcome.ignored('closed')
        if not self.started:
            return SubmitOutcome.ignored('not_started')
        if self.finished:
            return SubmitOutcome.ignored('finished')
        if self.reveal is not None:
            return SubmitOutcome.ignored('awaiting_transition')

        entry = self.queue[self.position]
        item = self.items[entry.item_index]
        try:
            is_correct = bool(self.variant.judge(item, entry, candidate))
        except Exception as exc:  # judges are content-driven; bad data means "wrong"
            logger.warning("Judge %s failed on %r: %s", self.variant.key, candidate, exc)
            is_correct = False

        policy = self.variant.advance_policy
        if is_correct:
            first_attempt = not self.first_attempt_failed and not entry.is_retry
            if first_attempt:
                self.score += 1
            self.reveal = 'correct'
            outcome = SubmitOutcome(status='correct', first_attempt=first_attempt)
            if policy.on_correct == AUTO_DELAY:
                self._schedule(policy.correct_delay, self._advance, 'advance')
        else:
            requeued = False
            if not self.first_attempt_failed:
                self.first_attempt_failed = True
                if self.variant.requeue_on_failure and entry.item_index not in self._requeued:
                    self._requeued.add(entry.item_index)
                    self.queue.append(self._make_entry(item, entry.item_index, True))
                    requeued = True
            self.reveal = 'incorrect'
            outcome = SubmitOutcome(
                status='incorrect',
                requeued=requeued,
                reveal=self.variant.reveal(item, entry),
            )
            if policy.on_incorrect == AUTO_DELAY:
                self._schedule(policy.incorrect_delay, self._clear_reveal, 'clear')

        logger.debug("Session %s entry %s -> %s", self.session_id, entry.entry_id, outcome.status)
        answer_submitted.send(
            self,
            session_id=self.session_id,
            item_id=item.get('id', entry.item_index),
            is_correct=is_correct,
            first_attempt=outcome.first_attempt,
            is_retry=entry.is_retry,
        )
        return outcome

    def acknowledge(self) -> bool:
        """Continue past a revealed failure (manual ``on_incorrect`` variants).

        A no-op unless such a failure reveal is pending.
        """
        self._poll()
        if self.closed or not self.started or self.finished:
            return False
        if self.reveal != 'incorrect' or self.variant.advance_policy.on_incorrect != MANUAL:
            return False
        self._advance()
        return True

    def proceed(self) -> bool:
        """Continue past a revealed success (manual ``on_correct`` variants)."""
        self._poll()
        if self.closed or not self.started or self.finished:
            return False
        if self.reveal != 'correct' or self.variant.advance_policy.on_correct != MANUAL:
            return False
        self._advance()
        return True

    def continue_session(self) -> bool:
        """Single "continue" button.

        Fires a pending delayed transition right away, otherwise acknowledges
        a revealed failure or proceeds past a revealed success.
        """
        if self.skip_delay():
            return True
        return self.acknowledge() or self.proceed()

    def skip_delay(self) -> bool:
        """Fire a pending delayed transition now (the learner did not wait)."""
        self._poll()
        if self._pending is None:
            return False
        pending, self._pending = self._pending, None
        pending.fire()
        return True

    def poll(self) -> None:
        """Apply any delayed transition that has come due."""
        self._poll()

    def _advance(self) -> None:
        self._pending = None
        self.reveal = None
        self.first_attempt_failed = False
        self.position += 1
        self.entries_processed += 1
        if self.position >= len(self.queue) and not self.finished:
            self.finished = True
            result = self.result_snapshot()
            logger.info("Session %s finished: %s/%s", self.session_id, result.score, result.total_items)
            session_completed.send(self, session_id=self.session_id, variant=self.variant.key,
                                   result=result.to_dict())

    def _clear_reveal(self) -> None:
        self._pending = None
        self.reveal = None
        entry = self.queue[self.position] if self.position < len(self.queue) else None
        if entry is not None:
            self.variant.on_reveal_cleared(self.items[entry.item_index], entry)

    def result_snapshot(self) -> SessionResult:
        return SessionResult(
            score=self.score,
            total_items=self.total_items,
            entries_processed=self.entries_processed,
            retried_items=len(self._requeued),
            finished=self.finished,
        )

    def _schedule(self, delay: float, action: Callable[[], None], label: str) -> None:
        self._cancel_pending()
        if delay <= 0:
            action()
            return
        self._pending = DelayedTransition(self._clock() + delay, action, label)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _poll(self) -> None:
        pending = self._pending
        if pending is None or self.closed:
            return
        if pending.is_due(self._clock()):
            self._pending = None
            pending.fire()

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------
    def request_playback(self) -> Optional[str]:
        """Text to speak for the current entry, or None (no audio / budget spent)."""
        self._poll()
        entry = self.current_entry
        if entry is None:
            return None
        return self.variant.request_playback(self.items[entry.item_index], entry)

    def snapshot(self) -> Dict[str, Any]:
        """Serializable view of the session for the front end."""
        status = self.status
        data: Dict[str, Any] = {
            'session_id': self.session_id,
            'variant': self.variant.key,
            'status': status,
            'position': self.position,
            'queue_length': len(self.queue),
            'total': self.total_items,
            'cleared': self.items_cleared(),
            'score': self.score,
            'awaiting': self.awaiting,
            'policy': self.variant.advance_policy.to_dict(),
        }
        total = self.total_items
        data['progress'] = round(data['cleared'] * 100 / total) if total else 0

        entry = self.current_entry
        if entry is not None:
            item = self.items[entry.item_index]
            data['current'] = {
                'entry_id': entry.entry_id,
                'retry': entry.is_retry,
                'first_attempt_failed': self.first_attempt_failed,
                'reveal': self.reveal,
                **self.variant.display(item, entry),
            }
            if self.reveal == 'incorrect':
                data['current']['answer'] = self.variant.reveal(item, entry)
        if status == STATUS_FINISHED:
            data['result'] = self.result().to_dict()
        return data
