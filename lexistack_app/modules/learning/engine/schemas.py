from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

AUTO_DELAY = 'auto-delay'
MANUAL = 'manual'


@dataclass(frozen=True)
class AdvancePolicy:
    """How a variant moves on after a judged answer.

    ``on_correct``: ``auto-delay`` advances after ``correct_delay`` seconds,
    ``manual`` waits for an explicit continue.
    ``on_incorrect``: ``auto-delay`` clears the failure reveal after
    ``incorrect_delay`` seconds and keeps the same entry for re-selection,
    ``manual`` keeps the reveal until ``acknowledge()``, which advances.
    """
    on_correct: str = AUTO_DELAY
    on_incorrect: str = MANUAL
    correct_delay: float = 0.5
    incorrect_delay: float = 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'onCorrect': self.on_correct,
            'onIncorrect': self.on_incorrect,
            'correctDelay': self.correct_delay,
            'incorrectDelay': self.incorrect_delay,
        }


@dataclass
class SessionQueueEntry:
    """One occurrence of an item in a session queue.

    The item itself lives once in the engine's arena; the entry only holds its
    index plus the per-occurrence presentation state.
    """
    entry_id: str
    item_index: int
    is_retry: bool = False
    options: Optional[List[Any]] = None
    extras: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SubmitOutcome:
    status: str  # 'correct' | 'incorrect' | 'ignored'
    first_attempt: bool = False
    requeued: bool = False
    reason: Optional[str] = None
    reveal: Optional[Dict[str, Any]] = None

    @property
    def is_correct(self) -> bool:
        return self.status == 'correct'

    @classmethod
    def ignored(cls, reason: str) -> 'SubmitOutcome':
        return cls(status='ignored', reason=reason)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'status': self.status,
            'correct': self.is_correct,
            'first_attempt': self.first_attempt,
            'requeued': self.requeued,
        }
        if self.reason:
            data['reason'] = self.reason
        if self.reveal:
            data['reveal'] = self.reveal
        return data


@dataclass
class SessionResult:
    """Final (or running) score; the denominator is the distinct item count."""
    score: int
    total_items: int
    entries_processed: int
    retried_items: int
    finished: bool

    @property
    def percent(self) -> int:
        if not self.total_items:
            return 0
        return round(self.score * 100 / self.total_items)

    @property
    def score_on_ten(self) -> str:
        """Score scaled to 10 with one decimal, trailing '.0' dropped."""
        if not self.total_items:
            return '0'
        text = f"{self.score * 10 / self.total_items:.1f}"
        return text[:-2] if text.endswith('.0') else text

    def to_dict(self) -> Dict[str, Any]:
        return {
            'score': self.score,
            'total': self.total_items,
            'entries_processed': self.entries_processed,
            'retried_items': self.retried_items,
            'finished': self.finished,
            'percent': self.percent,
            'score_on_ten': self.score_on_ten,
        }
