# Retry-queue session engine shared by every learning activity.
from .core import (
    RetryQueueEngine,
    STATUS_ACTIVE,
    STATUS_CLOSED,
    STATUS_FINISHED,
    STATUS_IDLE,
)
from .preparer import build_queue, collect_questions
from .schemas import AUTO_DELAY, MANUAL, AdvancePolicy, SessionQueueEntry, SessionResult, SubmitOutcome
from .shuffle import shuffled
from .timers import DelayedTransition

__all__ = [
    'RetryQueueEngine',
    'STATUS_ACTIVE',
    'STATUS_CLOSED',
    'STATUS_FINISHED',
    'STATUS_IDLE',
    'build_queue',
    'collect_questions',
    'AUTO_DELAY',
    'MANUAL',
    'AdvancePolicy',
    'SessionQueueEntry',
    'SessionResult',
    'SubmitOutcome',
    'shuffled',
    'DelayedTransition',
]
