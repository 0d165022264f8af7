"""
Session Variant Base.
Pure logic, no Database access.

A variant is the small configuration object that turns the shared retry-queue
engine into one concrete activity: it judges answers, builds what the front end
renders and picks the advance policy. Variants hold no scoring state.
"""

from typing import Any, Dict, Optional

from ..engine.schemas import AUTO_DELAY, MANUAL, AdvancePolicy, SessionQueueEntry


class SessionVariant:
    key = 'base'
    label = 'Session'
    uses_options = False
    requeue_on_failure = True
    autoplay = False
    speak_after_answer = False
    advance_policy = AdvancePolicy(on_correct=AUTO_DELAY, on_incorrect=MANUAL)

    def is_usable(self, item: Dict[str, Any]) -> bool:
        """Items failing this check are dropped before the queue is built."""
        return bool(self.prompt(item))

    def prepare_entry(self, item: Dict[str, Any], entry: SessionQueueEntry, rng) -> None:
        """Fill per-occurrence state (shuffled options, masks...) on ``entry``."""

    def judge(self, item: Dict[str, Any], entry: SessionQueueEntry, candidate: Any) -> bool:
        raise NotImplementedError

    def prompt(self, item: Dict[str, Any]) -> str:
        return str(item.get('question') or item.get('text') or '').strip()

    def expected(self, item: Dict[str, Any], entry: SessionQueueEntry) -> Any:
        """The accepted answer as shown to the learner after a failure."""
        return item.get('answer')

    def display(self, item: Dict[str, Any], entry: SessionQueueEntry) -> Dict[str, Any]:
        data = {'prompt': self.prompt(item)}
        if self.uses_options and entry.options is not None:
            data['choices'] = list(entry.options)
        return data

    def reveal(self, item: Dict[str, Any], entry: SessionQueueEntry) -> Dict[str, Any]:
        data = {'answer': self.expected(item, entry)}
        if item.get('explanation'):
            data['explanation'] = item['explanation']
        return data

    def on_reveal_cleared(self, item: Dict[str, Any], entry: SessionQueueEntry) -> None:
        """Hook run when an auto-delay failure reveal is cleared in place."""

    def request_playback(self, item: Dict[str, Any], entry: SessionQueueEntry) -> Optional[str]:
        """Text to synthesize for the current entry; None when nothing plays."""
        return None

    def describe(self) -> Dict[str, Any]:
        return {
            'key': self.key,
            'label': self.label,
            'uses_options': self.uses_options,
            'requeue_on_failure': self.requeue_on_failure,
            'policy': self.advance_policy.to_dict(),
        }

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.key}>"
