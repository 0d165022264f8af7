"""Cancellable delayed transitions, evaluated lazily against a clock."""

from typing import Callable


class DelayedTransition:
    """A state transition due at ``due_at`` on the engine's clock.

    The engine polls pending transitions on every interaction, so nothing
    fires on a torn-down session once ``cancel()`` has been called.
    """

    def __init__(self, due_at: float, action: Callable[[], None], label: str):
        self.due_at = due_at
        self.label = label
        self._action = action
        self.cancelled = False
        self.fired = False

    def is_due(self, now: float) -> bool:
        return not self.cancelled and not self.fired and now >= self.due_at

    def fire(self) -> None:
        if self.cancelled or self.fired:
            return
        self.fired = True
        self._action()

    def cancel(self) -> None:
        self.cancelled = True

    def __repr__(self) -> str:
        return f"<DelayedTransition {self.label} due={self.due_at:.3f} cancelled={self.cancelled}>"
