"""
Free-text variants: flashcard typing, translation typing and spelling bee.
"""

from typing import Any

from ..config import LearningModuleConfig
from ..engine.schemas import AUTO_DELAY, MANUAL, AdvancePolicy
from ..logics.normalizers import matches_any_alternative, normalize_plain
from .base import SessionVariant

DIRECTION_VI_EN = 'vi_en'
DIRECTION_EN_VI = 'en_vi'
DIRECTIONS = (DIRECTION_VI_EN, DIRECTION_EN_VI)


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ''


class TypingVariant(SessionVariant):
    """Show the meaning, type the word."""
    key = 'typing'
    label = 'Typing'
    speak_after_answer = True
    advance_policy = AdvancePolicy(
        on_correct=AUTO_DELAY,
        on_incorrect=MANUAL,
        correct_delay=LearningModuleConfig.TYPING_CORRECT_DELAY,
    )

    def prompt(self, item):
        return str(item.get('answer') or '').strip()

    def target(self, item) -> str:
        return str(item.get('question') or '').strip()

    def is_usable(self, item):
        return bool(self.prompt(item)) and bool(self.target(item))

    def judge(self, item, entry, candidate):
        given = normalize_plain(_text(candidate))
        return bool(given) and given == self.target(item).lower()

    def expected(self, item, entry):
        return self.target(item)

    def request_playback(self, item, entry):
        # the word itself is spoken after every judged answer
        return self.target(item) or None


class TranslateVariant(TypingVariant):
    """
    Translation typing in either direction.

    ``vi_en`` shows the Vietnamese meaning and expects the English word;
    ``en_vi`` shows the word and expects the meaning. Both sides accept any
    ``/``-delimited alternative, compared without Vietnamese tone marks.
    """
    key = 'translate'
    label = 'Translate'

    def __init__(self, direction: str = DIRECTION_VI_EN):
        if direction not in DIRECTIONS:
            raise ValueError(f"Unknown direction: {direction}")
        self.direction = direction

    def prompt(self, item):
        field = 'answer' if self.direction == DIRECTION_VI_EN else 'question'
        return str(item.get(field) or '').strip()

    def target(self, item):
        field = 'question' if self.direction == DIRECTION_VI_EN else 'answer'
        return str(item.get(field) or '').strip()

    def judge(self, item, entry, candidate):
        return matches_any_alternative(_text(candidate), self.target(item))

    def request_playback(self, item, entry):
        return str(item.get('question') or '').strip() or None

    def describe(self):
        data = super().describe()
        data['direction'] = self.direction
        return data


class SpellingVariant(SessionVariant):
    """
    Spelling bee: hear the word, type it.

    Each queue entry gets ``SPELLING_LISTEN_LIMIT`` plays, the automatic first
    play included.
    """
    key = 'spelling'
    label = 'Spelling Bee'
    autoplay = True
    advance_policy = AdvancePolicy(on_correct=MANUAL, on_incorrect=MANUAL)

    def __init__(self, listen_limit: int = LearningModuleConfig.SPELLING_LISTEN_LIMIT):
        self.listen_limit = listen_limit

    def target(self, item) -> str:
        return str(item.get('question') or '').strip()

    def is_usable(self, item):
        return bool(self.target(item))

    def prepare_entry(self, item, entry, rng):
        entry.extras['listens'] = 0

    def judge(self, item, entry, candidate):
        given = normalize_plain(_text(candidate))
        return bool(given) and given == self.target(item).lower()

    def expected(self, item, entry):
        return self.target(item)

    def reveal(self, item, entry):
        data = super().reveal(item, entry)
        data['meaning'] = item.get('answer')
        return data

    def listens_left(self, entry) -> int:
        return max(self.listen_limit - entry.extras.get('listens', 0), 0)

    def display(self, item, entry):
        return {'prompt': '', 'audio': True, 'listens_left': self.listens_left(entry)}

    def request_playback(self, item, entry):
        if self.listens_left(entry) <= 0:
            return None
        entry.extras['listens'] = entry.extras.get('listens', 0) + 1
        return self.target(item)
