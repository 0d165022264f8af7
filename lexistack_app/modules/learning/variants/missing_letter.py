"""
Missing-letter variant: fill the hidden letters of a word.
"""

from typing import Any, List

from ..config import LearningModuleConfig
from ..engine.schemas import AUTO_DELAY, MANUAL, AdvancePolicy
from .base import SessionVariant

MASK_CHAR = '_'


def letter_positions(word: str) -> List[int]:
    """Indexes of ASCII letters; spaces, hyphens and accents are never hidden."""
    return [i for i, ch in enumerate(word) if ch.isascii() and ch.isalpha()]


def hidden_count(letters: int) -> int:
    for max_len, hide in LearningModuleConfig.MISSING_LETTER_RULES:
        if letters <= max_len:
            return min(hide, letters)
    return min(LearningModuleConfig.MISSING_LETTER_MAX_HIDDEN, letters)


def typed_letters(letters: Any) -> List[str]:
    """Normalize a typed answer (string or list of slots) into one entry per slot."""
    if isinstance(letters, str):
        return list(letters.strip())
    if isinstance(letters, (list, tuple)):
        return [str(letter).strip() for letter in letters]
    return []


def rebuild_word(word: str, masked: List[int], letters: Any) -> str:
    """Put ``letters`` (typed in masked order) back into ``word``."""
    typed = typed_letters(letters)
    chars = list(word)
    for slot, index in enumerate(sorted(masked)):
        chars[index] = typed[slot] if slot < len(typed) else ''
    return ''.join(chars)


class MissingLetterVariant(SessionVariant):
    key = 'missing_letter'
    label = 'Missing Letter'
    advance_policy = AdvancePolicy(
        on_correct=AUTO_DELAY,
        on_incorrect=MANUAL,
        correct_delay=LearningModuleConfig.MISSING_LETTER_CORRECT_DELAY,
    )

    def target(self, item) -> str:
        return str(item.get('speak') or item.get('question') or '').strip()

    def is_usable(self, item):
        return bool(letter_positions(self.target(item)))

    def prepare_entry(self, item, entry, rng):
        positions = letter_positions(self.target(item))
        picked = rng.sample(positions, hidden_count(len(positions)))
        entry.extras['masked'] = sorted(picked)

    def judge(self, item, entry, candidate):
        word = self.target(item)
        masked = entry.extras.get('masked') or []
        typed = typed_letters(candidate)
        # exactly one letter per hidden slot
        if len(typed) != len(masked) or not all(len(ch) == 1 and ch.isascii() and ch.isalpha() for ch in typed):
            return False
        attempt = rebuild_word(word, masked, typed)
        return attempt.lower() == word.lower()

    def expected(self, item, entry):
        return self.target(item)

    def display(self, item, entry):
        word = self.target(item)
        masked = set(entry.extras.get('masked') or [])
        pattern = ''.join(MASK_CHAR if i in masked else ch for i, ch in enumerate(word))
        return {
            'prompt': str(item.get('answer') or '').strip(),
            'pattern': pattern,
            'masked': sorted(masked),
            'missing': len(masked),
        }
