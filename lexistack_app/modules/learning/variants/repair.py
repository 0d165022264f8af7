"""
Sentence-repair variant: reorder the given tokens into the correct sentence.
"""

from typing import Any, List

from ..engine.schemas import MANUAL, AdvancePolicy
from ..logics.normalizers import collapse_punctuation_spacing
from .base import SessionVariant


def split_tokens(question: Any) -> List[str]:
    """Tokens come as a list, a '/'-separated string or a plain sentence."""
    if isinstance(question, (list, tuple)):
        return [str(token) for token in question]
    text = str(question or '')
    if '/' in text:
        return [token.strip() for token in text.split('/')]
    return text.split(' ')


def join_tokens(tokens: Any) -> str:
    if isinstance(tokens, str):
        return collapse_punctuation_spacing(tokens)
    return collapse_punctuation_spacing(' '.join(str(token) for token in tokens))


class RepairVariant(SessionVariant):
    key = 'repair'
    label = 'Sentence Repair'
    advance_policy = AdvancePolicy(on_correct=MANUAL, on_incorrect=MANUAL)

    def is_usable(self, item):
        tokens = [t for t in split_tokens(item.get('question')) if t.strip()]
        return bool(tokens) and bool(str(item.get('answer') or '').strip())

    def prepare_entry(self, item, entry, rng):
        entry.extras['tokens'] = split_tokens(item.get('question'))

    def judge(self, item, entry, candidate):
        if not isinstance(candidate, (str, list, tuple)):
            return False
        # exact comparison, no case folding
        return join_tokens(candidate) == str(item.get('answer') or '').strip()

    def expected(self, item, entry):
        return str(item.get('answer') or '').strip()

    def display(self, item, entry):
        return {
            'prompt': str(item.get('instruction') or '').strip(),
            'tokens': list(entry.extras.get('tokens') or []),
        }
