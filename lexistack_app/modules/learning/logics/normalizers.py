# File: lexistack_app/modules/learning/logics/normalizers.py
# Pure text helpers used by the answer judges. No Flask, no DB.

import re
import unicodedata
from typing import Any, List

_COMBINING_MARKS = re.compile(r'[\u0300-\u036f]')
_SPACE_BEFORE_PUNCT = re.compile(r'\s+([,!.?;:])')


def remove_vietnamese_tones(text: Any) -> str:
    """
    Bỏ dấu tiếng Việt: 'Xin chào' -> 'xin chao'.

    Decomposes to NFD, drops the combining marks, maps đ/Đ to d and returns the
    lowercased, trimmed result.
    """
    if text is None:
        return ''
    decomposed = unicodedata.normalize('NFD', str(text))
    stripped = _COMBINING_MARKS.sub('', decomposed)
    stripped = stripped.replace('đ', 'd').replace('Đ', 'D')
    return stripped.lower().strip()


def normalize_plain(text: Any) -> str:
    """Trim and lowercase, keeping diacritics."""
    if text is None:
        return ''
    return str(text).strip().lower()


def split_alternatives(answer: Any) -> List[str]:
    """'Xin chào/Chào' -> ['Xin chào', 'Chào']; blank alternatives are dropped."""
    if answer is None:
        return []
    return [part.strip() for part in str(answer).split('/') if part.strip()]


def matches_any_alternative(candidate: Any, answer: Any, strip_tones: bool = True) -> bool:
    """True when ``candidate`` equals one of the ``/``-delimited alternatives.

    Whole-string comparison after normalization; substrings never match.
    """
    normalize = remove_vietnamese_tones if strip_tones else normalize_plain
    given = normalize(candidate)
    if not given:
        return False
    return any(normalize(alt) == given for alt in split_alternatives(answer))


def collapse_punctuation_spacing(text: str) -> str:
    """'Hello , world !' -> 'Hello, world!'"""
    return _SPACE_BEFORE_PUNCT.sub(r'\1', text).strip()
