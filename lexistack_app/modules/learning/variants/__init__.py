# Activity variants plugged into the retry-queue engine.
from lexistack_app.core.error_handlers import ValidationError

from .base import SessionVariant
from .choice import DefenseVariant, DefinitionVariant, ListeningVariant, PhoneticVariant, QuizVariant
from .matching import MatchingBoard, MatchingSection, MatchingVariant
from .missing_letter import MissingLetterVariant
from .repair import RepairVariant
from .typing import DIRECTIONS, SpellingVariant, TranslateVariant, TypingVariant

VARIANTS = {
    cls.key: cls
    for cls in (
        QuizVariant,
        DefinitionVariant,
        ListeningVariant,
        PhoneticVariant,
        DefenseVariant,
        TypingVariant,
        TranslateVariant,
        SpellingVariant,
        MissingLetterVariant,
        RepairVariant,
        MatchingVariant,
    )
}


def get_variant(key: str, **options) -> SessionVariant:
    """Instantiate the variant registered under ``key``.

    Only ``translate`` takes an option (``direction``); other options are ignored.
    """
    cls = VARIANTS.get(key)
    if cls is None:
        raise ValidationError(f"Unknown activity: {key}", errors={'variant': key})
    if cls is TranslateVariant:
        direction = options.get('direction') or DIRECTIONS[0]
        try:
            return cls(direction=direction)
        except ValueError as exc:
            raise ValidationError(str(exc), errors={'direction': direction}) from exc
    return cls()


__all__ = [
    'VARIANTS',
    'get_variant',
    'SessionVariant',
    'QuizVariant',
    'DefinitionVariant',
    'ListeningVariant',
    'PhoneticVariant',
    'DefenseVariant',
    'TypingVariant',
    'TranslateVariant',
    'SpellingVariant',
    'MissingLetterVariant',
    'RepairVariant',
    'MatchingVariant',
    'MatchingSection',
    'MatchingBoard',
]
