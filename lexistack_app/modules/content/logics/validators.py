"""Validation rules for uploaded content documents."""

from typing import Any, Dict, List

from lexistack_app.core.error_handlers import ValidationError
from lexistack_app.models import CONTENT_CATEGORIES

DEFENSE_SOURCE_TYPES = ('flashcard', 'quiz')


def document_errors(category: str, document: Any) -> List[str]:
    """Return human-readable problems with ``document``; empty when valid."""
    if not isinstance(document, dict):
        return ['Document must be a JSON object']

    errors = []
    if not str(document.get('id') or '').strip():
        errors.append('Missing ID')

    if category == 'defense':
        if document.get('type') not in DEFENSE_SOURCE_TYPES:
            errors.append("Field 'type' must be one of: " + ', '.join(DEFENSE_SOURCE_TYPES))
        if not str(document.get('sourceId') or '').strip():
            errors.append("Missing 'sourceId'")
    else:
        questions = document.get('questions')
        if questions is None:
            errors.append("Missing 'questions'")
        elif not isinstance(questions, list):
            errors.append("Field 'questions' must be a list")
    return errors


def validate_document(category: str, document: Any) -> Dict[str, Any]:
    """Raise ``ValidationError`` for an unusable document, return it otherwise."""
    if category not in CONTENT_CATEGORIES:
        raise ValidationError(f"Unknown category: {category}", errors={'category': category})
    errors = document_errors(category, document)
    if errors:
        raise ValidationError('; '.join(errors), errors={'document': errors})
    return document
