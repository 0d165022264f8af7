"""Batch import of uploaded JSON content documents."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from lexistack_app.core.error_handlers import ValidationError
from lexistack_app.models import db

from ..logics.validators import document_errors
from .repository import ContentRepository

logger = logging.getLogger(__name__)

STATUS_IMPORTED = 'imported'
STATUS_SKIPPED = 'skipped'
STATUS_ERROR = 'error'


@dataclass
class ImportResult:
    name: str
    status: str
    message: str
    id: Optional[str] = None
    title: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ImportService:
    """
    Import documents one by one; a bad or duplicate file never aborts the batch.

    Each file ends up ``imported``, ``skipped`` (id already exists) or
    ``error`` (invalid JSON or missing required fields).
    """

    def __init__(self, category: str, repository: Optional[ContentRepository] = None):
        self.category = category
        self.repository = repository or ContentRepository(category)

    def import_files(self, files: Iterable[Any]) -> List[ImportResult]:
        """``files`` are werkzeug ``FileStorage`` objects from a multipart upload."""
        batch: List[Tuple[str, Any]] = []
        results: List[ImportResult] = []
        for storage in files:
            name = getattr(storage, 'filename', None) or 'upload.json'
            try:
                raw = storage.read()
                payload = json.loads(raw.decode('utf-8-sig') if isinstance(raw, bytes) else raw)
            except (UnicodeDecodeError, json.JSONDecodeError) as exc:
                logger.warning("Import %s: invalid JSON in %s (%s)", self.category, name, exc)
                results.append(ImportResult(name, STATUS_ERROR, f"Error processing {name}: invalid JSON"))
                continue
            batch.append((name, payload))
        return results + self.import_documents(batch)

    def import_documents(self, documents: Iterable[Tuple[str, Any]]) -> List[ImportResult]:
        return [self.import_document(name, payload) for name, payload in documents]

    def import_document(self, name: str, document: Any) -> ImportResult:
        errors = document_errors(self.category, document)
        if errors:
            message = f"Error processing {name}: " + '; '.join(errors)
            logger.warning("Import %s: %s", self.category, message)
            return ImportResult(name, STATUS_ERROR, message)

        set_id = str(document['id']).strip()
        title = document.get('title')
        try:
            outcome = self.repository.save(document)
        except ValidationError as exc:
            return ImportResult(name, STATUS_ERROR, f"Error processing {name}: {exc.message}", id=set_id)
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.error("Import %s: store failure on %s: %s", self.category, name, exc)
            return ImportResult(name, STATUS_ERROR, f"Error processing {name}: storage failure", id=set_id)

        if outcome['success']:
            return ImportResult(name, STATUS_IMPORTED, f"Imported: {title or name}", id=set_id, title=title)
        logger.warning("Import %s: skipped %s (%s)", self.category, name, outcome['message'])
        return ImportResult(name, STATUS_SKIPPED, f"Skipped {name}: {outcome['message']}", id=set_id, title=title)

    @staticmethod
    def summarize(results: List[ImportResult]) -> Dict[str, int]:
        summary = {STATUS_IMPORTED: 0, STATUS_SKIPPED: 0, STATUS_ERROR: 0}
        for result in results:
            summary[result.status] += 1
        return summary
