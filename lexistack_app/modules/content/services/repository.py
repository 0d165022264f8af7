"""Content repository: per-category access to stored content sets."""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, List, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from lexistack_app.core.error_handlers import NotFoundError, ValidationError
from lexistack_app.core.signals import content_created, content_deleted
from lexistack_app.models import CONTENT_CATEGORIES, ContentSet, db

logger = logging.getLogger(__name__)


class ContentRepository:
    """
    Read and write the content sets of one category.

    Reads go through an optional per-app cache (``CONTENT_CACHE_ENABLED``)
    holding the full list, per-tag lists and single documents; any write clears
    it. Store failures on reads are logged and reported as empty / missing.
    Documents are returned as copies, so callers may mutate them freely.
    """

    def __init__(self, category: str):
        if category not in CONTENT_CATEGORIES:
            raise NotFoundError(f"Unknown category: {category}", resource=category, back='/')
        self.category = category

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------
    def _cache(self) -> Optional[Dict[str, Any]]:
        if not current_app.config.get('CONTENT_CACHE_ENABLED', True):
            return None
        store = current_app.extensions.setdefault('content_cache', {})
        return store.setdefault(self.category, {'all': None, 'by_tag': {}, 'by_id': {}})

    def clear_cache(self) -> None:
        store = current_app.extensions.get('content_cache')
        if store is not None:
            store.pop(self.category, None)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def _query(self):
        return ContentSet.query.filter_by(category=self.category).order_by(ContentSet.content_set_id)

    def get_all(self) -> List[Dict[str, Any]]:
        cache = self._cache()
        if cache is not None and cache['all'] is not None:
            return copy.deepcopy(cache['all'])
        try:
            documents = [row.to_dict() for row in self._query().all()]
        except SQLAlchemyError as exc:
            logger.error("Error fetching %s sets: %s", self.category, exc)
            db.session.rollback()
            return []
        if cache is not None:
            cache['all'] = documents
            for document in documents:
                cache['by_id'][document['id']] = document
        return copy.deepcopy(documents)

    def get_by_tag(self, tag: str) -> List[Dict[str, Any]]:
        cache = self._cache()
        if cache is not None and tag in cache['by_tag']:
            return copy.deepcopy(cache['by_tag'][tag])
        # only tags in use get a cache slot
        if cache is not None and tag not in self.list_tags():
            return []
        try:
            # tags live in a JSON column; filter in Python to stay backend-neutral
            documents = [row.to_dict() for row in self._query().all() if row.has_tag(tag)]
        except SQLAlchemyError as exc:
            logger.error("Error fetching %s sets for tag %s: %s", self.category, tag, exc)
            db.session.rollback()
            return []
        if cache is not None:
            cache['by_tag'][tag] = documents
            for document in documents:
                cache['by_id'][document['id']] = document
        return copy.deepcopy(documents)

    def get_untagged(self) -> List[Dict[str, Any]]:
        return [document for document in self.get_all() if not document.get('tags')]

    def get_by_id(self, set_id: Any) -> Optional[Dict[str, Any]]:
        set_id = str(set_id)
        cache = self._cache()
        if cache is not None and set_id in cache['by_id']:
            return copy.deepcopy(cache['by_id'][set_id])
        try:
            row = self._query().filter_by(set_key=set_id).first()
        except SQLAlchemyError as exc:
            logger.error("Error getting %s set %s: %s", self.category, set_id, exc)
            db.session.rollback()
            return None
        if row is None:
            return None
        document = row.to_dict()
        if cache is not None:
            cache['by_id'][set_id] = document
        return copy.deepcopy(document)

    def get_many(self, set_ids: List[Any]) -> List[Dict[str, Any]]:
        """Fetch several sets in the given order; unknown ids are skipped."""
        documents = []
        for set_id in set_ids:
            document = self.get_by_id(set_id)
            if document is not None:
                documents.append(document)
        return documents

    def exists(self, set_id: Any) -> bool:
        return self._query().filter_by(set_key=str(set_id)).first() is not None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def save(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """Create a new set; an existing id is never overwritten."""
        if not isinstance(document, dict) or not str(document.get('id') or '').strip():
            raise ValidationError(f"{self.category.capitalize()} data must have an 'id' field.")
        set_id = str(document['id']).strip()
        if self.exists(set_id):
            return {'success': False, 'message': 'ID already exists'}

        row = ContentSet.from_document(self.category, {**document, 'id': set_id})
        db.session.add(row)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            return {'success': False, 'message': 'ID already exists'}
        self.clear_cache()

        logger.info("Saved %s set %s (%d questions)", self.category, set_id, len(row.questions or []))
        content_created.send(
            self,
            category=self.category,
            content_id=set_id,
            title=row.title,
            items_count=len(row.questions or []),
        )
        return {'success': True, 'message': 'Saved successfully'}

    def update(self, set_id: Any, document: Dict[str, Any]) -> Dict[str, Any]:
        """Overwrite the stored document for ``set_id`` (created when missing)."""
        set_id = str(set_id)
        row = self._query().filter_by(set_key=set_id).first()
        if row is None:
            row = ContentSet(category=self.category, set_key=set_id)
            db.session.add(row)
        row.apply_document({**document, 'id': set_id})
        db.session.commit()
        self.clear_cache()
        logger.info("Updated %s set %s", self.category, set_id)
        return {'success': True, 'message': 'Updated successfully'}

    def delete(self, set_id: Any) -> bool:
        set_id = str(set_id)
        row = self._query().filter_by(set_key=set_id).first()
        if row is None:
            return False
        db.session.delete(row)
        db.session.commit()
        self.clear_cache()
        logger.info("Deleted %s set %s", self.category, set_id)
        content_deleted.send(self, category=self.category, content_id=set_id)
        return True

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------
    def list_tags(self) -> List[str]:
        tags: List[str] = []
        for document in self.get_all():
            for tag in document.get('tags') or []:
                if tag not in tags:
                    tags.append(tag)
        return tags

    @staticmethod
    def all_tags() -> Dict[str, List[str]]:
        """Tags in use, per category."""
        return {category: ContentRepository(category).list_tags() for category in CONTENT_CATEGORIES}
