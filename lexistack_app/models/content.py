"""Content set model: one uploaded JSON document per row."""

from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy.sql import func
from sqlalchemy.types import JSON

from ..db_instance import db

CONTENT_CATEGORIES = ('flashcard', 'quiz', 'repair', 'speak', 'phonetic', 'defense')

# Keys stored in dedicated columns; anything else in an uploaded document
# lands in ``settings`` and is merged back by ``to_dict``.
_COLUMN_KEYS = {'id', 'type', 'category', 'title', 'description', 'subject', 'tags', 'questions'}


class ContentSet(db.Model):
    """A named bundle of study items belonging to one activity category."""

    __tablename__ = 'content_sets'
    __table_args__ = (
        db.UniqueConstraint('category', 'set_key', name='uq_content_sets_category_key'),
    )

    content_set_id = db.Column(db.Integer, primary_key=True)
    category = db.Column(db.String(32), nullable=False, index=True)
    set_key = db.Column(db.String(255), nullable=False)
    title = db.Column(db.String(255), nullable=True)
    description = db.Column(db.Text, nullable=True)
    subject = db.Column(db.String(120), nullable=True)
    tags = db.Column(JSON, nullable=True)
    questions = db.Column(JSON, nullable=True)
    settings = db.Column(JSON, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), onupdate=func.now())

    @classmethod
    def from_document(cls, category: str, document: Dict[str, Any]) -> 'ContentSet':
        """Build a row from an uploaded document (whole-object upsert shape)."""

        content_set = cls(category=category, set_key=str(document['id']))
        content_set.apply_document(document)
        return content_set

    def apply_document(self, document: Dict[str, Any]) -> None:
        self.title = document.get('title')
        self.description = document.get('description')
        self.subject = document.get('subject')
        self.tags = self._normalize_tags(document.get('tags'))
        self.questions = list(document.get('questions') or [])
        extra = {key: value for key, value in document.items() if key not in _COLUMN_KEYS}
        if self.category == 'defense' and document.get('type'):
            # A defense config's ``type`` names the category of its question source
            extra['sourceType'] = str(document['type'])
        self.settings = extra or None

    @staticmethod
    def _normalize_tags(value: Any) -> list[str]:
        """Return a de-duplicated list of tag labels."""

        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(',')
        result: list[str] = []
        for tag in value:
            label = str(tag).strip()
            if label and label not in result:
                result.append(label)
        return result

    def has_tag(self, tag: str) -> bool:
        return tag in (self.tags or [])

    def to_dict(self) -> Dict[str, Any]:
        """Return the document shape the front end and sessions consume."""

        data: Dict[str, Any] = dict(self.settings or {})
        data.update({
            'id': self.set_key,
            'category': self.category,
            'type': self.category,
            'title': self.title,
            'description': self.description,
            'subject': self.subject,
            'tags': list(self.tags or []),
            'questions': list(self.questions or []),
        })
        if self.category == 'defense':
            source_type: Optional[str] = data.pop('sourceType', None)
            if source_type:
                data['type'] = source_type
        return data

    def __repr__(self) -> str:
        return f"<ContentSet {self.category}:{self.set_key}>"
