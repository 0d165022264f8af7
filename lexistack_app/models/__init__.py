"""Database models for LexiStack."""

from ..db_instance import db
from .content import CONTENT_CATEGORIES, ContentSet
from .user import AdminUser

__all__ = ["db", "ContentSet", "CONTENT_CATEGORIES", "AdminUser"]
