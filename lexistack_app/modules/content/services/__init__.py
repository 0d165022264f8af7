from .defense_resolver import DefenseResolver
from .import_service import ImportResult, ImportService
from .repository import ContentRepository

__all__ = ['ContentRepository', 'DefenseResolver', 'ImportResult', 'ImportService']
