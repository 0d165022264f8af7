"""Resolve a defense config into a playable level."""

from typing import Any, Dict, Optional

from lexistack_app.core.error_handlers import NotFoundError
from lexistack_app.modules.learning.config import DefenseGameConfig

from .repository import ContentRepository


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class DefenseResolver:
    """
    A defense config only points at a question source by ``(type, sourceId)``.
    Resolving it fetches that set and merges its questions with the game
    tuning stored on the config.
    """

    def __init__(self, defense_repository: Optional[ContentRepository] = None):
        self.defenses = defense_repository or ContentRepository('defense')

    def resolve(self, defense_id: Any) -> Dict[str, Any]:
        config = self.defenses.get_by_id(defense_id)
        if config is None:
            raise NotFoundError('Defense level not found', resource=str(defense_id),
                                back='/content/api/defense')

        source_type = config.get('type')
        source_id = config.get('sourceId')
        try:
            source = ContentRepository(source_type).get_by_id(source_id) if source_id else None
        except NotFoundError:
            source = None
        if source is None:
            raise NotFoundError('Question source not found', resource=f"{source_type}:{source_id}",
                                back='/content/api/defense')

        return {
            'id': config['id'],
            'title': config.get('title'),
            'type': source_type,
            'sourceId': source_id,
            'sourceTitle': source.get('title'),
            'questions': source.get('questions') or [],
            'enemyCount': _as_int(config.get('enemyCount'), DefenseGameConfig.DEFAULT_ENEMY_COUNT),
            'spawnRate': _as_int(config.get('spawnRate'), DefenseGameConfig.DEFAULT_SPAWN_RATE),
            'difficulty': config.get('difficulty') or DefenseGameConfig.DEFAULT_DIFFICULTY,
        }
