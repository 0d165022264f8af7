"""
Defense Game Service.

Server-side state of the tower-defense mini-game. The playing field (movement,
collision, animation) is rendered by the browser; it reports enemy distances
and breaches here. Questions are judged by a quiz engine whose supply is
reshuffled whenever it runs out, so the game never starves for questions.
"""

import itertools
import logging
import random
from typing import Any, Dict, List, Optional

from lexistack_app.core.error_handlers import ValidationError

from ..config import DefenseGameConfig
from ..engine.core import RetryQueueEngine
from ..variants.choice import DefenseVariant

logger = logging.getLogger(__name__)

STATE_PLAYING = 'playing'
STATE_WON = 'won'
STATE_LOST = 'lost'


class DefenseGame:

    key = 'defense'

    def __init__(self, level: Dict[str, Any], difficulty: Optional[str] = None,
                 rng: Optional[random.Random] = None, clock=None):
        difficulty = difficulty or level.get('difficulty') or DefenseGameConfig.DEFAULT_DIFFICULTY
        if difficulty not in DefenseGameConfig.DIFFICULTIES:
            raise ValidationError(f"Unknown difficulty: {difficulty}", errors={'difficulty': difficulty})

        self.level = level
        self.difficulty = difficulty
        self.enemy_count = int(level.get('enemyCount') or DefenseGameConfig.DEFAULT_ENEMY_COUNT)
        self.spawn_rate = int(level.get('spawnRate') or DefenseGameConfig.DEFAULT_SPAWN_RATE)
        self._rng = rng or random.Random()
        self._content = {'questions': level.get('questions') or []}
        self._ids = itertools.count(1)

        variant = DefenseVariant(pool=self._content['questions'])
        self.engine = RetryQueueEngine(variant, rng=self._rng, clock=clock)
        self.closed = False
        self._reset()

    def _reset(self) -> None:
        self.tower_hp = DefenseGameConfig.TOWER_HP_MAX
        self.kills = 0
        self.spawned = 0
        self.enemies: List[Dict[str, Any]] = []
        self.state = STATE_PLAYING
        # raises EmptyContentError when the source set has nothing usable
        self.engine.start(self._content)

    def start(self) -> 'DefenseGame':
        return self

    def restart(self) -> 'DefenseGame':
        self._reset()
        return self

    # ------------------------------------------------------------------
    # Enemies
    # ------------------------------------------------------------------
    def pick_skin(self) -> int:
        weights = DefenseGameConfig.DIFFICULTIES[self.difficulty]
        roll = self._rng.random()
        cumulative = 0.0
        for skin, weight in enumerate(weights, start=1):
            cumulative += weight
            if roll < cumulative:
                return skin
        # rounding leftovers go to the last tier with a non-zero weight
        return max(skin for skin, weight in enumerate(weights, start=1) if weight > 0)

    def spawn(self) -> Optional[Dict[str, Any]]:
        """Add one enemy; None once the level's enemy budget is spent."""
        if self.state != STATE_PLAYING or self.spawned >= self.enemy_count:
            return None
        skin = self.pick_skin()
        props = DefenseGameConfig.SKIN_PROPS[skin]
        enemy = {
            'id': next(self._ids),
            'skin': skin,
            'hp': props['hp'],
            'max_hp': props['hp'],
            'size': props['size'],
            'speed_mod': props['speed_mod'],
            'distance': None,
        }
        self.enemies.append(enemy)
        self.spawned += 1
        return enemy

    def report_positions(self, distances: Dict[Any, float]) -> None:
        """Update each enemy's distance to the tower (as measured by the client)."""
        for enemy in self.enemies:
            value = distances.get(enemy['id'], distances.get(str(enemy['id'])))
            if value is not None:
                enemy['distance'] = float(value)

    def nearest_enemy(self) -> Optional[Dict[str, Any]]:
        if not self.enemies:
            return None
        # enemies without a reported distance rank behind measured ones, oldest first
        return min(self.enemies, key=lambda e: (e['distance'] is None, e['distance'] or 0.0, e['id']))

    def breach(self, enemy_id: Any) -> bool:
        """An enemy reached the tower: it is removed and the tower loses 1 HP."""
        if self.state != STATE_PLAYING:
            return False
        enemy = self._find(enemy_id)
        if enemy is None:
            return False
        self.enemies.remove(enemy)
        self.tower_hp -= 1
        if self.tower_hp <= 0:
            self.tower_hp = 0
            self._end(STATE_LOST)
        return True

    def _find(self, enemy_id: Any) -> Optional[Dict[str, Any]]:
        for enemy in self.enemies:
            if str(enemy['id']) == str(enemy_id):
                return enemy
        return None

    # ------------------------------------------------------------------
    # Questions
    # ------------------------------------------------------------------
    def answer(self, option: Any) -> Dict[str, Any]:
        if self.state != STATE_PLAYING:
            return {'status': 'ignored', 'reason': self.state}

        self._refill()
        outcome = self.engine.submit_answer(option)
        data = outcome.to_dict()
        if outcome.is_correct:
            target = self.nearest_enemy()
            if target is not None:
                target['hp'] -= 1
                data['hit'] = target['id']
                if target['hp'] <= 0:
                    self.enemies.remove(target)
                    self.kills += 1
                    data['killed'] = target['id']
                    if self.kills >= self.enemy_count:
                        self._end(STATE_WON)
            self._refill()
        return data

    def _refill(self) -> None:
        """Start a fresh shuffled round once every question has been answered."""
        if self.engine.status == 'finished':
            logger.debug("Defense %s: question supply reshuffled", self.level.get('id'))
            self.engine.restart(self._content)

    def _end(self, state: str) -> None:
        self.state = state
        logger.info("Defense %s %s on %s (%d kills)", self.level.get('id'), state, self.difficulty, self.kills)

    def close(self) -> None:
        self.engine.close()
        self.closed = True

    def snapshot(self) -> Dict[str, Any]:
        if self.state == STATE_PLAYING and not self.closed:
            self._refill()
        question = None
        entry = self.engine.current_entry
        if entry is not None and self.state == STATE_PLAYING:
            item = self.engine.items[entry.item_index]
            question = {
                'entry_id': entry.entry_id,
                'reveal': self.engine.reveal,
                **self.engine.variant.display(item, entry),
            }
        return {
            'variant': self.key,
            'status': 'closed' if self.closed else self.state,
            'level': {key: self.level.get(key) for key in ('id', 'title', 'type', 'sourceId')},
            'difficulty': self.difficulty,
            'enemy_count': self.enemy_count,
            'spawn_rate': self.spawn_rate,
            'tower_hp': self.tower_hp,
            'tower_hp_max': DefenseGameConfig.TOWER_HP_MAX,
            'kills': self.kills,
            'spawned': self.spawned,
            'enemies': [dict(enemy) for enemy in self.enemies],
            'question': question,
        }
