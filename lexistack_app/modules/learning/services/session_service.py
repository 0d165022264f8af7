"""
Learning Session Service.

Single owner of every live learning session: loads the content (fully, before
any engine starts), builds the right runner for the chosen activity, keeps it
in the session store and tears it down on exit.
"""

import logging
from typing import Any, Dict, List, Optional

from lexistack_app.core.error_handlers import NotFoundError, ValidationError
from lexistack_app.modules.audio.services.speech_service import get_speech_service
from lexistack_app.modules.content.services import ContentRepository, DefenseResolver

from ..config import LearningModuleConfig
from ..engine.core import RetryQueueEngine
from ..variants import MatchingBoard, get_variant
from .browse_service import FlashcardDeck
from .defense_game import DefenseGame
from .session_store import SessionRuntime, current_owner_id, get_session_store, new_session_id

logger = logging.getLogger(__name__)

KIND_ENGINE = 'engine'
KIND_MATCHING = 'matching'
KIND_DEFENSE = 'defense'
KIND_BROWSE = 'browse'


class LearningSessionService:

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------
    @staticmethod
    def _set_ids(payload: Dict[str, Any]) -> List[str]:
        set_ids = payload.get('set_ids')
        if set_ids is None and payload.get('set_id') is not None:
            set_ids = [payload['set_id']]
        if not isinstance(set_ids, list) or not set_ids:
            raise ValidationError("Provide 'set_id' or a non-empty 'set_ids' list")
        # a set picked twice is still studied once
        return list(dict.fromkeys(str(set_id) for set_id in set_ids))

    @staticmethod
    def load_content(category: str, set_ids: List[str]) -> List[Dict[str, Any]]:
        """Fetch every requested set; a session never starts on partial data."""
        repository = ContentRepository(category)
        documents = repository.get_many(set_ids)
        found = {document['id'] for document in documents}
        missing = [set_id for set_id in set_ids if set_id not in found]
        if missing:
            raise NotFoundError(f"{category.capitalize()} set not found", resource=','.join(missing),
                                back=f"/content/api/{category}")
        return documents

    @staticmethod
    def _check_variant(category: str, variant_key: str) -> None:
        allowed = LearningModuleConfig.CATEGORY_VARIANTS.get(category)
        if allowed is None:
            raise ValidationError(f"Unknown category: {category}", errors={'category': category})
        if variant_key not in allowed:
            raise ValidationError(
                f"Activity '{variant_key}' is not available for {category} sets",
                errors={'variant': variant_key, 'allowed': list(allowed)},
            )

    # ------------------------------------------------------------------
    # Runtime bookkeeping
    # ------------------------------------------------------------------
    @staticmethod
    def _register(kind: str, runner: Any, content: Any = None) -> SessionRuntime:
        owner_id = current_owner_id()
        session_id = new_session_id()
        if isinstance(runner, RetryQueueEngine):
            runner.session_id = session_id
        runtime = SessionRuntime(session_id=session_id, owner_id=owner_id, kind=kind,
                                 runner=runner, content=content)
        runtime.channel = get_speech_service().acquire(session_id)
        get_session_store().add(runtime)
        logger.debug("Session %s (%s) registered for %s", session_id, kind, owner_id)
        return runtime

    @staticmethod
    def get_runtime(session_id: str, kind: Optional[str] = None) -> SessionRuntime:
        runtime = get_session_store().get(session_id, current_owner_id())
        if kind is not None and runtime.kind != kind:
            raise NotFoundError('Session not found', resource=session_id)
        return runtime

    @staticmethod
    def _speak(runtime: SessionRuntime, text: Optional[str]) -> Optional[Dict[str, str]]:
        if not text or runtime.channel is None:
            return None
        return runtime.channel.speak(text)

    @classmethod
    def _autoplay(cls, runtime: SessionRuntime) -> Optional[Dict[str, str]]:
        """First automatic playback of a new entry (listening, spelling bee)."""
        engine = runtime.runner
        if not engine.variant.autoplay or engine.awaiting != 'answer':
            return None
        entry = engine.current_entry
        if entry is None or entry.entry_id == runtime.autoplayed_entry:
            return None
        runtime.autoplayed_entry = entry.entry_id
        return cls._speak(runtime, engine.request_playback())

    @classmethod
    def _engine_view(cls, runtime: SessionRuntime, **extra) -> Dict[str, Any]:
        audio = cls._autoplay(runtime)
        data = runtime.runner.snapshot()
        data['session_id'] = runtime.session_id
        if audio is not None:
            data['audio'] = audio
        data.update(extra)
        return data

    # ------------------------------------------------------------------
    # Retry-queue sessions
    # ------------------------------------------------------------------
    @classmethod
    def start_session(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        category = str(payload.get('category') or '')
        variant_key = str(payload.get('variant') or '')
        cls._check_variant(category, variant_key)
        if variant_key == 'matching':
            return cls.start_matching(payload)
        if variant_key == 'browse':
            return cls.start_browse(payload)
        if variant_key == 'defense':
            raise ValidationError("Defense levels start from /defense/<defense_id>")

        documents = cls.load_content(category, cls._set_ids(payload))
        variant = get_variant(variant_key, direction=payload.get('direction'))
        engine = RetryQueueEngine(variant)
        # raises EmptyContentError before anything is registered
        engine.start(documents)
        runtime = cls._register(KIND_ENGINE, engine, documents)
        logger.info("Started %s session %s over %s", variant_key, runtime.session_id,
                    [d['id'] for d in documents])
        return cls._engine_view(runtime)

    @classmethod
    def get_state(cls, session_id: str) -> Dict[str, Any]:
        return cls._engine_view(cls.get_runtime(session_id, KIND_ENGINE))

    @classmethod
    def submit_answer(cls, session_id: str, candidate: Any) -> Dict[str, Any]:
        runtime = cls.get_runtime(session_id, KIND_ENGINE)
        engine = runtime.runner
        outcome = engine.submit_answer(candidate)
        audio = None
        if outcome.status != 'ignored' and engine.variant.speak_after_answer:
            audio = cls._speak(runtime, engine.request_playback())
        view = cls._engine_view(runtime, outcome=outcome.to_dict())
        if audio is not None:
            view['audio'] = audio
        return view

    @classmethod
    def continue_session(cls, session_id: str) -> Dict[str, Any]:
        runtime = cls.get_runtime(session_id, KIND_ENGINE)
        moved = runtime.runner.continue_session()
        return cls._engine_view(runtime, moved=moved)

    @classmethod
    def acknowledge(cls, session_id: str) -> Dict[str, Any]:
        runtime = cls.get_runtime(session_id, KIND_ENGINE)
        moved = runtime.runner.acknowledge()
        return cls._engine_view(runtime, moved=moved)

    @classmethod
    def restart(cls, session_id: str) -> Dict[str, Any]:
        runtime = cls.get_runtime(session_id, KIND_ENGINE)
        if runtime.channel is not None:
            runtime.channel.cancel()
        runtime.autoplayed_entry = None
        runtime.runner.restart(runtime.content)
        return cls._engine_view(runtime)

    @classmethod
    def listen(cls, session_id: str) -> Dict[str, Any]:
        """Replay the current prompt; spelling bee enforces its listen budget."""
        runtime = cls.get_runtime(session_id, KIND_ENGINE)
        audio = cls._speak(runtime, runtime.runner.request_playback())
        view = cls._engine_view(runtime)
        view['audio'] = audio
        if audio is None:
            view['reason'] = 'no_listens_left' if runtime.runner.variant.key == 'spelling' else 'no_audio'
        return view

    @classmethod
    def get_result(cls, session_id: str) -> Dict[str, Any]:
        runtime = cls.get_runtime(session_id)
        if runtime.kind not in (KIND_ENGINE, KIND_MATCHING):
            raise ValidationError(f"A {runtime.kind} session has no score", errors={'kind': runtime.kind})
        return runtime.runner.result().to_dict()

    @staticmethod
    def end_session(session_id: str) -> bool:
        """Exit: the runtime is torn down and forgotten."""
        return get_session_store().discard(session_id, current_owner_id())

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------
    @classmethod
    def start_matching(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        category = str(payload.get('category') or 'flashcard')
        cls._check_variant(category, 'matching')
        documents = cls.load_content(category, cls._set_ids(payload))
        board = MatchingBoard().start(documents)
        runtime = cls._register(KIND_MATCHING, board, documents)
        return cls.matching_state(runtime.session_id)

    @classmethod
    def matching_state(cls, session_id: str, **extra) -> Dict[str, Any]:
        runtime = cls.get_runtime(session_id, KIND_MATCHING)
        data = runtime.runner.snapshot()
        data['session_id'] = session_id
        data.update(extra)
        return data

    @classmethod
    def matching_pick(cls, session_id: str, first_uid: Any, second_uid: Any) -> Dict[str, Any]:
        runtime = cls.get_runtime(session_id, KIND_MATCHING)
        outcome = runtime.runner.pick(str(first_uid), str(second_uid))
        return cls.matching_state(session_id, outcome=outcome.to_dict())

    # ------------------------------------------------------------------
    # Defense
    # ------------------------------------------------------------------
    @classmethod
    def start_defense(cls, defense_id: str, difficulty: Optional[str] = None) -> Dict[str, Any]:
        level = DefenseResolver().resolve(defense_id)
        game = DefenseGame(level, difficulty=difficulty)
        runtime = cls._register(KIND_DEFENSE, game, level)
        return cls.defense_state(runtime.session_id)

    @classmethod
    def defense_state(cls, session_id: str, **extra) -> Dict[str, Any]:
        runtime = cls.get_runtime(session_id, KIND_DEFENSE)
        data = runtime.runner.snapshot()
        data['session_id'] = session_id
        data.update(extra)
        return data

    @classmethod
    def defense_spawn(cls, session_id: str) -> Dict[str, Any]:
        game = cls.get_runtime(session_id, KIND_DEFENSE).runner
        enemy = game.spawn()
        return cls.defense_state(session_id, spawned_enemy=enemy)

    @classmethod
    def defense_answer(cls, session_id: str, option: Any,
                       distances: Optional[Dict[str, float]] = None) -> Dict[str, Any]:
        game = cls.get_runtime(session_id, KIND_DEFENSE).runner
        if distances:
            game.report_positions(distances)
        outcome = game.answer(option)
        return cls.defense_state(session_id, outcome=outcome)

    @classmethod
    def defense_breach(cls, session_id: str, enemy_id: Any) -> Dict[str, Any]:
        game = cls.get_runtime(session_id, KIND_DEFENSE).runner
        applied = game.breach(enemy_id)
        return cls.defense_state(session_id, breach=applied)

    # ------------------------------------------------------------------
    # Flashcard browse
    # ------------------------------------------------------------------
    @classmethod
    def start_browse(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        documents = cls.load_content('flashcard', cls._set_ids(payload))
        deck = FlashcardDeck().start(documents)
        runtime = cls._register(KIND_BROWSE, deck, documents)
        return cls.browse_state(runtime.session_id)

    @classmethod
    def browse_state(cls, session_id: str, **extra) -> Dict[str, Any]:
        runtime = cls.get_runtime(session_id, KIND_BROWSE)
        data = runtime.runner.snapshot()
        data['session_id'] = session_id
        data.update(extra)
        return data

    @classmethod
    def browse_move(cls, session_id: str, direction: str) -> Dict[str, Any]:
        deck = cls.get_runtime(session_id, KIND_BROWSE).runner
        moved = deck.next() if direction == 'next' else deck.prev()
        return cls.browse_state(session_id, moved=moved)

    @classmethod
    def browse_speak(cls, session_id: str) -> Dict[str, Any]:
        runtime = cls.get_runtime(session_id, KIND_BROWSE)
        audio = cls._speak(runtime, runtime.runner.speak_text())
        return cls.browse_state(session_id, audio=audio)
