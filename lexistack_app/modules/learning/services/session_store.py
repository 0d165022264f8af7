"""
Live Session Store.

Every running activity (engine, matching board, defense game, flashcard deck)
is owned by exactly one browser. The owner id lives in the Flask session
cookie; the runtime objects stay in process memory, keyed by session id.
"""

import logging
import threading
import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from flask import current_app, session

from lexistack_app.core.error_handlers import NotFoundError

logger = logging.getLogger(__name__)

OWNER_SESSION_KEY = 'learner_id'


@dataclass
class SessionRuntime:
    session_id: str
    owner_id: str
    kind: str
    runner: Any
    content: Any = None
    channel: Any = None
    # store clock reading of the last add/get; drives idle expiry
    last_seen: float = 0.0
    # entry id that already got its automatic first playback
    autoplayed_entry: Optional[str] = None

    def close(self) -> None:
        """Teardown: cancel pending transitions and give back the speech lease."""
        self.runner.close()
        if self.channel is not None:
            self.channel.release()


class SessionStore:
    """
    Runtimes in least-recently-used order.

    A runtime leaves the store when its owner exits it, when the owner opens
    more than ``limit_per_owner`` sessions, when it sits idle for ``idle_ttl``
    seconds, or when the whole store exceeds ``max_total``. Every removal
    closes the runtime.
    """

    def __init__(self, limit_per_owner: int = 5, idle_ttl: Optional[float] = 1800,
                 max_total: Optional[int] = 1000, clock: Callable[[], float] = time.monotonic):
        self.limit_per_owner = limit_per_owner
        self.idle_ttl = idle_ttl
        self.max_total = max_total
        self.clock = clock
        self._sessions: "OrderedDict[str, SessionRuntime]" = OrderedDict()
        self._lock = threading.RLock()

    def _pop_expired(self, now: float) -> List[SessionRuntime]:
        if not self.idle_ttl:
            return []
        expired = [sid for sid, rt in self._sessions.items() if now - rt.last_seen > self.idle_ttl]
        return [self._sessions.pop(sid) for sid in expired]

    @staticmethod
    def _close(runtimes: List[SessionRuntime], reason: str) -> None:
        for old in runtimes:
            old.close()
            logger.debug("Discarded session %s (%s)", old.session_id, reason)

    def sweep(self) -> List[str]:
        """Tear down idle sessions; returns their ids."""
        with self._lock:
            expired = self._pop_expired(self.clock())
        self._close(expired, 'idle')
        return [old.session_id for old in expired]

    def add(self, runtime: SessionRuntime) -> List[str]:
        """Store ``runtime``; returns ids of the sessions discarded to make room."""
        with self._lock:
            now = self.clock()
            expired = self._pop_expired(now)
            runtime.last_seen = now
            self._sessions[runtime.session_id] = runtime
            owned = [sid for sid, rt in self._sessions.items() if rt.owner_id == runtime.owner_id]
            overflow = owned[:max(len(owned) - self.limit_per_owner, 0)]
            if self.max_total:
                excess = len(self._sessions) - len(overflow) - self.max_total
                overflow += [sid for sid in self._sessions if sid not in overflow][:max(excess, 0)]
            discarded = [self._sessions.pop(sid) for sid in overflow]
        self._close(expired, 'idle')
        self._close(discarded, 'limit reached')
        return [old.session_id for old in expired + discarded]

    def get(self, session_id: str, owner_id: str) -> SessionRuntime:
        with self._lock:
            now = self.clock()
            expired = self._pop_expired(now)
            runtime = self._sessions.get(session_id)
            if runtime is not None and runtime.owner_id == owner_id:
                runtime.last_seen = now
                self._sessions.move_to_end(session_id)
        self._close(expired, 'idle')
        if runtime is None or runtime.owner_id != owner_id:
            raise NotFoundError('Session not found', resource=session_id)
        return runtime

    def discard(self, session_id: str, owner_id: str) -> bool:
        with self._lock:
            runtime = self._sessions.get(session_id)
            if runtime is None or runtime.owner_id != owner_id:
                return False
            del self._sessions[session_id]
        runtime.close()
        return True

    def count(self, owner_id: Optional[str] = None) -> int:
        with self._lock:
            if owner_id is None:
                return len(self._sessions)
            return sum(1 for rt in self._sessions.values() if rt.owner_id == owner_id)

    def close_all(self) -> None:
        with self._lock:
            runtimes = list(self._sessions.values())
            self._sessions.clear()
        for runtime in runtimes:
            runtime.close()


def init_session_store(app) -> SessionStore:
    store = SessionStore(
        limit_per_owner=app.config.get('SESSION_LIMIT_PER_OWNER', 5),
        idle_ttl=app.config.get('SESSION_IDLE_TTL', 1800),
        max_total=app.config.get('SESSION_MAX_TOTAL', 1000),
    )
    app.extensions['learning_sessions'] = store
    return store


def get_session_store(app=None) -> SessionStore:
    app = app or current_app
    return app.extensions['learning_sessions']


def current_owner_id() -> str:
    """The browser's learner id, created on first use."""
    owner_id = session.get(OWNER_SESSION_KEY)
    if not owner_id:
        owner_id = uuid.uuid4().hex
        session[OWNER_SESSION_KEY] = owner_id
    return owner_id


def new_session_id() -> str:
    return uuid.uuid4().hex
