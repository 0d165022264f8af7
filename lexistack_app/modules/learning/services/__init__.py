from .browse_service import FlashcardDeck
from .defense_game import DefenseGame
from .session_service import LearningSessionService
from .session_store import SessionRuntime, SessionStore, get_session_store, init_session_store

__all__ = [
    'FlashcardDeck',
    'DefenseGame',
    'LearningSessionService',
    'SessionRuntime',
    'SessionStore',
    'get_session_store',
    'init_session_store',
]
