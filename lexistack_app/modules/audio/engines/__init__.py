from .base import AudioEngine
from .gtts_engine import GTTSEngine

__all__ = ['AudioEngine', 'GTTSEngine']
