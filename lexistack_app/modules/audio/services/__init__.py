from .speech_service import SpeechChannel, SpeechService, get_speech_service

__all__ = ['SpeechChannel', 'SpeechService', 'get_speech_service']
