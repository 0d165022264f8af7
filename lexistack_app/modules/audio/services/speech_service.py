import asyncio
import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, Optional

from flask import current_app

from ..config import AudioModuleDefaultConfig
from ..engines.base import AudioEngine
from ..engines.gtts_engine import GTTSEngine
from ..logics.audio_logic import generate_hash_name, get_storage_path

logger = logging.getLogger(__name__)


class SpeechChannel:
    """
    A lease on the speech service held by one learning session.

    At most one utterance is in flight per channel: ``speak`` supersedes the
    previous request, whose render is cancelled or, if already running, never
    published. Use as a context manager or call ``release`` on teardown.
    """

    def __init__(self, service: 'SpeechService', owner: str):
        self.service = service
        self.owner = owner
        self.released = False
        self.current_text: Optional[str] = None
        self._generation = 0
        self._future: Optional[Future] = None
        self._lock = threading.Lock()

    @property
    def in_flight(self) -> bool:
        future = self._future
        return future is not None and not future.done()

    def is_current(self, token: int) -> bool:
        return not self.released and token == self._generation

    def speak(self, text: str, lang: Optional[str] = None) -> Optional[Dict[str, str]]:
        """Request playback of ``text``; returns the audio URL right away."""
        text = (text or '').strip()
        if self.released or not text:
            return None
        lang = lang or self.service.default_lang
        filename = generate_hash_name(text, self.service.engine.name, lang)
        paths = get_storage_path(self.service.cache_dir, filename)

        with self._lock:
            self._generation += 1
            token = self._generation
            self._cancel_future()
            self.current_text = text
            if os.path.exists(paths['physical_path']):
                return {'url': paths['url'], 'text': text, 'status': 'exists'}
            self._future = self.service.submit(self._render, token, text, lang, paths['physical_path'])
        return {'url': paths['url'], 'text': text, 'status': 'pending'}

    def cancel(self) -> None:
        """Stop whatever is playing or rendering."""
        with self._lock:
            self._generation += 1
            self._cancel_future()
            self.current_text = None

    def release(self) -> None:
        if self.released:
            return
        self.cancel()
        self.released = True
        self.service.release(self)

    def _cancel_future(self) -> None:
        if self._future is not None:
            self._future.cancel()
            self._future = None

    def _render(self, token: int, text: str, lang: str, path: str) -> bool:
        if not self.is_current(token):
            return False
        part_path = f"{path}.{threading.get_ident()}.{token}.part"
        ok = asyncio.run(self.service.engine.generate(text, lang, part_path))
        if ok and self.is_current(token):
            os.replace(part_path, path)
            return True
        if os.path.exists(part_path):
            os.remove(part_path)
        if not ok:
            logger.warning("Speech render failed for %r (%s)", text, self.owner)
        return False

    def __enter__(self) -> 'SpeechChannel':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def __repr__(self) -> str:
        return f"<SpeechChannel owner={self.owner} released={self.released}>"


class SpeechService:
    """
    Text-to-speech for the learning screens.

    Audio is synthesized in background threads into a hash-named cache file;
    callers get the URL immediately and never wait for the render.
    """

    def __init__(self, cache_dir: str, default_lang: str = AudioModuleDefaultConfig.AUDIO_DEFAULT_LANG,
                 engine: Optional[AudioEngine] = None,
                 max_workers: int = AudioModuleDefaultConfig.AUDIO_MAX_WORKERS):
        self.cache_dir = cache_dir
        self.default_lang = default_lang
        self.engine = engine or GTTSEngine()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='speech')
        self._channels: Dict[int, SpeechChannel] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, app) -> 'SpeechService':
        return cls(
            cache_dir=app.config['AUDIO_CACHE_DIR'],
            default_lang=app.config.get('AUDIO_DEFAULT_LANG', AudioModuleDefaultConfig.AUDIO_DEFAULT_LANG),
        )

    def init_app(self, app) -> None:
        app.extensions['speech_service'] = self

    def acquire(self, owner: str) -> SpeechChannel:
        channel = SpeechChannel(self, owner)
        with self._lock:
            self._channels[id(channel)] = channel
        return channel

    def release(self, channel: SpeechChannel) -> None:
        with self._lock:
            self._channels.pop(id(channel), None)

    @property
    def active_channels(self) -> int:
        with self._lock:
            return len(self._channels)

    def submit(self, fn, *args) -> Future:
        return self._executor.submit(fn, *args)

    def shutdown(self, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait)


def get_speech_service(app=None) -> SpeechService:
    app = app or current_app
    return app.extensions['speech_service']
