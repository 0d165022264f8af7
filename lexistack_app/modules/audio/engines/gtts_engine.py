import asyncio
import logging
import os

from gtts import gTTS, gTTSError

from .base import AudioEngine

logger = logging.getLogger(__name__)


class GTTSEngine(AudioEngine):
    """
    Audio Engine using Google Text-to-Speech (gTTS library).
    Wraps blocking calls in threads.
    """

    name = 'gtts'

    async def generate(self, text: str, voice: str, full_path: str) -> bool:
        directory = os.path.dirname(full_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        # 'en-US' -> 'en', 'vi-VN' -> 'vi'
        lang = (voice or 'en').split('-')[0]

        try:
            # gTTS save is blocking
            await asyncio.to_thread(self._save_gtts, text, lang, full_path)
            return True
        except (gTTSError, ValueError, OSError) as e:
            logger.error("[GTTSEngine] Error generating audio for %r: %s", text, e)
            return False

    def _save_gtts(self, text: str, lang: str, path: str):
        """Blocking helper method."""
        tts = gTTS(text=text, lang=lang)
        tts.save(path)
