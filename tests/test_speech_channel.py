"""
Tests for the speech service: single-flight channels over a background renderer.
"""

import asyncio
import os
import threading
from unittest.mock import patch

import pytest
from gtts import gTTSError

from lexistack_app.modules.audio.engines.base import AudioEngine
from lexistack_app.modules.audio.engines.gtts_engine import GTTSEngine
from lexistack_app.modules.audio.logics.audio_logic import generate_hash_name, get_storage_path
from lexistack_app.modules.audio.services.speech_service import SpeechService


class GateEngine(AudioEngine):
    """Blocks every render until the test opens the gate."""

    name = 'gate'

    def __init__(self):
        self.gate = threading.Event()
        self.started = threading.Event()
        self.rendered = []

    async def generate(self, text, voice, full_path):
        self.started.set()
        self.gate.wait(5)
        with open(full_path, 'wb') as handle:
            handle.write(text.encode('utf-8'))
        self.rendered.append(text)
        return True


@pytest.fixture
def engine():
    return GateEngine()


@pytest.fixture
def service(tmp_path, engine):
    service = SpeechService(str(tmp_path), engine=engine, max_workers=1)
    yield service
    engine.gate.set()
    service.shutdown(wait=True)


def cached_path(service, text, lang='en'):
    return get_storage_path(service.cache_dir, generate_hash_name(text, service.engine.name, lang))['physical_path']


class TestSpeechChannel:

    def test_speak_returns_url_immediately(self, service):
        channel = service.acquire('s1')
        result = channel.speak(' hello ')
        assert result['status'] == 'pending'
        assert result['text'] == 'hello'
        assert result['url'].startswith('/audio/')
        assert result['url'].endswith('.mp3')

    def test_new_utterance_supersedes_running_one(self, service, engine):
        channel = service.acquire('s1')
        channel.speak('one')
        assert engine.started.wait(5)
        channel.speak('two')
        engine.gate.set()
        service.shutdown(wait=True)

        assert not os.path.exists(cached_path(service, 'one'))
        assert os.path.exists(cached_path(service, 'two'))
        assert not [name for name in os.listdir(service.cache_dir) if name.endswith('.part')]

    def test_queued_render_is_cancelled(self, service, engine):
        blocker = service.acquire('other')
        blocker.speak('busy')
        assert engine.started.wait(5)

        channel = service.acquire('s1')
        channel.speak('never')
        channel.cancel()
        engine.gate.set()
        service.shutdown(wait=True)
        assert 'never' not in engine.rendered

    def test_cached_file_is_reused(self, service, engine):
        with open(cached_path(service, 'cached'), 'wb') as handle:
            handle.write(b'ID3')
        result = service.acquire('s1').speak('cached')
        assert result['status'] == 'exists'
        assert engine.rendered == []

    def test_release_ends_the_lease(self, service):
        with service.acquire('s1') as channel:
            assert service.active_channels == 1
        assert channel.released is True
        assert service.active_channels == 0
        assert channel.speak('late') is None

    def test_blank_text_is_not_spoken(self, service):
        assert service.acquire('s1').speak('   ') is None


class TestAudioLogic:

    def test_hash_name_is_deterministic(self):
        first = generate_hash_name('hello', 'gtts', 'en')
        assert first == generate_hash_name(' hello ', 'gtts', 'en')
        assert first != generate_hash_name('hello', 'gtts', 'vi')
        assert first.endswith('.mp3')


class TestGTTSEngine:

    def test_failure_is_reported_not_raised(self, tmp_path):
        with patch('lexistack_app.modules.audio.engines.gtts_engine.gTTS', side_effect=gTTSError('offline')):
            ok = asyncio.run(GTTSEngine().generate('hello', 'en-US', str(tmp_path / 'x.mp3')))
        assert ok is False

    def test_language_is_reduced_to_base_code(self, tmp_path):
        with patch('lexistack_app.modules.audio.engines.gtts_engine.gTTS') as fake:
            ok = asyncio.run(GTTSEngine().generate('xin chào', 'vi-VN', str(tmp_path / 'y.mp3')))
        assert ok is True
        fake.assert_called_once_with(text='xin chào', lang='vi')
        fake.return_value.save.assert_called_once()
