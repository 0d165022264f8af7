import random

import pytest

from lexistack_app import create_app, db
from lexistack_app.config import Config
from lexistack_app.modules.audio.engines.base import AudioEngine
from lexistack_app.modules.audio.services.speech_service import SpeechService


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'connect_args': {'check_same_thread': False}
    }
    WTF_CSRF_ENABLED = False
    LOG_TO_FILE = False
    ADMIN_PASSCODE = '2000'


class SilentEngine(AudioEngine):
    """Writes a placeholder file instead of calling a TTS service."""

    name = 'silent'

    def __init__(self):
        self.calls = []

    async def generate(self, text, voice, full_path):
        self.calls.append(text)
        with open(full_path, 'wb') as handle:
            handle.write(b'ID3')
        return True


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def app(tmp_path):
    class _Config(TestConfig):
        AUDIO_CACHE_DIR = str(tmp_path / 'audio')

    app = create_app(_Config)
    service = SpeechService(app.config['AUDIO_CACHE_DIR'], engine=SilentEngine(), max_workers=1)
    service.init_app(app)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()
    service.shutdown(wait=True)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(app):
    client = app.test_client()
    response = client.post('/admin/login', json={'passcode': '2000'})
    assert response.status_code == 200
    return client


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rng():
    return random.Random(1234)
