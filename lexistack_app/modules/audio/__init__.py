# File: lexistack_app/modules/audio/__init__.py
from flask import Blueprint

audio_bp = Blueprint('audio', __name__)

module_metadata = {
    'name': 'Speech',
    'icon': 'volume-high',
    'category': 'System',
    'url_prefix': '/audio',
    'enabled': True
}


def setup_module(app):
    from .services.speech_service import SpeechService

    SpeechService.from_config(app).init_app(app)
    from . import routes  # noqa: F401
