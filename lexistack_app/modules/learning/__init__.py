# File: lexistack_app/modules/learning/__init__.py
from flask import Blueprint

learning_bp = Blueprint('learning', __name__)

module_metadata = {
    'name': 'Học tập',
    'icon': 'graduation-cap',
    'category': 'Learning',
    'url_prefix': '/learn',
    'enabled': True
}


def setup_module(app):
    from lexistack_app.extensions import csrf_protect
    from .services.session_store import init_session_store

    init_session_store(app)
    from . import routes  # noqa: F401
    from .events import register_events

    # Learner endpoints are anonymous JSON calls; sessions are bound to the cookie owner id
    csrf_protect.exempt(learning_bp)
    register_events()
