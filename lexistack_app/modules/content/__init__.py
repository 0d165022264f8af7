# File: lexistack_app/modules/content/__init__.py
from flask import Blueprint

content_bp = Blueprint('content', __name__)

module_metadata = {
    'name': 'Nội dung học',
    'icon': 'layer-group',
    'category': 'Learning',
    'url_prefix': '/content',
    'enabled': True
}


def setup_module(app):
    from . import routes  # noqa: F401
