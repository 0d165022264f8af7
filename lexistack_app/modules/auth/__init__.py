# File: lexistack_app/modules/auth/__init__.py
from flask import Blueprint

auth_bp = Blueprint('auth', __name__)

module_metadata = {
    'name': 'Xác thực quản trị',
    'icon': 'lock',
    'category': 'System',
    'url_prefix': '/admin',
    'enabled': True
}


def setup_module(app):
    from . import routes  # noqa: F401
