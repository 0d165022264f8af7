# File: lexistack_app/modules/admin/__init__.py
from flask import Blueprint

admin_bp = Blueprint('admin', __name__)

module_metadata = {
    'name': 'Quản lý nội dung',
    'icon': 'layer-group',
    'category': 'System',
    'url_prefix': '/admin',
    'enabled': True
}


def setup_module(app):
    from . import routes  # noqa: F401
