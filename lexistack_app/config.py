# File: lexistack_app/config.py
# Cấu hình ứng dụng LexiStack (đọc biến môi trường từ .env).

import os

from dotenv import load_dotenv

load_dotenv()

# Thư mục gốc của dự án: lexistack_app/ nằm ngay dưới thư mục gốc
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))

DATABASE_PATH = os.path.join(BASE_DIR, "database", "lexistack.db")


class Config:
    """Cấu hình ứng dụng LexiStack."""

    SECRET_KEY = os.environ.get('SECRET_KEY')
    if not SECRET_KEY:
        # Fallback for development, though env is preferred
        SECRET_KEY = 'dev-secret-key-replace-in-production'

    SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI') or f'sqlite:///{DATABASE_PATH}'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'connect_args': {'timeout': 30},
    }
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Admin panel passcode (the import/management screens sit behind it)
    ADMIN_PASSCODE = os.environ.get('ADMIN_PASSCODE', '2000')

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_DIR = os.environ.get('LOG_DIR') or os.path.join(BASE_DIR, 'logs')
    LOG_JSON = os.environ.get('LOG_JSON', '0') == '1'
    LOG_TO_FILE = True

    AUDIO_CACHE_DIR = os.environ.get('AUDIO_CACHE_DIR') or os.path.join(BASE_DIR, 'uploads', 'audio', 'cache')
    AUDIO_DEFAULT_LANG = os.environ.get('AUDIO_DEFAULT_LANG', 'en')

    # Read-through cache in front of the content store, cleared on every write
    CONTENT_CACHE_ENABLED = True

    # Live learning sessions kept per browser before the oldest is discarded
    SESSION_LIMIT_PER_OWNER = int(os.environ.get('SESSION_LIMIT_PER_OWNER', 5))
    # Seconds a session may sit untouched before it is torn down
    SESSION_IDLE_TTL = int(os.environ.get('SESSION_IDLE_TTL', 1800))
    # Hard cap over all browsers; the least recently used session goes first
    SESSION_MAX_TOTAL = int(os.environ.get('SESSION_MAX_TOTAL', 1000))

    @classmethod
    def init_app(cls, app):
        """Khởi tạo các thư mục cần thiết."""
        os.makedirs(os.path.dirname(DATABASE_PATH), exist_ok=True)
        if app.config.get('LOG_TO_FILE'):
            os.makedirs(app.config['LOG_DIR'], exist_ok=True)
        os.makedirs(app.config['AUDIO_CACHE_DIR'], exist_ok=True)
