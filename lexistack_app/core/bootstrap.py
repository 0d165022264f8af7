"""Bootstrap helpers for configuring the Flask application."""

from __future__ import annotations

from flask import Flask

from ..extensions import csrf_protect, db, login_manager
from .logging_config import setup_logging
from .module_registry import register_default_modules


def configure_logging(app: Flask) -> None:
    """Configure the package logger and route the Flask app logger through it."""

    logger = setup_logging(
        app,
        log_level=app.config.get('LOG_LEVEL', 'INFO'),
        log_dir=app.config.get('LOG_DIR'),
        json_format=app.config.get('LOG_JSON', False),
        to_file=app.config.get('LOG_TO_FILE', True),
    )
    app.logger.handlers = list(logger.handlers)
    app.logger.setLevel(logger.level)
    app.logger.propagate = False
    app.logger.info("Flask app logger configured successfully.")


def register_extensions(app: Flask) -> None:
    """Initialize shared extensions with the Flask app instance."""

    db.init_app(app)
    login_manager.init_app(app)
    csrf_protect.init_app(app)


def register_blueprints(app: Flask) -> None:
    """Register all default blueprints with the app."""

    register_default_modules(app)


def initialize_database(app: Flask) -> None:
    """Create database tables."""

    from .. import models  # noqa: F401  (register tables on the metadata)

    db.create_all()
    app.logger.info("Đã khởi tạo cơ sở dữ liệu: %s", app.config.get('SQLALCHEMY_DATABASE_URI'))
