import logging

from lexistack_app.core.signals import content_deleted, session_completed

logger = logging.getLogger(__name__)


def on_session_completed(sender, session_id=None, variant=None, result=None, **kwargs):
    """Event listener: log the final score of every finished session."""
    result = result or {}
    logger.info(
        "Session %s (%s) completed: %s/%s (%s%%), %s items retried",
        session_id,
        variant,
        result.get('score'),
        result.get('total'),
        result.get('percent'),
        result.get('retried_items'),
    )


def on_content_deleted(sender, category=None, content_id=None, **kwargs):
    """Running sessions keep their loaded copy; only note it for the logs."""
    logger.debug("Content %s/%s deleted; live sessions keep their loaded copy", category, content_id)


def register_events():
    """Connect signals."""
    session_completed.connect(on_session_completed)
    content_deleted.connect(on_content_deleted)
