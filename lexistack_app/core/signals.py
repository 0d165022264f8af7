"""
Central Signal Registry for Event-Driven Architecture.

Uses blinker (Flask's signalling library) to decouple modules.

Usage:
    # Publisher (sender)
    from lexistack_app.core.signals import session_completed
    session_completed.send(None, session_id='...', result={...})

    # Subscriber (receiver) - in module's events.py
    @session_completed.connect
    def on_session_completed(sender, **kwargs):
        ...
"""
from blinker import Namespace

learning_signals = Namespace()

# Fired when a session engine starts (or restarts) with a fresh queue
# Payload: session_id, variant, total_items
session_started = learning_signals.signal('session_started')

# Fired for every judged answer
# Payload: session_id, item_id, is_correct, first_attempt, is_retry
answer_submitted = learning_signals.signal('answer_submitted')

# Fired once per session when the queue is exhausted
# Payload: session_id, variant, result (SessionResult.to_dict())
session_completed = learning_signals.signal('session_completed')

# ============================================
# Content Management Signals
# ============================================
content_signals = Namespace()

# Fired when a content set is imported or saved
# Payload: category, content_id, title, items_count
content_created = content_signals.signal('content_created')

# Fired when a content set is deleted
# Payload: category, content_id
content_deleted = content_signals.signal('content_deleted')
