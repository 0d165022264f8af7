"""
Session Data Preparer
=====================

Turns raw content (one content-set document, or a list of them to merge) into
the item arena and the initial randomized queue of a session.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .schemas import SessionQueueEntry
from .shuffle import shuffled

logger = logging.getLogger(__name__)


def collect_questions(raw: Any) -> List[Dict[str, Any]]:
    """Flatten ``raw`` into a list of item dicts.

    ``raw`` may be a content-set mapping with a ``questions`` list, a list of
    such mappings, or ``None``. Anything that is not a mapping item is dropped.
    """
    if raw is None:
        return []
    if isinstance(raw, Mapping):
        sources: Sequence[Any] = [raw]
    elif isinstance(raw, (list, tuple)):
        sources = raw
    else:
        logger.warning("Unsupported content payload of type %s", type(raw).__name__)
        return []

    items: List[Dict[str, Any]] = []
    for source in sources:
        if not isinstance(source, Mapping):
            continue
        questions = source.get('questions') or []
        if not isinstance(questions, (list, tuple)):
            logger.warning("Content set %r has a non-list 'questions' field", source.get('id'))
            continue
        items.extend(dict(q) for q in questions if isinstance(q, Mapping))
    return items


def build_queue(
    items: Sequence[Dict[str, Any]],
    make_entry: Callable[[Dict[str, Any], int, bool], SessionQueueEntry],
    rng=None,
    is_usable: Optional[Callable[[Dict[str, Any]], bool]] = None,
) -> Tuple[List[Dict[str, Any]], List[SessionQueueEntry]]:
    """Return ``(arena, queue)``.

    The arena keeps every usable item once, in source order; the queue holds
    one fresh entry per arena slot in shuffled order.
    """
    arena: List[Dict[str, Any]] = []
    for item in items:
        if is_usable is not None and not is_usable(item):
            logger.warning("Skipping unusable item %r", item.get('id', item.get('question')))
            continue
        arena.append(item)

    order = shuffled(range(len(arena)), rng)
    queue = [make_entry(arena[index], index, False) for index in order]
    return arena, queue
