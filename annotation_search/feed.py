"""
Live collaboration feed → engine mutations.

The collaboration layer broadcasts messages shaped like::

    {"type": "annotation:created", "payload": {"annotation": {...}, "documentId": "..."}}
    {"type": "annotation:updated", "payload": {"annotation": {...}, "changes": {...}}}
    {"type": "annotation:deleted", "payload": {"id": "...", "documentId": "..."}}

plus presence traffic (``user:connected``, ``user:disconnected``,
``cursor:moved``) that carries no annotation data.  ``apply_event`` routes
the annotation messages to the engine's ingest operations and ignores the
rest.  Messages are applied in the order given; the last update wins.
"""

import logging
from typing import Dict

from .engine import AnnotationSearchEngine
from .errors import SearchRequestError

logger = logging.getLogger("annotation_search")

CREATED = "annotation:created"
UPDATED = "annotation:updated"
DELETED = "annotation:deleted"

FEED_EVENT_TYPES = (CREATED, UPDATED, DELETED)
PRESENCE_EVENT_TYPES = ("user:connected", "user:disconnected", "cursor:moved")


def apply_event(engine: AnnotationSearchEngine, message: Dict) -> bool:
    """Apply one feed message to *engine*.

    Returns True if the corpus changed.  Presence messages, unknown message
    types and malformed payloads leave the engine untouched and return False.
    """
    if not isinstance(message, dict):
        logger.warning(f"Ignoring feed message that is not an object: {type(message).__name__}")
        return False
    event_type = message.get("type")
    payload = message.get("payload") or {}

    if event_type in PRESENCE_EVENT_TYPES:
        return False

    if event_type not in FEED_EVENT_TYPES:
        logger.warning(f"Ignoring feed message of unknown type {event_type!r}")
        return False

    if not isinstance(payload, dict):
        logger.warning(f"Ignoring {event_type} message with a {type(payload).__name__} payload")
        return False

    if event_type == DELETED:
        annotation_id = payload.get("id")
        if not annotation_id or not isinstance(annotation_id, str):
            logger.warning("Ignoring annotation:deleted message without an id")
            return False
        return engine.remove_annotation(annotation_id)

    record = payload.get("annotation")
    if not record:
        logger.warning(f"Ignoring {event_type} message without an annotation")
        return False

    try:
        if event_type == CREATED:
            engine.add_annotation(record)
            return True
        # Update for a record created before we subscribed: insert it
        if not engine.update_annotation(record):
            engine.add_annotation(record)
        return True
    except SearchRequestError as e:
        logger.warning(f"Ignoring malformed {event_type} message: {e.message}")
        return False
