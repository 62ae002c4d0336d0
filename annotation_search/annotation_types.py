"""
Closed value sets for annotation records.

Three small enumerations travel on every annotation:

  platform    : the system the annotation came from (zotero, hypothesis, ...)
  type        : what kind of mark it is (highlight, note, ink, ...)
  visibility  : private, shared or public

Records produced by a newer collaborator may carry values we have never
seen.  Those are mapped to the explicit ``UNKNOWN`` variant instead of being
rejected, so the record stays searchable and countable.
"""

import logging
from typing import Optional, Tuple

logger = logging.getLogger("annotation_search")

UNKNOWN = "unknown"

PLATFORMS: Tuple[str, ...] = (
    "zotero",
    "mendeley",
    "adobe-reader",
    "researchopia",
    "hypothesis",
    "web-annotate",
    "calibre",
    "koreader",
)

ANNOTATION_TYPES: Tuple[str, ...] = (
    "highlight",
    "underline",
    "strikeout",
    "note",
    "text",
    "ink",
    "image",
    "shape",
)

VISIBILITY_LEVELS: Tuple[str, ...] = ("private", "shared", "public")

DEFAULT_TYPE = "highlight"
DEFAULT_VISIBILITY = "private"

# Zotero's default highlight yellow; used whenever a record has no color.
DEFAULT_COLOR = "#ffd400"


def _coerce(value: Optional[str], allowed: Tuple[str, ...], kind: str) -> str:
    if value in allowed or value == UNKNOWN:
        return value
    logger.debug(f"Unrecognised {kind} {value!r}, mapped to {UNKNOWN!r}")
    return UNKNOWN


def coerce_platform(value: Optional[str]) -> str:
    """Return *value* if it is a known platform, else ``UNKNOWN``."""
    return _coerce(value, PLATFORMS, "platform")


def coerce_type(value: Optional[str]) -> str:
    """Return *value* if it is a known annotation type, else ``UNKNOWN``."""
    return _coerce(value, ANNOTATION_TYPES, "annotation type")


def coerce_visibility(value: Optional[str]) -> str:
    """Return *value* if it is a known visibility level, else ``UNKNOWN``."""
    return _coerce(value, VISIBILITY_LEVELS, "visibility")


def effective_color(color: Optional[str]) -> str:
    """Color used for filtering and facets; unset colors use DEFAULT_COLOR."""
    return color or DEFAULT_COLOR
