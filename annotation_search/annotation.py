"""Annotation record, the unit the search engine mirrors."""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Union

from .annotation_types import (
    DEFAULT_TYPE,
    DEFAULT_VISIBILITY,
    UNKNOWN,
    coerce_platform,
    coerce_type,
    coerce_visibility,
    effective_color,
)
from .errors import validation_failed

Timestamp = Union[datetime, str]


def parse_timestamp(value: Optional[Timestamp]) -> Optional[datetime]:
    """Parse an ISO-8601 string (``Z`` suffix allowed) or datetime.

    Naive values are taken to be UTC so every timestamp the engine compares
    is timezone aware.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        raw = str(value).strip()
        if raw.endswith("Z") or raw.endswith("z"):
            raw = raw[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(raw)
        except ValueError:
            raise validation_failed(f"Invalid timestamp: {value!r}", value=str(value))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_timestamp(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class AuthorInfo:
    """Author of an annotation: stable id plus display name."""

    __slots__ = ("id", "name")

    def __init__(self, id: str = "", name: str = ""):
        self.id = id
        self.name = name

    def to_dict(self) -> Dict:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, d: Optional[Dict]) -> "AuthorInfo":
        d = d or {}
        return cls(d.get("id", "") or "", d.get("name", "") or "")

    def __eq__(self, other) -> bool:
        if not isinstance(other, AuthorInfo):
            return NotImplemented
        return self.id == other.id and self.name == other.name

    def __repr__(self) -> str:
        return f"<Author {self.id} {self.name!r}>"


class Annotation:
    """A highlight, note or other mark anchored to a document.

    The engine treats records as values: an edit arrives as a new
    ``Annotation`` with the same ``id`` and replaces the old one.  Nothing
    inside the engine mutates a record after it is stored, which is what lets
    readers keep working on a snapshot while a writer swaps records.

    ``platform``, ``type`` and ``visibility`` are coerced into their closed
    value sets; anything unrecognised becomes ``"unknown"``.
    """

    __slots__ = (
        "id", "document_id", "type", "text", "comment", "color",
        "platform", "tags", "author", "visibility",
        "created_at", "modified_at",
    )

    def __init__(
        self,
        id: str,
        document_id: str = "",
        type: str = DEFAULT_TYPE,
        text: Optional[str] = None,
        comment: Optional[str] = None,
        color: Optional[str] = None,
        platform: str = UNKNOWN,
        tags: Optional[List[str]] = None,
        author: Optional[AuthorInfo] = None,
        visibility: str = DEFAULT_VISIBILITY,
        created_at: Optional[Timestamp] = None,
        modified_at: Optional[Timestamp] = None,
    ):
        self.id = id
        self.document_id = document_id
        self.type = coerce_type(type)
        self.text = text
        self.comment = comment
        self.color = color
        self.platform = coerce_platform(platform)
        self.tags: List[str] = list(dict.fromkeys(tags or []))
        self.author = author or AuthorInfo()
        self.visibility = coerce_visibility(visibility)
        self.created_at = parse_timestamp(created_at) or datetime.now(timezone.utc)
        self.modified_at = parse_timestamp(modified_at) or self.created_at

    # -- derived fields -------------------------------------------------------

    @property
    def effective_color(self) -> str:
        return effective_color(self.color)

    @property
    def has_comment(self) -> bool:
        return bool(self.comment and self.comment.strip())

    # -- serialisation --------------------------------------------------------

    def to_dict(self) -> Dict:
        content = {}
        if self.text is not None:
            content["text"] = self.text
        if self.comment is not None:
            content["comment"] = self.comment
        if self.color is not None:
            content["color"] = self.color
        return {
            "id": self.id,
            "documentId": self.document_id,
            "type": self.type,
            "content": content,
            "metadata": {
                "platform": self.platform,
                "tags": list(self.tags),
                "author": self.author.to_dict(),
                "visibility": self.visibility,
            },
            "createdAt": format_timestamp(self.created_at),
            "modifiedAt": format_timestamp(self.modified_at),
        }

    @classmethod
    def from_dict(cls, d: Dict) -> "Annotation":
        """Build a record from the camelCase wire shape."""
        if not d.get("id"):
            raise validation_failed("Annotation record has no id", record=d)
        content = d.get("content") or {}
        metadata = d.get("metadata") or {}
        return cls(
            id=str(d["id"]),
            document_id=d.get("documentId", "") or "",
            type=d.get("type", DEFAULT_TYPE),
            text=content.get("text"),
            comment=content.get("comment"),
            color=content.get("color"),
            platform=metadata.get("platform", UNKNOWN),
            tags=metadata.get("tags") or [],
            author=AuthorInfo.from_dict(metadata.get("author")),
            visibility=metadata.get("visibility", DEFAULT_VISIBILITY),
            created_at=d.get("createdAt"),
            modified_at=d.get("modifiedAt"),
        )

    def __repr__(self) -> str:
        return (
            f"<Annotation {self.id} doc={self.document_id} type={self.type} "
            f"platform={self.platform}>"
        )
