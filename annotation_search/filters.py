"""
Structural filters for annotation search.

Every field of :class:`SearchFilters` is an independent predicate and all of
them are ANDed together.  A field left at ``None`` (or an empty list) places
no constraint on its dimension.

Note the tag filter is conjunctive: ``tags=["a", "b"]`` keeps only
annotations carrying both tags.  Free-text search is disjunctive by default,
so the query "a b" also returns annotations containing just one of the two
words.
"""

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Union

from .annotation import Annotation, parse_timestamp
from .errors import invalid_request, validation_failed
from .indexing import TEXT_MODES

SORT_KEYS = ("createdAt", "modifiedAt", "author", "relevance")
SORT_ORDERS = ("asc", "desc")

DEFAULT_SORT_BY = "createdAt"
DEFAULT_SORT_ORDER = "desc"
DEFAULT_PAGE_LIMIT = 20

# camelCase request keys → dataclass field names
_REQUEST_KEYS = {
    "documentId": "document_id",
    "authorId": "author_id",
    "dateRange": "date_range",
    "hasComment": "has_comment",
    "sortBy": "sort_by",
    "sortOrder": "sort_order",
    "textMode": "text_mode",
}


@dataclass
class DateRange:
    """Bounds on ``created_at``: start inclusive, end exclusive."""
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def __post_init__(self):
        self.start = parse_timestamp(self.start)
        self.end = parse_timestamp(self.end)

    def contains(self, moment: datetime) -> bool:
        if self.start is not None and moment < self.start:
            return False
        if self.end is not None and moment >= self.end:
            return False
        return True

    @classmethod
    def from_dict(cls, d: Optional[Dict]) -> Optional["DateRange"]:
        if not d:
            return None
        return cls(start=d.get("start"), end=d.get("end"))


def _as_list(value: Union[None, str, Iterable[str]]) -> Optional[List[str]]:
    if value is None:
        return None
    if isinstance(value, str):
        return [value]
    return list(value)


@dataclass
class SearchFilters:
    """A search request: text query, filters, sort and page selection."""
    query: Optional[str] = None
    document_id: Optional[str] = None
    author_id: Optional[str] = None
    platform: Union[None, str, List[str]] = None
    type: Union[None, str, List[str]] = None
    tags: Optional[List[str]] = None
    date_range: Optional[DateRange] = None
    visibility: Optional[str] = None
    colors: Optional[List[str]] = None
    has_comment: Optional[bool] = None
    sort_by: str = DEFAULT_SORT_BY
    sort_order: str = DEFAULT_SORT_ORDER
    page: int = 1
    limit: Optional[int] = None
    text_mode: str = "any"

    def __post_init__(self):
        self.platform = _as_list(self.platform)
        self.type = _as_list(self.type)
        self.tags = _as_list(self.tags)
        self.colors = _as_list(self.colors)
        if isinstance(self.date_range, dict):
            self.date_range = DateRange.from_dict(self.date_range)

    @classmethod
    def from_dict(cls, d: Optional[Dict]) -> "SearchFilters":
        """Build filters from a request dict (camelCase or snake_case keys).

        Keys that are not filter fields are ignored; a ``None`` value means
        "use the default".
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in (d or {}).items():
            name = _REQUEST_KEYS.get(key, key)
            if name in known and value is not None:
                kwargs[name] = value
        return cls(**kwargs)

    def validate(self) -> "SearchFilters":
        """Reject structurally invalid requests.  Returns ``self``."""
        if self.query is not None and not isinstance(self.query, str):
            raise invalid_request(f"query must be a string, got {type(self.query).__name__}",
                                  query=self.query)
        if not isinstance(self.page, int) or isinstance(self.page, bool) or self.page < 1:
            raise invalid_request(f"page must be an integer >= 1, got {self.page!r}", page=self.page)
        if self.limit is not None and (
                not isinstance(self.limit, int) or isinstance(self.limit, bool) or self.limit < 1):
            raise invalid_request(f"limit must be an integer >= 1, got {self.limit!r}", limit=self.limit)
        if self.sort_by not in SORT_KEYS:
            raise invalid_request(f"sort_by must be one of {SORT_KEYS}", sort_by=self.sort_by)
        if self.sort_order not in SORT_ORDERS:
            raise invalid_request(f"sort_order must be one of {SORT_ORDERS}", sort_order=self.sort_order)
        if self.text_mode not in TEXT_MODES:
            raise invalid_request(f"text_mode must be one of {TEXT_MODES}", text_mode=self.text_mode)

        dr = self.date_range
        if dr is not None and dr.start is not None and dr.end is not None and dr.end < dr.start:
            raise validation_failed(
                "date_range.end is earlier than date_range.start",
                start=dr.start.isoformat(), end=dr.end.isoformat(),
            )
        return self


class FilterEngine:
    """Evaluates :class:`SearchFilters` predicates against annotations."""

    @staticmethod
    def matches(annotation: Annotation, filters: SearchFilters) -> bool:
        if filters.document_id and annotation.document_id != filters.document_id:
            return False

        if filters.author_id and annotation.author.id != filters.author_id:
            return False

        if filters.platform and annotation.platform not in filters.platform:
            return False

        if filters.type and annotation.type not in filters.type:
            return False

        if filters.tags:
            annotation_tags = set(annotation.tags)
            if not all(tag in annotation_tags for tag in filters.tags):
                return False

        if filters.date_range is not None and not filters.date_range.contains(annotation.created_at):
            return False

        if filters.visibility and annotation.visibility != filters.visibility:
            return False

        if filters.colors and annotation.effective_color not in filters.colors:
            return False

        if filters.has_comment is not None and annotation.has_comment != filters.has_comment:
            return False

        return True

    def apply(self, annotations: Iterable[Annotation], filters: SearchFilters) -> List[Annotation]:
        """Return the annotations that satisfy every filter, order preserved."""
        return [a for a in annotations if self.matches(a, filters)]


def coerce_filters(filters: Union[None, SearchFilters, Dict] = None, **kwargs) -> SearchFilters:
    """Accept a SearchFilters, a request dict, keyword arguments, or nothing."""
    if isinstance(filters, SearchFilters):
        if kwargs:
            raise invalid_request("Pass either a SearchFilters object or keyword filters, not both")
        return filters
    merged = dict(filters or {})
    merged.update(kwargs)
    return SearchFilters.from_dict(merged)
