"""Ordering and page slicing of a filtered result list."""

import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Sequence

from .annotation import Annotation
from .errors import invalid_request
from .filters import DEFAULT_PAGE_LIMIT, DEFAULT_SORT_BY, DEFAULT_SORT_ORDER

_SORT_KEY_FNS: Dict[str, Callable[[Annotation], object]] = {
    "createdAt": lambda a: a.created_at,
    "modifiedAt": lambda a: a.modified_at,
    "author": lambda a: a.author.name.casefold(),
}


def sort_annotations(annotations: Sequence[Annotation],
                     sort_by: str = DEFAULT_SORT_BY,
                     sort_order: str = DEFAULT_SORT_ORDER) -> List[Annotation]:
    """Return *annotations* ordered by *sort_by*.

    ``relevance`` leaves the incoming order alone, since the text stage has
    already ranked it.  The sort is stable in both directions: annotations
    with equal keys keep their incoming order.
    """
    if sort_by == "relevance":
        return list(annotations)
    key_fn = _SORT_KEY_FNS.get(sort_by)
    if key_fn is None:
        raise invalid_request(f"Unsupported sort key: {sort_by!r}", sort_by=sort_by)
    if sort_order not in ("asc", "desc"):
        raise invalid_request(f"Unsupported sort order: {sort_order!r}", sort_order=sort_order)
    return sorted(annotations, key=key_fn, reverse=(sort_order == "desc"))


@dataclass
class Page:
    """One page of results plus the totals needed to render a pager."""
    items: List[Annotation] = field(default_factory=list)
    total: int = 0
    page: int = 1
    total_pages: int = 0


def paginate(items: Sequence[Annotation], page: int = 1,
             limit: int = DEFAULT_PAGE_LIMIT) -> Page:
    """Slice page *page* (1-based) of size *limit* out of *items*.

    Pages past the end yield an empty slice rather than an error.
    """
    if page < 1:
        raise invalid_request(f"page must be >= 1, got {page}", page=page)
    if limit < 1:
        raise invalid_request(f"limit must be >= 1, got {limit}", limit=limit)

    total = len(items)
    start = (page - 1) * limit
    return Page(
        items=list(items[start:start + limit]),
        total=total,
        page=page,
        total_pages=math.ceil(total / limit),
    )
