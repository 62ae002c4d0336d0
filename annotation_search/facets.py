"""
Facet counts for search-refinement UIs.

Facets answer "which filters exist and how many annotations sit behind
each?"  They are always computed over the full corpus held by the engine,
not over the filtered page: applying a filter narrows the results list but
leaves the facet counts where they were, so the UI can keep offering every
option.

Every dimension is returned as a list of dicts sorted by ``count``
descending; ties keep first-encounter order.
"""

import math
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from .annotation import Annotation, parse_timestamp

TAG_FACET_LIMIT = 50

# (label, inclusive upper bound in whole days)
DATE_BUCKETS = (
    ("today", 0),
    ("this_week", 7),
    ("this_month", 30),
    ("last_three_months", 90),
    ("last_year", 365),
)
OLDER = "older"

_SECONDS_PER_DAY = 24 * 60 * 60


def date_bucket(created_at: datetime, now: datetime) -> str:
    """Place *created_at* into one of the fixed age buckets relative to *now*.

    Ages are whole days, floored.  Timestamps in the future count as today.
    """
    days = math.floor((now - created_at).total_seconds() / _SECONDS_PER_DAY)
    for label, max_days in DATE_BUCKETS:
        if days <= max_days:
            return label
    return OLDER


@dataclass
class SearchFacets:
    """Grouped counts per facet dimension."""
    platforms: List[Dict] = field(default_factory=list)
    types: List[Dict] = field(default_factory=list)
    authors: List[Dict] = field(default_factory=list)
    tags: List[Dict] = field(default_factory=list)
    colors: List[Dict] = field(default_factory=list)
    date_ranges: List[Dict] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "platforms": self.platforms,
            "types": self.types,
            "authors": self.authors,
            "tags": self.tags,
            "colors": self.colors,
            "dateRanges": self.date_ranges,
        }

    def counts(self, dimension: str, key: str) -> Dict[str, int]:
        """Flatten one dimension to ``{value: count}`` (handy for assertions)."""
        return {row[key]: row["count"] for row in getattr(self, dimension)}


def _ranked(counter: Counter, key: str, limit: Optional[int] = None) -> List[Dict]:
    # most_common() is a stable sort, so ties stay in insertion order
    return [{key: value, "count": count} for value, count in counter.most_common(limit)]


class FacetAggregator:
    """Computes :class:`SearchFacets` over a corpus.

    Args:
        tag_limit: Maximum number of tag facet rows (most frequent first).
    """

    def __init__(self, tag_limit: int = TAG_FACET_LIMIT):
        self.tag_limit = tag_limit

    def aggregate(self, annotations: Iterable[Annotation],
                  now: Optional[datetime] = None) -> SearchFacets:
        # Naive clocks are read as UTC
        now = parse_timestamp(now) or datetime.now(timezone.utc)

        platforms: Counter = Counter()
        types: Counter = Counter()
        author_counts: Counter = Counter()
        author_names: Dict[str, str] = {}
        tags: Counter = Counter()
        colors: Counter = Counter()
        date_ranges: Counter = Counter()

        for annotation in annotations:
            platforms[annotation.platform] += 1
            types[annotation.type] += 1

            author_id = annotation.author.id
            author_names.setdefault(author_id, annotation.author.name)
            author_counts[author_id] += 1

            for tag in annotation.tags:
                tags[tag] += 1

            colors[annotation.effective_color] += 1
            date_ranges[date_bucket(annotation.created_at, now)] += 1

        return SearchFacets(
            platforms=_ranked(platforms, "platform"),
            types=_ranked(types, "type"),
            authors=[
                {"authorId": author_id, "authorName": author_names[author_id], "count": count}
                for author_id, count in author_counts.most_common()
            ],
            tags=_ranked(tags, "tag", self.tag_limit),
            colors=_ranked(colors, "color"),
            date_ranges=_ranked(date_ranges, "range"),
        )
