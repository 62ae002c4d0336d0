"""
Annotation Search: in-memory search and faceting for shared annotations.

Mirror a live collection of highlights and notes, then query it with
ranked free-text search, structural filters, pagination, facet counts,
autocomplete suggestions and popular tags.  Single process, in memory,
standard library only.

Usage:
    from annotation_search import AnnotationSearchEngine

    engine = AnnotationSearchEngine(records)
    engine.add_annotation(record)
    result = engine.search({"query": "transformers", "tags": ["ml"], "page": 1})
    print(result.total, result.facets.tags)
"""

__version__ = "1.0.0"

# Core
from annotation_search.engine import AnnotationSearchEngine, SearchResult
from annotation_search.annotation import Annotation, AuthorInfo
from annotation_search.annotation_types import (
    ANNOTATION_TYPES,
    DEFAULT_COLOR,
    PLATFORMS,
    UNKNOWN,
    VISIBILITY_LEVELS,
)

# Pipeline stages
from annotation_search.tokenizer import tokenize
from annotation_search.indexing import SearchIndex, extract_terms
from annotation_search.scoring import RelevanceScorer, ScoredAnnotation, search_text
from annotation_search.filters import DateRange, FilterEngine, SearchFilters
from annotation_search.paging import Page, paginate, sort_annotations
from annotation_search.facets import FacetAggregator, SearchFacets, date_bucket
from annotation_search.suggestions import get_popular_tags, get_suggestions

# Concurrency
from annotation_search.locking import LockTimeout, ReadWriteLock

# Errors
from annotation_search.errors import ErrorCode, SearchRequestError

# Collaboration feed
from annotation_search.feed import FEED_EVENT_TYPES, apply_event

__all__ = [
    "AnnotationSearchEngine",
    "SearchResult",
    "Annotation",
    "AuthorInfo",
    "ANNOTATION_TYPES",
    "DEFAULT_COLOR",
    "PLATFORMS",
    "UNKNOWN",
    "VISIBILITY_LEVELS",

    # Pipeline stages
    "tokenize",
    "SearchIndex",
    "extract_terms",
    "RelevanceScorer",
    "ScoredAnnotation",
    "search_text",
    "DateRange",
    "FilterEngine",
    "SearchFilters",
    "Page",
    "paginate",
    "sort_annotations",
    "FacetAggregator",
    "SearchFacets",
    "date_bucket",
    "get_popular_tags",
    "get_suggestions",

    # Concurrency
    "LockTimeout",
    "ReadWriteLock",

    # Errors
    "ErrorCode",
    "SearchRequestError",

    # Collaboration feed
    "FEED_EVENT_TYPES",
    "apply_event",
]
