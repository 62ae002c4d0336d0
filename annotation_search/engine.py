"""
AnnotationSearchEngine: ranked and faceted search over annotations.

The engine mirrors a collection of annotation records owned elsewhere
(database, collaboration feed) and answers queries over it:

- free-text search through an inverted index, ranked by field-weighted score
- structural filters (document, author, platform, type, tags, dates, ...)
- sort + pagination
- facet counts over the full corpus
- autocomplete suggestions and popular tags

Concurrency: the engine is a shared mutable resource.  Mutations take the
exclusive side of a reader/writer lock.  Queries take the shared side just
long enough to capture a snapshot of the records and the index candidates,
then score, sort, page and facet outside the lock.

Usage:
    from annotation_search import AnnotationSearchEngine

    engine = AnnotationSearchEngine(records)
    engine.add_annotation(new_record)
    result = engine.search({"query": "deep learning", "tags": ["ml"]})
    for annotation in result.annotations:
        ...
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from .annotation import Annotation
from .errors import invalid_request, validation_failed
from .facets import TAG_FACET_LIMIT, FacetAggregator, SearchFacets
from .filters import DEFAULT_PAGE_LIMIT, FilterEngine, SearchFilters, coerce_filters
from .indexing import SearchIndex
from .locking import ReadWriteLock
from .paging import paginate, sort_annotations
from .performance import PerformanceMonitor
from .scoring import RelevanceScorer, ScoredAnnotation, rank_candidates
from .suggestions import (
    DEFAULT_POPULAR_TAG_LIMIT,
    DEFAULT_SUGGESTION_LIMIT,
    get_popular_tags,
    get_suggestions,
)
from .tokenizer import tokenize

logger = logging.getLogger("annotation_search")

AnnotationLike = Union[Annotation, Dict]


@dataclass
class SearchResult:
    """One page of search results plus full-corpus facets."""
    annotations: List[Annotation] = field(default_factory=list)
    total: int = 0
    page: int = 1
    total_pages: int = 0
    facets: SearchFacets = field(default_factory=SearchFacets)
    # annotation id -> relevance score, only for free-text queries
    scores: Dict[str, int] = field(default_factory=dict)

    @property
    def ids(self) -> List[str]:
        return [a.id for a in self.annotations]

    def to_dict(self) -> Dict:
        return {
            "annotations": [a.to_dict() for a in self.annotations],
            "total": self.total,
            "page": self.page,
            "totalPages": self.total_pages,
            "facets": self.facets.to_dict(),
            "scores": dict(self.scores),
        }

    def __repr__(self):
        return (
            f"<SearchResult page={self.page}/{self.total_pages} "
            f"shown={len(self.annotations)} total={self.total}>"
        )


def _as_annotation(value: AnnotationLike) -> Annotation:
    if isinstance(value, Annotation):
        return value
    if isinstance(value, dict):
        return Annotation.from_dict(value)
    raise validation_failed(
        f"Expected an Annotation or a record dict, got {type(value).__name__}"
    )


def _check_limit(limit: int, name: str = "limit") -> None:
    if not isinstance(limit, int) or isinstance(limit, bool) or limit < 1:
        raise invalid_request(f"{name} must be an integer >= 1, got {limit!r}", **{name: limit})


class AnnotationSearchEngine:
    """In-memory search engine over a mirrored annotation corpus.

    Parameters
    ----------
    annotations : iterable of Annotation or record dicts, optional
        Initial corpus, loaded as by :meth:`set_annotations`.
    default_limit : int
        Page size used when a search does not name one (default 20).
    tag_facet_limit : int
        Maximum rows in the tag facet (default 50).
    incremental_index : bool
        When True (default) edits and deletes patch only the postings of the
        affected annotation.  When False they trigger a full index rebuild.
    lock_timeout : float | None
        Seconds to wait for the engine lock before raising LockTimeout.
        None waits forever.
    clock : callable | None
        Returns the current aware datetime; drives the date facet buckets.
    scorer : RelevanceScorer | None
        Custom field weights for ranking.
    """

    def __init__(
        self,
        annotations: Optional[Iterable[AnnotationLike]] = None,
        *,
        default_limit: int = DEFAULT_PAGE_LIMIT,
        tag_facet_limit: int = TAG_FACET_LIMIT,
        incremental_index: bool = True,
        lock_timeout: Optional[float] = None,
        clock: Optional[Callable[[], datetime]] = None,
        scorer: Optional[RelevanceScorer] = None,
    ):
        _check_limit(default_limit, "default_limit")
        _check_limit(tag_facet_limit, "tag_facet_limit")
        self.default_limit = default_limit
        self.incremental_index = incremental_index

        # id -> record, in corpus order
        self._annotations: Dict[str, Annotation] = {}
        self.index = SearchIndex()
        self.filter_engine = FilterEngine()
        self.facet_aggregator = FacetAggregator(tag_limit=tag_facet_limit)
        self.scorer = scorer or RelevanceScorer()

        self._lock = ReadWriteLock(timeout=lock_timeout)
        self._perf = PerformanceMonitor()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        if annotations is not None:
            self.set_annotations(annotations)

    # ── mutations ───────────────────────────────────────────────────────

    def set_annotations(self, annotations: Iterable[AnnotationLike]) -> int:
        """Replace the whole corpus and rebuild the index.

        Duplicate ids keep the last record, at the position of the first.
        Returns the number of annotations now held.
        """
        records: Dict[str, Annotation] = {}
        duplicates = 0
        for value in annotations:
            annotation = _as_annotation(value)
            if annotation.id in records:
                duplicates += 1
            records[annotation.id] = annotation

        if duplicates:
            logger.warning(f"set_annotations: {duplicates} duplicate id(s) collapsed")

        with self._lock.write():
            self._annotations = records
            self.index.rebuild(records.values())
            self._perf.record_rebuild()

        logger.info(f"Loaded {len(records)} annotations")
        return len(records)

    def add_annotation(self, annotation: AnnotationLike) -> Annotation:
        """Append one annotation and index it incrementally.

        An annotation whose id is already present replaces that record in
        place, so ids stay unique.
        """
        annotation = _as_annotation(annotation)
        with self._lock.write():
            existed = annotation.id in self._annotations
            self._annotations[annotation.id] = annotation
            self.index.add(annotation)
            self._perf.record_incremental()

        if existed:
            logger.debug(f"add_annotation: {annotation.id} already present, replaced")
        else:
            logger.debug(f"add_annotation: {annotation.id}")
        return annotation

    def update_annotation(self, annotation: AnnotationLike) -> bool:
        """Replace the record with the same id.  Unknown ids are a no-op.

        Returns True if a record was replaced.
        """
        annotation = _as_annotation(annotation)
        with self._lock.write():
            if annotation.id not in self._annotations:
                logger.debug(f"update_annotation: {annotation.id} not present, ignored")
                return False
            self._annotations[annotation.id] = annotation
            self._reindex_after_change(annotation.id)
        return True

    def remove_annotation(self, annotation_id: str) -> bool:
        """Delete a record and all its postings.  Unknown ids are a no-op.

        Returns True if a record was removed.
        """
        with self._lock.write():
            if annotation_id not in self._annotations:
                logger.debug(f"remove_annotation: {annotation_id} not present, ignored")
                return False
            del self._annotations[annotation_id]
            self._reindex_after_change(annotation_id)
        return True

    def rebuild_index(self) -> Dict:
        """Rebuild the inverted index from the current corpus."""
        with self._lock.write():
            self.index.rebuild(self._annotations.values())
            self._perf.record_rebuild()
            return self.index.get_stats()

    def _reindex_after_change(self, annotation_id: str) -> None:
        # Caller holds the write lock
        if self.incremental_index:
            annotation = self._annotations.get(annotation_id)
            if annotation is None:
                self.index.remove(annotation_id)
            else:
                self.index.add(annotation)
            self._perf.record_incremental()
        else:
            self.index.rebuild(self._annotations.values())
            self._perf.record_rebuild()
            logger.debug(f"Full index rebuild after change to {annotation_id}")

    # Ingest-interface names used by the persistence/collaboration layer

    def load(self, annotations: Iterable[AnnotationLike]) -> int:
        return self.set_annotations(annotations)

    def insert(self, annotation: AnnotationLike) -> Annotation:
        return self.add_annotation(annotation)

    def replace(self, annotation_id: str, annotation: AnnotationLike) -> bool:
        annotation = _as_annotation(annotation)
        if annotation.id != annotation_id:
            raise validation_failed(
                f"replace({annotation_id!r}) was given a record with id {annotation.id!r}",
                annotation_id=annotation_id, record_id=annotation.id,
            )
        return self.update_annotation(annotation)

    def delete(self, annotation_id: str) -> bool:
        return self.remove_annotation(annotation_id)

    # ── queries ─────────────────────────────────────────────────────────

    def _snapshot(self) -> Tuple[Annotation, ...]:
        with self._lock.read():
            return tuple(self._annotations.values())

    def search(self, filters: Union[None, SearchFilters, Dict] = None, **kwargs) -> SearchResult:
        """Search the corpus.

        Pipeline: text match (OR over query terms unless ``text_mode="all"``)
        → structural filters → sort → page.  Facets are computed over the
        full corpus, not the filtered results.

        Args:
            filters: SearchFilters, a request dict (camelCase or snake_case),
                or None.  Keyword arguments are accepted in place of a dict.

        Raises:
            SearchRequestError: invalid page/limit/sort or an inverted date range.
        """
        t0 = time.monotonic()
        request = coerce_filters(filters, **kwargs).validate()
        limit = request.limit if request.limit is not None else self.default_limit
        terms = tokenize(request.query)

        with self._lock.read():
            corpus = tuple(self._annotations.values())
            matched_ids = self.index.candidates(terms, mode=request.text_mode) if terms else None

        if terms:
            scored = rank_candidates(corpus, terms, matched_ids, self.scorer)
        else:
            scored = [ScoredAnnotation(a, 0) for a in corpus]

        kept = [s for s in scored if self.filter_engine.matches(s.annotation, request)]
        ordered = sort_annotations([s.annotation for s in kept], request.sort_by, request.sort_order)
        page = paginate(ordered, request.page, limit)

        scores = {}
        if terms:
            on_page = {a.id for a in page.items}
            scores = {s.id: s.score for s in kept if s.id in on_page}

        result = SearchResult(
            annotations=page.items,
            total=page.total,
            page=page.page,
            total_pages=page.total_pages,
            facets=self.facet_aggregator.aggregate(corpus, now=self._clock()),
            scores=scores,
        )
        self._perf.record_search((time.monotonic() - t0) * 1000)
        return result

    def get_facets(self) -> SearchFacets:
        """Facet counts over the full corpus."""
        return self.facet_aggregator.aggregate(self._snapshot(), now=self._clock())

    def get_suggestions(self, query: str, limit: int = DEFAULT_SUGGESTION_LIMIT) -> List[str]:
        _check_limit(limit)
        return get_suggestions(self._snapshot(), query, limit)

    def get_popular_tags(self, limit: int = DEFAULT_POPULAR_TAG_LIMIT) -> List[Tuple[str, int]]:
        _check_limit(limit)
        return get_popular_tags(self._snapshot(), limit)

    # Query-interface names used by the API layer

    def suggest(self, query: str, limit: int = DEFAULT_SUGGESTION_LIMIT) -> List[str]:
        return self.get_suggestions(query, limit)

    def popular_tags(self, limit: int = DEFAULT_POPULAR_TAG_LIMIT) -> List[Tuple[str, int]]:
        return self.get_popular_tags(limit)

    def get_annotation(self, annotation_id: str) -> Optional[Annotation]:
        with self._lock.read():
            return self._annotations.get(annotation_id)

    @property
    def annotations(self) -> List[Annotation]:
        """Current corpus, in order (a copy)."""
        return list(self._snapshot())

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._annotations)

    def __contains__(self, annotation_id: str) -> bool:
        with self._lock.read():
            return annotation_id in self._annotations

    def stats(self) -> Dict:
        """Corpus, index and query statistics."""
        with self._lock.read():
            stats = {
                "total_annotations": len(self._annotations),
                "incremental_index": self.incremental_index,
                "index": self.index.get_stats(),
            }
        stats["performance"] = self._perf.to_dict()
        return stats

    def __repr__(self) -> str:
        return f"<AnnotationSearchEngine annotations={len(self)}>"
