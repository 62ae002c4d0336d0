"""
Inverted index over annotation records.

Maps every term to the set of annotation ids that contain it.  Terms come
from four fields:

- highlighted text (tokenized)
- comment (tokenized)
- tags (each tag whole, lower-cased, not split further)
- author display name (tokenized)

A per-annotation term set is kept alongside the postings so an edit or a
delete touches only the postings of the affected annotation.  ``rebuild()``
re-derives everything from a corpus when a caller prefers the O(n) path.
"""

import logging
from typing import Dict, Iterable, List, Set

from .annotation import Annotation
from .tokenizer import tokenize

logger = logging.getLogger("annotation_search")

TEXT_MODES = ("any", "all")


def extract_terms(annotation: Annotation) -> List[str]:
    """Return the term multiset an annotation contributes to the index."""
    terms: List[str] = []
    terms.extend(tokenize(annotation.text))
    terms.extend(tokenize(annotation.comment))
    terms.extend(tag.lower() for tag in annotation.tags if tag)
    terms.extend(tokenize(annotation.author.name))
    return terms


class SearchIndex:
    """Term → annotation-id inverted index with a per-id term side table."""

    def __init__(self):
        # term -> {annotation_id, ...}
        self.postings: Dict[str, Set[str]] = {}

        # annotation_id -> {term, ...}
        self.annotation_terms: Dict[str, Set[str]] = {}

    def add(self, annotation: Annotation):
        """Index one annotation, replacing any postings it already had."""
        annotation_id = annotation.id
        if annotation_id in self.annotation_terms:
            self.remove(annotation_id)

        terms = set(extract_terms(annotation))
        self.annotation_terms[annotation_id] = terms
        for term in terms:
            self.postings.setdefault(term, set()).add(annotation_id)

    def remove(self, annotation_id: str) -> bool:
        """Drop every posting of *annotation_id*.  Unknown ids are ignored."""
        terms = self.annotation_terms.pop(annotation_id, None)
        if terms is None:
            return False

        for term in terms:
            ids = self.postings.get(term)
            if ids is None:
                continue
            ids.discard(annotation_id)
            # Clean up empty entries
            if not ids:
                del self.postings[term]
        return True

    def rebuild(self, annotations: Iterable[Annotation]):
        """Clear the index and re-derive it from *annotations*."""
        self.postings.clear()
        self.annotation_terms.clear()
        for annotation in annotations:
            self.add(annotation)
        logger.debug(
            f"Index rebuilt: {len(self.annotation_terms)} annotations, "
            f"{len(self.postings)} terms"
        )

    def lookup(self, term: str) -> Set[str]:
        """Ids whose postings contain *term* (empty set when absent)."""
        return self.postings.get(term, set())

    def candidates(self, terms: List[str], mode: str = "any") -> Set[str]:
        """Combine the postings of *terms*.

        Args:
            terms: Query terms, already tokenized.
            mode: "any" (union, OR) or "all" (intersection, AND)
        """
        if not terms:
            return set()

        if mode == "any":
            result: Set[str] = set()
            for term in terms:
                result.update(self.lookup(term))
            return result

        elif mode == "all":
            result = set(self.lookup(terms[0]))
            for term in terms[1:]:
                result &= self.lookup(term)
            return result

        else:
            raise ValueError(f"Invalid mode: {mode}. Use 'any' or 'all'")

    def terms_for(self, annotation_id: str) -> Set[str]:
        return set(self.annotation_terms.get(annotation_id, ()))

    def __contains__(self, annotation_id: str) -> bool:
        return annotation_id in self.annotation_terms

    def __len__(self) -> int:
        return len(self.annotation_terms)

    def get_stats(self) -> Dict:
        """Get index statistics."""
        posting_sizes = [len(ids) for ids in self.postings.values()]

        return {
            "total_annotations": len(self.annotation_terms),
            "total_terms": len(self.postings),
            "avg_postings_per_term": (
                round(sum(posting_sizes) / len(posting_sizes), 2) if posting_sizes else 0
            ),
            "max_postings_per_term": max(posting_sizes) if posting_sizes else 0,
        }
