"""
Relevance scoring for free-text annotation search.

Scoring is field-weighted substring containment:

- query term found in the highlighted text  → +3
- query term found in the comment           → +2
- query term found in the joined tag string → +1

Substring containment (not token equality) is used so partial words still
count: "transform" scores against "transformers".

Candidates come from the inverted index with OR semantics by default, so a
document matching more query terms accumulates a higher score and floats
above documents matching only one.  AND semantics are available with
``mode="all"``.
"""

from dataclasses import dataclass, field
from typing import AbstractSet, List, Sequence, Tuple

from .annotation import Annotation
from .indexing import SearchIndex
from .tokenizer import tokenize


@dataclass
class ScoredAnnotation:
    """An annotation with its relevance score and the terms that hit."""
    annotation: Annotation
    score: int
    matched_terms: List[str] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.annotation.id

    def __repr__(self):
        return f"<ScoredAnnotation {self.annotation.id} score={self.score}>"


class RelevanceScorer:
    """Field-weighted substring scorer.

    Args:
        text_weight: Points when a term occurs in the highlighted text.
        comment_weight: Points when a term occurs in the comment.
        tag_weight: Points when a term occurs in the joined tags.
    """

    def __init__(self, text_weight: int = 3, comment_weight: int = 2, tag_weight: int = 1):
        self.text_weight = text_weight
        self.comment_weight = comment_weight
        self.tag_weight = tag_weight

    def score(self, annotation: Annotation, terms: Sequence[str]) -> int:
        return self.explain(annotation, terms)[0]

    def explain(self, annotation: Annotation, terms: Sequence[str]) -> Tuple[int, List[str]]:
        """Score *annotation* and report which terms contributed."""
        text = (annotation.text or "").lower()
        comment = (annotation.comment or "").lower()
        tags = " ".join(annotation.tags).lower()

        score = 0
        matched = []
        for term in terms:
            hit = 0
            if term in text:
                hit += self.text_weight
            if term in comment:
                hit += self.comment_weight
            if term in tags:
                hit += self.tag_weight
            if hit:
                matched.append(term)
            score += hit
        return score, matched


def rank_candidates(annotations: Sequence[Annotation], terms: Sequence[str],
                    matched_ids: AbstractSet[str],
                    scorer: RelevanceScorer = None) -> List[ScoredAnnotation]:
    """Score the annotations whose id is in *matched_ids*, best first.

    Ties keep the order of *annotations*.
    """
    scorer = scorer or RelevanceScorer()
    scored = []
    for annotation in annotations:
        if annotation.id not in matched_ids:
            continue
        score, matched = scorer.explain(annotation, terms)
        scored.append(ScoredAnnotation(annotation, score, matched))

    scored.sort(key=lambda s: s.score, reverse=True)
    return scored


def search_text(index: SearchIndex, annotations: Sequence[Annotation], query: str,
                mode: str = "any", scorer: RelevanceScorer = None) -> List[ScoredAnnotation]:
    """Run the text stage of a search.

    Returns the matching annotations ranked by score, highest first.  A query
    with no indexable terms does not constrain anything: every annotation
    comes back with score 0 in corpus order.
    """
    terms = tokenize(query)
    if not terms:
        return [ScoredAnnotation(a, 0) for a in annotations]
    return rank_candidates(annotations, terms, index.candidates(terms, mode=mode), scorer)
