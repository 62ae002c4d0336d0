"""Autocomplete suggestions and tag clouds over the corpus."""

from collections import Counter
from typing import Iterable, List, Sequence, Tuple

from .annotation import Annotation

DEFAULT_SUGGESTION_LIMIT = 5
DEFAULT_POPULAR_TAG_LIMIT = 20
MIN_SUGGESTION_QUERY = 2


def get_suggestions(annotations: Sequence[Annotation], query: str,
                    limit: int = DEFAULT_SUGGESTION_LIMIT) -> List[str]:
    """Words, two-word phrases and tags that contain *query*.

    Text and comments are scanned first (lower-cased, whitespace-split),
    then tags, which are returned with their stored casing.  Results are
    unique, in first-seen order, and collection stops at *limit*.
    """
    if not query or len(query) < MIN_SUGGESTION_QUERY:
        return []

    needle = query.lower()
    suggestions = {}  # insertion-ordered set

    for annotation in annotations:
        combined = f"{annotation.text or ''} {annotation.comment or ''}".lower()
        words = combined.split()
        for i, word in enumerate(words):
            if needle in word:
                suggestions[word] = None
                if len(suggestions) >= limit:
                    return list(suggestions)

            if i < len(words) - 1:
                phrase = f"{word} {words[i + 1]}"
                if needle in phrase:
                    suggestions[phrase] = None
                    if len(suggestions) >= limit:
                        return list(suggestions)

    for annotation in annotations:
        for tag in annotation.tags:
            if needle in tag.lower():
                suggestions[tag] = None
                if len(suggestions) >= limit:
                    return list(suggestions)

    return list(suggestions)


def get_popular_tags(annotations: Iterable[Annotation],
                     limit: int = DEFAULT_POPULAR_TAG_LIMIT) -> List[Tuple[str, int]]:
    """The *limit* most used tags as ``(tag, count)``, ties in encounter order."""
    counts: Counter = Counter()
    for annotation in annotations:
        for tag in annotation.tags:
            counts[tag] += 1
    return counts.most_common(limit)
