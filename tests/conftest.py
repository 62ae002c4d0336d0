"""Shared fixtures: a fixed clock and an annotation factory."""

from datetime import datetime, timedelta, timezone

import pytest

from annotation_search import Annotation, AnnotationSearchEngine, AuthorInfo

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def build_annotation(id, text=None, comment=None, tags=None, author=("u1", "Alice"),
                     days_ago=0, **kwargs):
    created = NOW - timedelta(days=days_ago)
    modified = kwargs.pop("modified_at", created)
    kwargs.setdefault("document_id", "doc-1")
    kwargs.setdefault("platform", "zotero")
    kwargs.setdefault("visibility", "public")
    return Annotation(
        id=id,
        text=text,
        comment=comment,
        tags=tags or [],
        author=AuthorInfo(*author),
        created_at=created,
        modified_at=modified,
        **kwargs,
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_annotation():
    return build_annotation


@pytest.fixture
def abc_corpus():
    """The three-record corpus used across the property tests."""
    return [
        build_annotation("A", text="deep learning survey", tags=["ml"], days_ago=1),
        build_annotation("B", comment="deep dive into transformers", tags=["ml", "nlp"],
                         author=("u2", "Bob"), days_ago=2, type="note"),
        build_annotation("C", text="gardening tips", tags=["hobby"], days_ago=40,
                         platform="hypothesis", color="#ff0000"),
    ]


@pytest.fixture
def engine(abc_corpus):
    return AnnotationSearchEngine(abc_corpus, clock=lambda: NOW)
