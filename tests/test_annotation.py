"""Tests for the annotation record and its wire format."""

from datetime import datetime, timezone

import pytest

from annotation_search import DEFAULT_COLOR, UNKNOWN, Annotation, SearchRequestError
from annotation_search.annotation import parse_timestamp
from annotation_search.errors import ErrorCode

RECORD = {
    "id": "ann-1",
    "type": "highlight",
    "documentId": "10.1000/xyz",
    "createdAt": "2026-10-01T08:30:00.000Z",
    "modifiedAt": "2026-10-02T09:00:00Z",
    "content": {"text": "Attention is all you need", "comment": "classic", "color": "#2ea8e5"},
    "metadata": {
        "platform": "zotero",
        "author": {"id": "u1", "name": "Alice Liddell"},
        "tags": ["nlp", "transformers"],
        "visibility": "public",
    },
}


def test_from_dict_reads_wire_shape():
    a = Annotation.from_dict(RECORD)
    assert a.id == "ann-1"
    assert a.document_id == "10.1000/xyz"
    assert a.text == "Attention is all you need"
    assert a.comment == "classic"
    assert a.platform == "zotero"
    assert a.author.name == "Alice Liddell"
    assert a.tags == ["nlp", "transformers"]
    assert a.created_at == datetime(2026, 10, 1, 8, 30, tzinfo=timezone.utc)
    assert a.modified_at == datetime(2026, 10, 2, 9, 0, tzinfo=timezone.utc)


def test_to_dict_round_trips_fields():
    a = Annotation.from_dict(RECORD)
    d = a.to_dict()
    assert d["documentId"] == RECORD["documentId"]
    assert d["content"] == RECORD["content"]
    assert d["metadata"]["tags"] == RECORD["metadata"]["tags"]
    assert d["createdAt"] == "2026-10-01T08:30:00Z"
    assert Annotation.from_dict(d).created_at == a.created_at


def test_unknown_enumeration_values_are_coerced():
    record = dict(RECORD, type="sticker")
    record["metadata"] = dict(RECORD["metadata"], platform="readwise", visibility="team")
    a = Annotation.from_dict(record)
    assert a.type == UNKNOWN
    assert a.platform == UNKNOWN
    assert a.visibility == UNKNOWN


def test_defaults_for_missing_fields():
    a = Annotation.from_dict({"id": "x", "createdAt": "2026-01-01T00:00:00Z"})
    assert a.text is None
    assert a.tags == []
    assert a.effective_color == DEFAULT_COLOR
    assert a.modified_at == a.created_at
    assert a.has_comment is False


def test_whitespace_comment_is_not_a_comment():
    assert Annotation("x", comment="   ").has_comment is False
    assert Annotation("y", comment=" ok ").has_comment is True


def test_missing_id_is_a_validation_error():
    with pytest.raises(SearchRequestError) as exc:
        Annotation.from_dict({"content": {"text": "orphan"}})
    assert exc.value.code == ErrorCode.DATA_VALIDATION_FAILED


def test_parse_timestamp_variants():
    assert parse_timestamp(None) is None
    naive = parse_timestamp("2026-03-04T05:06:07")
    assert naive.tzinfo is not None
    offset = parse_timestamp("2026-03-04T07:06:07+02:00")
    assert offset == naive
    with pytest.raises(SearchRequestError):
        parse_timestamp("yesterday")


def test_duplicate_tags_collapse_in_order():
    a = Annotation.from_dict(dict(RECORD, metadata=dict(RECORD["metadata"], tags=["ml", "nlp", "ml"])))
    assert a.tags == ["ml", "nlp"]
