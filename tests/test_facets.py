"""Tests for facet aggregation and date buckets."""

from datetime import timedelta

import pytest

from annotation_search import FacetAggregator
from annotation_search.facets import date_bucket


@pytest.mark.parametrize("age,bucket", [
    (timedelta(0), "today"),
    (timedelta(hours=23), "today"),
    (timedelta(days=-3), "today"),
    (timedelta(days=1), "this_week"),
    (timedelta(days=7, hours=23), "this_week"),
    (timedelta(days=8), "this_month"),
    (timedelta(days=30), "this_month"),
    (timedelta(days=31), "last_three_months"),
    (timedelta(days=90), "last_three_months"),
    (timedelta(days=91), "last_year"),
    (timedelta(days=365), "last_year"),
    (timedelta(days=366), "older"),
])
def test_date_bucket_boundaries(now, age, bucket):
    assert date_bucket(now - age, now) == bucket


def test_abc_facets(abc_corpus, now):
    facets = FacetAggregator().aggregate(abc_corpus, now=now)
    assert facets.counts("platforms", "platform") == {"zotero": 2, "hypothesis": 1}
    assert facets.counts("types", "type") == {"highlight": 2, "note": 1}
    assert facets.counts("tags", "tag") == {"ml": 2, "nlp": 1, "hobby": 1}
    assert facets.counts("colors", "color") == {"#ffd400": 2, "#ff0000": 1}
    assert facets.counts("date_ranges", "range") == {"this_week": 2, "last_three_months": 1}
    assert facets.authors == [
        {"authorId": "u1", "authorName": "Alice", "count": 2},
        {"authorId": "u2", "authorName": "Bob", "count": 1},
    ]


def test_rows_sorted_by_count_ties_in_first_seen_order(make_annotation, now):
    corpus = [
        make_annotation("1", tags=["b"]),
        make_annotation("2", tags=["a", "c"]),
        make_annotation("3", tags=["c"]),
    ]
    tags = FacetAggregator().aggregate(corpus, now=now).tags
    assert [row["tag"] for row in tags] == ["c", "b", "a"]


def test_tag_facet_is_capped(make_annotation, now):
    corpus = [make_annotation(str(i), tags=[f"t{i}"]) for i in range(60)]
    corpus.append(make_annotation("x", tags=["t59"]))
    tags = FacetAggregator().aggregate(corpus, now=now).tags
    assert len(tags) == 50
    assert tags[0] == {"tag": "t59", "count": 2}

    small = FacetAggregator(tag_limit=3).aggregate(corpus, now=now).tags
    assert len(small) == 3


def test_counts_sum_to_corpus_size(abc_corpus, now):
    facets = FacetAggregator().aggregate(abc_corpus, now=now)
    for dimension in ("platforms", "types", "authors", "colors", "date_ranges"):
        assert sum(row["count"] for row in getattr(facets, dimension)) == len(abc_corpus)


def test_unknown_values_get_their_own_row(make_annotation, now):
    corpus = [make_annotation("1", platform="readwise"), make_annotation("2")]
    facets = FacetAggregator().aggregate(corpus, now=now)
    assert facets.counts("platforms", "platform") == {"unknown": 1, "zotero": 1}


def test_empty_corpus(now):
    facets = FacetAggregator().aggregate([], now=now)
    assert facets.to_dict() == {
        "platforms": [], "types": [], "authors": [],
        "tags": [], "colors": [], "dateRanges": [],
    }


def test_naive_clock_is_read_as_utc(abc_corpus, now):
    naive = now.replace(tzinfo=None)
    facets = FacetAggregator().aggregate(abc_corpus, now=naive)
    assert facets.counts("date_ranges", "range") == {"this_week": 2, "last_three_months": 1}
