"""Tests for relevance scoring and the text-search stage."""

import unittest

from annotation_search import Annotation, RelevanceScorer, SearchIndex, search_text


class TestRelevanceScorer(unittest.TestCase):
    def setUp(self):
        self.scorer = RelevanceScorer()

    def test_field_weights(self):
        a = Annotation("x", text="deep nets", comment="deep thoughts", tags=["deep"])
        self.assertEqual(self.scorer.score(a, ["deep"]), 3 + 2 + 1)

    def test_text_only(self):
        a = Annotation("x", text="Deep learning survey")
        self.assertEqual(self.scorer.score(a, ["deep"]), 3)

    def test_substring_containment(self):
        a = Annotation("x", comment="deep dive into transformers")
        self.assertEqual(self.scorer.score(a, ["transform"]), 2)

    def test_terms_accumulate(self):
        a = Annotation("x", text="deep learning survey")
        self.assertEqual(self.scorer.score(a, ["deep", "survey", "absent"]), 6)

    def test_joined_tags_match_across_tags(self):
        a = Annotation("x", tags=["machine", "learning"])
        self.assertEqual(self.scorer.score(a, ["machine learning"]), 1)

    def test_no_match_scores_zero(self):
        a = Annotation("x", text="gardening tips")
        self.assertEqual(self.scorer.score(a, ["deep"]), 0)

    def test_explain_reports_matched_terms(self):
        a = Annotation("x", text="deep learning")
        score, matched = self.scorer.explain(a, ["deep", "gardening"])
        self.assertEqual(score, 3)
        self.assertEqual(matched, ["deep"])

    def test_custom_weights(self):
        scorer = RelevanceScorer(text_weight=10, comment_weight=5, tag_weight=0)
        a = Annotation("x", text="deep", tags=["deep"])
        self.assertEqual(scorer.score(a, ["deep"]), 10)


class TestSearchText(unittest.TestCase):
    def setUp(self):
        self.corpus = [
            Annotation("A", text="deep learning survey", tags=["ml"]),
            Annotation("B", comment="deep dive into transformers", tags=["ml", "nlp"]),
            Annotation("C", text="gardening tips", tags=["hobby"]),
            Annotation("D", text="a survey of gardening"),
        ]
        self.index = SearchIndex()
        self.index.rebuild(self.corpus)

    def ids(self, results):
        return [r.id for r in results]

    def test_ranked_by_score(self):
        results = search_text(self.index, self.corpus, "deep")
        self.assertEqual(self.ids(results), ["A", "B"])
        self.assertEqual([r.score for r in results], [3, 2])

    def test_or_semantics(self):
        results = search_text(self.index, self.corpus, "transformers gardening")
        self.assertEqual(set(self.ids(results)), {"B", "C", "D"})

    def test_and_semantics_opt_in(self):
        results = search_text(self.index, self.corpus, "survey gardening", mode="all")
        self.assertEqual(self.ids(results), ["D"])

    def test_more_matching_terms_rank_higher(self):
        results = search_text(self.index, self.corpus, "survey gardening")
        self.assertEqual(self.ids(results)[0], "D")

    def test_ties_keep_corpus_order(self):
        results = search_text(self.index, self.corpus, "gardening")
        self.assertEqual(self.ids(results), ["C", "D"])

    def test_query_without_terms_returns_everything_unranked(self):
        results = search_text(self.index, self.corpus, "a !")
        self.assertEqual(self.ids(results), ["A", "B", "C", "D"])
        self.assertTrue(all(r.score == 0 for r in results))

    def test_unmatched_query_is_empty(self):
        self.assertEqual(search_text(self.index, self.corpus, "quantum"), [])


if __name__ == "__main__":
    unittest.main()
