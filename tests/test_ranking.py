import unittest

from redundancy.models import Comparison, NormalizedPage, PageRedundancy, SimilarPage
from redundancy.pipeline.ranking import (
    aggregate,
    frequent_pages,
    get_redundancy_score,
    get_similar_pages,
    to_percent,
    top_similar,
)


def _np(page_id: str) -> NormalizedPage:
    return NormalizedPage(page_id, f"/docs/{page_id}", page_id.upper(), "article", "", frozenset(), frozenset())


class TestRanking(unittest.TestCase):
    def test_to_percent_rounds_half_up(self):
        self.assertEqual(to_percent(0.125), 13)
        self.assertEqual(to_percent(1 / 3), 33)
        self.assertEqual(to_percent(0.0), 0)
        self.assertEqual(to_percent(1.0), 100)

    def test_top_similar_caps_and_orders(self):
        entries = [SimilarPage(page_id=f"p{i}", similarity=s) for i, s in enumerate([40, 90, 10, 90, 70, 55, 20])]
        top = top_similar(entries, 5)
        self.assertEqual([e.similarity for e in top], [90, 90, 70, 55, 40])
        self.assertEqual([e.page_id for e in top[:2]], ["p1", "p3"])

    def test_aggregate_builds_pairs_and_page_rankings(self):
        a, b, c = _np("b-page"), _np("a-page"), _np("c-page")
        comps = [
            Comparison(a, b, shingle_similarity=0.8, word_similarity=0.9),
            Comparison(a, c, shingle_similarity=0.4, word_similarity=0.5),
            Comparison(b, c, shingle_similarity=0.05, word_similarity=0.1),
        ]
        page_redundancy, pairs, word_pairs = aggregate([a, b, c], comps, threshold=0.1, word_threshold=0.25)

        self.assertEqual([(p.page_a, p.page_b, p.similarity) for p in pairs], [
            ("a-page", "b-page", 80),
            ("b-page", "c-page", 40),
        ])
        self.assertEqual(pairs[0].title_a, "A-PAGE")
        self.assertEqual(pairs[0].word_similarity, 90)
        self.assertEqual(word_pairs, [])

        data = page_redundancy["b-page"]
        self.assertEqual(data.max_similarity, 80)
        self.assertEqual(data.avg_similarity, 60)
        self.assertEqual([p.page_id for p in data.similar_pages], ["a-page", "c-page"])
        self.assertEqual(page_redundancy["c-page"].max_similarity, 40)

    def test_below_threshold_pages_report_zeros(self):
        a, b = _np("a"), _np("b")
        page_redundancy, pairs, _ = aggregate([a, b], [Comparison(a, b, 0.05, 0.0)], threshold=0.1)
        self.assertEqual(pairs, [])
        self.assertEqual(page_redundancy["a"], PageRedundancy())

    def test_word_pairs_only_for_low_shingle_overlap(self):
        a, b = _np("a"), _np("b")
        _, pairs, word_pairs = aggregate([a, b], [Comparison(a, b, 0.02, 0.6)], threshold=0.1, word_threshold=0.25)
        self.assertEqual(pairs, [])
        self.assertEqual(len(word_pairs), 1)
        self.assertEqual(word_pairs[0].word_similarity, 60)
        self.assertEqual(word_pairs[0].similarity, 2)

    def test_lookup_helpers_default_for_unknown_pages(self):
        data = {"a": PageRedundancy(max_similarity=70, similar_pages=[SimilarPage("b", 70)])}
        self.assertEqual(get_redundancy_score("a", data), 70)
        self.assertEqual(get_redundancy_score("zzz", data), 0)
        self.assertEqual(len(get_similar_pages("a", data)), 1)
        self.assertEqual(get_similar_pages("zzz", data), [])

    def test_frequent_pages_counts_pair_membership(self):
        a, b, c = _np("a"), _np("b"), _np("c")
        comps = [Comparison(a, b, 0.9, 0.9), Comparison(a, c, 0.5, 0.5)]
        _, pairs, _ = aggregate([a, b, c], comps)
        self.assertEqual(frequent_pages(pairs), [("a", "/docs/a", 2)])


if __name__ == "__main__":
    unittest.main()
