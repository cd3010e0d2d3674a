from __future__ import annotations

from typing import AbstractSet

from redundancy.models import Comparison, FormatCluster


def jaccard(a: AbstractSet[str], b: AbstractSet[str]) -> float:
    if not a or not b:
        return 0.0
    if len(a) > len(b):
        a, b = b, a
    intersection = sum(1 for item in a if item in b)
    union = len(a) + len(b) - intersection
    return intersection / union if union else 0.0


def compare_cluster(
    cluster: FormatCluster,
    *,
    min_similarity: float = 0.0,
    min_word_similarity: float = 0.0,
) -> list[Comparison]:
    """Score every unordered pair of distinct pages in one format cluster.

    Comparisons below both cutoffs are dropped instead of materialized.
    """
    pages = cluster.pages
    comparisons: list[Comparison] = []
    for i in range(len(pages)):
        a = pages[i]
        for j in range(i + 1, len(pages)):
            b = pages[j]
            shingle_similarity = jaccard(a.shingles, b.shingles)
            word_similarity = jaccard(a.long_words, b.long_words)
            if shingle_similarity < min_similarity and word_similarity < min_word_similarity:
                continue
            comparisons.append(
                Comparison(
                    a=a,
                    b=b,
                    shingle_similarity=shingle_similarity,
                    word_similarity=word_similarity,
                )
            )
    return comparisons
