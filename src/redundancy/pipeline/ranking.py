from __future__ import annotations

import heapq
import math
from collections import defaultdict

from redundancy.constants import (
    SIMILARITY_THRESHOLD,
    TOP_SIMILAR_PAGES,
    WORD_SIMILARITY_THRESHOLD,
)
from redundancy.models import (
    Comparison,
    NormalizedPage,
    PageRedundancy,
    SimilarPage,
    SimilarityPair,
    WordPair,
)


def to_percent(fraction: float) -> int:
    # Half-up so 0.125 -> 13, not banker's rounding.
    return int(math.floor(fraction * 100 + 0.5))


def _pair_from(comp: Comparison) -> SimilarityPair:
    a, b = comp.a, comp.b
    if b.page_id < a.page_id:
        a, b = b, a
    similarity = to_percent(comp.shingle_similarity)
    return SimilarityPair(
        page_a=a.page_id,
        page_b=b.page_id,
        similarity=similarity,
        path_a=a.path,
        path_b=b.path,
        title_a=a.title,
        title_b=b.title,
        shingle_similarity=similarity,
        word_similarity=to_percent(comp.word_similarity),
    )


def _word_pair_from(comp: Comparison) -> WordPair:
    a, b = comp.a, comp.b
    if b.page_id < a.page_id:
        a, b = b, a
    return WordPair(
        page_a=a.page_id,
        page_b=b.page_id,
        similarity=to_percent(comp.shingle_similarity),
        word_similarity=to_percent(comp.word_similarity),
        path_a=a.path,
        path_b=b.path,
    )


def _similar_entry(other: NormalizedPage, similarity: int) -> SimilarPage:
    return SimilarPage(page_id=other.page_id, similarity=similarity, title=other.title, path=other.path)


def top_similar(entries: list[SimilarPage], limit: int = TOP_SIMILAR_PAGES) -> list[SimilarPage]:
    return heapq.nsmallest(max(0, limit), entries, key=lambda e: (-e.similarity, e.page_id))


def aggregate(
    pages: list[NormalizedPage],
    comparisons: list[Comparison],
    *,
    threshold: float = SIMILARITY_THRESHOLD,
    word_threshold: float = WORD_SIMILARITY_THRESHOLD,
    top_k: int = TOP_SIMILAR_PAGES,
) -> tuple[dict[str, PageRedundancy], list[SimilarityPair], list[WordPair]]:
    """Fold pairwise comparisons into per-page rankings and sorted pair lists.

    Every page passed in gets an entry, even with no matches. Only
    comparisons at or above ``threshold`` count toward a page's rankings.
    """
    page_redundancy = {page.page_id: PageRedundancy() for page in pages}
    max_fraction: dict[str, float] = defaultdict(float)
    candidates: dict[str, list[SimilarPage]] = defaultdict(list)
    pairs: list[SimilarityPair] = []
    word_pairs: list[WordPair] = []

    for comp in comparisons:
        if comp.shingle_similarity >= threshold:
            pair = _pair_from(comp)
            pairs.append(pair)
            for page, other in ((comp.a, comp.b), (comp.b, comp.a)):
                candidates[page.page_id].append(_similar_entry(other, pair.similarity))
                max_fraction[page.page_id] = max(max_fraction[page.page_id], comp.shingle_similarity)
        elif comp.word_similarity >= word_threshold:
            word_pairs.append(_word_pair_from(comp))

    for page_id, data in page_redundancy.items():
        data.similar_pages = top_similar(candidates.get(page_id, []), top_k)
        data.max_similarity = to_percent(max_fraction.get(page_id, 0.0))
        if data.similar_pages:
            total = sum(p.similarity for p in data.similar_pages)
            data.avg_similarity = int(math.floor(total / len(data.similar_pages) + 0.5))

    pairs.sort(key=lambda p: (-p.similarity, p.page_a, p.page_b))
    word_pairs.sort(key=lambda p: (-p.word_similarity, p.page_a, p.page_b))
    return page_redundancy, pairs, word_pairs


def get_redundancy_score(page_id: str, page_redundancy: dict[str, PageRedundancy]) -> int:
    data = page_redundancy.get(page_id)
    if data is None:
        return 0
    return data.max_similarity


def get_similar_pages(page_id: str, page_redundancy: dict[str, PageRedundancy]) -> list[SimilarPage]:
    data = page_redundancy.get(page_id)
    if data is None:
        return []
    return data.similar_pages


def frequent_pages(pairs: list[SimilarityPair], *, min_count: int = 2, limit: int = 5) -> list[tuple[str, str, int]]:
    """Pages that show up in several reported pairs: (page_id, path, count)."""
    counts: dict[str, int] = defaultdict(int)
    paths: dict[str, str] = {}
    for pair in pairs:
        counts[pair.page_a] += 1
        counts[pair.page_b] += 1
        paths.setdefault(pair.page_a, pair.path_a)
        paths.setdefault(pair.page_b, pair.path_b)
    ranked = sorted(
        ((page_id, count) for page_id, count in counts.items() if count >= min_count),
        key=lambda row: (-row[1], row[0]),
    )
    return [(page_id, paths.get(page_id, ""), count) for page_id, count in ranked[:limit]]
