from __future__ import annotations

from typing import Any

from redundancy.constants import (
    EXPORT_PAIR_LIMIT,
    REPORT_PAIR_LIMIT,
    REPORT_PARAGRAPH_LIMIT,
    REPORT_WORD_PAIR_LIMIT,
)
from redundancy.models import Page, PageRedundancy, RedundancyResult, SimilarPage, SimilarityPair
from redundancy.pipeline.ranking import frequent_pages

RULE = "=" * 70
SUBRULE = "-" * 70


def _short_path(path: str) -> str:
    value = (path or "").replace("content/docs/knowledge-base/", "")
    if value.endswith(".mdx"):
        value = value[: -len(".mdx")]
    return value


def render_report(result: RedundancyResult, *, total_pages: int, top: int | None = None) -> list[str]:
    lines = [
        RULE,
        "REDUNDANCY REPORT",
        RULE,
        "",
        f"Analyzed: {total_pages} pages ({len(result.page_redundancy)} eligible)",
        f"Found: {len(result.pairs)} exact-phrase pairs (n-gram overlap)",
        f"Found: {len(result.word_pairs)} conceptually similar pairs (word overlap)",
        f"Found: {len(result.repeated_paragraphs)} repeated paragraph patterns",
        "",
        SUBRULE,
        "HIGH OVERLAP PAIRS",
        SUBRULE,
    ]

    pairs = result.pairs[: top or REPORT_PAIR_LIMIT]
    if not pairs:
        lines.extend(["", "No pairs above threshold found."])
    for pair in pairs:
        lines.extend(
            [
                "",
                f"  {pair.similarity}% similar:",
                f"    * {_short_path(pair.path_a) or pair.page_a}",
                f"    * {_short_path(pair.path_b) or pair.page_b}",
            ]
        )

    if result.word_pairs:
        lines.extend(["", SUBRULE, "CONCEPTUALLY SIMILAR PAIRS (high word overlap, different phrasing)", SUBRULE])
        for wp in result.word_pairs[: top or REPORT_WORD_PAIR_LIMIT]:
            lines.extend(
                [
                    "",
                    f"  {wp.word_similarity}% word overlap:",
                    f"    * {_short_path(wp.path_a) or wp.page_a}",
                    f"    * {_short_path(wp.path_b) or wp.page_b}",
                ]
            )

    lines.extend(["", SUBRULE, "REPEATED PARAGRAPHS (appear in 2+ pages)", SUBRULE])
    paragraphs = result.repeated_paragraphs[:REPORT_PARAGRAPH_LIMIT]
    if not paragraphs:
        lines.extend(["", "No repeated paragraphs found."])
    for rp in paragraphs:
        lines.extend(["", f"  Appears in {rp.count} pages:", f'    "{rp.preview}..."'])
        for occ in rp.occurrences[:5]:
            lines.append(f"      - {_short_path(occ.path) or occ.page_id}")
        if rp.count > 5:
            lines.append(f"      ... and {rp.count - 5} more")

    lines.extend(["", SUBRULE, "SUGGESTIONS", SUBRULE])
    frequent = frequent_pages(result.pairs)
    if frequent:
        lines.extend(["", "  Pages with most overlap (consider consolidating or extracting shared content):"])
        for page_id, path, count in frequent:
            lines.append(f"    * {_short_path(path) or page_id} (overlaps with {count} pages)")
    if result.repeated_paragraphs:
        lines.extend(["", "  Consider moving repeated content to shared pages:"])
        for rp in result.repeated_paragraphs[:3]:
            lines.append(f'    * "{rp.preview[:50]}..." ({rp.count} occurrences)')

    lines.extend(["", RULE])
    return lines


def exit_code(result: RedundancyResult) -> int:
    return 1 if (result.pairs or result.word_pairs) else 0


def similar_page_to_dict(entry: SimilarPage) -> dict[str, Any]:
    return {
        "id": entry.page_id,
        "title": entry.title,
        "path": entry.path,
        "similarity": entry.similarity,
    }


def page_redundancy_to_dict(data: PageRedundancy | None) -> dict[str, Any]:
    if data is None:
        return {"maxSimilarity": 0, "avgSimilarity": 0, "similarPages": []}
    return {
        "maxSimilarity": data.max_similarity,
        "avgSimilarity": data.avg_similarity,
        "similarPages": [similar_page_to_dict(p) for p in data.similar_pages],
    }


def pair_to_dict(pair: SimilarityPair) -> dict[str, Any]:
    return {
        "pageA": pair.page_a,
        "pageB": pair.page_b,
        "pathA": pair.path_a,
        "pathB": pair.path_b,
        "titleA": pair.title_a,
        "titleB": pair.title_b,
        "similarity": pair.similarity,
        "shingleSimilarity": pair.shingle_similarity,
        "wordSimilarity": pair.word_similarity,
    }


def result_to_dict(result: RedundancyResult) -> dict[str, Any]:
    return {
        "runId": result.run_id,
        "pageRedundancy": {
            page_id: page_redundancy_to_dict(data) for page_id, data in result.page_redundancy.items()
        },
        "pairs": [pair_to_dict(p) for p in result.pairs],
        "wordPairs": [
            {
                "pageA": wp.page_a,
                "pageB": wp.page_b,
                "similarity": wp.similarity,
                "wordSimilarity": wp.word_similarity,
            }
            for wp in result.word_pairs
        ],
        "repeatedParagraphs": [
            {
                "preview": rp.preview,
                "count": rp.count,
                "occurrences": [
                    {"pageId": o.page_id, "path": o.path, "paragraphIndex": o.paragraph_index}
                    for o in rp.occurrences
                ],
            }
            for rp in result.repeated_paragraphs
        ],
    }


def build_export_payload(
    pages: list[Page],
    result: RedundancyResult,
    *,
    pair_limit: int = EXPORT_PAIR_LIMIT,
) -> dict[str, Any]:
    """Per-page redundancy blocks plus the top pairs, for the site build."""
    rows = []
    for page in pages:
        block = page_redundancy_to_dict(result.page_redundancy.get(page.id))
        rows.append(
            {
                "id": page.id,
                "path": page.path,
                "title": page.title,
                "contentFormat": page.content_format,
                "redundancy": {
                    "maxSimilarity": block["maxSimilarity"],
                    "similarPages": block["similarPages"],
                },
            }
        )
    return {
        "pages": rows,
        "redundancyPairs": [pair_to_dict(p) for p in result.pairs[: max(0, pair_limit)]],
    }
