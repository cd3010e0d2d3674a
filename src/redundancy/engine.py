from __future__ import annotations

import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from redundancy.config import EngineSettings
from redundancy.logging_utils import RunLogger, get_run_logger
from redundancy.models import Comparison, FormatCluster, NormalizedPage, Page, RedundancyResult
from redundancy.pipeline.clustering import cluster_by_format
from redundancy.pipeline.normalize import is_eligible, normalize_page
from redundancy.pipeline.paragraphs import find_repeated_paragraphs
from redundancy.pipeline.ranking import aggregate
from redundancy.pipeline.similarity import compare_cluster


@dataclass(slots=True)
class RunContext:
    """State scoped to a single engine invocation."""

    settings: EngineSettings
    logger: RunLogger
    normalized: dict[str, NormalizedPage] = field(default_factory=dict)

    def normalize(self, page: Page) -> NormalizedPage:
        page_id = str(page.id)
        cached = self.normalized.get(page_id)
        if cached is not None:
            return cached
        phrases = self.settings.template_phrases if self.settings.strip_template_phrases else ()
        result = normalize_page(
            page,
            shingle_size=self.settings.shingle_size,
            min_word_length=self.settings.min_word_length,
            template_phrases=phrases,
        )
        self.normalized[page_id] = result
        return result



def _compare(ctx: RunContext, cluster: FormatCluster) -> list[Comparison]:
    comparisons = compare_cluster(
        cluster,
        min_similarity=ctx.settings.similarity_threshold,
        min_word_similarity=ctx.settings.word_similarity_threshold,
    )
    if len(cluster.pages) > 1:
        ctx.logger.event(
            "cluster_compared",
            "Compared format cluster",
            level=logging.DEBUG,
            content_format=cluster.content_format,
            page_count=len(cluster.pages),
            kept_count=len(comparisons),
        )
    return comparisons


def _compare_all(ctx: RunContext, clusters: list[FormatCluster]) -> list[Comparison]:
    comparable = [c for c in clusters if len(c.pages) > 1]
    if ctx.settings.workers > 1 and len(comparable) > 1:
        with ThreadPoolExecutor(max_workers=ctx.settings.workers) as pool:
            parts = list(pool.map(lambda cluster: _compare(ctx, cluster), comparable))
    else:
        parts = [_compare(ctx, cluster) for cluster in comparable]
    return [comp for part in parts for comp in part]


def compute_redundancy(
    pages: list[Page],
    settings: EngineSettings | None = None,
    *,
    find_paragraphs: bool = False,
    logger: logging.Logger | None = None,
) -> RedundancyResult:
    """Score near-duplicate content across ``pages``.

    Pages are normalized, filtered for minimum content, grouped by content
    format and compared pairwise only within their group. Thin pages are
    absent from the result. Never raises on a malformed individual record.
    """
    settings = settings or EngineSettings()
    run_id = uuid.uuid4().hex[:12]
    ctx = RunContext(settings=settings, logger=get_run_logger(run_id, logger))
    ctx.logger.event("redundancy_start", "Redundancy analysis started", page_count=len(pages), workers=settings.workers)

    eligible: list[NormalizedPage] = []
    with ctx.logger.timed("eligibility", "Filtered thin pages") as counters:
        for page in pages:
            if str(page.id) in ctx.normalized:
                ctx.logger.event("eligibility", "Duplicate page id ignored", level=logging.WARNING, page_id=str(page.id))
                continue
            normalized = ctx.normalize(page)
            if is_eligible(normalized, settings.min_distinct_words):
                eligible.append(normalized)
        counters["eligible_count"] = len(eligible)
        counters["skipped_count"] = len(pages) - len(eligible)

    with ctx.logger.timed("clustering", "Grouped pages by content format") as counters:
        clusters = cluster_by_format(eligible)
        counters["cluster_count"] = len(clusters)
        counters["largest_cluster"] = max((len(c.pages) for c in clusters), default=0)

    with ctx.logger.timed("pairwise", "Compared pages within format clusters") as counters:
        comparisons = _compare_all(ctx, clusters)
        counters["comparison_count"] = len(comparisons)

    with ctx.logger.timed("aggregation", "Ranked pairs and similar pages") as counters:
        page_redundancy, pairs, word_pairs = aggregate(
            eligible,
            comparisons,
            threshold=settings.similarity_threshold,
            word_threshold=settings.word_similarity_threshold,
            top_k=settings.top_similar_pages,
        )
        counters["pair_count"] = len(pairs)

    repeated = []
    if find_paragraphs:
        with ctx.logger.timed("paragraphs", "Indexed repeated paragraphs") as counters:
            eligible_ids = {p.page_id for p in eligible}
            seen: set[str] = set()
            sources = []
            for page in pages:
                page_id = str(page.id)
                if page_id in eligible_ids and page_id not in seen:
                    seen.add(page_id)
                    sources.append(page)
            repeated = find_repeated_paragraphs(
                sources,
                shingle_size=settings.shingle_size,
                template_phrases=settings.template_phrases,
            )
            counters["repeated_paragraph_count"] = len(repeated)

    ctx.logger.event(
        "redundancy_finish",
        "Redundancy analysis finished",
        **ctx.logger.summary(
            eligible_count=len(eligible),
            pair_count=len(pairs),
            word_pair_count=len(word_pairs),
            repeated_paragraph_count=len(repeated),
        ),
    )
    return RedundancyResult(
        page_redundancy=page_redundancy,
        pairs=pairs,
        word_pairs=word_pairs,
        repeated_paragraphs=repeated,
        run_id=run_id,
    )
