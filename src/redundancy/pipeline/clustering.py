from __future__ import annotations

from redundancy.models import FormatCluster, NormalizedPage


def cluster_by_format(pages: list[NormalizedPage]) -> list[FormatCluster]:
    """Bucket pages by content format, in order of first appearance.

    Pages without a format each get a singleton cluster, so they are never
    compared against anything.
    """
    clusters: list[FormatCluster] = []
    by_format: dict[str, FormatCluster] = {}
    for page in pages:
        key = page.content_format
        if key is None:
            clusters.append(FormatCluster(content_format=None, pages=[page]))
            continue
        cluster = by_format.get(key)
        if cluster is None:
            cluster = FormatCluster(content_format=key)
            by_format[key] = cluster
            clusters.append(cluster)
        cluster.pages.append(page)
    return clusters
