"""
KUBESNAP STATS AGGREGATOR
-------------------------
Folds a CollectionResult into per-kind and per-namespace counts, and renders
the collection summary document written next to the snapshot.

Pure: the same result always produces the same stats, and the result is
never touched.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from kubesnap import APP_NAME, __version__
from kubesnap.models import CollectionOptions, CollectionResult, CollectionStats


def aggregate(result: CollectionResult) -> CollectionStats:
    """Counts instances per kind, per namespace and overall."""
    cluster_counts = {kind: len(items) for kind, items in sorted(result.cluster.items())}

    namespace_counts = {}
    namespace_totals = {}
    for ns, kinds in result.namespaced.items():
        counts = {kind: len(items) for kind, items in sorted(kinds.items())}
        namespace_counts[ns] = counts
        namespace_totals[ns] = sum(counts.values())

    # Per-kind totals across both scopes
    resource_type_counts: Dict[str, int] = {}
    for kind, count in cluster_counts.items():
        resource_type_counts[kind] = resource_type_counts.get(kind, 0) + count
    for counts in namespace_counts.values():
        for kind, count in counts.items():
            resource_type_counts[kind] = resource_type_counts.get(kind, 0) + count

    return CollectionStats(
        cluster_counts=cluster_counts,
        namespace_counts=namespace_counts,
        namespace_totals=namespace_totals,
        resource_type_counts=dict(sorted(resource_type_counts.items())),
        total_cluster_resources=sum(cluster_counts.values()),
        total_namespaced_resources=sum(namespace_totals.values()),
    )


def build_summary(stats: CollectionStats,
                  options: CollectionOptions,
                  result: CollectionResult,
                  output_format: str,
                  persistence: Optional[Dict[str, int]] = None,
                  timestamp: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Assembles the `collection-summary.yaml` document.

    Structure:
        collection_info / cluster_summary / cluster_resources /
        namespace_details / persistence
    """
    timestamp = timestamp or datetime.now()
    failures: List[str] = [str(f) for f in result.failures]

    summary = {
        "collection_info": {
            "timestamp": timestamp.isoformat(timespec="seconds"),
            "tool": APP_NAME,
            "version": __version__,
            "sanitized": options.sanitize,
            "format": output_format,
            "optional_resources_included": options.enabled_optional_kinds(),
            "namespaces": list(result.namespaces),
            "failed_resource_types": failures,
        },
        "cluster_summary": {
            "total_namespaces": stats.total_namespaces,
            "total_cluster_resources": stats.total_cluster_resources,
            "total_namespaced_resources": stats.total_namespaced_resources,
            "total_resources": stats.total_resources,
            "resource_type_counts": dict(stats.resource_type_counts),
        },
        "cluster_resources": {
            "total_resources": stats.total_cluster_resources,
            "resource_types": dict(stats.cluster_counts),
        },
        "namespace_details": {
            ns: {
                "total_resources": stats.namespace_totals.get(ns, 0),
                "resource_types": dict(counts),
            }
            for ns, counts in stats.namespace_counts.items()
        },
    }

    if persistence is not None:
        summary["persistence"] = dict(persistence)

    return summary
