#!/usr/bin/env python3
"""
KUBESNAP CORE MODELS
--------------------
Defines the fundamental data structures used across the collection pipeline.
These models represent the "Data Contract" between Discovery, the Fetcher,
the Orchestrator and the Stats Aggregator.

Design:
- Descriptors and options are frozen: they are shared across worker threads.
- Documents stay generic (Dict[str, Any]). Custom resources are unknown until
  runtime, so no per-kind schema is ever imposed on the payload.

Author: Kubesnap Team
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


# Groups whose names carry no domain suffix, or live under k8s.io, are served
# by the API server itself. Cluster API style groups (x-k8s.io) are CRDs.
BUILTIN_GROUP_SUFFIX = ".k8s.io"
EXTENSION_GROUP_SUFFIX = ".x-k8s.io"


class ResourceScope(Enum):
    """Where an instance of a resource type lives."""
    CLUSTER = "Cluster"
    NAMESPACED = "Namespaced"


@dataclass(frozen=True)
class ResourceTypeDescriptor:
    """
    One API resource type as served at discovery time.

    `plural` is the REST resource name (e.g. 'deployments') and is what the
    generic list path is built from; `kind` is the schema name ('Deployment').
    """
    kind: str
    group_version: str
    scope: ResourceScope
    plural: str = ""

    @property
    def group(self) -> str:
        """API group; empty string for the core group."""
        if "/" not in self.group_version:
            return ""
        return self.group_version.split("/", 1)[0]

    @property
    def version(self) -> str:
        return self.group_version.split("/", 1)[-1]

    @property
    def is_custom(self) -> bool:
        """Heuristic: domain-suffixed groups outside k8s.io are custom resources."""
        group = self.group
        if not group or "." not in group:
            return False
        if group.endswith(EXTENSION_GROUP_SUFFIX):
            return True
        return not group.endswith(BUILTIN_GROUP_SUFFIX)

    @property
    def qualified_name(self) -> str:
        """
        Name used by the inclusion policy and as the result key.

        Built-ins keep their bare kind ('Deployment'); custom resources use the
        CRD naming convention '<plural>.<group>' ('widgets.example.com').
        """
        if self.is_custom:
            plural = self.plural or self.kind.lower()
            return f"{plural}.{self.group}"
        return self.kind

    def __str__(self):
        return f"{self.group_version}/{self.kind}"


# The Resource Catalog is simply the ordered, immutable set of descriptors.
ResourceCatalog = Tuple[ResourceTypeDescriptor, ...]


@dataclass(frozen=True)
class CollectionOptions:
    """
    Immutable configuration for one collection run.

    If `specific_crds` is set it takes precedence over `include_custom_resources`
    when deciding which custom kinds are collected.
    """
    include_secrets: bool = False
    include_events: bool = False
    include_replicasets: bool = False
    include_endpoints: bool = False
    include_leases: bool = False
    include_custom_resources: bool = False
    specific_crds: Optional[Tuple[str, ...]] = None
    sanitize: bool = True

    def enabled_optional_kinds(self) -> List[str]:
        """Human-readable list of optional resources switched on (summary artifact)."""
        flags = []
        if self.include_secrets:
            flags.append("secrets")
        if self.include_custom_resources:
            flags.append("custom_resources")
        if self.specific_crds is not None:
            flags.append(f"specific_crds: {list(self.specific_crds)}")
        if self.include_events:
            flags.append("events")
        if self.include_replicasets:
            flags.append("replicasets")
        if self.include_endpoints:
            flags.append("endpoints")
        if self.include_leases:
            flags.append("leases")
        return flags


@dataclass
class CollectedResource:
    """One retrieved document plus where it came from."""
    descriptor: ResourceTypeDescriptor
    document: Dict[str, Any]
    namespace: Optional[str] = None

    @property
    def name(self) -> Optional[str]:
        """Declared metadata.name, or None for unnamed instances."""
        metadata = self.document.get("metadata")
        if not isinstance(metadata, dict):
            return None
        name = metadata.get("name")
        return name if isinstance(name, str) and name else None


@dataclass(frozen=True)
class FetchFailure:
    """A per-kind failure captured during collection (never run-fatal)."""
    kind: str
    reason: str
    namespace: Optional[str] = None

    def __str__(self):
        scope = self.namespace or "cluster"
        return f"{scope}/{self.kind}: {self.reason}"


@dataclass
class CollectionResult:
    """
    Output of one orchestrator run.

    cluster:    kind -> instances
    namespaced: namespace -> kind -> instances
    """
    cluster: Dict[str, List[CollectedResource]] = field(default_factory=dict)
    namespaced: Dict[str, Dict[str, List[CollectedResource]]] = field(default_factory=dict)
    failures: List[FetchFailure] = field(default_factory=list)

    @property
    def namespaces(self) -> List[str]:
        return list(self.namespaced.keys())

    def kinds_in(self, namespace: Optional[str] = None) -> List[str]:
        if namespace is None:
            return sorted(self.cluster)
        return sorted(self.namespaced.get(namespace, {}))


@dataclass(frozen=True)
class CollectionStats:
    """Read-only counts derived from a CollectionResult."""
    cluster_counts: Dict[str, int]
    namespace_counts: Dict[str, Dict[str, int]]
    namespace_totals: Dict[str, int]
    resource_type_counts: Dict[str, int]
    total_cluster_resources: int = 0
    total_namespaced_resources: int = 0

    @property
    def total_resources(self) -> int:
        return self.total_cluster_resources + self.total_namespaced_resources

    @property
    def total_namespaces(self) -> int:
        return len(self.namespace_counts)
