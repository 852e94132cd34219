"""
KUBESNAP SCOPE CLASSIFIER
-------------------------
Maps discovered resource types to Cluster or Namespaced scope.
Pure: reads only metadata already present on the descriptor or the raw
discovery entry; never calls the API server.
"""

from typing import Any, Dict, Optional

from kubesnap.models import ResourceScope, ResourceTypeDescriptor


def parse_scope(entry: Dict[str, Any]) -> Optional[ResourceScope]:
    """
    Reads the scope out of a raw APIResource entry.

    Returns None when the entry does not say (missing or non-boolean
    'namespaced'); such types are excluded rather than guessed.
    """
    namespaced = entry.get("namespaced")
    if namespaced is True:
        return ResourceScope.NAMESPACED
    if namespaced is False:
        return ResourceScope.CLUSTER
    return None


def classify(descriptor: ResourceTypeDescriptor) -> ResourceScope:
    """Returns the descriptor's scope; a descriptor without one is a programming error."""
    if not isinstance(descriptor.scope, ResourceScope):
        raise ValueError(f"Resource type {descriptor} has no determinable scope")
    return descriptor.scope


def is_cluster_scoped(descriptor: ResourceTypeDescriptor) -> bool:
    return classify(descriptor) is ResourceScope.CLUSTER


def is_namespaced(descriptor: ResourceTypeDescriptor) -> bool:
    return classify(descriptor) is ResourceScope.NAMESPACED
