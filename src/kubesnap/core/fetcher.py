"""
KUBESNAP DYNAMIC FETCHER
------------------------
Retrieves every live instance of one resource type as generic documents.

Works purely from the descriptor's group/version/plural, so the same code
path serves Pods, ClusterRoles and CRDs installed five minutes ago.
Any transport, timeout or decode failure surfaces as FetchError for that kind
only; callers decide how to degrade.
"""

import logging
from typing import Any, Dict, List, Optional

from kubesnap.core.errors import FetchError
from kubesnap.models import ResourceTypeDescriptor

logger = logging.getLogger("kubesnap.fetcher")


class DynamicFetcher:
    """Generic lister bound to one platform client and one request timeout."""

    def __init__(self, client, timeout: Optional[float] = None):
        self.client = client
        self.timeout = timeout

    def fetch(self,
              descriptor: ResourceTypeDescriptor,
              namespace: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Lists `descriptor` cluster-wide (namespace=None) or inside one namespace.

        Returns:
            Documents ordered by namespace, then name. Each carries apiVersion
            and kind (list endpoints omit them on items).

        Raises:
            FetchError: on any failure for this kind.
        """
        kind = descriptor.qualified_name
        try:
            payload = self.client.list_resources(descriptor, namespace=namespace, timeout=self.timeout)
        except Exception as e:
            raise FetchError(kind, e, namespace=namespace) from e

        items = payload.get("items") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            raise FetchError(kind, ValueError("list response carries no 'items' array"), namespace=namespace)

        documents = []
        for item in items:
            if not isinstance(item, dict):
                raise FetchError(kind, ValueError(f"non-object item in list: {item!r}"), namespace=namespace)
            documents.append(self._with_type_header(item, descriptor))

        documents.sort(key=_sort_key)
        logger.debug(f"Fetched {len(documents)} {kind} from {namespace or 'cluster scope'}")
        return documents

    @staticmethod
    def _with_type_header(item: Dict[str, Any], descriptor: ResourceTypeDescriptor) -> Dict[str, Any]:
        """Puts apiVersion/kind first, keeping any values the server sent."""
        if "apiVersion" in item and "kind" in item:
            return item
        document = {
            "apiVersion": item.get("apiVersion", descriptor.group_version),
            "kind": item.get("kind", descriptor.kind),
        }
        for key, value in item.items():
            if key not in document:
                document[key] = value
        return document


def _sort_key(document: Dict[str, Any]):
    metadata = document.get("metadata")
    if not isinstance(metadata, dict):
        return ("", "")
    return (str(metadata.get("namespace") or ""), str(metadata.get("name") or ""))
