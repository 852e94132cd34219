"""
KUBESNAP DISCOVERY SERVICE
--------------------------
Builds the Resource Catalog: every resource type the API server serves right
now, with its scope and group/version.

Rules:
- Rebuilt on every run; never cached (CRDs come and go between runs).
- Subresources ('pods/log') and types without the 'list' verb are skipped.
- Types whose scope cannot be read are dropped with a warning, never guessed.
- When two groups serve the same qualified name (core Event and
  events.k8s.io Event) the first one seen wins; the core group comes first.
"""

import logging
from typing import Any, Dict, List, Optional

from kubesnap.core.errors import DiscoveryError
from kubesnap.core.scope import parse_scope
from kubesnap.models import ResourceCatalog, ResourceTypeDescriptor

logger = logging.getLogger("kubesnap.discovery")


class DiscoveryService:
    """Queries the platform once and returns the Resource Catalog."""

    def __init__(self, client):
        self.client = client

    def discover(self) -> ResourceCatalog:
        """
        Returns:
            Tuple of ResourceTypeDescriptor in discovery order.

        Raises:
            DiscoveryError: discovery endpoint unreachable or malformed.
        """
        try:
            entries = self.client.discover()
        except DiscoveryError:
            raise
        except Exception as e:
            raise DiscoveryError(f"Resource discovery failed: {e}") from e

        if not isinstance(entries, list):
            raise DiscoveryError(f"Malformed discovery payload: expected a list, got {type(entries).__name__}")

        catalog = []
        seen = {}
        for entry in entries:
            descriptor = self._to_descriptor(entry)
            if descriptor is None:
                continue

            key = descriptor.qualified_name
            if key in seen:
                logger.debug(f"Duplicate resource type {key}: keeping {seen[key]}, ignoring {descriptor}")
                continue
            seen[key] = descriptor
            catalog.append(descriptor)

        logger.info(f"🔎 Discovered {len(catalog)} collectable resource types")
        return tuple(catalog)

    def _to_descriptor(self, entry: Dict[str, Any]) -> Optional[ResourceTypeDescriptor]:
        if not isinstance(entry, dict):
            logger.warning(f"⚠️  Ignoring malformed discovery entry: {entry!r}")
            return None

        name = entry.get("name") or ""
        kind = entry.get("kind")
        group_version = entry.get("groupVersion")

        if "/" in name:
            return None  # subresource
        if not kind or not group_version:
            logger.warning(f"⚠️  Discovery entry without kind/groupVersion skipped: {name or entry}")
            return None

        verbs = entry.get("verbs")
        if isinstance(verbs, list) and "list" not in verbs:
            logger.debug(f"Skipping {group_version}/{kind}: 'list' not supported")
            return None

        scope = parse_scope(entry)
        if scope is None:
            logger.warning(f"⚠️  Scope of {group_version}/{kind} is undeterminable, excluding it")
            return None

        return ResourceTypeDescriptor(
            kind=kind,
            group_version=group_version,
            scope=scope,
            plural=name,
        )


def catalog_summary(catalog: ResourceCatalog) -> Dict[str, List[str]]:
    """Qualified names grouped by scope value (debug/verbose output)."""
    grouped: Dict[str, List[str]] = {}
    for descriptor in catalog:
        grouped.setdefault(descriptor.scope.value, []).append(descriptor.qualified_name)
    return grouped
