#!/usr/bin/env python3
"""
KUBESNAP COLLECTION ORCHESTRATOR
--------------------------------
The central coordinator of the discovery-driven collection pipeline.

Sequence:
  Discovery (once) -> Scope Classifier + Inclusion Policy gate each type
  -> Phase A: cluster-scoped types, listed cluster-wide
  -> Phase B: namespaced types, listed once per target namespace
  -> Dynamic Fetcher -> Sanitizer -> CollectionResult

Every (kind, namespace) pair is an independent unit of work executed on a
bounded thread pool. A failing unit is logged, recorded in
`CollectionResult.failures` and counts as zero results; it never stops its
siblings. Only discovery failure is fatal here.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable, List, Optional, Sequence, Tuple

from kubesnap.core.discovery import DiscoveryService, catalog_summary
from kubesnap.core.errors import FetchError, NoValidNamespaces
from kubesnap.core.fetcher import DynamicFetcher
from kubesnap.core.policy import should_collect
from kubesnap.core.sanitizer import sanitize
from kubesnap.core.scope import is_cluster_scoped, is_namespaced
from kubesnap.models import (
    CollectedResource,
    CollectionOptions,
    CollectionResult,
    FetchFailure,
    ResourceCatalog,
    ResourceTypeDescriptor,
)

logger = logging.getLogger("kubesnap.collector")

DEFAULT_WORKERS = 8

WorkUnit = Tuple[ResourceTypeDescriptor, Optional[str]]


def verify_namespaces(requested: Iterable[str], available: Iterable[str]) -> List[str]:
    """
    Keeps the requested namespaces that exist, in request order, without duplicates.

    Raises:
        NoValidNamespaces: nothing left after verification.
    """
    requested = [ns.strip() for ns in requested if ns and ns.strip()]
    existing = set(available)
    verified = []

    for ns in requested:
        if ns in verified:
            continue
        if ns in existing:
            verified.append(ns)
        else:
            logger.warning(f"⚠️  Namespace '{ns}' does not exist, skipping")

    if not verified:
        raise NoValidNamespaces(requested)
    return verified


class CollectionOrchestrator:
    """
    Composes Discovery, Scope Classifier, Inclusion Policy, Dynamic Fetcher
    and Sanitizer into the two collection passes.
    """

    def __init__(self,
                 client,
                 options: CollectionOptions,
                 workers: int = DEFAULT_WORKERS,
                 timeout: Optional[float] = None,
                 discovery: Optional[DiscoveryService] = None,
                 fetcher: Optional[DynamicFetcher] = None):
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        self.options = options
        self.workers = workers
        self.discovery = discovery or DiscoveryService(client)
        self.fetcher = fetcher or DynamicFetcher(client, timeout=timeout)

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    def collect(self, namespaces: Sequence[str]) -> CollectionResult:
        """
        Runs discovery once, then Phase A (cluster) and Phase B (namespaces).

        Args:
            namespaces: Verified target namespaces (see verify_namespaces).

        Raises:
            DiscoveryError: catalog unavailable.
        """
        catalog = self.discovery.discover()
        logger.debug(f"Catalog by scope: {catalog_summary(catalog)}")

        cluster_types = self.select(catalog, namespaced=False)
        namespaced_types = self.select(catalog, namespaced=True)

        result = CollectionResult(namespaced={ns: {} for ns in namespaces})

        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="kubesnap") as pool:
            # --- PHASE A: CLUSTER-SCOPED ---
            logger.info(f"📦 Collecting cluster-scoped resources ({len(cluster_types)} types)...")
            self._run_phase(pool, [(d, None) for d in cluster_types], result)
            logger.info(f"✅ Collected {len(result.cluster)} cluster-scoped resource types")

            # --- PHASE B: NAMESPACED ---
            logger.info(f"📦 Collecting namespaced resources from {len(namespaces)} namespace(s)...")
            units = [(d, ns) for ns in namespaces for d in namespaced_types]
            self._run_phase(pool, units, result)

        for ns in namespaces:
            logger.info(f"📂 {ns}: {len(result.kinds_in(ns))} resource types")

        return result

    def select(self, catalog: ResourceCatalog, namespaced: bool) -> List[ResourceTypeDescriptor]:
        """Descriptors of the requested scope that pass the inclusion policy."""
        in_scope = is_namespaced if namespaced else is_cluster_scoped
        selected = []
        for descriptor in catalog:
            if not in_scope(descriptor):
                continue
            if not should_collect(descriptor.qualified_name, self.options):
                logger.debug(f"Skipping {descriptor.scope.value.lower()} resource: {descriptor.qualified_name}")
                continue
            selected.append(descriptor)
        return selected

    # -----------------------------------------------------------------------
    # Internal Helpers
    # -----------------------------------------------------------------------

    def _collect_unit(self, descriptor: ResourceTypeDescriptor, namespace: Optional[str]) -> List[CollectedResource]:
        """Fetch + sanitize for one (kind, namespace) unit. Runs on a worker thread."""
        documents = self.fetcher.fetch(descriptor, namespace)
        return [
            CollectedResource(
                descriptor=descriptor,
                document=sanitize(document, enabled=self.options.sanitize),
                namespace=namespace,
            )
            for document in documents
        ]

    def _run_phase(self, pool: ThreadPoolExecutor, units: List[WorkUnit], result: CollectionResult):
        """Fan out `units`, then fold their outcomes into `result` on this thread."""
        futures = {pool.submit(self._collect_unit, d, ns): (d, ns) for d, ns in units}

        for future in as_completed(futures):
            descriptor, namespace = futures[future]
            kind = descriptor.qualified_name
            where = namespace or "cluster"

            try:
                items = future.result()
            except FetchError as e:
                logger.warning(f"  ⚠️  Failed to collect {kind} ({where}): {e.cause}")
                result.failures.append(FetchFailure(kind=kind, reason=str(e.cause), namespace=namespace))
                continue
            except Exception as e:
                logger.error(f"  ❌ Unexpected error collecting {kind} ({where}): {e}", exc_info=True)
                result.failures.append(FetchFailure(kind=kind, reason=str(e), namespace=namespace))
                continue

            if not items:
                logger.debug(f"  ⏭️  {kind} ({where}): 0 items")
                continue

            if namespace is None:
                result.cluster[kind] = items
                logger.info(f"  ✅ {kind} ({len(items)})")
            else:
                result.namespaced.setdefault(namespace, {})[kind] = items
                logger.debug(f"  ✅ {kind} ({where}): {len(items)}")
