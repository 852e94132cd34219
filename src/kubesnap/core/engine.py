#!/usr/bin/env python3
"""
KUBESNAP ENGINE - The High Orchestrator
---------------------------------------
Coordinates one complete snapshot run:

  config -> platform client -> namespace resolution -> collection
  -> persistence -> summary -> archive

Fatal errors (credentials, discovery, namespaces) propagate as KubesnapError
subclasses; everything finer grained is absorbed by the stage that owns it and
reported through the RunReport.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from kubesnap.core.archive import archive
from kubesnap.core.client import PlatformClient
from kubesnap.core.collector import CollectionOrchestrator, verify_namespaces
from kubesnap.core.config import ConfigManager
from kubesnap.core.errors import ArchiveError, NamespaceListError
from kubesnap.core.io import OutputManager
from kubesnap.core.stats import aggregate, build_summary
from kubesnap.models import CollectionOptions, CollectionResult, CollectionStats, FetchFailure

logger = logging.getLogger("kubesnap.engine")


@dataclass
class RunReport:
    """Everything the CLI needs to render the end of a run."""
    output_dir: Path
    archive_path: Optional[Path]
    stats: CollectionStats
    options: CollectionOptions
    namespaces: List[str]
    files_written: int = 0
    instances_skipped: int = 0
    write_failures: int = 0
    failures: List[FetchFailure] = field(default_factory=list)
    summary_path: Optional[Path] = None
    archive_error: Optional[str] = None
    duration_seconds: float = 0.0

    @property
    def location(self) -> Path:
        """Where the snapshot ended up (archive if one was written)."""
        return self.archive_path or self.output_dir

    @property
    def kept_directory(self) -> bool:
        return self.archive_path is None or self.output_dir.exists()


class KubesnapEngine:
    """
    Principal Orchestrator for cluster snapshots.

    Responsibilities:
    - Platform client lifecycle
    - Namespace resolution and verification
    - Collection, persistence, summary and archive sequencing
    """

    def __init__(self,
                 config: ConfigManager,
                 kubeconfig: Optional[str] = None,
                 context: Optional[str] = None,
                 in_cluster: bool = False,
                 client_factory: Callable[..., PlatformClient] = PlatformClient):
        """
        Args:
            config: Loaded configuration, CLI overrides already applied.
            client_factory: Builds the platform client; swapped out in tests.
        """
        self.config = config
        self.options = config.collection_options()
        self.client = client_factory(
            kubeconfig=kubeconfig,
            context=context,
            in_cluster=in_cluster,
            request_timeout=config.request_timeout,
            pool_size=config.workers,
        )
        logger.info(f"Engine initialized ({config.workers} workers, {config.request_timeout}s timeout)")

    # =========================================================================
    # NAMESPACES
    # =========================================================================

    def resolve_namespaces(self, requested: Optional[Sequence[str]] = None) -> List[str]:
        """
        All namespaces when nothing is requested, otherwise the requested ones
        that exist.

        Raises:
            NamespaceListError: namespaces could not be listed.
            NoValidNamespaces: none of the requested namespaces exist.
        """
        try:
            available = self.client.list_namespaces()
        except Exception as e:
            raise NamespaceListError(f"Failed to list namespaces: {e}") from e

        if not requested:
            logger.info(f"Collecting from all {len(available)} namespaces")
            return verify_namespaces(available, available)

        verified = verify_namespaces(requested, available)
        logger.info(f"Collecting from {len(verified)} namespace(s): {', '.join(verified)}")
        return verified

    # =========================================================================
    # RUN
    # =========================================================================

    def collect(self, namespaces: Sequence[str]) -> CollectionResult:
        orchestrator = CollectionOrchestrator(
            self.client,
            self.options,
            workers=self.config.workers,
            timeout=self.config.request_timeout,
        )
        return orchestrator.collect(namespaces)

    def run(self, requested_namespaces: Optional[Sequence[str]] = None) -> RunReport:
        """
        Executes a full snapshot.

        Raises:
            KubesnapError: any run-fatal condition (see kubesnap.core.errors).
        """
        start_time = time.time()
        try:
            namespaces = self.resolve_namespaces(requested_namespaces)
            result = self.collect(namespaces)
        finally:
            self.client.close()

        stats = aggregate(result)
        logger.info(f"Collected {stats.total_resources} resources "
                    f"({stats.total_cluster_resources} cluster, {stats.total_namespaced_resources} namespaced)")

        # --- PERSISTENCE ---
        output = OutputManager(self.config.output_dir, output_format=self.config.output_format)
        output_dir = output.create_output_dir()
        counters = output.persist(result)

        summary = build_summary(
            stats,
            self.options,
            result,
            output_format=self.config.output_format,
            persistence=counters,
        )
        summary_path = output.write_summary(summary)

        # --- ARCHIVE ---
        archive_path = None
        archive_error = None
        try:
            archive_path = archive(output_dir, self.config.compression)
        except ArchiveError as e:
            # Only the archive step failed; the directory is intact
            archive_error = str(e)
            logger.error(f"❌ {e}. Output left at {output_dir}")

        report = RunReport(
            output_dir=output_dir,
            archive_path=archive_path,
            stats=stats,
            options=self.options,
            namespaces=list(namespaces),
            files_written=counters["files_written"],
            instances_skipped=counters["instances_skipped"],
            write_failures=counters["write_failures"],
            failures=list(result.failures),
            summary_path=summary_path,
            archive_error=archive_error,
            duration_seconds=round(time.time() - start_time, 2),
        )
        logger.info(f"✅ Snapshot complete in {report.duration_seconds}s: {report.location}")
        return report
