"""
KUBESNAP FILE SYSTEM MANAGER
----------------------------
Handles all physical I/O for a snapshot:
- Timestamped output directory creation
- Atomic file writes (temp file + os.replace)
- Layout: cluster/<kind>/<name>.<ext> and <namespace>/<kind>/<name>.<ext>
- The collection summary at the output root

Decoupled from the engine so other backends (object storage) can slot in.
"""

import logging
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from kubesnap import APP_NAME
from kubesnap.core.encoding import EXTENSIONS, encode, expand_formats
from kubesnap.core.errors import EncodeError, WriteError
from kubesnap.models import CollectedResource, CollectionResult

logger = logging.getLogger("kubesnap.io")

CLUSTER_DIR = "cluster"
SUMMARY_FILE = "collection-summary.yaml"
TIMESTAMP_FORMAT = "%Y-%m-%d-%H-%M-%S"

# Path separators and NUL; everything else a name may hold (e.g. 'system:admin') is kept
_UNSAFE_CHARS = re.compile(r"[/\\\x00]")


def safe_filename(name: str) -> str:
    """
    Filesystem-safe form of a resource or kind name. Only characters that
    would split or truncate the path are replaced, so distinct valid names
    stay distinct on disk.
    """
    cleaned = _UNSAFE_CHARS.sub("_", name)
    if cleaned in ("", ".", ".."):
        cleaned = cleaned.replace(".", "_") or "_"
    return cleaned


class OutputManager:
    """
    Abstraction layer for writing one snapshot to local disk.

    Counters (files_written, instances_skipped, write_failures) accumulate
    across persist() calls and end up in the summary.
    """

    def __init__(self, base_dir: Path, output_format: str = "yaml", app_name: str = APP_NAME):
        self.base_dir = Path(base_dir)
        self.app_name = app_name
        self.output_format = output_format
        self.formats = expand_formats(output_format)
        self.output_dir: Optional[Path] = None
        self.files_written = 0
        self.instances_skipped = 0
        self.write_failures = 0

    # =========================================================================
    # DIRECTORY MANAGEMENT
    # =========================================================================

    def create_output_dir(self, now: Optional[datetime] = None) -> Path:
        """
        Creates <base>/<app>-YYYY-MM-DD-HH-MM-SS/.

        Raises:
            WriteError: the directory cannot be created or already exists.
        """
        stamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
        target = self.base_dir / f"{self.app_name}-{stamp}"
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            target.mkdir()
        except OSError as e:
            raise WriteError(f"Output directory creation failed: {e}") from e

        self.output_dir = target
        logger.info(f"📁 Created output directory: {target}")
        return target

    def _require_output_dir(self) -> Path:
        if self.output_dir is None:
            raise WriteError("Output directory has not been created")
        return self.output_dir

    # =========================================================================
    # WRITING
    # =========================================================================

    def atomic_write(self, target_path: Path, content: bytes) -> None:
        """
        Atomically writes content to file.
        Uses .<app>.tmp + os.replace, so readers never see partial files.
        """
        temp_file = target_path.with_name(f"{target_path.name}.{self.app_name}.tmp")
        try:
            target_path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_file, "wb") as f:
                f.write(content)
                f.flush()
            os.replace(temp_file, target_path)
        except OSError as e:
            if temp_file.exists():
                temp_file.unlink()
            raise WriteError(f"Atomic write failed for {target_path}: {e}") from e

    def path_for(self, resource: CollectedResource, fmt: str) -> Optional[Path]:
        """Destination for one instance in one format; None if it has no name."""
        name = resource.name
        if name is None:
            return None

        root = self._require_output_dir()
        scope_dir = safe_filename(resource.namespace) if resource.namespace else CLUSTER_DIR
        kind_dir = safe_filename(resource.descriptor.qualified_name.lower())
        return root / scope_dir / kind_dir / f"{safe_filename(name)}.{EXTENSIONS[fmt]}"

    def write_resources(self, resources: Iterable[CollectedResource]) -> int:
        """
        Writes each instance in every configured format.

        Unnamed instances are skipped. Encode/write failures are logged and
        counted per instance; siblings are still written.

        Returns:
            Number of files written by this call.
        """
        written = 0
        for resource in resources:
            if resource.name is None:
                self.instances_skipped += 1
                logger.debug(f"Skipping unnamed {resource.descriptor.qualified_name} instance")
                continue

            for fmt in self.formats:
                target = self.path_for(resource, fmt)
                try:
                    self.atomic_write(target, encode(resource.document, fmt))
                    written += 1
                except (EncodeError, WriteError) as e:
                    self.write_failures += 1
                    logger.warning(f"⚠️  Failed to save {resource.descriptor.qualified_name}/{resource.name}: {e}")

        self.files_written += written
        return written

    def persist(self, result: CollectionResult) -> Dict[str, int]:
        """Writes the whole CollectionResult and returns the persistence counters."""
        self._require_output_dir()

        for kind, items in sorted(result.cluster.items()):
            count = self.write_resources(items)
            logger.debug(f"  💾 cluster/{kind}: {count} files")

        for ns, kinds in result.namespaced.items():
            for kind, items in sorted(kinds.items()):
                count = self.write_resources(items)
                logger.debug(f"  💾 {ns}/{kind}: {count} files")

        logger.info(f"💾 Wrote {self.files_written} files ({self.write_failures} failures)")
        return self.counters()

    def counters(self) -> Dict[str, int]:
        return {
            "files_written": self.files_written,
            "instances_skipped": self.instances_skipped,
            "write_failures": self.write_failures,
        }

    def write_summary(self, summary: Dict[str, Any]) -> Path:
        """
        Writes collection-summary.yaml at the output root.

        Raises:
            EncodeError / WriteError: the summary itself could not be saved.
        """
        target = self._require_output_dir() / SUMMARY_FILE
        self.atomic_write(target, encode(summary, "yaml"))
        logger.info(f"📊 Summary saved to: {target}")
        return target

    def list_files(self) -> List[Path]:
        """All regular files below the output directory, sorted."""
        root = self._require_output_dir()
        return sorted(p for p in root.rglob("*") if p.is_file())
