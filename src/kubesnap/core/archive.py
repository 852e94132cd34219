"""
KUBESNAP ARCHIVER
-----------------
Packages a snapshot directory as <dir>.tar.gz.

Modes:
  compressed    archive written, directory removed
  uncompressed  directory kept, no archive
  both          archive written, directory kept
"""

import logging
import shutil
import tarfile
from pathlib import Path
from typing import Optional

from kubesnap.core.errors import ArchiveError

logger = logging.getLogger("kubesnap.archive")

MODES = ("compressed", "uncompressed", "both")


def archive_path_for(output_dir: Path) -> Path:
    return output_dir.with_name(f"{output_dir.name}.tar.gz")


def archive(output_dir: Path, mode: str = "compressed") -> Optional[Path]:
    """
    Applies `mode` to `output_dir`.

    Returns:
        The archive path, or None in uncompressed mode.

    Raises:
        ArchiveError: unknown mode, missing directory or tar failure. The
        output directory is left in place on failure.
    """
    if mode not in MODES:
        raise ArchiveError(f"Unknown compression mode '{mode}' (expected one of {', '.join(MODES)})")

    output_dir = Path(output_dir)
    if not output_dir.is_dir():
        raise ArchiveError(f"Output directory does not exist: {output_dir}")

    if mode == "uncompressed":
        logger.info(f"📁 Output kept uncompressed at {output_dir}")
        return None

    target = archive_path_for(output_dir)
    try:
        with tarfile.open(target, "w:gz") as tar:
            tar.add(str(output_dir), arcname=".")
    except (OSError, tarfile.TarError) as e:
        if target.exists():
            target.unlink()
        raise ArchiveError(f"Archive creation failed: {e}") from e

    logger.info(f"📦 Archive created: {target}")

    if mode == "compressed":
        try:
            shutil.rmtree(output_dir)
        except OSError as e:
            # The archive is complete; a leftover directory is not fatal
            logger.warning(f"⚠️  Could not remove {output_dir} after archiving: {e}")
        else:
            logger.debug(f"Removed uncompressed directory {output_dir}")

    return target
