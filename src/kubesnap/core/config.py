"""
KUBESNAP CONFIGURATION MANAGER
------------------------------
Handles loading and parsing of user configuration (.kubesnap.yaml).
Allows customization of:
- Optional resource collection (secrets, events, CRDs, ...)
- Runtime settings (worker pool size, request timeout)
- Output location, format and compression
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from ruamel.yaml import YAML

from kubesnap import APP_NAME
from kubesnap.core.archive import MODES as COMPRESSION_MODES
from kubesnap.models import CollectionOptions

logger = logging.getLogger("kubesnap.config")

OUTPUT_FORMATS = ("json", "yaml", "both")

CONFIG_HEADER = """# Kubesnap Configuration File
# CLI flags override these values; toggles can only be switched on from the CLI.

"""

# Enable-only toggles; a CLI flag can switch them on, never off
COLLECTION_TOGGLES = (
    "include_secrets",
    "include_events",
    "include_replicasets",
    "include_endpoints",
    "include_leases",
    "include_custom_resources",
)


class ConfigManager:
    """
    Manages user configuration state.
    defaults:
      collection: everything optional off, sanitize on
      runtime:    8 workers, 30s request timeout
      output:     /tmp, yaml, compressed
    """

    DEFAULT_CONFIG = {
        "collection": {
            "include_secrets": False,
            "include_events": False,
            "include_replicasets": False,
            "include_endpoints": False,
            "include_leases": False,
            "include_custom_resources": False,
            "crds": [],
            "sanitize": True,
        },
        "runtime": {
            "workers": 8,
            "request_timeout": 30,
        },
        "output": {
            "directory": "/tmp",
            "format": "yaml",
            "compression": "compressed",
        },
    }

    def __init__(self, workspace_root: Path, app_name: str = APP_NAME):
        self.workspace = Path(workspace_root)
        self.app_name = app_name
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)
        self.source: Optional[Path] = None
        self._load_config()

    def _load_config(self):
        """
        Attempts to load configuration from:
        1. .<app_name>/config.yaml (Preferred)
        2. .<app_name>.yaml (Root file)
        """
        yaml = YAML(typ='safe')

        possible_files = [
            self.workspace / f".{self.app_name}" / "config.yaml",
            self.workspace / f".{self.app_name}.yaml",
        ]

        for path in possible_files:
            if not path.exists():
                continue
            try:
                loaded = yaml.load(path)
            except Exception as e:
                logger.warning(f"Failed to parse {path.name}: {e}")
                continue
            if isinstance(loaded, dict):
                self._merge_config(loaded)
            elif loaded is not None:
                logger.warning(f"Ignoring {path.name}: top level must be a mapping")
                continue
            self.source = path
            logger.info(f"Loaded configuration from {path.name}")
            return

    def _merge_config(self, user_config: Dict[str, Any]):
        """Depth-1 merge of user config into defaults."""
        for section in self.DEFAULT_CONFIG:
            values = user_config.get(section)
            if isinstance(values, dict):
                self.config[section].update(values)
            elif values is not None:
                logger.warning(f"Config section '{section}' must be a mapping, ignoring it")

    # =========================================================================
    # OVERRIDES
    # =========================================================================

    def apply_overrides(self,
                        enable: Iterable[str] = (),
                        crds: Optional[Iterable[str]] = None,
                        raw: bool = False,
                        workers: Optional[int] = None,
                        request_timeout: Optional[float] = None,
                        output_dir: Optional[str] = None,
                        output_format: Optional[str] = None,
                        compression: Optional[str] = None):
        """
        Layers CLI values over the file. Toggles in `enable` are OR-ed in;
        valued options replace the file value when given.
        """
        collection = self.config["collection"]
        for toggle in enable:
            if toggle not in COLLECTION_TOGGLES:
                raise ValueError(f"Unknown collection toggle: {toggle}")
            collection[toggle] = True
        if crds is not None:
            collection["crds"] = list(crds)
        if raw:
            collection["sanitize"] = False

        runtime = self.config["runtime"]
        if workers is not None:
            runtime["workers"] = workers
        if request_timeout is not None:
            runtime["request_timeout"] = request_timeout

        output = self.config["output"]
        if output_dir is not None:
            output["directory"] = output_dir
        if output_format is not None:
            output["format"] = output_format
        if compression is not None:
            output["compression"] = compression

        self.validate()

    def validate(self):
        """Raises ValueError on values the run cannot honour."""
        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Invalid output format '{self.output_format}' (choose from {', '.join(OUTPUT_FORMATS)})")
        if self.compression not in COMPRESSION_MODES:
            raise ValueError(f"Invalid compression '{self.compression}' (choose from {', '.join(COMPRESSION_MODES)})")
        workers = self.config["runtime"].get("workers")
        if isinstance(workers, bool) or not isinstance(workers, int) or workers < 1:
            raise ValueError(f"runtime.workers must be a positive integer, got {workers!r}")
        timeout = self.config["runtime"].get("request_timeout")
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ValueError(f"runtime.request_timeout must be a positive number, got {timeout!r}")
        crds = self.config["collection"].get("crds")
        if crds is not None and not isinstance(crds, list):
            raise ValueError("collection.crds must be a list of names")

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    def collection_options(self) -> CollectionOptions:
        """Freezes the collection section into CollectionOptions."""
        collection = self.config["collection"]
        crds = [str(c).strip() for c in collection.get("crds") or [] if str(c).strip()]
        return CollectionOptions(
            include_secrets=bool(collection.get("include_secrets")),
            include_events=bool(collection.get("include_events")),
            include_replicasets=bool(collection.get("include_replicasets")),
            include_endpoints=bool(collection.get("include_endpoints")),
            include_leases=bool(collection.get("include_leases")),
            include_custom_resources=bool(collection.get("include_custom_resources")),
            specific_crds=tuple(crds) if crds else None,
            sanitize=bool(collection.get("sanitize", True)),
        )

    @property
    def workers(self) -> int:
        return self.config["runtime"]["workers"]

    @property
    def request_timeout(self) -> float:
        return self.config["runtime"]["request_timeout"]

    @property
    def output_dir(self) -> Path:
        return Path(self.config["output"]["directory"]).expanduser()

    @property
    def output_format(self) -> str:
        return self.config["output"]["format"]

    @property
    def compression(self) -> str:
        return self.config["output"]["compression"]


def write_default_config(target_dir: Path, app_name: str = APP_NAME, force: bool = False) -> Path:
    """
    Writes the default configuration as .<app_name>.yaml in `target_dir`.

    Raises:
        FileExistsError: file present and `force` not set.
    """
    target = Path(target_dir) / f".{app_name}.yaml"
    if target.exists() and not force:
        raise FileExistsError(f"{target} already exists")

    yaml = YAML()
    yaml.default_flow_style = False
    with open(target, "w", encoding="utf-8") as f:
        f.write(CONFIG_HEADER)
        yaml.dump(copy.deepcopy(ConfigManager.DEFAULT_CONFIG), f)

    logger.info(f"Wrote default configuration to {target}")
    return target
