"""
KUBESNAP ENCODER
----------------
Serializes generic documents for the output tree.

- json: pretty-printed, 2-space indent, key order preserved.
- yaml: ruamel.yaml block style, same layout `kubectl get -o yaml` produces.
  Strings such as "yes" or "off" are quoted so YAML 1.1 readers keep them
  as strings when the file is applied.
"""

import io
import json
import re
from typing import Any, Dict, List

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError
from ruamel.yaml.representer import RoundTripRepresenter

from kubesnap.core.errors import EncodeError

FORMATS = ("json", "yaml")
EXTENSIONS = {"json": "json", "yaml": "yaml"}

# Plain scalars that YAML 1.1 resolves to bool or null
_YAML11_AMBIGUOUS = re.compile(
    r"^(?:y|Y|yes|Yes|YES|n|N|no|No|NO"
    r"|true|True|TRUE|false|False|FALSE"
    r"|on|On|ON|off|Off|OFF"
    r"|~|null|Null|NULL)$"
)


def expand_formats(fmt: str) -> List[str]:
    """'both' -> ['json', 'yaml']; single formats pass through."""
    if fmt == "both":
        return list(FORMATS)
    if fmt not in FORMATS:
        raise ValueError(f"Unknown output format '{fmt}' (expected json, yaml or both)")
    return [fmt]


class ApplySafeRepresenter(RoundTripRepresenter):
    """
    Round-trip representer that double-quotes strings a YAML 1.1 reader
    (kubectl, client-go) would load as a bool or null.
    """

    def represent_str(self, data):
        if _YAML11_AMBIGUOUS.match(data):
            return self.represent_scalar("tag:yaml.org,2002:str", data, style='"')
        return super().represent_str(data)


ApplySafeRepresenter.add_representer(str, ApplySafeRepresenter.represent_str)


def _yaml_engine() -> YAML:
    # A fresh emitter per call: YAML instances are not thread-safe.
    # Round-trip mode keeps mapping keys in insertion order.
    yaml = YAML()
    yaml.Representer = ApplySafeRepresenter
    yaml.default_flow_style = False
    yaml.indent(mapping=2, sequence=2, offset=0)
    yaml.width = 4096
    return yaml


def encode(document: Dict[str, Any], fmt: str) -> bytes:
    """
    Encodes one document.

    Raises:
        EncodeError: unsupported format or unserializable content.
    """
    try:
        if fmt == "json":
            return (json.dumps(document, indent=2, ensure_ascii=False) + "\n").encode("utf-8")
        if fmt == "yaml":
            stream = io.StringIO()
            _yaml_engine().dump(document, stream)
            return stream.getvalue().encode("utf-8")
    except (TypeError, ValueError, YAMLError) as e:
        raise EncodeError(f"Cannot encode document as {fmt}: {e}") from e

    raise EncodeError(f"Unsupported encoding format: {fmt}")


def decode(data: bytes, fmt: str) -> Any:
    """Inverse of encode()."""
    text = data.decode("utf-8") if isinstance(data, bytes) else data
    try:
        if fmt == "json":
            return json.loads(text)
        if fmt == "yaml":
            return YAML(typ="safe", pure=True).load(text)
    except (ValueError, YAMLError) as e:
        raise EncodeError(f"Cannot decode {fmt} content: {e}") from e

    raise EncodeError(f"Unsupported encoding format: {fmt}")
