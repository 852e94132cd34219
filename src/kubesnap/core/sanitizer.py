"""
KUBESNAP SANITIZER
------------------
Strips server-assigned fields so a collected document can be re-applied with
`kubectl apply`. Removes metadata.{uid, resourceVersion, selfLink,
creationTimestamp, generation, managedFields} and the whole `status` subtree.

Never mutates its input and never adds fields; key order is preserved.
"""

from typing import Any, Dict

# Metadata fields assigned by the API server on every write
VOLATILE_METADATA_FIELDS = (
    "uid",
    "resourceVersion",
    "selfLink",
    "creationTimestamp",
    "generation",
    "managedFields",
)

STATUS_FIELD = "status"


def sanitize(document: Dict[str, Any], enabled: bool = True) -> Dict[str, Any]:
    """
    Returns a sanitized copy of `document`.

    With `enabled=False` ("raw" mode) the copy is returned untouched.
    Non-mapping input is returned as is.
    """
    if not isinstance(document, dict):
        return document
    if not enabled:
        return dict(document)

    cleaned = {}
    for key, value in document.items():
        if key == STATUS_FIELD:
            continue
        if key == "metadata" and isinstance(value, dict):
            value = {k: v for k, v in value.items() if k not in VOLATILE_METADATA_FIELDS}
        cleaned[key] = value
    return cleaned
