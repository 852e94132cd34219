"""
KUBESNAP ERROR TAXONOMY
-----------------------
Run-fatal errors (no catalog, no namespaces, no client) and local errors
(one kind, one instance) share a single root so the CLI can catch them in
one place. Local errors are caught by the stage that raised them.
"""

from typing import Optional


class KubesnapError(Exception):
    """Root of all Kubesnap errors."""


class ClientConfigError(KubesnapError):
    """Kubeconfig / in-cluster credentials could not be loaded."""


class DiscoveryError(KubesnapError):
    """Discovery endpoint unreachable or returned malformed metadata. Fatal."""


class NamespaceListError(KubesnapError):
    """Namespaces could not be listed while resolving the run's targets. Fatal."""


class NoValidNamespaces(KubesnapError):
    """None of the requested namespaces exist. Fatal, raised before collection."""

    def __init__(self, requested=None):
        self.requested = list(requested or [])
        super().__init__(f"No valid namespaces found (requested: {', '.join(self.requested) or 'none'})")


class FetchError(KubesnapError):
    """Listing one resource kind failed. Degrades that kind to zero results."""

    def __init__(self, kind: str, cause: Exception, namespace: Optional[str] = None):
        self.kind = kind
        self.cause = cause
        self.namespace = namespace
        where = f" in namespace '{namespace}'" if namespace else ""
        super().__init__(f"Failed to fetch {kind}{where}: {cause}")


class EncodeError(KubesnapError):
    """A document could not be serialized to the requested format."""


class WriteError(KubesnapError):
    """An encoded document could not be written to disk."""


class ArchiveError(KubesnapError):
    """The output directory could not be packaged."""
