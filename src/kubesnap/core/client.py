#!/usr/bin/env python3
"""
KUBESNAP PLATFORM CLIENT
------------------------
Thin, generic gateway to the Kubernetes API server.

Responsibilities:
1. Load credentials from an explicit kubeconfig path / context, or from the
   in-cluster service account. Nothing is read from or written to the process
   environment, so several clients can coexist in one process.
2. Raw discovery (`/api`, `/apis`, per group-version resource lists).
3. Generic listing of any resource type from its group/version/plural, with
   server-side pagination. No typed per-kind API classes are involved.

Everything is returned as plain JSON values (dicts / lists).
"""

import logging
import time
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

from kubernetes import client as k8s_client
from kubernetes import config as k8s_config
from kubernetes.config.config_exception import ConfigException

from kubesnap.core.errors import ClientConfigError, DiscoveryError
from kubesnap.models import ResourceTypeDescriptor

logger = logging.getLogger("kubesnap.client")

DEFAULT_REQUEST_TIMEOUT = 30
# Page size used for list calls (same default kubectl uses)
LIST_CHUNK_SIZE = 500


class PlatformClient:
    """
    Pre-authenticated handle used by Discovery, the Fetcher and the Engine.
    """

    def __init__(self,
                 kubeconfig: Optional[str] = None,
                 context: Optional[str] = None,
                 in_cluster: bool = False,
                 request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
                 pool_size: int = 8):
        """
        Args:
            kubeconfig: Path to a kubeconfig file (default: the client's own
                        resolution, i.e. ~/.kube/config).
            context: Kubeconfig context to use (default: current-context).
            in_cluster: Use the pod's service account instead of a kubeconfig.
            request_timeout: Seconds allowed for each HTTP call.
            pool_size: HTTP connection pool size; match the worker count.
        """
        self.kubeconfig = kubeconfig
        self.context = context
        self.in_cluster = in_cluster
        self.request_timeout = request_timeout
        self.api_client = self._build_api_client(pool_size)

    def _build_api_client(self, pool_size: int) -> k8s_client.ApiClient:
        configuration = k8s_client.Configuration()
        try:
            if self.in_cluster:
                k8s_config.load_incluster_config(client_configuration=configuration)
                logger.info("Using in-cluster service account credentials")
            else:
                k8s_config.load_kube_config(
                    config_file=self.kubeconfig,
                    context=self.context,
                    client_configuration=configuration,
                    persist_config=False,
                )
                logger.info(f"Loaded kubeconfig: {self.kubeconfig or '~/.kube/config'}")
        except (ConfigException, OSError, TypeError) as e:
            raise ClientConfigError(f"Failed to load Kubernetes credentials: {e}") from e

        configuration.connection_pool_maxsize = max(pool_size, 4)
        logger.info(f"✅ Client configured for {configuration.host}")
        return k8s_client.ApiClient(configuration)

    # =========================================================================
    # RAW HTTP
    # =========================================================================

    def _get(self,
             path: str,
             query: Optional[List[Tuple[str, Any]]] = None,
             timeout: Optional[float] = None) -> Any:
        """GET `path` and return the decoded JSON body."""
        logger.debug(f"GET {path} {query or ''}")
        return self.api_client.call_api(
            path,
            "GET",
            query_params=query or [],
            header_params={"Accept": "application/json"},
            response_type="object",
            auth_settings=["BearerToken"],
            _return_http_data_only=True,
            _preload_content=True,
            _request_timeout=timeout or self.request_timeout,
        )

    # =========================================================================
    # DISCOVERY
    # =========================================================================

    def discover(self) -> List[Dict[str, Any]]:
        """
        Returns every APIResource entry served under each group's preferred
        version, annotated with its 'groupVersion'. Core group first.

        Failures on /api or /apis propagate. A single group-version that fails
        (typically an unavailable aggregated API such as metrics.k8s.io) is
        skipped with a warning.
        """
        group_versions = []

        core = self._get("/api")
        if not isinstance(core, dict) or not isinstance(core.get("versions"), list):
            raise DiscoveryError("Malformed /api response: missing 'versions'")
        group_versions.extend(core["versions"])

        groups = self._get("/apis")
        if not isinstance(groups, dict) or not isinstance(groups.get("groups"), list):
            raise DiscoveryError("Malformed /apis response: missing 'groups'")

        for group in groups["groups"]:
            preferred = group.get("preferredVersion") or next(iter(group.get("versions") or []), None)
            if not preferred or not preferred.get("groupVersion"):
                logger.warning(f"⚠️  API group '{group.get('name')}' advertises no version, skipping")
                continue
            group_versions.append(preferred["groupVersion"])

        entries = []
        for group_version in group_versions:
            path = f"/api/{group_version}" if "/" not in group_version else f"/apis/{group_version}"
            try:
                resource_list = self._get(path)
            except Exception as e:
                logger.warning(f"⚠️  Discovery failed for {group_version}: {e}")
                continue

            resources = resource_list.get("resources") if isinstance(resource_list, dict) else None
            if not isinstance(resources, list):
                logger.warning(f"⚠️  Malformed resource list for {group_version}, skipping")
                continue

            for resource in resources:
                if isinstance(resource, dict):
                    entries.append(dict(resource, groupVersion=group_version))

        logger.debug(f"Discovery returned {len(entries)} resource entries from {len(group_versions)} group versions")
        return entries

    # =========================================================================
    # LISTING
    # =========================================================================

    @staticmethod
    def build_list_path(descriptor: ResourceTypeDescriptor, namespace: Optional[str] = None) -> str:
        """
        /api/v1/pods, /api/v1/namespaces/default/pods,
        /apis/example.com/v1/namespaces/default/widgets, ...
        """
        if descriptor.group:
            base = f"/apis/{descriptor.group_version}"
        else:
            base = f"/api/{descriptor.version}"
        plural = descriptor.plural or f"{descriptor.kind.lower()}s"
        if namespace:
            return f"{base}/namespaces/{quote(namespace, safe='')}/{plural}"
        return f"{base}/{plural}"

    def list_resources(self,
                       descriptor: ResourceTypeDescriptor,
                       namespace: Optional[str] = None,
                       timeout: Optional[float] = None) -> Dict[str, Any]:
        """
        Lists all instances of `descriptor` (cluster-wide or in one namespace),
        following 'continue' tokens. Returns a List document with all items.

        `timeout` bounds the whole call, not each page: later pages only get
        what is left of it.

        Raises:
            TimeoutError: the pages did not all arrive within `timeout`.
        """
        path = self.build_list_path(descriptor, namespace)
        budget = timeout or self.request_timeout
        deadline = time.monotonic() + budget
        items = []
        token = None
        page = {}

        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise TimeoutError(f"Listing {path} exceeded {budget}s after {len(items)} items")
            query = [("limit", LIST_CHUNK_SIZE)]
            if token:
                query.append(("continue", token))
            page = self._get(path, query=query, timeout=remaining)
            if not isinstance(page, dict) or not isinstance(page.get("items"), list):
                raise ValueError(f"Malformed list response from {path}: missing 'items'")
            items.extend(page["items"])

            token = (page.get("metadata") or {}).get("continue")
            if not token:
                break

        return {
            "apiVersion": page.get("apiVersion", descriptor.group_version),
            "kind": page.get("kind", f"{descriptor.kind}List"),
            "items": items,
        }

    def list_namespaces(self) -> List[str]:
        """Names of all namespaces in the cluster."""
        page = self._get("/api/v1/namespaces")
        if not isinstance(page, dict) or not isinstance(page.get("items"), list):
            raise ValueError("Malformed namespace list response")

        names = []
        for item in page["items"]:
            name = (item.get("metadata") or {}).get("name") if isinstance(item, dict) else None
            if name:
                names.append(name)

        logger.info(f"Found {len(names)} namespaces")
        logger.debug(f"Namespaces: {names}")
        return names

    def close(self):
        self.api_client.close()
