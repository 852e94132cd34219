"""
KUBESNAP INCLUSION POLICY
-------------------------
Decides, per resource kind name, whether a run collects it.

Decision table (first match wins):
1. Hard denylist (ComponentStatus, Binding)        -> never
2. Secret                                          -> include_secrets
3. Event / Lease / Endpoints+EndpointSlice / ReplicaSet -> own toggle each
4. Dotted name (custom resource)                   -> specific_crds if set,
                                                      else include_custom_resources
5. Everything else                                 -> always

The function is pure: the same (kind, options) pair always yields the same
answer, and every kind name maps to exactly one outcome.
"""

import logging
from typing import List

from kubesnap.models import CollectionOptions

logger = logging.getLogger("kubesnap.policy")

# Not reproducible or not listable as configuration
DENYLIST = frozenset({"ComponentStatus", "Binding"})

SENSITIVE_KINDS = frozenset({"Secret"})

# kind -> CollectionOptions attribute gating it
HIGH_VOLUME_TOGGLES = {
    "Event": "include_events",
    "Lease": "include_leases",
    "Endpoints": "include_endpoints",
    "EndpointSlice": "include_endpoints",
    "ReplicaSet": "include_replicasets",
}


def is_custom_resource_name(kind_name: str) -> bool:
    """
    Heuristic: CRDs are addressed as '<plural>.<group>' (widgets.example.com).
    Built-in kinds never contain a dot.
    """
    return "." in kind_name


def should_collect(kind_name: str, options: CollectionOptions) -> bool:
    """
    Returns True if instances of `kind_name` should be collected under `options`.
    """
    if kind_name in DENYLIST:
        return False

    if kind_name in SENSITIVE_KINDS:
        return options.include_secrets

    toggle = HIGH_VOLUME_TOGGLES.get(kind_name)
    if toggle:
        return bool(getattr(options, toggle))

    if is_custom_resource_name(kind_name):
        # An explicit allow-list overrides the blanket toggle entirely
        if options.specific_crds is not None:
            wanted = kind_name.lower()
            return any(crd.strip().lower() == wanted for crd in options.specific_crds)
        return options.include_custom_resources

    return True


def describe_plan(options: CollectionOptions) -> List[str]:
    """
    Renders the policy as human-readable plan lines for the CLI banner.
    Skipped groups carry the flag that enables them.
    """
    plan = ["Core resources: ✅ Always collected"]

    def line(label: str, enabled: bool, flag: str):
        if enabled:
            plan.append(f"{label}: ✅ Enabled")
        else:
            plan.append(f"{label}: ⏭️  Skipped (use {flag} to enable)")

    line("Secrets", options.include_secrets, "-s")

    if options.specific_crds is not None:
        plan.append(f"Custom Resources: ✅ Specific CRDs: {', '.join(options.specific_crds)}")
    else:
        line("Custom Resources", options.include_custom_resources, "-C")

    line("Events", options.include_events, "-E")
    line("ReplicaSets", options.include_replicasets, "-R")
    line("Endpoints", options.include_endpoints, "-P")
    line("Leases", options.include_leases, "-L")

    for entry in plan:
        logger.debug(f"  - {entry}")
    return plan
