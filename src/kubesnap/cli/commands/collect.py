"""
COLLECT COMMAND
---------------
Snapshots the cluster into a timestamped directory / archive.
"""

import logging
from pathlib import Path

from kubesnap.cli.commands.base import get_console, normalize_list
from kubesnap.core.config import ConfigManager
from kubesnap.core.engine import KubesnapEngine
from kubesnap.core.errors import KubesnapError, NoValidNamespaces

logger = logging.getLogger("kubesnap.cli")

# CLI flag dest -> collection toggle it switches on
TOGGLE_FLAGS = {
    "secrets": "include_secrets",
    "custom_resources": "include_custom_resources",
    "events": "include_events",
    "replicasets": "include_replicasets",
    "endpoints": "include_endpoints",
    "leases": "include_leases",
}


def add_collect_flags(sub):
    """Injects the collect-specific options into its sub-parser."""
    sub.add_argument("-k", "--kubeconfig", default=None, metavar="PATH")
    sub.add_argument("--context", default=None)
    sub.add_argument("--in-cluster", action="store_true", dest="in_cluster")
    sub.add_argument("-n", "--namespaces", action="append", default=None, metavar="LIST")
    sub.add_argument("-o", "--output", default=None, metavar="DIR")
    sub.add_argument("-f", "--format", choices=["json", "yaml", "both"], default=None, dest="output_format")
    sub.add_argument("-c", "--compression", choices=["compressed", "uncompressed", "both"], default=None)
    sub.add_argument("-s", "--secrets", action="store_true")
    sub.add_argument("-C", "--custom-resources", action="store_true", dest="custom_resources")
    sub.add_argument("-E", "--events", action="store_true")
    sub.add_argument("-R", "--replicasets", action="store_true")
    sub.add_argument("-P", "--endpoints", action="store_true")
    sub.add_argument("-L", "--leases", action="store_true")
    sub.add_argument("--crds", default=None, metavar="LIST")
    sub.add_argument("-r", "--raw", action="store_true")
    sub.add_argument("-w", "--workers", type=int, default=None)
    sub.add_argument("--timeout", type=float, default=None, metavar="SECONDS")
    sub.add_argument("--verbose", action="store_true")
    sub.add_argument("--debug", action="store_true")
    sub.add_argument("-h", "--help", action="store_true")


def print_collect_help(invoked_as: str):
    console = get_console()
    console.print(f"\n[bold green]USAGE:[/bold green] [bold white]{invoked_as} collect[/bold white] [options]")
    console.print("\n[bold cyan]CONNECTION[/bold cyan]")
    console.print("  -k, --kubeconfig PATH   Kubeconfig file (default: ~/.kube/config)")
    console.print("  --context NAME          Kubeconfig context (default: current-context)")
    console.print("  --in-cluster            Use the pod service account")
    console.print("\n[bold cyan]SCOPE[/bold cyan]")
    console.print("  -n, --namespaces LIST   Comma-separated namespaces (default: all)")
    console.print("  -s, --secrets           Include Secrets")
    console.print("  -C, --custom-resources  Include all custom resources")
    console.print("  --crds LIST             Only these CRDs (e.g. widgets.example.com)")
    console.print("  -E, --events            Include Events")
    console.print("  -R, --replicasets       Include ReplicaSets")
    console.print("  -P, --endpoints         Include Endpoints / EndpointSlices")
    console.print("  -L, --leases            Include Leases")
    console.print("\n[bold cyan]OUTPUT[/bold cyan]")
    console.print("  -o, --output DIR        Base directory (default: /tmp)")
    console.print("  -f, --format FORMAT     json, yaml or both (default: yaml)")
    console.print("  -c, --compression MODE  compressed, uncompressed or both")
    console.print("  -r, --raw               Keep server-assigned fields")
    console.print("\n[bold cyan]RUNTIME[/bold cyan]")
    console.print("  -w, --workers N         Concurrent requests (default: 8)")
    console.print("  --timeout SECONDS       Per-request timeout (default: 30)")
    console.print("  --verbose / --debug     More logging")


def build_config(args, workspace: Path = Path(".")) -> ConfigManager:
    """
    Loads the workspace config and layers the CLI flags on top.

    Raises:
        ValueError: invalid combined settings.
    """
    config = ConfigManager(workspace)
    enabled = [toggle for flag, toggle in TOGGLE_FLAGS.items() if getattr(args, flag, False)]
    crds = normalize_list(args.crds) if args.crds is not None else None

    config.apply_overrides(
        enable=enabled,
        crds=crds,
        raw=args.raw,
        workers=args.workers,
        request_timeout=args.timeout,
        output_dir=args.output,
        output_format=args.output_format,
        compression=args.compression,
    )
    return config


def handle_collect_command(args, formatter, engine_factory=KubesnapEngine) -> int:
    """
    Handles 'collect' subcommand execution. Returns the process exit code.
    """
    console = get_console()

    try:
        config = build_config(args)
    except ValueError as e:
        console.print(f"[bold red]❌ Invalid configuration:[/bold red] {e}")
        return 1

    namespaces = normalize_list(args.namespaces)
    formatter.display_plan(
        config.collection_options(),
        namespaces,
        output_format=config.output_format,
        compression=config.compression,
        workers=config.workers,
    )

    try:
        engine = engine_factory(
            config,
            kubeconfig=args.kubeconfig,
            context=args.context,
            in_cluster=args.in_cluster,
        )
        with console.status("[bold cyan]Collecting cluster resources...[/bold cyan]"):
            report = engine.run(namespaces or None)
    except NoValidNamespaces as e:
        console.print(f"[bold red]❌ {e}[/bold red]")
        return 1
    except KubesnapError as e:
        console.print(f"[bold red]❌ {type(e).__name__}:[/bold red] {e}")
        logger.debug("Run aborted", exc_info=True)
        return 1

    formatter.display_report(report, verbose=args.verbose or args.debug)

    # Snapshot written but not packaged as requested
    return 1 if report.archive_error else 0
