#!/usr/bin/env python3
"""
KUBESNAP UNIFIED CLI
--------------------
Point-in-time snapshots of a cluster's configuration surface.

Commands live in kubesnap/cli/commands/; this module only parses arguments,
sets up logging and dispatches.
"""

import argparse
import logging
import os
import sys

from rich.table import Table

from kubesnap import APP_NAME
from kubesnap.cli.commands.base import (
    get_console,
    print_custom_header,
    print_version,
    setup_logging,
)
from kubesnap.cli.commands.collect import add_collect_flags, handle_collect_command, print_collect_help
from kubesnap.ui.formatter import KubesnapFormatter

# Global setup
console = get_console()
logger = logging.getLogger("kubesnap.cli")


def print_kubectl_help(invoked_as: str):
    """
    Displays the main help menu in a 'kubectl' inspired format.
    """
    console.print("\n[bold cyan]┌─ COMMANDS[/bold cyan]")
    cmd_table = Table(show_header=False, box=None, padding=(0, 2, 0, 0))
    cmd_table.add_column(style="bold green", width=12)
    cmd_table.add_column(style="white")
    cmd_table.add_row("collect", "Snapshot cluster resources to disk")
    cmd_table.add_row("init", "Write a default .kubesnap.yaml in the current directory")
    cmd_table.add_row("version", "Display version information")
    console.print(cmd_table)

    console.print("\n[bold cyan]┌─ GLOBAL OPTIONS[/bold cyan]")
    opt_table = Table(show_header=False, box=None, padding=(0, 2, 0, 0))
    opt_table.add_column(style="yellow", width=24)
    opt_table.add_column(style="dim white")
    opt_table.add_row("-h, --help", "Display usage information")
    opt_table.add_row("-v, --version", "Display version information")
    console.print(opt_table)

    console.print(f"\n[bold magenta]💡 TIP[/bold magenta]")
    console.print(f"   Use [cyan bold]{invoked_as} <command> --help[/cyan bold] for subcommand specific flags.\n")


def build_parser(invoked_as: str = APP_NAME) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=invoked_as, add_help=False)
    parser.add_argument("-h", "--help", action="store_true")
    parser.add_argument("-v", "--version", action="store_true")

    subparsers = parser.add_subparsers(dest="command")

    # COLLECT
    collect_parser = subparsers.add_parser("collect", add_help=False)
    add_collect_flags(collect_parser)

    # INIT
    init_parser = subparsers.add_parser("init", add_help=False)
    init_parser.add_argument("--force", action="store_true")
    init_parser.add_argument("-h", "--help", action="store_true")

    # UTILS
    subparsers.add_parser("version", add_help=False)

    return parser


def main(argv=None):
    """
    Primary orchestration logic for the CLI.
    """
    invoked_as = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else APP_NAME
    if invoked_as in ("__main__.py", "-c", "") or invoked_as.endswith(".py"):
        invoked_as = APP_NAME

    parser = build_parser(invoked_as)
    args, unknown = parser.parse_known_args(argv)

    if unknown:
        console.print(f"[red]Error: Unrecognized arguments: {unknown}[/red]")
        print_kubectl_help(invoked_as)
        sys.exit(1)

    setup_logging(verbose=getattr(args, "verbose", False), debug=getattr(args, "debug", False))

    if args.version or args.command == "version":
        print_version(invoked_as)
        sys.exit(0)

    # Help / Headers
    if args.help or not args.command:
        if args.command == "init":
            console.print(f"\n[bold green]USAGE:[/bold green] [bold white]{invoked_as} init[/bold white] [--force]")
            console.print("Generates a default [cyan].kubesnap.yaml[/cyan] configuration file in the current directory.")
            sys.exit(0)

        print_custom_header(invoked_as)
        if args.command == "collect":
            print_collect_help(invoked_as)
        else:
            print_kubectl_help(invoked_as)
        sys.exit(0)

    # Dispatch
    if args.command == "init":
        from kubesnap.cli.commands.config import handle_init_command
        sys.exit(handle_init_command(console, force=args.force))

    try:
        print_custom_header(invoked_as)
        sys.exit(handle_collect_command(args, KubesnapFormatter()))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[bold red]Fatal Error:[/bold red] {e}")
        logger.debug("Unhandled error", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
