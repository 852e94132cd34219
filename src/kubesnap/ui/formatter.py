#!/usr/bin/env python3
"""
KUBESNAP FORMATTER
------------------
Renders collection plans and run reports using 'rich'.
"""

from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from kubesnap.core.engine import RunReport
from kubesnap.core.policy import describe_plan
from kubesnap.models import CollectionOptions

console = Console()


class KubesnapFormatter:
    """Renders the pre-run plan and the post-run summary."""

    def __init__(self, console_override: Optional[Console] = None):
        self.console = console_override or console

    # -------------------------------------------------------------------------
    # Plan
    # -------------------------------------------------------------------------

    def display_plan(self, options: CollectionOptions, namespaces: Optional[List[str]], output_format: str,
                     compression: str, workers: int):
        """Shows what the run is about to collect and how it will be stored."""
        table = Table(show_header=False, box=None, padding=(0, 2, 0, 0))
        table.add_column(style="bold white", width=18)
        table.add_column()

        for line in describe_plan(options):
            label, _, status = line.partition(": ")
            table.add_row(label, status)

        table.add_row("Sanitize", "✅ Enabled" if options.sanitize else "⏭️  Raw (server fields kept)")
        table.add_row("Namespaces", ", ".join(namespaces) if namespaces else "[dim]all[/dim]")
        table.add_row("Format", output_format)
        table.add_row("Compression", compression)
        table.add_row("Workers", str(workers))

        self.console.print(Panel(table, title="[bold cyan]Collection Plan[/bold cyan]", border_style="cyan",
                                 expand=False))

    # -------------------------------------------------------------------------
    # Results
    # -------------------------------------------------------------------------

    def display_report(self, report: RunReport, verbose: bool = False):
        """
        Renders the per-scope summary table, failures and output location.

        Args:
            verbose: Also break down resource types per scope.
        """
        stats = report.stats

        table = Table(title="Collection Summary", show_lines=False, header_style="bold magenta")
        table.add_column("Scope", style="cyan")
        table.add_column("Types", justify="right")
        table.add_column("Resources", justify="right", style="green")

        table.add_row("cluster", str(len(stats.cluster_counts)), str(stats.total_cluster_resources))
        for ns, counts in stats.namespace_counts.items():
            table.add_row(ns, str(len(counts)), str(stats.namespace_totals.get(ns, 0)))
        table.add_section()
        table.add_row("[bold]total[/bold]", str(len(stats.resource_type_counts)), f"[bold]{stats.total_resources}[/bold]")
        self.console.print(table)

        if verbose and stats.resource_type_counts:
            kinds = Table(title="Resource Types", header_style="bold magenta")
            kinds.add_column("Kind", style="white")
            kinds.add_column("Count", justify="right")
            for kind, count in stats.resource_type_counts.items():
                kinds.add_row(kind, str(count))
            self.console.print(kinds)

        if report.failures:
            self.console.print(f"\n[bold yellow]⚠️  {len(report.failures)} resource type(s) could not be collected:[/bold yellow]")
            for failure in report.failures:
                self.console.print(f"  [yellow]•[/yellow] {failure}")

        if report.write_failures:
            self.console.print(f"[yellow]⚠️  {report.write_failures} file(s) failed to write[/yellow]")

        self.console.print(f"\n💾 Files written: [bold]{report.files_written}[/bold]"
                           f"  [dim](skipped unnamed: {report.instances_skipped})[/dim]")
        if report.archive_path:
            self.console.print(f"📦 Archive: [bold green]{report.archive_path}[/bold green]")
        if report.kept_directory:
            self.console.print(f"📁 Directory: [bold green]{report.output_dir}[/bold green]")
        if report.archive_error:
            self.console.print(f"[bold red]❌ Archive failed:[/bold red] {report.archive_error}")

        self.console.print(f"[dim]⏱  Completed in {report.duration_seconds}s[/dim]")
