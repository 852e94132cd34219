"""
CLI SHARED UTILITIES
--------------------
Common logic used across multiple CLI commands.
"""

import logging
import platform

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from kubesnap import APP_NAME, __version__

# Global UI Controller
console = Console()

# Third-party loggers that are far too chatty below WARNING
NOISY_LOGGERS = ("urllib3", "kubernetes")


def get_console():
    return console


def setup_logging(verbose: bool = False, debug: bool = False):
    """
    Default: WARNING. --verbose: INFO. --debug: DEBUG with logger names.
    """
    if debug:
        level = logging.DEBUG
        fmt = "%(levelname)s %(name)s: %(message)s"
    elif verbose:
        level = logging.INFO
        fmt = "%(message)s"
    else:
        level = logging.WARNING
        fmt = "%(message)s"

    logging.basicConfig(level=level, format=fmt, force=True)

    # Silence noisy libs
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if debug else logging.WARNING)


def normalize_list(raw_values):
    """
    Flattens values that might contain commas.
    Example: ["ns1,ns2", "ns3"] -> ["ns1", "ns2", "ns3"]
    """
    if not raw_values:
        return []
    if isinstance(raw_values, str):
        raw_values = [raw_values]

    normalized = []
    for value in raw_values:
        for sub in value.split(","):
            clean = sub.strip()
            if clean:
                normalized.append(clean)
    return normalized


def print_custom_header(invoked_as: str = APP_NAME):
    """
    Displays the top-level application banner.
    """
    title = "📸 Kubesnap"
    subtitle = "Kubernetes Configuration Snapshots"

    title_width = Text(title).cell_len
    subtitle_width = Text(subtitle).cell_len

    # Center the title over the longer subtitle
    if subtitle_width > title_width:
        total_padding = subtitle_width - title_width
        pad_left = total_padding // 2
        title = (" " * pad_left) + title + (" " * (total_padding - pad_left))

    console.print("")
    console.print(Panel(
        f"[bold]{title}[/bold]\n[dim italic]{subtitle}[/dim italic]",
        border_style="cyan",
        box=box.ROUNDED,
        padding=(0, 2),
        expand=False
    ))


def print_version(invoked_as: str = APP_NAME):
    """
    Displays system information panel.
    """
    info_table = Table(box=None, show_header=False, padding=(0, 1))
    info_table.add_column(width=18, justify="left")
    info_table.add_column(justify="left")

    info_table.add_row("Client Version:", f"[bold white]{__version__}[/bold white]")
    info_table.add_row("Identity:", f"[bold cyan]{invoked_as.upper()}[/bold cyan]")

    try:
        from importlib.metadata import version as dist_version
        info_table.add_row("K8s Client:", f"[yellow]{dist_version('kubernetes')}[/yellow]")
    except Exception:
        info_table.add_row("K8s Client:", "[dim]unknown[/dim]")

    info_table.add_row("Platform:", f"{platform.system()} {platform.release()} ({platform.machine()})")
    info_table.add_row("Runtime:", f"Python {platform.python_version()}")

    console.print(Panel.fit(
        info_table,
        title="[bold]Operational Context[/bold]",
        border_style="cyan",
        padding=(0, 2)
    ))
