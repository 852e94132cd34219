"""
INIT COMMAND
------------
Bootstraps a default .kubesnap.yaml in the current directory.
"""

from pathlib import Path

from kubesnap.core.config import write_default_config


def handle_init_command(console, target_dir: Path = Path("."), force: bool = False) -> int:
    try:
        target = write_default_config(target_dir, force=force)
    except FileExistsError as e:
        console.print(f"[yellow]⚠️  {e}. Use --force to overwrite.[/yellow]")
        return 1
    except OSError as e:
        console.print(f"[bold red]❌ Could not write configuration:[/bold red] {e}")
        return 1

    console.print(f"[green]✅ Created {target}[/green]")
    console.print("[dim]Edit it to change defaults, then run 'kubesnap collect'.[/dim]")
    return 0
