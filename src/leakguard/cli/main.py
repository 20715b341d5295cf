"""
leakguard CLI
Main entry point for the command-line interface

Usage:
    leakguard install               # Install gitleaks, shared config and git template hooks
    leakguard sync ~/Projects       # Add hooks to existing repositories
    leakguard sync --all-volumes    # ... on every fixed volume
    leakguard locate ~/Projects     # List repositories that sync would visit
    leakguard status                # Show the hook state of the current repository
"""

import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from leakguard import __version__
from leakguard.cli.commands import install, locate, sync
from leakguard.shared.domain.exceptions import ConfigurationError
from leakguard.shared.infrastructure.config import load_settings
from leakguard.shared.infrastructure.logging import configure_logging

app = typer.Typer(
    name="leakguard",
    help="leakguard - keep secret scanning hooks in every git repository",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()

VERBOSITY_LEVELS = {1: "INFO", 2: "DEBUG"}


@app.callback()
def root(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML settings file"),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="More log output (-v info, -vv debug)"),
) -> None:
    """Load settings and configure logging for every command."""
    try:
        settings = load_settings(config)
    except ConfigurationError as e:
        console.print(f"[red]✗ {e}[/red]", highlight=False)
        raise typer.Exit(2)

    if verbose:
        settings.log_level = VERBOSITY_LEVELS[min(verbose, 2)]
    configure_logging(settings)
    ctx.obj = {"settings": settings}


app.command(name="install")(install.install)
app.command(name="sync")(sync.sync)
app.command(name="locate")(locate.locate)
app.command(name="status")(locate.status)


@app.command()
def version():
    """Show leakguard version info."""
    table = Table(show_header=False, box=None)
    table.add_row("leakguard", f"[bold green]v{__version__}[/bold green]")
    table.add_row("Python", sys.version.split()[0])
    table.add_row("Platform", sys.platform)

    console.print(Panel(table, title="[bold blue]leakguard[/bold blue]", expand=False))


def main():
    """Entry point for setuptools."""
    app()


if __name__ == "__main__":
    main()
