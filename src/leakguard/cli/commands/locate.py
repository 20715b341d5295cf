"""
``leakguard locate`` and ``leakguard status``: read-only inspection commands.
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from leakguard.cli.context import get_settings
from leakguard.discovery import RepositoryLocator, select_roots
from leakguard.hooks.git_config import GitConfig
from leakguard.hooks.models import RepositoryRef
from leakguard.hooks.state import classify
from leakguard.shared.domain.exceptions import ConfigurationError, GitConfigError

console = Console()


def locate(
    ctx: typer.Context,
    roots: Optional[List[Path]] = typer.Argument(None, help="Directories to search (default: current directory)"),
    max_depth: Optional[int] = typer.Option(None, "--max-depth", "-d", min=0, help="Maximum directory depth"),
    all_volumes: bool = typer.Option(False, "--all-volumes", help="Search every mounted fixed volume"),
    include_hidden: bool = typer.Option(False, "--include-hidden", help="Also search hidden directories"),
    exclude: Optional[List[str]] = typer.Option(None, "--exclude", "-x", help="Extra directory name to skip"),
) -> None:
    """List git repositories, one per line."""
    settings = get_settings(ctx)
    try:
        locator = RepositoryLocator(
            max_depth=max_depth if max_depth is not None else settings.max_depth,
            extra_excludes=[*settings.extra_excludes, *(exclude or [])],
            skip_hidden=settings.skip_hidden and not include_hidden,
        )
    except ConfigurationError as e:
        console.print(f"[red]✗ {e}[/red]", highlight=False)
        raise typer.Exit(2)

    for repo in locator.locate_all(select_roots(roots, all_volumes)):
        console.print(str(repo), highlight=False, soft_wrap=True)


def status(
    ctx: typer.Context,
    repo: Path = typer.Argument(Path("."), help="Repository to inspect"),
) -> None:
    """Show the hook state of one repository and what sync would do."""
    settings = get_settings(ctx)
    path = repo.expanduser().resolve()
    if not (path / ".git").is_dir():
        console.print(f"[red]✗ Not a git repository: {path}[/red]", highlight=False)
        raise typer.Exit(1)

    ref = RepositoryRef(path)
    try:
        classification = classify(ref, GitConfig(path), settings.hook_manager_dir, settings.scanner_name)
    except GitConfigError as e:
        console.print(f"[red]✗ {e}[/red]", highlight=False)
        raise typer.Exit(1)

    table = Table(show_header=False, box=None)
    table.add_row("Repository", escape(str(path)))
    table.add_row("Hook state", classification.state.value)
    table.add_row("Sync strategy", classification.state.strategy)
    table.add_row("core.hooksPath", escape(classification.hooks_path) if classification.hooks_path else "[dim](default)[/dim]")
    if classification.entry_point:
        table.add_row("Entry point", escape(str(classification.entry_point)))
    console.print(table)

    for warning in classification.warnings:
        console.print(f"[yellow]⚠[/yellow]  {escape(warning)}", highlight=False)
