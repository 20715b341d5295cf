"""
``leakguard sync``: install scanner hooks in every repository under the given roots.
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from leakguard.cli.commands._sync_ux import print_result, print_summary
from leakguard.cli.context import get_settings
from leakguard.discovery import RepositoryLocator, select_roots
from leakguard.hooks.git_config import find_git
from leakguard.hooks.markers import render_scanner_block, shell_config_path
from leakguard.hooks.reconciler import HookReconciler
from leakguard.hooks.templates import HookTemplate
from leakguard.installer.scanner import find_scanner
from leakguard.shared.domain.exceptions import (
    ConfigurationError,
    GitConfigError,
    MissingTemplateError,
    ScannerNotFoundError,
)
from leakguard.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)
console = Console()

EXIT_PRECONDITION = 2


def sync(
    ctx: typer.Context,
    roots: Optional[List[Path]] = typer.Argument(None, help="Directories to search (default: current directory)"),
    max_depth: Optional[int] = typer.Option(None, "--max-depth", "-d", min=0, help="Maximum directory depth"),
    all_volumes: bool = typer.Option(False, "--all-volumes", help="Search every mounted fixed volume"),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Report intended changes without writing"),
    include_hidden: bool = typer.Option(False, "--include-hidden", help="Also search hidden directories"),
    exclude: Optional[List[str]] = typer.Option(None, "--exclude", "-x", help="Extra directory name to skip"),
) -> None:
    """Install secret-scanning hooks in existing repositories (Husky or native)."""
    settings = get_settings(ctx)

    try:
        git_cmd = find_git()
        scanner = find_scanner(settings.scanner_name, settings.scanner_install_dir)
        template = HookTemplate.load(settings.hooks_template_dir)
        locator = RepositoryLocator(
            max_depth=max_depth if max_depth is not None else settings.max_depth,
            extra_excludes=[*settings.extra_excludes, *(exclude or [])],
            skip_hidden=settings.skip_hidden and not include_hidden,
        )
        reconciler = HookReconciler(
            template=template,
            scanner_block=render_scanner_block(settings.scanner_name, shell_config_path(settings.scanner_config_path)),
            marker=settings.scanner_name,
            manager_dir_name=settings.hook_manager_dir,
            dry_run=dry_run,
            git_cmd=git_cmd,
        )
    except (GitConfigError, ScannerNotFoundError, MissingTemplateError, ConfigurationError) as e:
        logger.error("sync_precondition_failed", error=str(e), error_type=type(e).__name__)
        console.print(f"[red]✗ {e}[/red]", highlight=False)
        raise typer.Exit(EXIT_PRECONDITION)

    search_roots = select_roots(roots, all_volumes)
    console.print(f"[bold cyan]🔍 Using {scanner}[/bold cyan]", highlight=False)
    for root in search_roots:
        console.print(f"[cyan]Scanning {root} for git repositories...[/cyan]", highlight=False)

    with console.status("[bold green]Locating repositories...[/bold green]"):
        repos = locator.locate_all(search_roots)

    summary = reconciler.reconcile_all(repos, on_result=lambda result: print_result(console, result))
    print_summary(console, summary, dry_run=dry_run)

    logger.info(
        "sync_completed",
        found=summary.found,
        updated=summary.updated,
        unchanged=summary.unchanged,
        failed=summary.failed,
        skipped=summary.skipped,
        dry_run=dry_run,
    )
    if summary.exit_code:
        raise typer.Exit(summary.exit_code)
