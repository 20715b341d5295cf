"""
``leakguard install``: scanner binary, shared config and git template hooks.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table

from leakguard.cli.context import get_settings
from leakguard.installer.bootstrap import Bootstrapper
from leakguard.installer.scanner import InstallConfig, ScannerInstaller
from leakguard.shared.domain.exceptions import GitConfigError, InstallError
from leakguard.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)
console = Console()


def install(
    ctx: typer.Context,
    version: Optional[str] = typer.Option(None, "--version", help="Scanner release to install"),
    install_dir: Optional[Path] = typer.Option(None, "--install-dir", help="Where to put the scanner binary"),
    skip_binary: bool = typer.Option(False, "--skip-binary", help="Only write config and hook templates"),
    force: bool = typer.Option(False, "--force", "-f", help="Reinstall the binary and overwrite the shared config"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask before reinstalling"),
) -> None:
    """Install the scanner and set up hooks for newly created repositories."""
    settings = get_settings(ctx)
    console.print("[bold cyan]🛡️  Installing secret scanning...[/bold cyan]")

    summary = Table(show_header=False, box=None)

    if not skip_binary:
        config = InstallConfig(
            version=version or settings.scanner_version,
            install_dir=(install_dir or settings.scanner_install_dir).expanduser(),
            scanner_name=settings.scanner_name,
            force=force,
            timeout=settings.download_timeout,
        )
        installer = ScannerInstaller(config)

        current = installer.installed_version()
        if current and current != config.version and not (force or yes):
            console.print(f"[yellow]⚠  {settings.scanner_name} {current} is already installed[/yellow]")
            if Confirm.ask(f"Replace it with v{config.version}?", default=False):
                config.force = True
            else:
                config.version = current

        try:
            with console.status(f"[bold green]Installing {settings.scanner_name} v{config.version}...[/bold green]"):
                result = installer.install()
        except InstallError as e:
            logger.error("scanner_install_failed", error=str(e))
            console.print(f"[red]✗ {e}[/red]", highlight=False)
            raise typer.Exit(1)

        console.print(f"[green]✓[/green] {result.message}: {result.binary_path} ({result.version})", highlight=False)
        if not result.on_path:
            console.print(
                f"[yellow]⚠  {config.install_dir} is not on PATH; add it so hooks can find {settings.scanner_name}[/yellow]",
                highlight=False,
            )
        summary.add_row("Scanner binary", str(result.binary_path))

    bootstrapper = Bootstrapper(settings)
    try:
        report = bootstrapper.run(force=force)
    except (InstallError, GitConfigError) as e:
        logger.error("bootstrap_failed", error=str(e))
        console.print(f"[red]✗ {e}[/red]", highlight=False)
        raise typer.Exit(1)

    config_state = "written" if report.config_written else "kept existing"
    console.print(f"[green]✓[/green] Scanner config {config_state}: {report.config_path}", highlight=False)
    console.print(f"[green]✓[/green] Hook templates written to {settings.hooks_template_dir}", highlight=False)
    console.print(f"[green]✓[/green] git init.templateDir set to {settings.template_dir}", highlight=False)

    summary.add_row("Global config", str(report.config_path))
    summary.add_row("Git template", str(settings.hooks_template_dir))
    summary.add_row("Hooks", ", ".join(p.name for p in report.templates))
    console.print(Panel(summary, title="[bold green]Installation complete[/bold green]", expand=False))

    console.print("\n[bold]Next steps:[/bold]")
    console.print("  1. New repositories get the hooks automatically on git init / git clone")
    console.print("  2. Add hooks to existing repositories with: [cyan]leakguard sync ~/Projects[/cyan]")
