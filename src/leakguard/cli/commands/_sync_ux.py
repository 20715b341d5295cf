"""
Rendering helpers for ``leakguard sync``.

Keeps rich markup out of the command logic.
"""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from leakguard.hooks.models import HookState, ReconciliationOutcome, ReconciliationResult, RunSummary

OUTCOME_STYLES = {
    ReconciliationOutcome.UPDATED: ("green", "✓"),
    ReconciliationOutcome.UNCHANGED: ("green", "✓"),
    ReconciliationOutcome.FAILED: ("red", "✗"),
    ReconciliationOutcome.SKIPPED: ("yellow", "⚠"),
}


def print_result(console: Console, result: ReconciliationResult) -> None:
    """One block per repository: path, strategy, outcome, then details."""
    color, icon = OUTCOME_STYLES[result.outcome]
    label = result.outcome.value
    if result.dry_run and result.outcome == ReconciliationOutcome.UPDATED:
        label = "would update"

    console.print(
        f"[{color}]{icon}[/{color}] [bold]{escape(str(result.repo))}[/bold] "
        f"[dim]({result.strategy})[/dim] [{color}]{label}[/{color}]",
        highlight=False,
        soft_wrap=True,
    )

    if result.state == HookState.BYPASS_MISCONFIGURED:
        console.print(
            "  [bold red]🚨 CRITICAL[/bold red]: core.hooksPath points at a missing directory, "
            "no hooks were running in this repository",
            highlight=False,
            soft_wrap=True,
        )
    for warning in result.warnings:
        console.print(f"  [yellow]⚠[/yellow]  {escape(warning)}", highlight=False, soft_wrap=True)
    for action in result.actions:
        console.print(f"  [dim]→[/dim] {escape(action)}", highlight=False, soft_wrap=True)
    if result.error:
        console.print(f"  [{color}]{escape(result.error)}[/{color}]", highlight=False, soft_wrap=True)


def print_summary(console: Console, summary: RunSummary, dry_run: bool = False) -> None:
    table = Table(title="Dry run summary" if dry_run else "Summary", show_header=False, box=None)
    table.add_row("Repositories found", str(summary.found))
    table.add_row("[green]Updated[/green]", str(summary.updated))
    table.add_row("[green]Already configured[/green]", str(summary.unchanged))
    table.add_row("[red]Failed[/red]", str(summary.failed))
    table.add_row("[yellow]Skipped[/yellow]", str(summary.skipped))
    console.print()
    console.print(table)

    if summary.failed:
        console.print(f"\n[bold red]⛔ {summary.failed} repository(ies) could not be reconciled.[/bold red]")
    elif summary.found == 0:
        console.print("\n[yellow]No git repositories found.[/yellow]")
    else:
        console.print("\n[bold green]✅ Secret scanning hooks are in place.[/bold green]")
