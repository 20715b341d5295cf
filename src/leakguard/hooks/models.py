"""
Hook reconciliation domain models.

RepositoryRef identifies a located repository, HookState classifies its
current hook setup, and each reconciliation yields one ReconciliationResult.
RunSummary aggregates results for a whole run.
"""

from __future__ import annotations

import threading
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class HookState(str, Enum):
    """Classification of a repository's hook configuration (first match wins)."""

    BYPASS_MISCONFIGURED = "bypass-misconfigured"
    MANAGER_CONFIGURED = "manager-configured"
    MANAGER_NEEDS_INJECTION = "manager-needs-injection"
    MANAGER_NEEDS_ENTRYPOINT = "manager-needs-entrypoint"
    NATIVE = "native"

    @property
    def strategy(self) -> str:
        """Name of the strategy applied for this state."""
        return _STRATEGIES[self]


_STRATEGIES = {
    HookState.BYPASS_MISCONFIGURED: "bypass-repair",
    HookState.MANAGER_CONFIGURED: "hook-manager (already configured)",
    HookState.MANAGER_NEEDS_INJECTION: "hook-manager injection",
    HookState.MANAGER_NEEDS_ENTRYPOINT: "hook-manager creation",
    HookState.NATIVE: "native install",
}


class ReconciliationOutcome(str, Enum):
    """Per-repository result. UNCHANGED is the no-op success."""

    UPDATED = "updated"
    UNCHANGED = "unchanged"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def is_success(self) -> bool:
        return self in (ReconciliationOutcome.UPDATED, ReconciliationOutcome.UNCHANGED)


@dataclass(frozen=True, order=True)
class RepositoryRef:
    """Absolute path of a directory that contains a .git directory."""

    path: Path

    @property
    def git_dir(self) -> Path:
        return self.path / ".git"

    @property
    def native_hooks_dir(self) -> Path:
        return self.git_dir / "hooks"

    def __str__(self) -> str:
        return str(self.path)


@dataclass
class ReconciliationResult:
    """Outcome of reconciling one repository."""

    repo: RepositoryRef
    outcome: ReconciliationOutcome
    state: HookState | None = None
    actions: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    error: str | None = None
    dry_run: bool = False

    @property
    def strategy(self) -> str:
        return self.state.strategy if self.state else "-"


@dataclass
class RunSummary:
    """
    Explicit aggregation of reconciliation results.

    record() is lock-protected so a producer/consumer pipeline may share
    one summary; summaries from separate runs can be combined with merge().
    """

    results: list[ReconciliationResult] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record(self, result: ReconciliationResult) -> ReconciliationResult:
        with self._lock:
            self.results.append(result)
        return result

    def merge(self, other: RunSummary) -> RunSummary:
        merged = RunSummary()
        for result in [*self.results, *other.results]:
            merged.record(result)
        return merged

    @property
    def counts(self) -> Counter:
        with self._lock:
            return Counter(r.outcome for r in self.results)

    @property
    def found(self) -> int:
        with self._lock:
            return len(self.results)

    @property
    def updated(self) -> int:
        return self.counts[ReconciliationOutcome.UPDATED]

    @property
    def unchanged(self) -> int:
        return self.counts[ReconciliationOutcome.UNCHANGED]

    @property
    def failed(self) -> int:
        return self.counts[ReconciliationOutcome.FAILED]

    @property
    def skipped(self) -> int:
        return self.counts[ReconciliationOutcome.SKIPPED]

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0
