"""
Hook reconciler.

Brings one repository's hooks in line with the scanner setup:

- bypass repair: core.hooksPath points at a missing directory, so nothing
  runs at all. Unset it and install native hooks.
- hook-manager injection: add the scanner block to an existing
  .husky/pre-commit, keeping every existing line.
- hook-manager creation: write a .husky/pre-commit holding only the block.
- native install: write the templates into .git/hooks, backing up any
  foreign hook first.

Each repository is handled with whole-file atomic writes so an interrupt
between repositories never leaves a half-written hook behind.
"""

import os
import stat
import tempfile
import time
from collections.abc import Callable, Iterable
from pathlib import Path

from leakguard.hooks.git_config import HOOKS_PATH_KEY, GitConfig
from leakguard.hooks.markers import DEFAULT_MARKER, file_has_scanner_invocation, has_scanner_invocation, inject_block
from leakguard.hooks.models import (
    HookState,
    ReconciliationOutcome,
    ReconciliationResult,
    RepositoryRef,
    RunSummary,
)
from leakguard.hooks.state import Classification, classify
from leakguard.hooks.templates import HOOK_NAMES, HookTemplate
from leakguard.shared.domain.exceptions import (
    GitConfigError,
    HookWriteError,
    MissingTemplateError,
    RepositoryAccessError,
)
from leakguard.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

EXEC_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH
NEW_FILE_MODE = 0o644


def write_atomic(path: Path, text: str) -> None:
    """
    Replace path with text in one step and mark it executable.

    Raises:
        HookWriteError: If the file cannot be written
    """
    try:
        mode = stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        mode = NEW_FILE_MODE

    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            errors="surrogateescape",
            dir=path.parent,
            prefix=f".{path.name}.",
            delete=False,
            newline="",
        ) as handle:
            tmp_name = handle.name
            handle.write(text)
        os.chmod(tmp_name, mode | EXEC_BITS)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise HookWriteError(f"Failed to write {path}: {e.strerror or e}", {"path": str(path)}) from e


def backup_path(path: Path, timestamp: int) -> Path:
    """First free `<name>.backup.<timestamp>[-n]` next to path."""
    candidate = path.with_name(f"{path.name}.backup.{timestamp}")
    counter = 1
    while candidate.exists():
        candidate = path.with_name(f"{path.name}.backup.{timestamp}-{counter}")
        counter += 1
    return candidate


def _require_writable(directory: Path, what: str) -> None:
    if directory.exists() and not os.access(directory, os.W_OK):
        raise HookWriteError(f"{what} not writable: {directory}", {"path": str(directory)})


class HookReconciler:
    """Classifies a repository's hooks and applies exactly one strategy."""

    def __init__(
        self,
        template: HookTemplate,
        scanner_block: str,
        marker: str = DEFAULT_MARKER,
        manager_dir_name: str = ".husky",
        dry_run: bool = False,
        git_cmd: str | None = None,
        clock: Callable[[], float] = time.time,
    ):
        if not has_scanner_invocation(scanner_block, marker):
            raise ValueError(f"scanner block must contain the marker {marker!r}")
        for name in HOOK_NAMES:
            if not has_scanner_invocation(template.body(name), marker):
                raise MissingTemplateError(
                    f"Hook template {name} never runs {marker}; re-run 'leakguard install' or fix template_dir",
                    {"hook": name, "marker": marker},
                )
        self.template = template
        self.scanner_block = scanner_block
        self.marker = marker
        self.manager_dir_name = manager_dir_name
        self.dry_run = dry_run
        self.git_cmd = git_cmd
        self.clock = clock

    def reconcile(self, repo: RepositoryRef) -> ReconciliationResult:
        """
        Reconcile one repository. Never raises for per-repository problems.

        Returns:
            ReconciliationResult with outcome updated, unchanged, failed or skipped
        """
        result = ReconciliationResult(repo=repo, outcome=ReconciliationOutcome.UNCHANGED, dry_run=self.dry_run)

        try:
            self._check_enterable(repo)
            git = GitConfig(repo.path, self.git_cmd)
            classification = classify(repo, git, self.manager_dir_name, self.marker)
            result.state = classification.state
            result.warnings.extend(classification.warnings)
            changed = self._apply(repo, classification, git, result)
        except RepositoryAccessError as e:
            result.outcome = ReconciliationOutcome.SKIPPED
            result.error = str(e)
        except (HookWriteError, MissingTemplateError, GitConfigError) as e:
            result.outcome = ReconciliationOutcome.FAILED
            result.error = str(e)
        except OSError as e:
            result.outcome = ReconciliationOutcome.FAILED
            result.error = f"Filesystem error: {e}"
        else:
            result.outcome = ReconciliationOutcome.UPDATED if changed else ReconciliationOutcome.UNCHANGED

        log = logger.warning if result.outcome == ReconciliationOutcome.FAILED else logger.info
        log(
            "repository_reconciled",
            repo=str(repo),
            state=result.state.value if result.state else None,
            outcome=result.outcome.value,
            error=result.error,
            dry_run=self.dry_run,
        )
        return result

    def reconcile_all(
        self,
        repos: Iterable[RepositoryRef],
        summary: RunSummary | None = None,
        on_result: Callable[[ReconciliationResult], None] | None = None,
    ) -> RunSummary:
        """Reconcile repositories in order, recording each result into summary."""
        summary = summary if summary is not None else RunSummary()
        for repo in repos:
            result = summary.record(self.reconcile(repo))
            if on_result is not None:
                on_result(result)
        return summary

    @staticmethod
    def _check_enterable(repo: RepositoryRef) -> None:
        if not repo.path.is_dir():
            raise RepositoryAccessError(f"Repository no longer exists: {repo}")
        if not os.access(repo.path, os.R_OK | os.X_OK) or not os.access(repo.git_dir, os.R_OK | os.X_OK):
            raise RepositoryAccessError(f"Permission denied entering {repo}")

    def _act(self, result: ReconciliationResult, description: str) -> None:
        result.actions.append(f"would {description}" if self.dry_run else description)

    def _apply(
        self,
        repo: RepositoryRef,
        classification: Classification,
        git: GitConfig,
        result: ReconciliationResult,
    ) -> bool:
        state = classification.state

        if state == HookState.BYPASS_MISCONFIGURED:
            return self._repair_bypass(repo, classification, git, result)
        if state == HookState.MANAGER_CONFIGURED:
            result.actions.append(f"{self.manager_dir_name}/pre-commit already runs {self.marker}")
            return self._ensure_executable(classification.entry_point, f"{self.manager_dir_name}/pre-commit", result)
        if state == HookState.MANAGER_NEEDS_INJECTION:
            return self._inject(classification.entry_point, result)
        if state == HookState.MANAGER_NEEDS_ENTRYPOINT:
            return self._create_entry_point(classification.entry_point, result)
        return self._install_native(repo, result)

    def _repair_bypass(
        self,
        repo: RepositoryRef,
        classification: Classification,
        git: GitConfig,
        result: ReconciliationResult,
    ) -> bool:
        result.warnings.append(
            f"core.hooksPath points at missing directory '{classification.hooks_path}': no hooks were running"
        )
        self._act(result, f"unset {HOOKS_PATH_KEY} (was '{classification.hooks_path}')")
        if not self.dry_run:
            git.unset_local(HOOKS_PATH_KEY)
        self._install_native(repo, result)
        return True

    def _inject(self, entry_point: Path, result: ReconciliationResult) -> bool:
        _require_writable(entry_point.parent, "hook-manager directory")
        with open(entry_point, encoding="utf-8", errors="surrogateescape", newline="") as handle:
            original = handle.read()
        if has_scanner_invocation(original, self.marker):
            result.actions.append(f"{entry_point.name} already runs {self.marker}")
            return False

        updated, after_line = inject_block(original, self.scanner_block)
        where = f"after line {after_line}" if after_line is not None else "at end of file"
        self._act(result, f"inject scanner block into {self.manager_dir_name}/pre-commit {where}")
        if not self.dry_run:
            write_atomic(entry_point, updated)
            logger.info("hook_injected", path=str(entry_point), after_line=after_line)
        return True

    def _create_entry_point(self, entry_point: Path, result: ReconciliationResult) -> bool:
        _require_writable(entry_point.parent, "hook-manager directory")
        self._act(result, f"create {self.manager_dir_name}/pre-commit with scanner block")
        if not self.dry_run:
            write_atomic(entry_point, self.scanner_block)
            logger.info("hook_created", path=str(entry_point))
        return True

    def _install_native(self, repo: RepositoryRef, result: ReconciliationResult) -> bool:
        hooks_dir = repo.native_hooks_dir
        if not hooks_dir.is_dir():
            self._act(result, f"create {hooks_dir}")
            if not self.dry_run:
                try:
                    hooks_dir.mkdir(parents=True, exist_ok=True)
                except OSError as e:
                    raise HookWriteError(f"Failed to create hooks directory {hooks_dir}: {e.strerror or e}") from e
        _require_writable(hooks_dir, "hooks directory")

        changed = False
        timestamp = int(self.clock())
        for name in HOOK_NAMES:
            hook = hooks_dir / name
            if hook.is_file() and file_has_scanner_invocation(hook, self.marker):
                result.actions.append(f"native {name} already runs {self.marker}")
                if self._ensure_executable(hook, f"native {name}", result):
                    changed = True
                continue

            backup = None
            if hook.exists():
                backup = backup_path(hook, timestamp)
                self._act(result, f"back up native {name} to {backup.name}")
                if not self.dry_run:
                    try:
                        hook.rename(backup)
                    except OSError as e:
                        raise HookWriteError(f"Failed to back up {hook}: {e.strerror or e}") from e
                    logger.info("hook_backed_up", path=str(hook), backup=str(backup))

            self._act(result, f"install native {name}")
            if not self.dry_run:
                try:
                    write_atomic(hook, self.template.body(name))
                except HookWriteError:
                    if backup is not None:
                        self._restore_backup(backup, hook)
                    raise
            changed = True

        return changed

    def _ensure_executable(self, hook: Path, label: str, result: ReconciliationResult) -> bool:
        """Add missing execute bits; git silently skips non-executable hooks."""
        mode = stat.S_IMODE(hook.stat().st_mode)
        if mode & stat.S_IXUSR:
            return False
        self._act(result, f"mark {label} executable")
        if not self.dry_run:
            try:
                os.chmod(hook, mode | EXEC_BITS)
            except OSError as e:
                raise HookWriteError(f"Failed to mark {hook} executable: {e.strerror or e}", {"path": str(hook)}) from e
            logger.info("hook_made_executable", path=str(hook), previous_mode=oct(mode))
        return True

    @staticmethod
    def _restore_backup(backup: Path, hook: Path) -> None:
        try:
            backup.rename(hook)
        except OSError as e:
            logger.error("hook_restore_failed", path=str(hook), backup=str(backup), error=str(e))
        else:
            logger.info("hook_restored", path=str(hook), backup=str(backup))
