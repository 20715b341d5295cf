"""
Hook state classification.

Inspects a repository without modifying it and decides which
reconciliation strategy applies.
"""

from dataclasses import dataclass, field
from pathlib import Path

from leakguard.hooks.git_config import HOOKS_PATH_KEY, GitConfig
from leakguard.hooks.markers import DEFAULT_MARKER, file_has_scanner_invocation
from leakguard.hooks.models import HookState, RepositoryRef
from leakguard.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

# Runtime helper files of a working hook-manager install (Husky v4-v8, v9)
MANAGER_HELPERS = ("_/husky.sh", "husky.sh", "_/h")


@dataclass
class Classification:
    """Result of inspecting one repository."""

    state: HookState
    hooks_path: str | None = None
    resolved_hooks_path: Path | None = None
    manager_dir: Path | None = None
    entry_point: Path | None = None
    warnings: list[str] = field(default_factory=list)


def resolve_hooks_path(repo: RepositoryRef, raw: str) -> Path:
    """Relative core.hooksPath values are relative to the working tree root."""
    path = Path(raw)
    return path if path.is_absolute() else repo.path / path


def manager_is_valid(manager_dir: Path) -> bool:
    """A hook-manager directory is usable when one of its runtime helpers exists."""
    return any((manager_dir / helper).is_file() for helper in MANAGER_HELPERS)


def classify(
    repo: RepositoryRef,
    git: GitConfig,
    manager_dir_name: str = ".husky",
    marker: str = DEFAULT_MARKER,
) -> Classification:
    """
    Classify a repository's hook state.

    Order (first match wins):
    1. core.hooksPath redirected to a missing non-default directory
    2. hook-manager directory present (configured / needs injection /
       needs entry point), if structurally valid or its entry point exists
    3. native hooks

    Raises:
        GitConfigError: If reading core.hooksPath fails
    """
    raw = git.get(HOOKS_PATH_KEY) or None
    resolved = resolve_hooks_path(repo, raw) if raw else None

    # a missing default hooks directory is recreated by the native install
    is_default = resolved is not None and resolved.resolve() == repo.native_hooks_dir.resolve()
    if resolved is not None and not is_default and not resolved.is_dir():
        logger.warning("hooks_path_missing", repo=str(repo), hooks_path=raw)
        return Classification(HookState.BYPASS_MISCONFIGURED, raw, resolved)

    manager_dir = repo.path / manager_dir_name
    entry_point = manager_dir / "pre-commit"
    warnings: list[str] = []

    if resolved is not None:
        target = resolved.resolve()
        if target != repo.native_hooks_dir.resolve() and not target.is_relative_to(manager_dir.resolve()):
            warnings.append(f"core.hooksPath points at {raw}; hooks outside that directory will not run")

    if manager_dir.is_dir():
        if entry_point.is_file():
            state = (
                HookState.MANAGER_CONFIGURED
                if file_has_scanner_invocation(entry_point, marker)
                else HookState.MANAGER_NEEDS_INJECTION
            )
            return Classification(state, raw, resolved, manager_dir, entry_point, warnings)

        if manager_is_valid(manager_dir):
            return Classification(
                HookState.MANAGER_NEEDS_ENTRYPOINT, raw, resolved, manager_dir, entry_point, warnings
            )

        logger.warning("hook_manager_incomplete", repo=str(repo), manager_dir=str(manager_dir))
        warnings.append(
            f"{manager_dir_name}/ exists but has no runtime helper; installed native hooks instead "
            "(the hook manager may still own core.hooksPath at commit time)"
        )

    return Classification(HookState.NATIVE, raw, resolved, warnings=warnings)
