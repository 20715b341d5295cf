"""
Repository locator.

Walks directory trees and yields every directory that directly contains a
.git directory. Excluded directories are pruned before their children are
listed, so huge dependency trees and restricted system paths are never
read.
"""

import os
from collections.abc import Iterable, Iterator
from pathlib import Path

from leakguard.hooks.models import RepositoryRef
from leakguard.shared.domain.exceptions import ConfigurationError
from leakguard.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

GIT_DIR_NAME = ".git"

DEFAULT_EXCLUDED_NAMES = frozenset(
    {
        # dependency caches
        "node_modules",
        "bower_components",
        "jspm_packages",
        "vendor",
        ".venv",
        "venv",
        "site-packages",
        ".tox",
        ".nox",
        ".cargo",
        ".rustup",
        ".gradle",
        ".m2",
        ".npm",
        ".yarn",
        ".pnpm-store",
        # build outputs
        "build",
        "dist",
        "target",
        "out",
        ".next",
        ".nuxt",
        # caches
        "__pycache__",
        ".cache",
        ".mypy_cache",
        ".pytest_cache",
        ".ruff_cache",
        # version control internals
        GIT_DIR_NAME,
        ".hg",
        ".svn",
        ".bzr",
        # archive and trash debris
        "__MACOSX",
        ".Trash",
        "$Recycle.Bin",
        "System Volume Information",
    }
)

EXCLUDED_SYSTEM_PATHS = frozenset(
    {
        "/proc",
        "/sys",
        "/dev",
        "/run",
        "/var/log",
        "/var/cache",
        "/var/lib/docker",
        "/System",
        "/private/var",
        "C:\\Windows",
    }
)
_NORMALIZED_SYSTEM_PATHS = frozenset(os.path.normcase(p) for p in EXCLUDED_SYSTEM_PATHS)


def _has_git_dir(directory: str) -> bool:
    # os.path.isdir swallows permission errors, unlike Path.is_dir
    return os.path.isdir(os.path.join(directory, GIT_DIR_NAME))


class RepositoryLocator:
    """
    Finds git repositories under one or more roots.

    Depth is counted from the root (depth 0). With max_depth=N directories
    at depth <= N are examined; None means unbounded. Symlinked directories
    are never followed.
    """

    def __init__(
        self,
        max_depth: int | None = None,
        extra_excludes: Iterable[str] = (),
        skip_hidden: bool = True,
    ):
        if max_depth is not None and max_depth < 0:
            raise ConfigurationError(f"max_depth must be >= 0, got {max_depth}")
        self.max_depth = max_depth
        self.excluded_names = DEFAULT_EXCLUDED_NAMES | frozenset(extra_excludes)
        self.skip_hidden = skip_hidden

    def is_excluded(self, name: str, path: str) -> bool:
        """Decide whether a child directory is pruned."""
        if name in self.excluded_names:
            return True
        if self.skip_hidden and name.startswith("."):
            return True
        # Go module cache
        if name == "mod" and os.path.basename(os.path.dirname(path)) == "pkg":
            return True
        return os.path.normcase(path) in _NORMALIZED_SYSTEM_PATHS

    def walk(self, root: str | Path) -> Iterator[RepositoryRef]:
        """
        Lazily yield repositories under root in depth-first, name-sorted order.

        Unreadable directories are skipped without aborting the walk.
        """
        root_path = Path(root).expanduser()
        try:
            root_path = root_path.resolve(strict=True)
        except (OSError, RuntimeError):
            logger.warning("root_not_found", root=str(root))
            return
        if not root_path.is_dir():
            logger.warning("root_not_a_directory", root=str(root_path))
            return

        stack: list[tuple[str, int]] = [(str(root_path), 0)]
        while stack:
            directory, depth = stack.pop()

            if _has_git_dir(directory):
                yield RepositoryRef(Path(directory))

            if self.max_depth is not None and depth >= self.max_depth:
                continue

            try:
                with os.scandir(directory) as it:
                    entries = sorted(it, key=lambda entry: entry.name)
            except OSError as e:
                logger.debug("directory_unreadable", path=directory, error=str(e))
                continue

            children = []
            for entry in entries:
                try:
                    if not entry.is_dir(follow_symlinks=False):
                        continue
                except OSError:
                    continue
                if self.is_excluded(entry.name, entry.path):
                    continue
                children.append(entry.path)

            stack.extend((child, depth + 1) for child in reversed(children))

    def locate(self, root: str | Path) -> list[RepositoryRef]:
        """Sorted, duplicate-free repositories under one root."""
        return sorted(set(self.walk(root)))

    def locate_all(self, roots: Iterable[str | Path]) -> list[RepositoryRef]:
        """Sorted, duplicate-free repositories under all roots."""
        found: set[RepositoryRef] = set()
        for root in roots:
            found.update(self.walk(root))
        logger.info("repositories_located", count=len(found))
        return sorted(found)

