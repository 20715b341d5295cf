"""
Git config access for a single repository.

Every call passes the repository explicitly with `git -C`, nothing here
depends on the process working directory.
"""

import os
import shutil
import subprocess
from pathlib import Path

from leakguard.shared.domain.exceptions import GitConfigError
from leakguard.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

HOOKS_PATH_KEY = "core.hooksPath"
TEMPLATE_DIR_KEY = "init.templateDir"

# Set by git while a hook runs; they would override `-C`.
_GIT_LOCATION_VARS = ("GIT_DIR", "GIT_WORK_TREE", "GIT_INDEX_FILE", "GIT_COMMON_DIR")


def find_git() -> str:
    """Return the git executable path or raise GitConfigError."""
    git_cmd = shutil.which("git")
    if not git_cmd:
        raise GitConfigError("Git executable not found in PATH")
    return git_cmd


def _clean_env() -> dict[str, str]:
    return {k: v for k, v in os.environ.items() if k not in _GIT_LOCATION_VARS}


class GitConfig:
    """Reads and edits git configuration as seen from one repository."""

    def __init__(self, repo: Path, git_cmd: str | None = None):
        self.repo = repo
        self.git_cmd = git_cmd or find_git()

    def _run(self, *args: str) -> subprocess.CompletedProcess:
        cmd = [self.git_cmd, "-C", str(self.repo), "config", *args]
        logger.debug("git_config_call", repo=str(self.repo), args=list(args))
        try:
            return subprocess.run(cmd, capture_output=True, text=True, check=False, env=_clean_env())
        except OSError as e:
            raise GitConfigError(f"Failed to run git: {e}", {"repo": str(self.repo)}) from e

    def get(self, key: str, local_only: bool = False) -> str | None:
        """
        Get a config value (with ~ expanded).

        Args:
            key: Git config key (e.g. "core.hooksPath")
            local_only: Only consult the repository's own config

        Returns:
            The value, or None when the key is not set
        """
        args = ["--local"] if local_only else []
        result = self._run(*args, "--type=path", "--get", key)

        if result.returncode == 0:
            return result.stdout.strip()
        # Exit code 1: key not set
        if result.returncode == 1:
            return None

        raise GitConfigError(
            f"git config --get {key} failed: {result.stderr.strip()}",
            {"repo": str(self.repo), "returncode": result.returncode},
        )

    def unset_local(self, key: str) -> None:
        """
        Remove a key from the repository's own config.

        Raises:
            GitConfigError: If the key is not set locally or git fails
        """
        result = self._run("--local", "--unset", key)
        if result.returncode == 0:
            logger.info("git_config_unset", repo=str(self.repo), key=key)
            return

        # Exit code 5: key not present in the local file
        if result.returncode == 5:
            raise GitConfigError(
                f"{key} is not set in this repository; it comes from global or system git config",
                {"repo": str(self.repo), "key": key},
            )
        raise GitConfigError(
            f"git config --unset {key} failed: {result.stderr.strip()}",
            {"repo": str(self.repo), "returncode": result.returncode},
        )


def set_global(key: str, value: str, git_cmd: str | None = None) -> None:
    """Set a key in the user's global git config."""
    git_cmd = git_cmd or find_git()
    try:
        result = subprocess.run(
            [git_cmd, "config", "--global", key, value],
            capture_output=True,
            text=True,
            check=False,
            env=_clean_env(),
        )
    except OSError as e:
        raise GitConfigError(f"Failed to run git: {e}") from e

    if result.returncode != 0:
        raise GitConfigError(
            f"git config --global {key} failed: {result.stderr.strip()}",
            {"key": key, "returncode": result.returncode},
        )
    logger.info("git_config_global_set", key=key, value=value)
