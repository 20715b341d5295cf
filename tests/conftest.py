"""Shared test fixtures for the leakguard test suite."""

import os
import shutil
import subprocess
from pathlib import Path

import pytest
from typer.testing import CliRunner

from leakguard.hooks.markers import render_scanner_block
from leakguard.hooks.models import RepositoryRef
from leakguard.hooks.templates import HookTemplate

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture
def enforced_permissions():
    """Skip tests that rely on permission bits when running as root."""
    if hasattr(os, "geteuid") and os.geteuid() == 0:
        pytest.skip("root ignores file permissions")


@pytest.fixture(autouse=True)
def isolated_home(tmp_path_factory, monkeypatch):
    """
    Point HOME and git's global config at a scratch directory.

    No test may read or change the developer's real git configuration.
    """
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(home / ".gitconfig"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    for name in list(os.environ):
        if name.startswith("LEAKGUARD_") or name in ("GIT_DIR", "GIT_WORK_TREE", "GIT_INDEX_FILE"):
            monkeypatch.delenv(name, raising=False)
    return home


@pytest.fixture
def cli_runner():
    """Fixture providing Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def git_repo(tmp_path):
    """Factory creating real git repositories under tmp_path."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    def make(relative: str = "repo") -> Path:
        path = tmp_path / relative
        path.mkdir(parents=True, exist_ok=True)
        subprocess.run(["git", "init", "-q", str(path)], check=True, capture_output=True)
        return path

    return make


@pytest.fixture
def git_set(tmp_path):
    """Set a git config key, locally in a repository or globally."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    def run(key: str, value: str, repo: Path | None = None) -> None:
        cmd = ["git", "-C", str(repo), "config", key, value] if repo else ["git", "config", "--global", key, value]
        subprocess.run(cmd, check=True, capture_output=True)

    return run


@pytest.fixture
def hook_template():
    """Small template bodies that carry the scanner marker."""
    return HookTemplate(
        pre_commit="#!/bin/sh\n# gitleaks pre-commit template\nexit 0\n",
        commit_msg="#!/bin/sh\n# gitleaks commit-msg template\nexit 0\n",
    )


@pytest.fixture
def scanner_block():
    return render_scanner_block("gitleaks", "$HOME/.config/gitleaks/gitleaks.toml")


@pytest.fixture
def fake_repo(tmp_path):
    """Factory for directories with a bare .git directory (no git needed)."""

    def make(relative: str = "fake") -> RepositoryRef:
        path = tmp_path / relative
        (path / ".git").mkdir(parents=True, exist_ok=True)
        return RepositoryRef(path)

    return make


@pytest.fixture
def tree_snapshot():
    """Capture every file's bytes and mode under a directory."""

    def snapshot(root: Path) -> dict:
        files = {}
        for dirpath, dirnames, filenames in os.walk(root):
            for name in filenames + dirnames:
                path = Path(dirpath) / name
                stat_result = path.lstat()
                content = path.read_bytes() if path.is_file() and not path.is_symlink() else None
                files[str(path.relative_to(root))] = (content, stat_result.st_mode)
        return files

    return snapshot
