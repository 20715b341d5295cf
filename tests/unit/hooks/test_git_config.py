"""Tests for git config access through the git executable."""

import subprocess
from unittest.mock import patch

import pytest

from leakguard.hooks.git_config import HOOKS_PATH_KEY, TEMPLATE_DIR_KEY, GitConfig, find_git, set_global
from leakguard.shared.domain.exceptions import GitConfigError


def test_unset_key_is_none(git_repo):
    assert GitConfig(git_repo()).get(HOOKS_PATH_KEY) is None


def test_local_value(git_repo, git_set):
    repo = git_repo()
    git_set(HOOKS_PATH_KEY, ".husky/_", repo)

    assert GitConfig(repo).get(HOOKS_PATH_KEY) == ".husky/_"
    assert GitConfig(repo).get(HOOKS_PATH_KEY, local_only=True) == ".husky/_"


def test_global_value_is_visible_but_not_local(git_repo, git_set):
    repo = git_repo()
    git_set(HOOKS_PATH_KEY, "/opt/hooks")

    assert GitConfig(repo).get(HOOKS_PATH_KEY) == "/opt/hooks"
    assert GitConfig(repo).get(HOOKS_PATH_KEY, local_only=True) is None


def test_tilde_is_expanded(git_repo, git_set, isolated_home):
    repo = git_repo()
    git_set(HOOKS_PATH_KEY, "~/hooks", repo)

    assert GitConfig(repo).get(HOOKS_PATH_KEY) == str(isolated_home / "hooks")


def test_unset_local(git_repo, git_set):
    repo = git_repo()
    git_set(HOOKS_PATH_KEY, ".husky_removed", repo)

    GitConfig(repo).unset_local(HOOKS_PATH_KEY)

    assert GitConfig(repo).get(HOOKS_PATH_KEY) is None


def test_unset_key_only_set_globally(git_repo, git_set):
    repo = git_repo()
    git_set(HOOKS_PATH_KEY, "/opt/hooks")

    with pytest.raises(GitConfigError) as exc_info:
        GitConfig(repo).unset_local(HOOKS_PATH_KEY)

    assert "global or system" in str(exc_info.value)


def test_hook_environment_does_not_leak_into_calls(git_repo, git_set, monkeypatch, tmp_path):
    repo = git_repo()
    other = git_repo("other")
    git_set(HOOKS_PATH_KEY, "mine", repo)
    monkeypatch.setenv("GIT_DIR", str(other / ".git"))

    assert GitConfig(repo).get(HOOKS_PATH_KEY) == "mine"


def test_set_global(git_repo, isolated_home):
    git_repo()

    set_global(TEMPLATE_DIR_KEY, str(isolated_home / ".git-template"))

    written = subprocess.run(
        ["git", "config", "--global", "--get", TEMPLATE_DIR_KEY],
        capture_output=True,
        text=True,
        check=True,
    )
    assert written.stdout.strip() == str(isolated_home / ".git-template")


def test_find_git_missing():
    with patch("leakguard.hooks.git_config.shutil.which", return_value=None):
        with pytest.raises(GitConfigError):
            find_git()


def test_git_failure_is_reported(tmp_path):
    result = subprocess.CompletedProcess(args=[], returncode=128, stdout="", stderr="fatal: bad config")
    with patch("leakguard.hooks.git_config.subprocess.run", return_value=result):
        with pytest.raises(GitConfigError) as exc_info:
            GitConfig(tmp_path, git_cmd="git").get(HOOKS_PATH_KEY)

    assert "fatal: bad config" in str(exc_info.value)
    assert exc_info.value.context["returncode"] == 128
