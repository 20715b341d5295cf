"""Tests for repository discovery."""

import os

import pytest

from leakguard.discovery import DEFAULT_EXCLUDED_NAMES, RepositoryLocator
from leakguard.shared.domain.exceptions import ConfigurationError


@pytest.fixture
def tree(tmp_path):
    """
    root/
      alpha/.git
      alpha/packages/inner/.git      nested repository in a working tree
      alpha/.git/modules/sub/.git    inside git internals, never reported
      beta/gamma/.git
      node_modules/dep/.git
      .cache/tool/.git
      .hidden/delta/.git
      notes/readme.txt
    """
    root = tmp_path / "root"
    for relative in [
        "alpha/.git",
        "alpha/packages/inner/.git",
        "alpha/.git/modules/sub/.git",
        "beta/gamma/.git",
        "node_modules/dep/.git",
        ".cache/tool/.git",
        ".hidden/delta/.git",
    ]:
        (root / relative).mkdir(parents=True)
    (root / "notes").mkdir()
    (root / "notes" / "readme.txt").write_text("hi\n")
    return root


def names(repos, root):
    return [str(repo.path.relative_to(root.resolve())) for repo in repos]


def test_finds_repositories_and_nested_ones(tree):
    repos = RepositoryLocator().locate(tree)

    assert names(repos, tree) == ["alpha", "alpha/packages/inner", "beta/gamma"]


def test_dependency_and_git_internals_are_pruned(tree):
    found = names(RepositoryLocator(skip_hidden=False).locate(tree), tree)

    assert not any(name.startswith("node_modules") for name in found)
    assert not any(".git/" in name for name in found)
    assert not any(name.startswith(".cache") for name in found)


def test_hidden_directories_on_request(tree):
    found = names(RepositoryLocator(skip_hidden=False).locate(tree), tree)

    assert ".hidden/delta" in found


def test_extra_excludes(tree):
    found = names(RepositoryLocator(extra_excludes=["beta"]).locate(tree), tree)

    assert found == ["alpha", "alpha/packages/inner"]


@pytest.mark.parametrize(
    "max_depth, expected",
    [
        (0, []),
        (1, ["alpha"]),
        (2, ["alpha", "beta/gamma"]),
        (None, ["alpha", "alpha/packages/inner", "beta/gamma"]),
    ],
)
def test_max_depth(tree, max_depth, expected):
    assert names(RepositoryLocator(max_depth=max_depth).locate(tree), tree) == expected


def test_root_itself_can_be_a_repository(tree):
    repos = RepositoryLocator(max_depth=0).locate(tree / "alpha")

    assert [repo.path for repo in repos] == [(tree / "alpha").resolve()]


def test_negative_depth_rejected():
    with pytest.raises(ConfigurationError):
        RepositoryLocator(max_depth=-1)


def test_git_file_is_not_a_repository(tmp_path):
    worktree = tmp_path / "worktree"
    worktree.mkdir()
    (worktree / ".git").write_text("gitdir: /elsewhere/.git/worktrees/wt\n")

    assert RepositoryLocator().locate(tmp_path) == []


def test_results_are_deterministic_and_unique(tree):
    locator = RepositoryLocator()

    first = locator.locate_all([tree, tree / "alpha", tree])
    second = locator.locate_all([tree / "alpha", tree])

    assert first == second
    assert len(first) == len(set(first))


def test_missing_root_yields_nothing(tmp_path):
    assert RepositoryLocator().locate(tmp_path / "missing") == []


def test_file_root_yields_nothing(tmp_path):
    path = tmp_path / "file.txt"
    path.write_text("x\n")

    assert RepositoryLocator().locate(path) == []


def test_symlinked_directories_are_not_followed(tmp_path):
    outside = tmp_path / "outside" / "repo"
    (outside / ".git").mkdir(parents=True)
    root = tmp_path / "root"
    root.mkdir()
    try:
        os.symlink(outside, root / "link", target_is_directory=True)
    except (OSError, NotImplementedError):
        pytest.skip("symlinks not supported")

    assert RepositoryLocator().locate(root) == []


def test_unreadable_directory_is_skipped(tree, enforced_permissions):
    locked = tree / "locked"
    (locked / "secret" / ".git").mkdir(parents=True)
    locked.chmod(0)
    try:
        found = names(RepositoryLocator().locate(tree), tree)
    finally:
        locked.chmod(0o755)

    assert found == ["alpha", "alpha/packages/inner", "beta/gamma"]


def test_walk_is_lazy(tree):
    walker = RepositoryLocator().walk(tree)

    assert next(walker).path.name == "alpha"


def test_default_exclusions_cover_common_dependency_dirs():
    assert {"node_modules", ".git", "vendor", "__pycache__", "__MACOSX"} <= DEFAULT_EXCLUDED_NAMES


def test_go_module_cache_is_pruned(tmp_path):
    (tmp_path / "go" / "pkg" / "mod" / "github.com" / "dep" / ".git").mkdir(parents=True)
    (tmp_path / "go" / "src" / "mod" / ".git").mkdir(parents=True)

    found = names(RepositoryLocator().locate(tmp_path), tmp_path)

    assert found == ["go/src/mod"]


def test_system_paths_are_excluded():
    locator = RepositoryLocator(skip_hidden=False)

    assert locator.is_excluded("proc", "/proc")
    assert not locator.is_excluded("src", "/home/dev/src")
