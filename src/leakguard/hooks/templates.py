"""
Canonical hook templates.

The packaged templates are rendered once by the installer into the git
template directory; the reconciler then reads them back from there as
read-only input.
"""

import importlib.resources
from dataclasses import dataclass
from pathlib import Path

from leakguard.shared.domain.exceptions import MissingTemplateError

PRE_COMMIT = "pre-commit"
COMMIT_MSG = "commit-msg"
HOOK_NAMES = (PRE_COMMIT, COMMIT_MSG)


@dataclass(frozen=True)
class HookTemplate:
    """Script bodies for the hooks installed into native hook directories."""

    pre_commit: str
    commit_msg: str

    def body(self, hook_name: str) -> str:
        if hook_name == PRE_COMMIT:
            return self.pre_commit
        if hook_name == COMMIT_MSG:
            return self.commit_msg
        raise KeyError(hook_name)

    @classmethod
    def load(cls, hooks_dir: Path) -> "HookTemplate":
        """
        Read both templates from a directory.

        Raises:
            MissingTemplateError: If either file is absent or unreadable
        """
        bodies = {}
        for name in HOOK_NAMES:
            path = hooks_dir / name
            try:
                bodies[name] = path.read_text(encoding="utf-8")
            except FileNotFoundError as e:
                raise MissingTemplateError(
                    f"Hook template not found: {path}. Run 'leakguard install' first.",
                    {"path": str(path)},
                ) from e
            except OSError as e:
                raise MissingTemplateError(f"Cannot read hook template {path}: {e}", {"path": str(path)}) from e
        return cls(pre_commit=bodies[PRE_COMMIT], commit_msg=bodies[COMMIT_MSG])


def render_packaged_templates(scanner: str, config_path: str, hook_manager_dir: str = ".husky") -> HookTemplate:
    """Render the templates shipped with the package for a given scanner."""
    package = importlib.resources.files("leakguard.resources").joinpath("hooks")

    def render(name: str) -> str:
        text = package.joinpath(name).read_text(encoding="utf-8")
        return (
            text.replace("@SCANNER@", scanner)
            .replace("@CONFIG_PATH@", config_path)
            .replace("@HOOK_MANAGER_DIR@", hook_manager_dir)
        )

    return HookTemplate(pre_commit=render(PRE_COMMIT), commit_msg=render(COMMIT_MSG))
