"""
Machine-level bootstrap.

Writes the shared scanner configuration, materialises the hook templates
in the git template directory and points git's init.templateDir at it, so
every repository created or cloned afterwards starts with the hooks.
"""

import importlib.resources
from dataclasses import dataclass, field
from pathlib import Path

from leakguard.hooks.git_config import TEMPLATE_DIR_KEY, set_global
from leakguard.hooks.markers import shell_config_path
from leakguard.hooks.reconciler import write_atomic
from leakguard.hooks.templates import HOOK_NAMES, HookTemplate, render_packaged_templates
from leakguard.shared.domain.exceptions import HookWriteError, InstallError
from leakguard.shared.infrastructure.config import Settings
from leakguard.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

SCANNER_CONFIG_RESOURCE = "gitleaks.toml"


@dataclass
class BootstrapReport:
    """What a bootstrap run wrote."""

    config_written: bool = False
    config_path: Path | None = None
    templates: list[Path] = field(default_factory=list)
    template_dir_configured: bool = False


class Bootstrapper:
    """Writes shared config and hook templates for one user account."""

    def __init__(self, settings: Settings, git_cmd: str | None = None):
        self.settings = settings
        self.git_cmd = git_cmd

    def templates(self) -> HookTemplate:
        return render_packaged_templates(
            scanner=self.settings.scanner_name,
            config_path=shell_config_path(self.settings.scanner_config_path),
            hook_manager_dir=self.settings.hook_manager_dir,
        )

    def write_scanner_config(self, force: bool = False) -> bool:
        """
        Copy the packaged scanner config to the shared location.

        Returns:
            True if written, False if an existing file was kept
        """
        target = self.settings.scanner_config_path
        if target.exists() and not force:
            logger.info("scanner_config_kept", path=str(target))
            return False

        content = importlib.resources.files("leakguard.resources").joinpath(SCANNER_CONFIG_RESOURCE).read_text(
            encoding="utf-8"
        )
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        except OSError as e:
            raise InstallError(f"Cannot write scanner config {target}: {e}") from e
        logger.info("scanner_config_written", path=str(target))
        return True

    def write_templates(self) -> list[Path]:
        """Write executable pre-commit and commit-msg templates."""
        hooks_dir = self.settings.hooks_template_dir
        template = self.templates()
        written = []
        try:
            hooks_dir.mkdir(parents=True, exist_ok=True)
            for name in HOOK_NAMES:
                path = hooks_dir / name
                write_atomic(path, template.body(name))
                written.append(path)
        except (OSError, HookWriteError) as e:
            raise InstallError(f"Cannot write hook templates into {hooks_dir}: {e}") from e
        logger.info("hook_templates_written", directory=str(hooks_dir))
        return written

    def configure_git_template(self) -> None:
        """Point git's global init.templateDir at the template directory."""
        set_global(TEMPLATE_DIR_KEY, str(self.settings.template_dir), self.git_cmd)

    def run(self, force: bool = False) -> BootstrapReport:
        report = BootstrapReport(config_path=self.settings.scanner_config_path)
        report.config_written = self.write_scanner_config(force=force)
        report.templates = self.write_templates()
        self.configure_git_template()
        report.template_dir_configured = True
        return report
