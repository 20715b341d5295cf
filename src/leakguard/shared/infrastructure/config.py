"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables (prefix LEAKGUARD_), an
optional .env file and an optional YAML settings file. Environment values
take precedence over the YAML file.
"""

from pathlib import Path
from typing import Any, List, Optional

import structlog
import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from leakguard.shared.domain.exceptions import ConfigurationError

DEFAULT_CONFIG_FILE = Path("~/.config/leakguard/config.yaml")


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_prefix="LEAKGUARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: str = Field(default="development", description="Environment (development/production)")
    log_level: str = Field(default="WARNING", description="Logging level")
    log_redaction_enabled: bool = Field(default=True, description="Redact secrets in log output")

    # Scanner
    scanner_name: str = Field(
        default="gitleaks",
        description="Scanner binary name; also the marker looked for in hook files",
    )
    scanner_version: str = Field(default="8.24.2", description="Pinned scanner release")
    scanner_install_dir: Path = Field(
        default=Path("~/.local/bin"),
        description="Directory the scanner binary is installed into",
    )
    scanner_config_path: Path = Field(
        default=Path("~/.config/gitleaks/gitleaks.toml"),
        description="Shared scanner configuration file",
    )
    download_timeout: float = Field(default=60.0, description="Download timeout in seconds")

    # Hooks
    template_dir: Path = Field(
        default=Path("~/.git-template"),
        description="Git template directory holding hooks/pre-commit and hooks/commit-msg",
    )
    hook_manager_dir: str = Field(default=".husky", description="Hook-manager directory name")

    # Discovery
    extra_excludes: List[str] = Field(default=[], description="Additional directory names to prune")
    skip_hidden: bool = Field(default=True, description="Skip hidden directories while walking")
    max_depth: Optional[int] = Field(default=None, description="Maximum traversal depth (None = unbounded)")

    @field_validator("scanner_install_dir", "scanner_config_path", "template_dir", mode="after")
    @classmethod
    def _expand_user(cls, value: Path) -> Path:
        return value.expanduser()

    @field_validator("max_depth")
    @classmethod
    def _non_negative_depth(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 0:
            raise ValueError("max_depth must be >= 0")
        return value

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env.lower() == "production"

    @property
    def hooks_template_dir(self) -> Path:
        """Directory holding the hook template files."""
        return self.template_dir / "hooks"


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}", {"path": str(path)}) from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path}: {e}", {"path": str(path)}) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping at top level", {"path": str(path)})

    unknown = sorted(set(data) - set(Settings.model_fields))
    if unknown:
        raise ConfigurationError(
            f"Unknown settings in {path}: {', '.join(unknown)}",
            {"path": str(path), "keys": unknown},
        )
    return data


def load_settings(config_file: Path | None = None) -> Settings:
    """
    Build settings from environment and an optional YAML file.

    Args:
        config_file: YAML file to read. When None, the default location is
            used if it exists.

    Returns:
        Validated Settings

    Raises:
        ConfigurationError: If the file is unreadable or values are invalid
    """
    logger = structlog.get_logger(__name__)

    explicit = config_file is not None
    path = (config_file or DEFAULT_CONFIG_FILE).expanduser()

    file_values: dict[str, Any] = {}
    if path.is_file():
        file_values = _read_yaml(path)
        logger.debug("settings_file_loaded", path=str(path), keys=sorted(file_values))
    elif explicit:
        raise ConfigurationError(f"Settings file not found: {path}", {"path": str(path)})

    try:
        from_env = Settings()
        env_values = from_env.model_dump(include=from_env.model_fields_set)
        return Settings(**{**file_values, **env_values})
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}", {"path": str(path)}) from e


# Global settings instance
settings = Settings()
