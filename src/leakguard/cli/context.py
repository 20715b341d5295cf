"""Per-invocation CLI state shared between the root callback and commands."""

import typer

from leakguard.shared.infrastructure.config import Settings, load_settings


def get_settings(ctx: typer.Context) -> Settings:
    """Settings loaded by the root callback, or defaults when a command runs standalone."""
    obj = ctx.find_root().obj
    if isinstance(obj, dict) and "settings" in obj:
        return obj["settings"]
    return load_settings()
