"""
Structured logging configuration using structlog.

Provides consistent, structured logging across all modules. Hook files and
config values can carry credentials, so every event passes through a
redactor before rendering.
"""

import logging
import re
import sys
from typing import Any

import structlog

from leakguard.shared.infrastructure.config import Settings, settings

_REDACTIONS = {
    r"(api[_-]?key|token|password|secret)['\"]?\s*[:=]\s*['\"]?([^'\"\s]+)": r"\1=[REDACTED]",
    r"Bearer\s+\S+": "Bearer [TOKEN_REDACTED]",
    r"\bgh[pousr]_[A-Za-z0-9]{20,}\b": "[TOKEN_REDACTED]",
    r"\b(AKIA|ASIA)[0-9A-Z]{16}\b": "[AWS_KEY_REDACTED]",
}


def _redact_string(text: str) -> str:
    for pattern, replacement in _REDACTIONS.items():
        text = re.sub(pattern, replacement, text, flags=re.IGNORECASE)
    return text


def _redact_value(value: Any) -> Any:
    if isinstance(value, str):
        return _redact_string(value)
    if isinstance(value, dict):
        return {k: _redact_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_redact_value(v) for v in value]
    return value


def secret_redactor(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Redact credential-looking values from log events.

    Args:
        logger: Logger instance
        method_name: Logging method name
        event_dict: Event dictionary to process

    Returns:
        Redacted event dictionary
    """
    return {k: _redact_value(v) for k, v in event_dict.items()}


def configure_logging(config: Settings | None = None, stream: Any = sys.stderr) -> None:
    """
    Configure structlog for the application.

    Sets up:
    - Pretty console output for development
    - JSON output for production
    - Log level from settings
    """
    config = config or settings

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if config.log_redaction_enabled:
        shared_processors.append(secret_redactor)

    if config.is_development:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=stream.isatty() if hasattr(stream, "isatty") else False),
        ]
    else:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=stream,
        level=getattr(logging, config.log_level.upper(), logging.WARNING),
        force=True,
    )


def get_logger(name: str) -> Any:
    """
    Get a structured logger instance.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("hook_injected", repo="/src/app", line=3)
    """
    return structlog.get_logger(name)
