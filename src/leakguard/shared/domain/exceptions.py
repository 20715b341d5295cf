"""
Domain exceptions for leakguard.

All application errors inherit from LeakguardError. Errors raised while
processing a single repository are caught by the reconciler and recorded
as outcomes; only the startup preconditions abort a run.
"""


class LeakguardError(Exception):
    """Base class for all leakguard exceptions."""

    def __init__(self, message: str, context: dict = None):
        super().__init__(message)
        self.context = context or {}


class ConfigurationError(LeakguardError):
    """Raised when configuration is invalid or corrupt."""

    pass


class RepositoryAccessError(LeakguardError):
    """Raised when a repository directory cannot be entered."""

    pass


class HookWriteError(LeakguardError):
    """Raised when a hook file or directory cannot be written."""

    pass


class MissingTemplateError(LeakguardError):
    """Raised when the hook template source is absent."""

    pass


class ScannerNotFoundError(LeakguardError):
    """Raised when the scanner binary cannot be located."""

    pass


class GitConfigError(LeakguardError):
    """Raised when a git config call fails."""

    pass


class InstallError(LeakguardError):
    """Raised when installation fails (download, archive or verification)."""

    pass
