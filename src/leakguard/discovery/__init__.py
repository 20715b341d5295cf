"""Repository discovery: directory walking and volume enumeration."""

from leakguard.discovery.locator import DEFAULT_EXCLUDED_NAMES, RepositoryLocator
from leakguard.discovery.volumes import list_fixed_volumes, select_roots

__all__ = [
    "DEFAULT_EXCLUDED_NAMES",
    "RepositoryLocator",
    "list_fixed_volumes",
    "select_roots",
]
