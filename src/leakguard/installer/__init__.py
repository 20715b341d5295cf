"""
Installer module.

Scanner binary installation and machine-level bootstrap (shared config,
git template directory).
"""

from leakguard.installer.bootstrap import Bootstrapper, BootstrapReport
from leakguard.installer.scanner import InstallConfig, InstallResult, ScannerInstaller, find_scanner

__all__ = [
    "BootstrapReport",
    "Bootstrapper",
    "InstallConfig",
    "InstallResult",
    "ScannerInstaller",
    "find_scanner",
]
