"""
Scanner binary installer.

Downloads a pinned gitleaks release, extracts the binary, verifies that it
runs and places it in the install directory. Re-running with the same
version installed is a no-op.
"""

import os
import platform as platform_module
import shutil
import stat
import subprocess
import tarfile
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

import httpx

from leakguard.shared.domain.exceptions import InstallError, ScannerNotFoundError
from leakguard.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

RELEASE_URL = (
    "https://github.com/gitleaks/gitleaks/releases/download/"
    "v{version}/{name}_{version}_{os}_{arch}.tar.gz"
)

_OS_TAGS = {"linux": "linux", "darwin": "darwin"}
_ARCH_TAGS = {
    "x86_64": "x64",
    "amd64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
}


@dataclass
class InstallConfig:
    """Configuration for scanner installation."""

    version: str = "8.24.2"
    install_dir: Path = field(default_factory=lambda: Path.home() / ".local" / "bin")
    scanner_name: str = "gitleaks"
    force: bool = False
    verify_install: bool = True
    timeout: float = 60.0
    system: str | None = None
    machine: str | None = None


@dataclass
class InstallResult:
    """Result of a scanner installation."""

    success: bool
    message: str
    binary_path: Path | None = None
    version: str | None = None
    on_path: bool = True


def platform_tag(system: str | None = None, machine: str | None = None) -> tuple[str, str]:
    """
    Map the running platform to release asset tags.

    Raises:
        InstallError: For platforms without a published release asset
    """
    system = (system or platform_module.system()).lower()
    machine = (machine or platform_module.machine()).lower()
    os_tag = _OS_TAGS.get(system)
    arch_tag = _ARCH_TAGS.get(machine)
    if os_tag is None or arch_tag is None:
        raise InstallError(f"Unsupported platform: {system}/{machine}", {"system": system, "machine": machine})
    return os_tag, arch_tag


def read_version(binary: Path) -> str | None:
    """Version reported by `<binary> version`, without a leading 'v'."""
    try:
        result = subprocess.run([str(binary), "version"], capture_output=True, text=True, timeout=30, check=False)
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("scanner_version_failed", binary=str(binary), error=str(e))
        return None
    if result.returncode != 0:
        return None
    output = result.stdout.strip() or result.stderr.strip()
    return output.lstrip("v") if output else None


def find_scanner(scanner_name: str, install_dir: Path) -> Path:
    """
    Locate the scanner binary: install directory first, then PATH.

    Raises:
        ScannerNotFoundError: If it is in neither place
    """
    candidate = install_dir / scanner_name
    if candidate.is_file() and os.access(candidate, os.X_OK):
        return candidate
    on_path = shutil.which(scanner_name)
    if on_path:
        return Path(on_path)
    raise ScannerNotFoundError(
        f"{scanner_name} is not installed (looked in {install_dir} and PATH). Run 'leakguard install' first.",
        {"scanner": scanner_name, "install_dir": str(install_dir)},
    )


def is_on_path(directory: Path) -> bool:
    entries = [Path(p).expanduser() for p in os.environ.get("PATH", "").split(os.pathsep) if p]
    try:
        target = directory.resolve()
    except OSError:
        return False
    return any(entry.resolve() == target for entry in entries if entry.exists())


class ScannerInstaller:
    """Installs the scanner binary from its GitHub release."""

    def __init__(self, config: InstallConfig, client: httpx.Client | None = None):
        self.config = config
        self.client = client

    @property
    def binary_path(self) -> Path:
        return self.config.install_dir / self.config.scanner_name

    def release_url(self) -> str:
        os_tag, arch_tag = platform_tag(self.config.system, self.config.machine)
        return RELEASE_URL.format(
            version=self.config.version,
            name=self.config.scanner_name,
            os=os_tag,
            arch=arch_tag,
        )

    def installed_version(self) -> str | None:
        if not self.binary_path.is_file():
            return None
        return read_version(self.binary_path)

    def install(self) -> InstallResult:
        """
        Install the configured scanner version.

        Returns:
            InstallResult; "Already installed" when the version matches

        Raises:
            InstallError: On download, extraction or verification failure
        """
        on_path = is_on_path(self.config.install_dir)
        current = self.installed_version()
        if current == self.config.version and not self.config.force:
            logger.info("scanner_already_installed", version=current, path=str(self.binary_path))
            return InstallResult(True, "Already installed", self.binary_path, current, on_path)

        url = self.release_url()
        with tempfile.TemporaryDirectory(prefix="leakguard-") as tmp:
            tmp_dir = Path(tmp)
            archive = tmp_dir / "scanner.tar.gz"
            self._download(url, archive)
            extracted = self._extract(archive, tmp_dir / "extract", self.config.scanner_name)

            version = None
            if self.config.verify_install:
                version = read_version(extracted)
                if version is None:
                    raise InstallError(f"Verification failed: downloaded {self.config.scanner_name} does not run")

            try:
                self.config.install_dir.mkdir(parents=True, exist_ok=True)
                shutil.move(str(extracted), str(self.binary_path))
            except OSError as e:
                raise InstallError(f"Cannot install into {self.config.install_dir}: {e}") from e

        logger.info("scanner_installed", version=version, path=str(self.binary_path), previous=current)
        message = "Reinstalled" if current else "Installed"
        return InstallResult(True, message, self.binary_path, version or self.config.version, on_path)

    def _download(self, url: str, destination: Path) -> None:
        logger.info("scanner_download_started", url=url)
        client = self.client or httpx.Client(timeout=self.config.timeout, follow_redirects=True)
        try:
            with client.stream("GET", url) as response:
                response.raise_for_status()
                with open(destination, "wb") as handle:
                    for chunk in response.iter_bytes():
                        handle.write(chunk)
        except httpx.HTTPStatusError as e:
            raise InstallError(f"Download failed: HTTP {e.response.status_code} for {url}", {"url": url}) from e
        except httpx.HTTPError as e:
            raise InstallError(f"Download failed: {e}", {"url": url}) from e
        finally:
            if self.client is None:
                client.close()

    @staticmethod
    def _extract(archive: Path, destination: Path, member_name: str) -> Path:
        """Extract a single top-level member, rejecting anything else."""
        destination.mkdir(parents=True, exist_ok=True)
        try:
            with tarfile.open(archive, "r:gz") as tar:
                try:
                    member = tar.getmember(member_name)
                except KeyError as e:
                    raise InstallError(f"Archive does not contain {member_name}") from e
                if not member.isfile():
                    raise InstallError(f"Archive member {member_name} is not a regular file")

                target = destination / member_name
                source = tar.extractfile(member)
                if source is None:
                    raise InstallError(f"Cannot read {member_name} from archive")
                with source, open(target, "wb") as handle:
                    shutil.copyfileobj(source, handle)
        except (tarfile.TarError, OSError) as e:
            raise InstallError(f"Invalid release archive: {e}") from e

        target.chmod(target.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return target
