"""Mounted fixed volumes, used as roots for a whole-machine sync."""

import os
import string
import sys
from pathlib import Path

from leakguard.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

# Virtual, network and removable-media filesystems never hold working copies worth walking
NON_FIXED_FILESYSTEMS = frozenset(
    {
        "autofs",
        "binfmt_misc",
        "bpf",
        "cgroup",
        "cgroup2",
        "cifs",
        "configfs",
        "debugfs",
        "devpts",
        "devtmpfs",
        "efivarfs",
        "fuse.sshfs",
        "fusectl",
        "hugetlbfs",
        "iso9660",
        "mqueue",
        "nfs",
        "nfs4",
        "nsfs",
        "overlay",
        "proc",
        "pstore",
        "ramfs",
        "rpc_pipefs",
        "securityfs",
        "smbfs",
        "squashfs",
        "sysfs",
        "tmpfs",
        "tracefs",
        "udf",
    }
)

DRIVE_FIXED = 3


def _unescape_mount_path(raw: str) -> str:
    # /proc/mounts encodes space, tab, newline and backslash as octal escapes
    return (
        raw.replace("\\040", " ")
        .replace("\\011", "\t")
        .replace("\\012", "\n")
        .replace("\\134", "\\")
    )


def parse_mounts(text: str) -> list[Path]:
    """Mount points of fixed, device-backed filesystems from /proc/mounts text."""
    mounts = []
    for line in text.splitlines():
        fields = line.split()
        if len(fields) < 3:
            continue
        device, mount_point, fs_type = fields[0], _unescape_mount_path(fields[1]), fields[2]
        if fs_type in NON_FIXED_FILESYSTEMS or not device.startswith("/dev/"):
            continue
        if device.startswith("/dev/loop"):
            continue
        mounts.append(Path(mount_point))
    return mounts


def collapse_nested(paths: list[Path]) -> list[Path]:
    """Drop volumes mounted inside another listed volume, the walk reaches them anyway."""
    unique = sorted(set(paths), key=lambda p: len(p.parts))
    kept: list[Path] = []
    for path in unique:
        if not any(path.is_relative_to(parent) for parent in kept):
            kept.append(path)
    return sorted(kept)


def _windows_fixed_drives() -> list[Path]:
    import ctypes

    drives = []
    for letter in string.ascii_uppercase:
        root = f"{letter}:\\"
        if ctypes.windll.kernel32.GetDriveTypeW(root) == DRIVE_FIXED:
            drives.append(Path(root))
    return drives


def _darwin_volumes() -> list[Path]:
    volumes = [Path("/")]
    try:
        for entry in sorted(Path("/Volumes").iterdir()):
            # The boot volume shows up as a symlink back to /
            if entry.is_dir() and not entry.is_symlink():
                volumes.append(entry)
    except OSError as e:
        logger.debug("volumes_unreadable", error=str(e))
    return volumes


def list_fixed_volumes(platform: str = sys.platform, mounts_file: Path = Path("/proc/mounts")) -> list[Path]:
    """
    List mounted fixed volumes for the current platform.

    Falls back to the filesystem root when nothing can be determined.
    """
    if platform.startswith("win"):
        volumes = _windows_fixed_drives()
    elif platform == "darwin":
        volumes = _darwin_volumes()
    else:
        try:
            volumes = parse_mounts(mounts_file.read_text(encoding="utf-8"))
        except OSError as e:
            logger.warning("mounts_unreadable", path=str(mounts_file), error=str(e))
            volumes = []

    volumes = [v for v in volumes if os.path.isdir(v)]
    if not volumes:
        volumes = [Path(os.path.abspath(os.sep))]

    result = collapse_nested(volumes)
    logger.info("volumes_listed", volumes=[str(v) for v in result])
    return result


def select_roots(roots: list[Path] | None, all_volumes: bool = False) -> list[Path]:
    """Roots for a walk: explicit roots, all fixed volumes, or the working directory."""
    selected = list(roots or [])
    if all_volumes:
        selected.extend(list_fixed_volumes())
    if not selected:
        selected.append(Path.cwd())
    return selected
