"""Tests for fixed volume enumeration and root selection."""

from pathlib import Path

from leakguard.discovery.volumes import collapse_nested, list_fixed_volumes, parse_mounts, select_roots

MOUNTS = """\
/dev/nvme0n1p2 / ext4 rw,relatime 0 0
proc /proc proc rw,nosuid,nodev,noexec,relatime 0 0
tmpfs /run tmpfs rw,nosuid,nodev 0 0
/dev/nvme0n1p1 /boot/efi vfat rw,relatime 0 0
/dev/sdb1 /mnt/My\\040Data ext4 rw,relatime 0 0
/dev/loop3 /snap/core/1234 squashfs ro,nodev 0 0
/dev/sr0 /media/cdrom iso9660 ro 0 0
server:/export /mnt/nfs nfs4 rw 0 0
"""


def test_parse_mounts_keeps_fixed_devices():
    assert parse_mounts(MOUNTS) == [Path("/"), Path("/boot/efi"), Path("/mnt/My Data")]


def test_parse_mounts_ignores_short_lines():
    assert parse_mounts("garbage\n\n") == []


def test_collapse_nested():
    paths = [Path("/mnt/data"), Path("/"), Path("/boot/efi"), Path("/")]

    assert collapse_nested(paths) == [Path("/")]


def test_collapse_keeps_siblings():
    paths = [Path("/mnt/b"), Path("/mnt/a"), Path("/mnt/a/inner")]

    assert collapse_nested(paths) == [Path("/mnt/a"), Path("/mnt/b")]


def test_list_fixed_volumes_from_mounts_file(tmp_path):
    data = tmp_path / "data"
    (data / "nested").mkdir(parents=True)
    other = tmp_path / "other"
    other.mkdir()
    mounts = tmp_path / "mounts"
    mounts.write_text(
        f"/dev/sda1 {data} ext4 rw 0 0\n"
        f"/dev/sda2 {data / 'nested'} ext4 rw 0 0\n"
        f"/dev/sdb1 {other} xfs rw 0 0\n"
        f"/dev/sdc1 {tmp_path / 'unmounted'} ext4 rw 0 0\n"
        "tmpfs /tmp tmpfs rw 0 0\n"
    )

    assert list_fixed_volumes(platform="linux", mounts_file=mounts) == [data, other]


def test_unreadable_mounts_falls_back_to_root(tmp_path):
    volumes = list_fixed_volumes(platform="linux", mounts_file=tmp_path / "missing")

    assert volumes == [Path("/")]


def test_select_roots_defaults_to_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    assert select_roots(None) == [Path.cwd()]


def test_select_roots_explicit(tmp_path):
    assert select_roots([tmp_path]) == [tmp_path]


def test_select_roots_with_all_volumes(tmp_path, monkeypatch):
    monkeypatch.setattr("leakguard.discovery.volumes.list_fixed_volumes", lambda: [Path("/")])

    assert select_roots([tmp_path], all_volumes=True) == [tmp_path, Path("/")]
    assert select_roots(None, all_volumes=True) == [Path("/")]
