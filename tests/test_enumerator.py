import subprocess

import pytest

from diskmaker.enumerator import BlockDeviceEnumerator, LSBLK_COMMAND, parse_lsblk_output
from diskmaker.errors import EnumerationError


LSBLK_OUTPUT = """sda
sda1 /boot
sda2 /
sdb
sdc
sr0
"""


def test_parse_keeps_only_unmounted_devices():
    assert parse_lsblk_output(LSBLK_OUTPUT) == {"sda", "sdb", "sdc", "sr0"}


def test_parse_excludes_any_line_with_mountpoint():
    content = "sdb [SWAP]\nsdc /var/lib/data\nsdd   \n"
    assert parse_lsblk_output(content) == {"sdd"}


def test_parse_ignores_blank_lines_and_collapses_duplicates():
    assert parse_lsblk_output("\n\nsdb\n   \nsdb\n") == {"sdb"}


def test_parse_excludes_lines_with_extra_fields():
    assert parse_lsblk_output("sdb /mnt extra\n") == set()


def test_parse_empty_output():
    assert parse_lsblk_output("") == set()


def test_find_unmounted_devices_runs_lsblk(monkeypatch):
    calls = []

    def fake_check_output(cmd, timeout=None):
        calls.append((cmd, timeout))
        return b"sdb\nsdc /data\n"

    monkeypatch.setattr(subprocess, "check_output", fake_check_output)

    enumerator = BlockDeviceEnumerator(timeout=30)
    assert enumerator.find_unmounted_devices() == {"sdb"}
    assert calls == [(LSBLK_COMMAND, 30)]


@pytest.mark.parametrize("error", [
    FileNotFoundError("lsblk"),
    subprocess.CalledProcessError(1, LSBLK_COMMAND),
    subprocess.TimeoutExpired(LSBLK_COMMAND, 5),
])
def test_command_failures_raise_enumeration_error(monkeypatch, error):
    def fake_check_output(cmd, timeout=None):
        raise error

    monkeypatch.setattr(subprocess, "check_output", fake_check_output)

    with pytest.raises(EnumerationError):
        BlockDeviceEnumerator(timeout=5).find_unmounted_devices()


def test_non_utf8_output_is_decoded(monkeypatch):
    monkeypatch.setattr(subprocess, "check_output", lambda cmd, timeout=None: b"sdb\n\xff\xfe /mnt\n")
    assert BlockDeviceEnumerator().find_unmounted_devices() == {"sdb"}
