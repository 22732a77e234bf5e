import struct

import pytest

from luix.fat_directory import DirectoryEntry


def _raw(name, ext=b"", attributes=0x20, cluster_high=0, cluster_low=0, size=0):
    return struct.pack(
        "<8s3sBBBHHHHHHHI",
        name.ljust(8, b" "),
        ext.ljust(3, b" "),
        attributes,
        0,
        0,
        0,
        0,
        0,
        cluster_high,
        0,
        0,
        cluster_low,
        size,
    )


def test_file_entry():
    sector = _raw(b"DEEPFILE", b"TXT", cluster_low=7, size=0x22)
    entry = DirectoryEntry.from_sector(sector, 0)
    assert entry.name == "DEEPFILE"
    assert entry.ext == "TXT"
    assert entry.file_name() == "DEEPFILE.TXT"
    assert entry.size == 0x22
    assert entry.cluster() == 7
    assert not entry.is_directory()
    assert not entry.is_long_name()


def test_name_without_extension():
    entry = DirectoryEntry.from_sector(_raw(b"TEST", attributes=0x10), 0)
    assert entry.file_name() == "TEST"
    assert entry.is_directory()


def test_readme_name():
    entry = DirectoryEntry.from_sector(_raw(b"README", b"MD"), 0)
    assert entry.file_name() == "README.MD"


def test_long_name_attribute():
    entry = DirectoryEntry.from_sector(_raw(b"AXXXXXXX", attributes=0x0F), 0)
    assert entry.is_long_name()


def test_dot_entries():
    sector = _raw(b".", attributes=0x10) + _raw(b"..", attributes=0x10)
    assert DirectoryEntry.from_sector(sector, 0).name == "."
    assert DirectoryEntry.from_sector(sector, 32).name == ".."


def test_cluster_high_word():
    entry = DirectoryEntry.from_sector(_raw(b"BIG", cluster_high=1, cluster_low=0), 0)
    assert entry.cluster() == 0x10000


def test_deleted_and_free_entries():
    deleted = b"\xe5" + _raw(b"GONE")[1:]
    assert DirectoryEntry.from_sector(deleted, 0) is None
    assert DirectoryEntry.from_sector(bytes(32), 0) is None


def test_second_entry_in_sector():
    sector = _raw(b"EFI", attributes=0x10) + _raw(b"BOOT", attributes=0x10)
    assert DirectoryEntry.from_sector(sector, 32).name == "BOOT"


def test_offset_past_end_raises():
    with pytest.raises(ValueError):
        DirectoryEntry.from_sector(_raw(b"A"), 16)