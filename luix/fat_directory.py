"""FAT directory entries."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Optional

DIRECTORY_ENTRY_SIZE = 32
ATTR_LONG_NAME = 0x0F
ATTR_DIRECTORY = 0x10
_FREE_MARKERS = (0xE5, 0x00)

_ENTRY = struct.Struct("<8s3sBBBHHHHHHHI")


def _format_string(value: bytes) -> str:
    """Decode a space- or NUL-terminated 8.3 name field."""
    name = []
    for byte in value:
        if byte in (0x20, 0x00):
            break
        name.append(chr(byte))
    return "".join(name)


@dataclass(frozen=True)
class DirectoryEntry:
    """A short-name directory entry."""

    name: str
    ext: str
    attributes: int
    reserved: int
    creation_time_tenths: int
    creation_time: int
    creation_date: int
    access_date: int
    cluster_high: int
    modification_time: int
    modification_date: int
    cluster_low: int
    size: int

    @classmethod
    def from_sector(cls, sector: bytes, offset: int) -> Optional[DirectoryEntry]:
        """Decode the entry at ``offset``; None if the slot is free or deleted."""
        if offset < 0 or offset + DIRECTORY_ENTRY_SIZE > len(sector):
            raise ValueError(f"no directory entry at offset {offset}")
        if sector[offset] in _FREE_MARKERS:
            return None
        raw_name, raw_ext, *fields = _ENTRY.unpack_from(sector, offset)
        return cls(_format_string(raw_name), _format_string(raw_ext), *fields)

    def is_long_name(self) -> bool:
        return self.attributes == ATTR_LONG_NAME

    def is_directory(self) -> bool:
        return bool(self.attributes & ATTR_DIRECTORY)

    def cluster(self) -> int:
        """The first cluster of the file's data."""
        return (self.cluster_high << 16) | self.cluster_low

    def file_name(self) -> str:
        """The name and extension joined by a dot."""
        return f"{self.name}.{self.ext}" if self.ext else self.name