"""Block devices addressed by sector."""

from __future__ import annotations

from abc import ABC, abstractmethod
from os import PathLike
from typing import Union

DEFAULT_BLOCK_SIZE = 512


class BlockDevice(ABC):
    """A device that reads and writes data starting at a sector."""

    @abstractmethod
    def read_block(self, sector: int, length: int) -> bytes:
        """Read ``length`` bytes starting at ``sector``."""

    @abstractmethod
    def write_block(self, sector: int, data: bytes) -> int:
        """Write ``data`` starting at ``sector``; return the number of bytes written."""


class MemoryBlockDevice(BlockDevice):
    """A block device backed by a byte array held in memory."""

    def __init__(self, data: bytes, block_size: int = DEFAULT_BLOCK_SIZE) -> None:
        if block_size <= 0:
            raise ValueError(f"block size must be positive, got {block_size}")
        self.block_size = block_size
        self.data = bytearray(data)

    @classmethod
    def from_file(
        cls, path: Union[str, PathLike], block_size: int = DEFAULT_BLOCK_SIZE
    ) -> MemoryBlockDevice:
        """Load a disk image into memory; writes do not go back to the file."""
        with open(path, "rb") as image:
            return cls(image.read(), block_size)

    def _span(self, sector: int, length: int) -> tuple[int, int]:
        if sector < 0:
            raise ValueError(f"sector must not be negative, got {sector}")
        if length < 0:
            raise ValueError(f"length must not be negative, got {length}")
        start = sector * self.block_size
        end = start + length
        if end > len(self.data):
            raise ValueError(
                f"access of {length} bytes at sector {sector} runs past the end of the device"
            )
        return start, end

    def read_block(self, sector: int, length: int) -> bytes:
        start, end = self._span(sector, length)
        return bytes(self.data[start:end])

    def write_block(self, sector: int, data: bytes) -> int:
        start, end = self._span(sector, len(data))
        self.data[start:end] = data
        return len(data)

    def __len__(self) -> int:
        return len(self.data)