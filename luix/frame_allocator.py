"""Frame allocator over a boot-time memory map."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import IntEnum
from itertools import islice

from luix.address import PhysicalAddress
from luix.frame import FRAME_SIZE, PhysicalFrame, range_inclusive


class EntryType(IntEnum):
    """Kinds of memory map entries reported by the bootloader."""

    USABLE = 0
    RESERVED = 1
    ACPI_RECLAIMABLE = 2
    ACPI_NVS = 3
    BAD_MEMORY = 4
    BOOTLOADER_RECLAIMABLE = 5
    KERNEL_AND_MODULES = 6
    FRAMEBUFFER = 7


@dataclass(frozen=True)
class MemoryMapEntry:
    """A region of physical memory and what it is used for."""

    base: int
    length: int
    entry_type: EntryType


def calculate_available_memory(entries: Iterable[MemoryMapEntry]) -> int:
    """Total bytes in usable memory map entries."""
    return sum(entry.length for entry in entries if entry.entry_type == EntryType.USABLE)


class FrameAllocator:
    """Hands out physical frames from usable memory, reusing freed frames first."""

    def __init__(self, entries: Iterable[MemoryMapEntry]) -> None:
        self.memory_map: tuple[MemoryMapEntry, ...] = tuple(entries)
        self.reusable_frames: list[PhysicalFrame] = []
        self._next = 0

    def allocate_frame(self) -> PhysicalFrame:
        """Allocate a single frame."""
        return self.allocate_frames(FRAME_SIZE)

    def allocate_frames(self, size: int) -> PhysicalFrame:
        """Allocate enough frames for ``size`` bytes and return the first one.

        Raises MemoryError when no usable memory is left.
        """
        if size <= 0:
            raise ValueError(f"size must be positive, got {size}")
        frame_count = -(-size // FRAME_SIZE)

        if len(self.reusable_frames) >= frame_count:
            taken = self.reusable_frames[-frame_count:]
            del self.reusable_frames[-frame_count:]
            return taken[0]

        frame = next(islice(self.usable_frames(), self._next, None), None)
        self._next += frame_count
        if frame is None:
            raise MemoryError("Out of memory")
        return frame

    def deallocate_frames(self, start_address: PhysicalAddress, size: int) -> None:
        """Return the frames covering ``size`` bytes from ``start_address``."""
        if size <= 0:
            raise ValueError(f"size must be positive, got {size}")
        end_address = start_address + (size - 1)
        start_frame = PhysicalFrame.containing_address(start_address)
        end_frame = PhysicalFrame.containing_address(end_address)
        self.reusable_frames.extend(range_inclusive(start_frame, end_frame))
        self.reusable_frames.sort()

    def usable_frames(self) -> Iterator[PhysicalFrame]:
        """Every frame in the usable entries of the memory map, in order."""
        for entry in self.memory_map:
            if entry.entry_type != EntryType.USABLE:
                continue
            for address in range(entry.base, entry.base + entry.length, FRAME_SIZE):
                yield PhysicalFrame.containing_address(PhysicalAddress(address))