"""First-fit free-list heap allocator with coalescing."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass

HEAP_START = 0xFEED_CAFE_000
HEAP_SIZE = 1024 * 1024 * 5

# Every free region must be able to hold a list node: a next pointer and a size.
BLOCK_SIZE = 16
BLOCK_ALIGN = 8


def _check_alignment(align: int) -> None:
    if align <= 0 or align & (align - 1):
        raise ValueError(f"alignment must be a power of two, got {align}")


def align_up(addr: int, align: int) -> int:
    """Round ``addr`` up to a multiple of ``align`` (a power of two)."""
    _check_alignment(align)
    return (addr + align - 1) & ~(align - 1)


@dataclass(frozen=True)
class FreeBlock:
    """A free region of the heap."""

    start: int
    size: int

    @property
    def end(self) -> int:
        return self.start + self.size


class LinkedListAllocator:
    """Keeps free regions sorted by address and merges neighbours on free."""

    def __init__(self) -> None:
        self._blocks: list[FreeBlock] = []

    def init(self, heap_start: int, heap_size: int) -> None:
        """Add the heap region to the free list."""
        self._add_free_region(heap_start, heap_size)

    def free_blocks(self) -> list[FreeBlock]:
        """The free regions in address order."""
        return list(self._blocks)

    def _add_free_region(self, addr: int, size: int) -> None:
        if size < BLOCK_SIZE:
            raise ValueError(f"Size should be at least the size of a block. Size: {size}")

        index = bisect_right(self._blocks, addr, key=lambda block: block.start)
        length = size

        if index < len(self._blocks) and addr + size == self._blocks[index].start:
            length += self._blocks[index].size
            del self._blocks[index]

        if index > 0 and self._blocks[index - 1].end == addr:
            left = self._blocks[index - 1]
            self._blocks[index - 1] = FreeBlock(left.start, left.size + length)
            return

        self._blocks.insert(index, FreeBlock(addr, length))

    @staticmethod
    def _align_with_block_size(size: int, align: int) -> tuple[int, int]:
        if size < 0:
            raise ValueError(f"size must not be negative, got {size}")
        _check_alignment(align)
        align = max(align, BLOCK_ALIGN)
        size = align_up(size, align)
        return max(size, BLOCK_SIZE), align

    def alloc_block(self, size: int, align: int) -> int:
        """Allocate ``size`` bytes aligned to ``align``; return the start address.

        Raises MemoryError when no free region is large enough.
        """
        size, align = self._align_with_block_size(size, align)
        for index, block in enumerate(self._blocks):
            start = align_up(block.start, align)
            end = start + size
            if end > block.end:
                continue
            del self._blocks[index]
            remaining = block.end - end
            if remaining >= BLOCK_SIZE:
                self._add_free_region(end, remaining)
            return start
        raise MemoryError("Could not allocate memory.")

    def dealloc_block(self, ptr: int, size: int, align: int) -> None:
        """Return a block previously given out by ``alloc_block``."""
        size, _ = self._align_with_block_size(size, align)
        self._add_free_region(ptr, size)