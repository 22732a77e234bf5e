"""Physical and virtual memory addresses."""

from __future__ import annotations

from dataclasses import dataclass

_U64_MAX = (1 << 64) - 1
_PAGE_SHIFT = 12
_ENTRY_COUNT = 512


def _check_u64(value: int) -> None:
    if not 0 <= value <= _U64_MAX:
        raise ValueError(f"address out of 64-bit range: {value:#x}")


def _align_down(value: int, align: int) -> int:
    if align <= 0:
        raise ValueError(f"alignment must be positive, got {align}")
    return value & ~(align - 1) & _U64_MAX


@dataclass(frozen=True, order=True)
class PhysicalAddress:
    """A 64-bit physical memory address."""

    value: int = 0

    def __post_init__(self) -> None:
        _check_u64(self.value)

    def align_down(self, align: int) -> PhysicalAddress:
        """Round down to a multiple of ``align`` (a power of two)."""
        return PhysicalAddress(_align_down(self.value, align))

    def __add__(self, rhs: int) -> PhysicalAddress:
        if not isinstance(rhs, int):
            return NotImplemented
        return PhysicalAddress(self.value + rhs)

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return f"0x{self.value:X}"


@dataclass(frozen=True, order=True)
class VirtualAddress:
    """A 64-bit virtual memory address with page-table index helpers."""

    value: int = 0

    def __post_init__(self) -> None:
        _check_u64(self.value)

    def align_down(self, align: int) -> VirtualAddress:
        """Round down to a multiple of ``align`` (a power of two)."""
        return VirtualAddress(_align_down(self.value, align))

    def page_offset(self) -> int:
        """Offset of the address inside its 4 KiB page."""
        return self.value % (1 << _PAGE_SHIFT)

    def _index(self, shift: int) -> int:
        # Truncated to 16 bits before taking the 9-bit table index.
        return ((self.value >> shift) & 0xFFFF) % _ENTRY_COUNT

    def p1_index(self) -> int:
        """The 9-bit level 1 page table index."""
        return self._index(_PAGE_SHIFT)

    def p2_index(self) -> int:
        """The 9-bit level 2 page table index."""
        return self._index(_PAGE_SHIFT + 9)

    def p3_index(self) -> int:
        """The 9-bit level 3 page table index."""
        return self._index(_PAGE_SHIFT + 18)

    def p4_index(self) -> int:
        """The 9-bit level 4 page table index."""
        return self._index(_PAGE_SHIFT + 27)

    def __add__(self, rhs: int) -> VirtualAddress:
        if not isinstance(rhs, int):
            return NotImplemented
        return VirtualAddress(self.value + rhs)

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return f"0x{self.value:X}"