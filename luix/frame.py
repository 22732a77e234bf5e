"""Physical memory frames."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from luix.address import PhysicalAddress

FRAME_SIZE = 4096


@dataclass(frozen=True, order=True)
class PhysicalFrame:
    """A 4 KiB frame of physical memory."""

    start_address: PhysicalAddress

    @classmethod
    def containing_address(cls, address: PhysicalAddress) -> PhysicalFrame:
        """The frame that holds ``address``."""
        return cls(address.align_down(FRAME_SIZE))

    @classmethod
    def size(cls) -> int:
        """Size of a frame in bytes."""
        return FRAME_SIZE


def range_inclusive(start: PhysicalFrame, end: PhysicalFrame) -> Iterator[PhysicalFrame]:
    """Yield every frame from ``start`` up to and including ``end``."""
    frame = start
    while frame <= end:
        yield frame
        frame = PhysicalFrame(frame.start_address + FRAME_SIZE)