"""NVMe submission and completion queues."""

from __future__ import annotations

import dataclasses
import struct
from collections.abc import Callable
from dataclasses import dataclass
from typing import ClassVar, Optional

from luix.nvme_command import NvmeCommand

_COMPLETION = struct.Struct("<IIHHHH")
_DOORBELL_WIDTH = 4

Doorbell = Callable[[int, int], None]


def _no_doorbell(offset: int, value: int) -> None:
    pass


def doorbell_offset(queue_id: int, completion: bool) -> int:
    """Offset of a queue's doorbell from the start of the doorbell area."""
    return (queue_id * 2 + (1 if completion else 0)) * _DOORBELL_WIDTH


@dataclass(frozen=True)
class NvmeCompletion:
    """A 16-byte completion queue entry."""

    SIZE: ClassVar[int] = _COMPLETION.size

    dw0: int = 0
    dw1: int = 0
    sq_head: int = 0
    sq_id: int = 0
    command_id: int = 0
    phase_status: int = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> NvmeCompletion:
        if len(data) < _COMPLETION.size:
            raise ValueError(f"NVMe completion needs {_COMPLETION.size} bytes, got {len(data)}")
        return cls(*_COMPLETION.unpack_from(data))

    def status(self) -> int:
        """The status field without the phase tag."""
        return (self.phase_status >> 1) & 0x7FFF

    def phase(self) -> bool:
        return bool(self.phase_status & 1)

    def is_success(self) -> bool:
        return self.status() == 0

    def status_code(self) -> int:
        return (self.phase_status >> 1) & 0x1FF


def _check_size(queue_size: int) -> None:
    if queue_size <= 0:
        raise ValueError(f"queue size must be positive, got {queue_size}")


class SubmissionQueue:
    """A ring of commands; the doorbell is rung with the new tail after each submission."""

    def __init__(self, queue_id: int, queue_size: int, doorbell: Optional[Doorbell] = None) -> None:
        _check_size(queue_size)
        self.queue_id = queue_id
        self.entries: list[NvmeCommand] = [NvmeCommand(opcode=0) for _ in range(queue_size)]
        self.tail = 0
        self.doorbell_offset = doorbell_offset(queue_id, completion=False)
        self._doorbell = doorbell or _no_doorbell

    def submit_command(self, command: NvmeCommand) -> int:
        """Place ``command`` at the tail, tagged with its slot; return the command id."""
        command_id = self.tail
        self.entries[self.tail] = dataclasses.replace(command, command_id=command_id)
        self.tail = (self.tail + 1) % len(self.entries)
        self._doorbell(self.doorbell_offset, self.tail)
        return command_id


class CompletionQueue:
    """A ring of completions tracked with a phase tag that flips on every wrap."""

    def __init__(self, queue_id: int, queue_size: int, doorbell: Optional[Doorbell] = None) -> None:
        _check_size(queue_size)
        self.queue_id = queue_id
        self.entries: list[NvmeCompletion] = [NvmeCompletion() for _ in range(queue_size)]
        self.tail = 0
        self.phase = True
        self.doorbell_offset = doorbell_offset(queue_id, completion=True)
        self._doorbell = doorbell or _no_doorbell
        self._write_index = 0
        self._write_phase = True
        self._pending = 0

    def post(self, completion: NvmeCompletion) -> None:
        """Write a completion as the controller would, setting its phase tag.

        Raises OverflowError when every slot holds an entry not yet polled.
        """
        if self._pending == len(self.entries):
            raise OverflowError("completion queue is full")
        phase_status = (completion.phase_status & ~1) | int(self._write_phase)
        self.entries[self._write_index] = dataclasses.replace(
            completion, phase_status=phase_status
        )
        self._write_index = (self._write_index + 1) % len(self.entries)
        if self._write_index == 0:
            self._write_phase = not self._write_phase
        self._pending += 1

    def poll(self) -> Optional[NvmeCompletion]:
        """Consume the entry at the tail if its phase tag is current; else None."""
        entry = self.entries[self.tail]
        if entry.phase() != self.phase:
            return None
        self.tail = (self.tail + 1) % len(self.entries)
        if self.tail == 0:
            self.phase = not self.phase
        self._pending = max(self._pending - 1, 0)
        self._doorbell(self.doorbell_offset, self.tail)
        return entry