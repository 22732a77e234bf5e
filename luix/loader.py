"""Placing the loadable segments of an ELF program into a process image."""

from __future__ import annotations

from dataclasses import dataclass

from luix.address import VirtualAddress
from luix.elf import ElfFile, ProgramHeaderType
from luix.frame import FRAME_SIZE

PAGE_SIZE = FRAME_SIZE
PROCESS_START = 0xF00D_C0DE_000
CODE_SIZE = 10 * PAGE_SIZE


@dataclass
class ProcessImage:
    """The mapped memory of a new process and where it starts running."""

    base: int
    memory: bytearray
    entry_point: int
    stack_pointer: int

    @property
    def pages(self) -> list[VirtualAddress]:
        """Start addresses of the mapped pages."""
        return [
            VirtualAddress(start)
            for start in range(self.base, self.base + len(self.memory), PAGE_SIZE)
        ]

    def _span(self, address: int, length: int) -> slice:
        start = address - self.base
        if start < 0 or length < 0 or start + length > len(self.memory):
            raise ValueError(
                f"{length} bytes at {address:#x} lie outside the mapped process memory"
            )
        return slice(start, start + length)

    def read(self, address: int, length: int) -> bytes:
        return bytes(self.memory[self._span(address, length)])

    def write(self, address: int, data: bytes) -> None:
        self.memory[self._span(address, len(data))] = data


def load(elf_file: ElfFile) -> ProcessImage:
    """Map the process pages and copy every LOAD segment to its place."""
    start_page = VirtualAddress(PROCESS_START).align_down(PAGE_SIZE)
    end_page = VirtualAddress(PROCESS_START + CODE_SIZE).align_down(PAGE_SIZE)
    mapped_size = end_page.value - start_page.value + PAGE_SIZE

    image = ProcessImage(
        base=start_page.value,
        memory=bytearray(mapped_size),
        entry_point=PROCESS_START + elf_file.entry_point(),
        stack_pointer=PROCESS_START + CODE_SIZE,
    )
    for index, header in enumerate(elf_file.program_headers):
        if header.p_type != ProgramHeaderType.LOAD:
            continue
        image.write(PROCESS_START + header.p_vaddr, elf_file.data(index))
    return image