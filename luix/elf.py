"""Parsing of 64-bit little-endian ELF files."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Union

ELF_MAGIC = b"\x7fELF"

_ELF_HEADER = struct.Struct("<16sHHIQQQIHHHHHH")
_PROGRAM_HEADER = struct.Struct("<IIQQQQQQ")
_SECTION_HEADER = struct.Struct("<IIQQQQIIQQ")


class ElfError(ValueError):
    """The buffer is not a well-formed ELF file."""


class ProgramHeaderType(IntEnum):
    """Segment types of a program header."""

    NULL = 0
    LOAD = 1
    DYNAMIC = 2
    INTERP = 3
    NOTE = 4
    SHLIB = 5
    PHDR = 6
    TLS = 7
    LOOS = 0x60000000
    HIOS = 0x6FFFFFFF
    LOPROC = 0x70000000
    HIPROC = 0x7FFFFFFF


@dataclass(frozen=True)
class ElfHeader:
    e_ident: bytes
    e_type: int
    e_machine: int
    e_version: int
    e_entry: int
    e_phoff: int
    e_shoff: int
    e_flags: int
    e_ehsize: int
    e_phentsize: int
    e_phnum: int
    e_shentsize: int
    e_shnum: int
    e_shstrndx: int


@dataclass(frozen=True)
class ProgramHeader:
    p_type: Union[ProgramHeaderType, int]
    p_flags: int
    p_offset: int
    p_vaddr: int
    p_paddr: int
    p_filesz: int
    p_memsz: int
    p_align: int


@dataclass(frozen=True)
class SectionHeader:
    sh_name: int
    sh_type: int
    sh_flags: int
    sh_addr: int
    sh_offset: int
    sh_size: int
    sh_link: int
    sh_info: int
    sh_addralign: int
    sh_entsize: int


def _segment_type(value: int) -> Union[ProgramHeaderType, int]:
    try:
        return ProgramHeaderType(value)
    except ValueError:
        return value


def _unpack_table(buffer: bytes, layout: struct.Struct, offset: int, count: int, what: str):
    end = offset + layout.size * count
    if count and end > len(buffer):
        raise ElfError(f"{what} table at {offset:#x} runs past the end of the file")
    return [layout.unpack_from(buffer, offset + i * layout.size) for i in range(count)]


@dataclass(frozen=True)
class ElfFile:
    """An ELF image with its header, program headers and section headers."""

    header: ElfHeader
    program_headers: tuple[ProgramHeader, ...]
    section_headers: tuple[SectionHeader, ...]
    buffer: bytes

    @classmethod
    def parse(cls, buffer: bytes) -> ElfFile:
        """Parse an ELF image held in ``buffer``."""
        buffer = bytes(buffer)
        if len(buffer) < _ELF_HEADER.size:
            raise ElfError("buffer too short for an ELF header")
        header = ElfHeader(*_ELF_HEADER.unpack_from(buffer))
        if header.e_ident[:4] != ELF_MAGIC:
            raise ElfError("missing ELF magic")

        program_headers = tuple(
            ProgramHeader(_segment_type(fields[0]), *fields[1:])
            for fields in _unpack_table(
                buffer, _PROGRAM_HEADER, header.e_phoff, header.e_phnum, "program header"
            )
        )
        section_headers = tuple(
            SectionHeader(*fields)
            for fields in _unpack_table(
                buffer, _SECTION_HEADER, header.e_shoff, header.e_shnum, "section header"
            )
        )
        return cls(header, program_headers, section_headers, buffer)

    def entry_point(self) -> int:
        """Virtual address of the program's entry point."""
        return self.header.e_entry

    def data(self, segment_index: int) -> bytes:
        """The file contents of the program header at ``segment_index``."""
        header = self.program_headers[segment_index]
        end = header.p_offset + header.p_filesz
        if end > len(self.buffer):
            raise ElfError(f"segment {segment_index} runs past the end of the file")
        return self.buffer[header.p_offset:end]