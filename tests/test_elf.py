import struct

import pytest

from luix.elf import ElfError, ElfFile, ProgramHeaderType

GNU_STACK = 0x6474E551


def build_elf(entry=0x1000, segments=(b"\x90\x90\xc3",), shnum=3, types=None):
    phnum = len(segments)
    phoff = 64
    data_off = phoff + phnum * 56
    payload = b"".join(segments)
    shoff = data_off + len(payload)
    ident = ELF_IDENT
    header = struct.pack(
        "<16sHHIQQQIHHHHHH",
        ident, 2, 0x3E, 1, entry, phoff, shoff, 0, 64, 56, phnum, 64, shnum, 0,
    )
    phdrs = b""
    offset = data_off
    for index, segment in enumerate(segments):
        p_type = types[index] if types else 1
        phdrs += struct.pack(
            "<IIQQQQQQ", p_type, 5, offset, 0x1000 * index, 0x1000 * index,
            len(segment), len(segment), 0x1000,
        )
        offset += len(segment)
    shdrs = struct.pack("<IIQQQQIIQQ", 0, 0, 0, 0, 0, 0, 0, 0, 0, 0) * shnum
    return header + phdrs + payload + shdrs


ELF_IDENT = b"\x7fELF" + bytes([2, 1, 1]) + bytes(9)


def test_parse_header_fields():
    elf = ElfFile.parse(build_elf(entry=0x2345, segments=(b"ab", b"cde"), shnum=4))
    assert elf.header.e_ident[0:4] == bytes([0x7F, 0x45, 0x4C, 0x46])
    assert elf.header.e_phnum == len(elf.program_headers) == 2
    assert elf.header.e_phentsize == 0x38
    assert elf.header.e_shnum == len(elf.section_headers) == 4
    assert elf.header.e_shentsize == 0x40
    assert elf.entry_point() == 0x2345


def test_segment_data_round_trip():
    segments = (b"\x90\x90\xc3", b"hello world", b"\x00\x01")
    elf = ElfFile.parse(build_elf(segments=segments))
    assert [elf.data(i) for i in range(len(segments))] == list(segments)
    assert all(h.p_type == ProgramHeaderType.LOAD for h in elf.program_headers)
    assert [h.p_filesz for h in elf.program_headers] == [len(s) for s in segments]


def test_unknown_segment_type_kept_as_int():
    elf = ElfFile.parse(build_elf(segments=(b"x", b"y"), types=[1, GNU_STACK]))
    assert elf.program_headers[0].p_type is ProgramHeaderType.LOAD
    assert elf.program_headers[1].p_type == GNU_STACK
    assert not isinstance(elf.program_headers[1].p_type, ProgramHeaderType)


def test_short_buffer_rejected():
    with pytest.raises(ElfError):
        ElfFile.parse(b"\x7fELF")


def test_bad_magic_rejected():
    image = bytearray(build_elf())
    image[0] = 0
    with pytest.raises(ElfError):
        ElfFile.parse(bytes(image))


def test_truncated_tables_rejected():
    image = build_elf(shnum=3)
    with pytest.raises(ElfError):
        ElfFile.parse(image[:-10])


def test_segment_past_end_rejected():
    image = bytearray(build_elf(segments=(b"abcd",)))
    # Enlarge p_filesz of the only segment beyond the file size.
    struct.pack_into("<Q", image, 64 + 32, len(image) * 2)
    elf = ElfFile.parse(bytes(image))
    with pytest.raises(ElfError):
        elf.data(0)


def test_segment_index_out_of_range():
    elf = ElfFile.parse(build_elf(segments=(b"a",)))
    with pytest.raises(IndexError):
        elf.data(1)