import struct

import pytest

from luix.elf import ElfFile, ProgramHeaderType
from luix.loader import CODE_SIZE, PAGE_SIZE, PROCESS_START, load


def build_elf(segments, entry=0):
    phoff = 64
    data_offset = phoff + 56 * len(segments)
    headers = b""
    payload = b""
    for p_type, vaddr, content in segments:
        offset = data_offset + len(payload)
        headers += struct.pack(
            "<IIQQQQQQ", p_type, 5, offset, vaddr, vaddr, len(content), len(content), 0x1000
        )
        payload += content
    ident = b"\x7fELF" + bytes([2, 1, 1]) + bytes(9)
    header = struct.pack(
        "<16sHHIQQQIHHHHHH", ident, 2, 0x3E, 1, entry, phoff, 0, 0, 64, 56, len(segments), 64, 0, 0
    )
    return header + headers + payload


def test_load_places_segments_and_entry():
    code = b"\x48\x31\xc0\xc3"
    data = b"init-data"
    elf = ElfFile.parse(
        build_elf(
            [(ProgramHeaderType.LOAD, 0x0, code), (ProgramHeaderType.LOAD, 0x1000, data)],
            entry=0x2,
        )
    )
    image = load(elf)
    assert image.base == PROCESS_START
    assert image.entry_point == PROCESS_START + 0x2
    assert image.stack_pointer == PROCESS_START + CODE_SIZE
    assert image.read(PROCESS_START, len(code)) == code
    assert image.read(PROCESS_START + 0x1000, len(data)) == data


def test_non_load_segments_are_skipped():
    note = b"note-bytes"
    elf = ElfFile.parse(
        build_elf([(ProgramHeaderType.NOTE, 0x200, note), (ProgramHeaderType.LOAD, 0x0, b"ok")])
    )
    image = load(elf)
    assert image.read(PROCESS_START, 2) == b"ok"
    assert image.read(PROCESS_START + 0x200, len(note)) == bytes(len(note))


def test_pages_cover_code_and_stack():
    image = load(ElfFile.parse(build_elf([(ProgramHeaderType.LOAD, 0, b"x")])))
    pages = [page.value for page in image.pages]
    assert pages[0] == PROCESS_START
    assert all(b - a == PAGE_SIZE for a, b in zip(pages, pages[1:]))
    assert pages[-1] <= image.stack_pointer < pages[-1] + PAGE_SIZE
    assert len(image.memory) == len(pages) * PAGE_SIZE


def test_segment_outside_mapped_memory_is_rejected():
    elf = ElfFile.parse(build_elf([(ProgramHeaderType.LOAD, CODE_SIZE + PAGE_SIZE, b"far")]))
    with pytest.raises(ValueError):
        load(elf)


def test_read_outside_image_is_rejected():
    image = load(ElfFile.parse(build_elf([(ProgramHeaderType.LOAD, 0, b"x")])))
    with pytest.raises(ValueError):
        image.read(PROCESS_START - 1, 2)