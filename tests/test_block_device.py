import pytest
from hypothesis import given
from hypothesis import strategies as st

from luix.block_device import BlockDevice, MemoryBlockDevice


def test_block_device_is_abstract():
    with pytest.raises(TypeError):
        BlockDevice()


def test_read_returns_bytes_of_sector():
    data = bytes(range(256)) * 4
    device = MemoryBlockDevice(data)
    assert device.read_block(1, 12) == data[512:524]


def test_write_then_read_round_trip():
    device = MemoryBlockDevice(bytes(2048))
    written = device.write_block(2, b"EFI PART")
    assert written == 8
    assert device.read_block(2, 8) == b"EFI PART"
    assert device.read_block(0, 8) == bytes(8)


def test_custom_block_size():
    data = b"a" * 16 + b"b" * 16
    device = MemoryBlockDevice(data, block_size=16)
    assert device.read_block(1, 16) == b"b" * 16


def test_read_past_end_raises():
    device = MemoryBlockDevice(bytes(1024))
    with pytest.raises(ValueError):
        device.read_block(2, 1)


def test_write_past_end_raises():
    device = MemoryBlockDevice(bytes(1024))
    with pytest.raises(ValueError):
        device.write_block(1, bytes(513))


def test_negative_sector_raises():
    device = MemoryBlockDevice(bytes(1024))
    with pytest.raises(ValueError):
        device.read_block(-1, 4)


def test_invalid_block_size_raises():
    with pytest.raises(ValueError):
        MemoryBlockDevice(bytes(16), block_size=0)


def test_from_file(tmp_path):
    image = tmp_path / "disk.img"
    content = b"\x00" * 512 + b"This is a file inside a long path"
    image.write_bytes(content)
    device = MemoryBlockDevice.from_file(image)
    assert device.read_block(1, 33) == b"This is a file inside a long path"
    assert len(device) == len(content)


@given(sector=st.integers(0, 7), payload=st.binary(min_size=1, max_size=512))
def test_round_trip_property(sector, payload):
    device = MemoryBlockDevice(bytes(8 * 512))
    device.write_block(sector, payload)
    assert device.read_block(sector, len(payload)) == payload