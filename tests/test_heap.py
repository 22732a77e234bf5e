import pytest
from hypothesis import given
from hypothesis import strategies as st

from luix.heap import FreeBlock, LinkedListAllocator, align_up

BASE = 0xFEED_CAFF_000


@pytest.fixture
def allocator():
    heap = LinkedListAllocator()
    heap.init(BASE, 2048)
    return heap


def test_init(allocator):
    assert allocator.free_blocks() == [FreeBlock(BASE, 2048)]


def test_alloc_block(allocator):
    a = allocator.alloc_block(1024, 1)
    b = allocator.alloc_block(256, 1)
    c = allocator.alloc_block(128, 1)
    d = allocator.alloc_block(64, 1)

    assert a == 0xFEED_CAFF_000
    assert b == 0xFEEDCAFF400
    assert c == 0xFEEDCAFF500
    assert d == 0xFEEDCAFF580

    blocks = allocator.free_blocks()
    assert len(blocks) == 1
    assert blocks[0].size == 576


def test_dealloc_block(allocator):
    a = allocator.alloc_block(512, 1)
    b = allocator.alloc_block(256, 1)
    c = allocator.alloc_block(256, 1)
    allocator.dealloc_block(b, 256, 1)
    allocator.dealloc_block(a, 512, 1)
    allocator.dealloc_block(c, 256, 1)

    assert allocator.free_blocks() == [FreeBlock(BASE, 2048)]


def test_small_allocation_padded_to_block_size(allocator):
    first = allocator.alloc_block(1, 1)
    second = allocator.alloc_block(1, 1)
    assert first == BASE
    assert second == BASE + 16


def test_alignment_respected():
    heap = LinkedListAllocator()
    heap.init(BASE + 8, 4096)
    addr = heap.alloc_block(32, 64)
    assert addr % 64 == 0
    assert addr >= BASE + 8


def test_out_of_memory(allocator):
    with pytest.raises(MemoryError):
        allocator.alloc_block(4096, 1)


def test_region_too_small():
    heap = LinkedListAllocator()
    with pytest.raises(ValueError):
        heap.init(BASE, 8)


def test_bad_alignment(allocator):
    with pytest.raises(ValueError):
        allocator.alloc_block(16, 3)


def test_align_up():
    assert align_up(0x1001, 0x1000) == 0x2000
    assert align_up(0x1000, 0x1000) == 0x1000
    with pytest.raises(ValueError):
        align_up(10, 0)


def test_non_adjacent_free_regions_stay_separate():
    heap = LinkedListAllocator()
    heap.init(BASE, 64)
    heap.init(BASE + 1024, 64)
    assert heap.free_blocks() == [FreeBlock(BASE, 64), FreeBlock(BASE + 1024, 64)]


@given(st.data())
def test_free_in_any_order_restores_heap(data):
    sizes = data.draw(
        st.lists(st.sampled_from([16 * k for k in range(1, 17)]), min_size=1, max_size=8)
    )
    heap = LinkedListAllocator()
    heap.init(BASE, 2048)
    addresses = [heap.alloc_block(size, 1) for size in sizes]
    order = data.draw(st.permutations(range(len(sizes))))
    for index in order:
        heap.dealloc_block(addresses[index], sizes[index], 1)
    assert heap.free_blocks() == [FreeBlock(BASE, 2048)]