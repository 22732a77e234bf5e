import pytest
from hypothesis import given
from hypothesis import strategies as st

from luix.ring_buffer import RingBuffer


def test_push_pop():
    ring_buffer = RingBuffer(3)

    ring_buffer.push(1)
    assert ring_buffer.pop() == 1
    ring_buffer.push(2)
    assert ring_buffer.pop() == 2
    ring_buffer.push(3)
    assert ring_buffer.pop() == 3
    ring_buffer.push(4)
    ring_buffer.push(5)
    assert ring_buffer.pop() == 4
    assert ring_buffer.pop() == 5
    assert ring_buffer.pop() is None


def test_push_cycle():
    ring_buffer = RingBuffer(3)

    ring_buffer.push(1)
    ring_buffer.push(2)
    assert ring_buffer.pop() == 1
    assert ring_buffer.pop() == 2
    assert ring_buffer.pop() is None
    ring_buffer.push(3)
    ring_buffer.push(4)
    ring_buffer.push(5)
    ring_buffer.push(6)
    assert ring_buffer.pop() == 5
    assert ring_buffer.pop() == 6
    assert ring_buffer.pop() is None


def test_len():
    ring_buffer = RingBuffer(4)
    for value in range(10):
        ring_buffer.push(value)
    assert len(ring_buffer) == 3


def test_zero_capacity_rejected():
    with pytest.raises(ValueError):
        RingBuffer(0)