"""Tests for the allocator and the owned command-line handle."""

import pytest

from winargv.core.errors import OutOfMemoryError
from winargv.core.memory import CODE_UNIT_SIZE, CommandLine, HeapAllocator


def make_line(allocator: HeapAllocator, text: str) -> CommandLine:
    units = [ord(c) for c in text] + [0]
    line = CommandLine(allocator.allocate(len(units) * CODE_UNIT_SIZE), allocator)
    for i, unit in enumerate(units):
        line._units[i] = unit
    return line


class TestHeapAllocator:
    def test_tracks_bytes_in_use(self):
        allocator = HeapAllocator()
        block = allocator.allocate(16)
        assert len(block) == 16
        assert allocator.in_use == 16
        assert allocator.outstanding == 1
        allocator.release(block)
        assert allocator.in_use == 0
        assert allocator.outstanding == 0

    def test_limit(self):
        allocator = HeapAllocator(limit=32)
        allocator.allocate(20)
        with pytest.raises(OutOfMemoryError) as exc:
            allocator.allocate(20)
        assert exc.value.nbytes == 20
        assert allocator.in_use == 20

    def test_unrepresentable_request(self):
        with pytest.raises(OutOfMemoryError):
            HeapAllocator().allocate(2**64 - 2)

    def test_release_foreign_block(self):
        with pytest.raises(ValueError):
            HeapAllocator().release(bytearray(4))

    def test_double_release(self):
        allocator = HeapAllocator()
        block = allocator.allocate(4)
        allocator.release(block)
        with pytest.raises(ValueError):
            allocator.release(block)

    def test_out_of_memory_is_a_memory_error(self):
        with pytest.raises(MemoryError):
            HeapAllocator(limit=0).allocate(1)


class TestCommandLine:
    def test_text_and_length(self):
        allocator = HeapAllocator()
        line = make_line(allocator, "app.exe x")
        assert str(line) == "app.exe x"
        assert len(line) == 9
        assert line.nbytes == 20
        line.release()

    def test_units_are_read_only_and_nul_terminated(self):
        allocator = HeapAllocator()
        line = make_line(allocator, "ab")
        units = line.units
        assert units.tolist() == [0x61, 0x62, 0]
        assert units.readonly
        line.release()

    def test_release_returns_memory(self):
        allocator = HeapAllocator()
        line = make_line(allocator, "ab")
        line.release()
        assert line.released
        assert allocator.in_use == 0

    def test_release_twice_is_harmless(self):
        allocator = HeapAllocator()
        line = make_line(allocator, "ab")
        line.release()
        line.release()
        assert allocator.outstanding == 0

    def test_released_line_is_unusable(self):
        line = make_line(HeapAllocator(), "ab")
        line.release()
        with pytest.raises(ValueError):
            str(line)
        with pytest.raises(ValueError):
            len(line)
        assert repr(line) == "CommandLine(<released>)"

    def test_context_manager_releases(self):
        allocator = HeapAllocator()
        with make_line(allocator, "ab") as line:
            assert str(line) == "ab"
        assert line.released
        assert allocator.in_use == 0

    def test_take_moves_ownership(self):
        allocator = HeapAllocator()
        line = make_line(allocator, "ab")
        moved = line.take()
        assert line.released
        assert str(moved) == "ab"
        assert allocator.outstanding == 1

        line.release()  # empty source releases nothing
        assert allocator.outstanding == 1
        moved.release()
        assert allocator.outstanding == 0

    def test_take_from_released_line(self):
        line = make_line(HeapAllocator(), "ab")
        line.release()
        with pytest.raises(ValueError):
            line.take()

    def test_repr(self):
        line = make_line(HeapAllocator(), "a b")
        assert repr(line) == "CommandLine('a b')"
        line.release()
