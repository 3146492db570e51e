"""Allocation domain and the owned command-line handle.

An allocator hands out raw byte blocks and takes them back. A
:class:`CommandLine` owns exactly one block and remembers which allocator it
came from, so releasing it always returns memory to the right place.
"""

from __future__ import annotations

import sys
from typing import Protocol

from winargv.core.errors import OutOfMemoryError

CODE_UNIT_SIZE = 2
NATIVE_UTF16 = "utf-16-le" if sys.byteorder == "little" else "utf-16-be"


class Allocator(Protocol):
    """Allocate N bytes or fail with OutOfMemoryError; release a block."""

    def allocate(self, nbytes: int) -> bytearray: ...

    def release(self, block: bytearray) -> None: ...


class HeapAllocator:
    """Allocator backed by ``bytearray`` with outstanding-byte accounting.

    ``limit`` caps the bytes that may be outstanding at once. Blocks stay
    referenced until released, so a dropped handle shows up in ``in_use``.
    """

    def __init__(self, limit: int | None = None) -> None:
        self.limit = limit
        self.in_use = 0
        self._blocks: dict[int, bytearray] = {}

    def allocate(self, nbytes: int) -> bytearray:
        if self.limit is not None and self.in_use + nbytes > self.limit:
            raise OutOfMemoryError(
                nbytes, hint=f"{self.in_use} of {self.limit} bytes already in use"
            )
        try:
            block = bytearray(nbytes)
        except (MemoryError, OverflowError):
            raise OutOfMemoryError(nbytes) from None
        self._blocks[id(block)] = block
        self.in_use += nbytes
        return block

    def release(self, block: bytearray) -> None:
        if self._blocks.pop(id(block), None) is None:
            raise ValueError("block was not allocated here or was already released")
        self.in_use -= len(block)

    @property
    def outstanding(self) -> int:
        """Number of blocks allocated and not yet released."""
        return len(self._blocks)


class CommandLine:
    """A NUL-terminated run of UTF-16 code units owned by the caller.

    The handle is move-only: :meth:`take` transfers the block to a new handle
    and leaves this one empty. Release it with :meth:`release` or by using it
    as a context manager.
    """

    __slots__ = ("_allocator", "_block", "_units")

    def __init__(self, block: bytearray, allocator: Allocator) -> None:
        self._allocator: Allocator | None = allocator
        self._block: bytearray | None = block
        self._units: memoryview | None = memoryview(block).cast("H")

    def _view(self) -> memoryview:
        if self._units is None:
            raise ValueError("command line has been released")
        return self._units

    @property
    def units(self) -> memoryview:
        """Read-only view of the code units, including the terminating NUL."""
        return self._view().toreadonly()

    @property
    def nbytes(self) -> int:
        return self._view().nbytes

    @property
    def released(self) -> bool:
        return self._units is None

    def __len__(self) -> int:
        return len(self._view()) - 1

    def __str__(self) -> str:
        return self._view()[:-1].tobytes().decode(NATIVE_UTF16, "surrogatepass")

    def __repr__(self) -> str:
        if self._units is None:
            return "CommandLine(<released>)"
        return f"CommandLine({str(self)!r})"

    def take(self) -> CommandLine:
        """Move ownership into a new handle."""
        self._view()
        moved = CommandLine.__new__(CommandLine)
        moved._allocator, moved._block, moved._units = (
            self._allocator,
            self._block,
            self._units,
        )
        self._allocator = self._block = self._units = None
        return moved

    def release(self) -> None:
        """Return the block to its allocator. Safe to call more than once."""
        if self._units is None:
            return
        self._units.release()
        block, allocator = self._block, self._allocator
        self._allocator = self._block = self._units = None
        allocator.release(block)

    def __enter__(self) -> CommandLine:
        return self

    def __exit__(self, *exc_info) -> None:
        self.release()
