"""Exception hierarchy for command-line construction.

Every failure of a build maps to exactly one subclass of
:class:`CommandLineError`. Each carries the HRESULT-style ``status`` that the
Windows convention reports for the same condition, so callers bridging to
native code can pass it through unchanged.

Hierarchy
---------
CommandLineError
├── InvalidArgumentError   (E_INVALIDARG)
├── SizeOverflowError      (INTSAFE_E_ARITHMETIC_OVERFLOW)
└── OutOfMemoryError       (E_OUTOFMEMORY)
"""

from __future__ import annotations

E_INVALIDARG = 0x80070057
E_OUTOFMEMORY = 0x8007000E
INTSAFE_E_ARITHMETIC_OVERFLOW = 0x80070216


class CommandLineError(Exception):
    """Base exception for all winargv errors."""

    status: int = 0x80004005  # E_FAIL

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional guidance for the caller."""


class InvalidArgumentError(CommandLineError, ValueError):
    """Raised when the command is missing. Nothing has been allocated."""

    status = E_INVALIDARG


class SizeOverflowError(CommandLineError, OverflowError):
    """Raised when a length or byte-size computation exceeds the size limit."""

    status = INTSAFE_E_ARITHMETIC_OVERFLOW

    def __init__(
        self,
        message: str,
        *,
        operands: tuple[int, int] | None = None,
        limit: int | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.operands = operands
        self.limit = limit


class OutOfMemoryError(CommandLineError, MemoryError):
    """Raised when the allocator cannot satisfy a byte request."""

    status = E_OUTOFMEMORY

    def __init__(self, nbytes: int, *, hint: str | None = None) -> None:
        super().__init__(f"cannot allocate {nbytes} bytes", hint=hint)
        self.nbytes = nbytes
