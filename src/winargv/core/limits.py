"""Overflow-checked size arithmetic.

Python integers never wrap, so the unsigned size type being emulated is made
explicit: a :class:`SizeLimits` knows its width and refuses any result that
would not fit.
"""

from __future__ import annotations

from dataclasses import dataclass

from winargv.core.errors import SizeOverflowError

SIZE_BITS = (16, 32, 64)


@dataclass(frozen=True)
class SizeLimits:
    """Checked add/multiply over an unsigned size of ``bits`` width."""

    bits: int = 64

    def __post_init__(self) -> None:
        if self.bits not in SIZE_BITS:
            raise ValueError(f"size width must be one of {SIZE_BITS}, got {self.bits}")

    @property
    def max(self) -> int:
        return (1 << self.bits) - 1

    def check(self, value: int) -> int:
        """Return ``value`` if it is representable, else raise."""
        if value < 0 or value > self.max:
            raise SizeOverflowError(
                f"size {value} does not fit in {self.bits} bits", limit=self.max
            )
        return value

    def add(self, a: int, b: int) -> int:
        result = a + b
        if result > self.max:
            raise SizeOverflowError(
                f"{a} + {b} overflows a {self.bits}-bit size",
                operands=(a, b),
                limit=self.max,
            )
        return result

    def mul(self, a: int, b: int) -> int:
        result = a * b
        if result > self.max:
            raise SizeOverflowError(
                f"{a} * {b} overflows a {self.bits}-bit size",
                operands=(a, b),
                limit=self.max,
            )
        return result


DEFAULT_LIMITS = SizeLimits()
