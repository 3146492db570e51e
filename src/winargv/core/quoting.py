"""Argument quoting for the Windows argv-reconstruction convention.

Arguments with no whitespace or quote are copied verbatim. Anything else is
wrapped in double quotes, and backslashes are doubled wherever they end up in
front of a quote: before an embedded ``"`` (which also gets its own escaping
backslash) and at the end of the argument, where the closing quote follows.
Backslashes anywhere else are literal.

``measure_argument`` and ``escape_argument`` walk the same run scanner, so the
length one predicts is always the length the other writes.
"""

from __future__ import annotations

from array import array
from collections.abc import Iterator, MutableSequence, Sequence
from dataclasses import dataclass

from winargv.core.errors import InvalidArgumentError
from winargv.core.limits import DEFAULT_LIMITS, SizeLimits
from winargv.core.memory import NATIVE_UTF16

NUL = 0x00
TAB = 0x09
LF = 0x0A
VT = 0x0B
SPACE = 0x20
QUOTE = 0x22
BACKSLASH = 0x5C

# Units that force an argument into quotes
QUOTE_TRIGGERS = frozenset({SPACE, TAB, LF, VT, QUOTE})

Argument = str | Sequence[int]


@dataclass(frozen=True)
class ArgumentPlan:
    """How one argument will be emitted."""

    needs_quoting: bool
    length: int
    """Code units occupied in the output, not counting the joining space."""


def code_units(argument: Argument) -> array:
    """Convert an argument to UTF-16 code units, stopping at the first NUL."""
    if isinstance(argument, str):
        units = array("H", argument.encode(NATIVE_UTF16, "surrogatepass"))
    elif isinstance(argument, (bytes, bytearray, memoryview)):
        # array() reads a bytes-like as raw memory, not as one unit per item
        raise InvalidArgumentError(
            "argument must be a str or a sequence of 16-bit code units, not bytes",
            hint="decode the bytes to str first",
        )
    else:
        try:
            units = array("H", argument)
        except (OverflowError, TypeError, ValueError):
            raise InvalidArgumentError(
                "argument must be a str or a sequence of 16-bit code units"
            ) from None
    try:
        return units[: units.index(NUL)]
    except ValueError:
        return units


def _runs(units: Sequence[int]) -> Iterator[tuple[int, int | None]]:
    """Yield ``(backslashes, following_unit)`` pairs, ``None`` at end of string."""
    i = 0
    n = len(units)
    while i < n:
        start = i
        while i < n and units[i] == BACKSLASH:
            i += 1
        if i == n:
            yield i - start, None
            return
        yield i - start, units[i]
        i += 1


def _needs_quoting(units: Sequence[int]) -> bool:
    """True if any unit would split or end the argument when left unquoted."""
    return any(unit in QUOTE_TRIGGERS for unit in units)


def measure_argument(argument: Argument, limits: SizeLimits | None = None) -> ArgumentPlan:
    """Decide whether ``argument`` needs quoting and how long it will be.

    Raises SizeOverflowError if any intermediate length exceeds ``limits``.
    """
    limits = limits or DEFAULT_LIMITS
    units = code_units(argument)

    if not units:
        return ArgumentPlan(True, 2)
    if not _needs_quoting(units):
        return ArgumentPlan(False, limits.check(len(units)))

    length = 2  # Opening and closing quote
    for backslashes, unit in _runs(units):
        if unit is None:
            # Doubled, the closing quote follows
            length = limits.add(length, limits.mul(backslashes, 2))
        elif unit == QUOTE:
            # Doubled, plus one to escape the quote, plus the quote
            length = limits.add(length, limits.add(limits.mul(backslashes, 2), 2))
        else:
            length = limits.add(length, limits.add(backslashes, 1))
    return ArgumentPlan(True, length)


def _fill(dest: MutableSequence[int], pos: int, unit: int, count: int) -> int:
    for i in range(pos, pos + count):
        dest[i] = unit
    return pos + count


def escape_argument(dest: MutableSequence[int], pos: int, argument: Argument) -> int:
    """Write the quoted form of ``argument`` at ``dest[pos]``.

    Returns the position just past the closing quote. ``dest`` must have room
    for the length ``measure_argument`` reports.
    """
    units = code_units(argument)
    dest[pos] = QUOTE
    pos += 1
    for backslashes, unit in _runs(units):
        if unit is None:
            pos = _fill(dest, pos, BACKSLASH, backslashes * 2)
        elif unit == QUOTE:
            pos = _fill(dest, pos, BACKSLASH, backslashes * 2 + 1)
            dest[pos] = QUOTE
            pos += 1
        else:
            pos = _fill(dest, pos, BACKSLASH, backslashes)
            dest[pos] = unit
            pos += 1
    dest[pos] = QUOTE
    return pos + 1


def copy_argument(dest: MutableSequence[int], pos: int, argument: Argument) -> int:
    """Write ``argument`` verbatim at ``dest[pos]`` and return the end position."""
    units = code_units(argument)
    end = pos + len(units)
    dest[pos:end] = units
    return end


def write_argument(
    dest: MutableSequence[int], pos: int, argument: Argument, plan: ArgumentPlan
) -> int:
    if plan.needs_quoting:
        return escape_argument(dest, pos, argument)
    return copy_argument(dest, pos, argument)


def quote_argument(argument: Argument, limits: SizeLimits | None = None) -> str:
    """Return the emitted form of a single argument as text."""
    plan = measure_argument(argument, limits)
    dest = array("H", bytes(plan.length * 2))
    write_argument(dest, 0, argument, plan)
    return dest.tobytes().decode(NATIVE_UTF16, "surrogatepass")
