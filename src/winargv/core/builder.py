"""Command-line construction.

The build runs in two passes. The first measures the command and every
argument with checked arithmetic, so a size that cannot be represented is
rejected before anything is allocated. The second writes into a buffer of
exactly that size and cannot fail.
"""

from __future__ import annotations

from collections.abc import Iterable
from itertools import takewhile

from winargv.core.config import log_built, log_failed
from winargv.core.errors import CommandLineError, InvalidArgumentError
from winargv.core.limits import DEFAULT_LIMITS, SizeLimits
from winargv.core.memory import CODE_UNIT_SIZE, Allocator, CommandLine, HeapAllocator
from winargv.core.quoting import (
    NUL,
    SPACE,
    Argument,
    ArgumentPlan,
    code_units,
    measure_argument,
    write_argument,
)


def _until_sentinel(arguments: Iterable[Argument | None] | None) -> list[Argument]:
    """Arguments up to, not including, the first None entry."""
    if arguments is None:
        return []
    return list(takewhile(lambda argument: argument is not None, arguments))


def _measure(
    command: Argument, arguments: list[Argument], limits: SizeLimits
) -> tuple[ArgumentPlan, list[ArgumentPlan], int]:
    """Plan every piece and return the total length in code units, NUL included."""
    command_plan = measure_argument(command, limits)
    total = command_plan.length

    plans = []
    for argument in arguments:
        plan = measure_argument(argument, limits)
        # This argument plus its separating space
        total = limits.add(total, plan.length)
        total = limits.add(total, 1)
        plans.append(plan)

    total = limits.add(total, 1)  # NUL
    return command_plan, plans, total


def _build(
    command: Argument | None,
    arguments: Iterable[Argument | None] | None,
    allocator: Allocator,
    limits: SizeLimits,
) -> tuple[CommandLine, int]:
    if command is None:
        raise InvalidArgumentError(
            "command is required", hint="pass the program path as the first argument"
        )

    command = code_units(command)
    args = [code_units(argument) for argument in _until_sentinel(arguments)]

    command_plan, plans, total = _measure(command, args, limits)
    nbytes = limits.mul(total, CODE_UNIT_SIZE)

    line = CommandLine(allocator.allocate(nbytes), allocator)
    try:
        dest = line._units
        pos = write_argument(dest, 0, command, command_plan)
        for argument, plan in zip(args, plans):
            dest[pos] = SPACE
            pos = write_argument(dest, pos + 1, argument, plan)
        dest[pos] = NUL
        assert pos + 1 == total, f"wrote {pos + 1} code units, measured {total}"
    except BaseException:
        line.release()
        raise
    return line, len(args)


def build_command_line(
    command: Argument | None,
    arguments: Iterable[Argument | None] | None = None,
    *,
    allocator: Allocator | None = None,
    limits: SizeLimits | None = None,
) -> CommandLine:
    """Join ``command`` and ``arguments`` into one quoted command line.

    Each argument is quoted and escaped so that the Windows argv parser
    splits the result back into exactly ``[command, *arguments]``. A ``None``
    entry in ``arguments`` ends the list.

    Raises InvalidArgumentError if ``command`` is None, SizeOverflowError if
    the size does not fit ``limits``, and OutOfMemoryError if the allocator
    refuses the request. Nothing stays allocated after a failure.

    The caller owns the returned CommandLine and must release it.
    """
    if allocator is None:
        allocator = HeapAllocator()
    try:
        line, argc = _build(command, arguments, allocator, limits or DEFAULT_LIMITS)
    except CommandLineError as e:
        log_failed(e, e.status)
        raise
    log_built(argc, line)
    return line
