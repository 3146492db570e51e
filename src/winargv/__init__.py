"""
winargv - Windows command-line construction.

Joins a program path and its arguments into one command line that the
Windows argv parser splits back into exactly the same strings.
"""

from __future__ import annotations

__version__ = "0.1.0"

from winargv.core.builder import build_command_line
from winargv.core.errors import (
    CommandLineError,
    InvalidArgumentError,
    OutOfMemoryError,
    SizeOverflowError,
)
from winargv.core.limits import SizeLimits
from winargv.core.memory import CommandLine, HeapAllocator
from winargv.core.quoting import ArgumentPlan, escape_argument, measure_argument, quote_argument
from winargv.winargv import join_command_line, setup

__all__ = [
    "ArgumentPlan",
    "CommandLine",
    "CommandLineError",
    "HeapAllocator",
    "InvalidArgumentError",
    "OutOfMemoryError",
    "SizeLimits",
    "SizeOverflowError",
    "build_command_line",
    "escape_argument",
    "join_command_line",
    "measure_argument",
    "quote_argument",
    "setup",
    "__version__",
]
