"""
Shared test fixtures for winargv tests.
"""

import pytest
import structlog

from winargv.core.config import Config, configure_logging
from winargv.core.memory import HeapAllocator


def split_command_line(line: str) -> list[str]:
    """Split a command line the way the Windows argv parser does.

    Space and tab separate arguments outside quotes. ``"`` toggles quoting.
    2n backslashes before a quote become n backslashes and the quote toggles;
    2n+1 backslashes before a quote become n backslashes and a literal quote.
    Backslashes anywhere else are literal.
    """
    args = []
    i, n = 0, len(line)
    while True:
        while i < n and line[i] in " \t":
            i += 1
        if i >= n:
            return args

        current = []
        in_quotes = False
        while i < n:
            c = line[i]
            if c == "\\":
                start = i
                while i < n and line[i] == "\\":
                    i += 1
                count = i - start
                if i < n and line[i] == '"':
                    current.append("\\" * (count // 2))
                    if count % 2:
                        current.append('"')
                        i += 1
                else:
                    current.append("\\" * count)
            elif c == '"':
                in_quotes = not in_quotes
                i += 1
            elif c in " \t" and not in_quotes:
                break
            else:
                current.append(c)
                i += 1
        args.append("".join(current))


class RecordingAllocator(HeapAllocator):
    """HeapAllocator that remembers every request it was asked for."""

    def __init__(self, limit: int | None = None) -> None:
        super().__init__(limit)
        self.requests: list[int] = []

    def allocate(self, nbytes: int) -> bytearray:
        self.requests.append(nbytes)
        return super().allocate(nbytes)


@pytest.fixture
def allocator():
    return RecordingAllocator()


@pytest.fixture
def build(allocator):
    """Return a build_command_line wrapper that yields text and releases the buffer."""
    from winargv.core.builder import build_command_line

    def _build(command, arguments=None, **kwargs):
        kwargs.setdefault("allocator", allocator)
        with build_command_line(command, arguments, **kwargs) as line:
            return str(line)

    return _build


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    configure_logging(Config())
    structlog.reset_defaults()
