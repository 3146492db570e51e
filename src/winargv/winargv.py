"""Convenience entry points that pull settings from the config files.

``setup`` loads the layered configuration for a working directory and turns
on logging if a log path is configured. ``join_command_line`` builds a command
line under a config's size width and memory limit and hands back plain text,
releasing the buffer itself.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from winargv.core.builder import build_command_line
from winargv.core.config import Config, configure_logging, load_config
from winargv.core.quoting import Argument


def setup(cwd: Path | None = None) -> Config:
    """Load config for ``cwd`` and configure logging from it."""
    config = load_config(cwd if cwd is not None else Path.cwd())
    configure_logging(config)
    return config


def join_command_line(
    command: Argument | None,
    arguments: Iterable[Argument | None] | None = None,
    *,
    config: Config | None = None,
) -> str:
    """Build a command line and return it as text."""
    if config is None:
        config = Config()
    with build_command_line(
        command, arguments, allocator=config.allocator(), limits=config.limits()
    ) as line:
        return str(line)
