"""winargv configuration and logging."""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TextIO

import structlog

from winargv.core.limits import SIZE_BITS, SizeLimits
from winargv.core.memory import CommandLine, HeapAllocator

USER_CONFIG = Path.home() / ".winargv" / "config"
PROJECT_CONFIG_NAME = ".winargv"
ENV_CONFIG = "WINARGV_CONFIG"


@dataclass
class Config:
    """Parsed configuration."""

    size_bits: int | None = None  # None = 64
    """Width of the size type every length computation is checked against."""

    memory_limit: int | None = None  # None = unbounded
    log: Path | None = None  # None = no logging
    log_full: bool = False  # log command-line text (requires log path)

    def limits(self) -> SizeLimits:
        return SizeLimits(self.size_bits or 64)

    def allocator(self) -> HeapAllocator:
        return HeapAllocator(self.memory_limit)


# === Config Loading ===


def _find_project_config(cwd: Path) -> Path | None:
    """Walk up from cwd to find .winargv file."""
    current = cwd.resolve()
    while True:
        candidate = current / PROJECT_CONFIG_NAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:  # reached root
            return None
        current = parent


def _merge_configs(base: Config, overlay: Config) -> Config:
    """Merge overlay config into base. Settings the overlay sets win."""
    return replace(
        base,
        size_bits=overlay.size_bits
        if overlay.size_bits is not None
        else base.size_bits,
        memory_limit=overlay.memory_limit
        if overlay.memory_limit is not None
        else base.memory_limit,
        log=overlay.log if overlay.log is not None else base.log,
        log_full=overlay.log_full if overlay.log_full else base.log_full,
    )


def load_config(cwd: Path) -> Config:
    """Load config from ~/.winargv/config, .winargv, and $WINARGV_CONFIG. Last one wins."""
    config = Config()

    # 1. User config (lowest priority)
    if USER_CONFIG.is_file():
        config = _merge_configs(config, parse_config(USER_CONFIG.read_text()))

    # 2. Project config (walk up from cwd)
    project_path = _find_project_config(cwd)
    if project_path is not None:
        config = _merge_configs(config, parse_config(project_path.read_text()))

    # 3. Env override (highest priority)
    env_path = os.environ.get(ENV_CONFIG)
    if env_path:
        env_config_path = Path(env_path).expanduser()
        if env_config_path.is_file():
            config = _merge_configs(config, parse_config(env_config_path.read_text()))

    return config


def parse_config(text: str) -> Config:
    """Parse config text into Config object. Raises ValueError on syntax errors."""
    settings: dict[str, bool | int | Path] = {}

    for lineno, raw_line in enumerate(text.splitlines(), 1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        parts = line.split(None, 1)
        directive = parts[0].lower()
        rest = parts[1].strip() if len(parts) > 1 else ""

        try:
            if directive == "set":
                _apply_setting(settings, rest)
            else:
                raise ValueError(f"unknown directive '{directive}'")
        except ValueError as e:
            raise ValueError(f"line {lineno}: {e}") from None

    return Config(
        size_bits=settings.get("size_bits"),
        memory_limit=settings.get("memory_limit"),
        log=settings.get("log"),
        log_full=settings.get("log_full", False),
    )


def _parse_int(key: str, value: str | None) -> int:
    if value is None:
        raise ValueError(f"'{key}' requires a number")
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"'{key}' requires a number, got '{value}'") from None


def _apply_setting(settings: dict[str, bool | int | Path], rest: str) -> None:
    """Parse and apply a 'set' directive. Raises ValueError on invalid setting."""
    if not rest:
        raise ValueError("'set' requires a setting name")

    parts = rest.split(None, 1)
    key = parts[0].lower()
    value = parts[1] if len(parts) > 1 else None
    key_normalized = key.replace("-", "_")

    if key_normalized == "log_full":
        if value is not None:
            raise ValueError(f"'{key}' takes no value")
        settings[key_normalized] = True

    elif key_normalized == "size_bits":
        bits = _parse_int(key, value)
        if bits not in SIZE_BITS:
            raise ValueError(f"'size-bits' must be one of 16, 32, 64, got '{value}'")
        settings[key_normalized] = bits

    elif key_normalized == "memory_limit":
        limit = _parse_int(key, value)
        if limit < 0:
            raise ValueError(f"'memory-limit' must not be negative, got '{value}'")
        settings[key_normalized] = limit

    elif key_normalized == "log":
        if value is None:
            raise ValueError("'log' requires a path")
        settings[key_normalized] = Path(value).expanduser()

    else:
        raise ValueError(f"unknown setting '{key}'")


# === Logging ===

_logger: structlog.BoundLogger | None = None
_log_file: TextIO | None = None
_log_full = False


def configure_logging(config: Config) -> None:
    """Configure logging based on config settings. Call once at startup."""
    global _logger, _log_file, _log_full
    if _log_file is not None:
        _log_file.close()
        _log_file = None
    _log_full = config.log_full
    if config.log is None:
        _logger = None
        return

    # Ensure log directory exists
    config.log.parent.mkdir(parents=True, exist_ok=True)
    _log_file = config.log.open("a")

    # JSON lines to the log file
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso", key="ts"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.BoundLogger,
        logger_factory=structlog.PrintLoggerFactory(file=_log_file),
        cache_logger_on_first_use=False,
    )
    _logger = structlog.get_logger()


def log_built(argc: int, line: CommandLine) -> None:
    """Log a successful build. No-op if logging not configured."""
    if _logger is None:
        return
    entry: dict[str, int | str] = {"argc": argc, "length": len(line), "nbytes": line.nbytes}
    if _log_full:
        entry["command_line"] = str(line)
    _logger.info("built", **entry)


def log_failed(error: Exception, status: int) -> None:
    """Log a failed build. No-op if logging not configured."""
    if _logger is None:
        return
    _logger.warning(
        "failed", error=type(error).__name__, status=f"0x{status:08X}", reason=str(error)
    )
