"""Verbosity-gated logging for ziptree.

Every record is published to the LogBus. Console printing is off for library
use and switched on by the CLI (set_console). What each level shows:

    QUIET    warnings and errors
    NORMAL   one summary line per archive operation
    VERBOSE  skipped links and excluded files
    DEBUG    every entry copied

Usage:
    from ziptree.core.logging import get_logger

    log = get_logger(__name__)
    log.verbose(f"skip link: {rel}")
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING

from ziptree.core.log_bus import LogRecord, get_log_bus

if TYPE_CHECKING:
    from ziptree.core.config import LoggingPolicy


class VerbosityLevel(IntEnum):
    QUIET = 0
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3


@dataclass(frozen=True)
class _Level:
    name: str
    threshold: VerbosityLevel
    color: str
    to_stderr: bool = False


_DEBUG = _Level("DEBUG", VerbosityLevel.DEBUG, "\033[36m")
_VERBOSE = _Level("VERBOSE", VerbosityLevel.VERBOSE, "\033[34m")
_INFO = _Level("INFO", VerbosityLevel.NORMAL, "\033[32m")
_WARNING = _Level("WARNING", VerbosityLevel.QUIET, "\033[33m", to_stderr=True)
_ERROR = _Level("ERROR", VerbosityLevel.QUIET, "\033[31m", to_stderr=True)
_RESET = "\033[0m"


class _Settings:
    verbosity: VerbosityLevel = VerbosityLevel.NORMAL
    colors: bool = True
    console: bool = False


_settings = _Settings()


def set_verbosity(level: int | VerbosityLevel) -> None:
    _settings.verbosity = VerbosityLevel(level)


def get_verbosity() -> VerbosityLevel:
    return _settings.verbosity


def apply_logging_policy(policy: LoggingPolicy) -> None:
    """Apply a resolved logging.level (quiet | normal | verbose | debug)."""
    set_verbosity(VerbosityLevel[policy.level_name.upper()])


def set_colors(enabled: bool) -> None:
    """Color console lines; only takes effect on a TTY."""
    _settings.colors = enabled


def set_console(enabled: bool) -> None:
    """Print records to stdout (info and below) and stderr (warnings, errors)."""
    _settings.console = enabled


class ZipTreeLogger:
    def __init__(self, name: str) -> None:
        self.name = name

    def is_enabled_for(self, level: VerbosityLevel) -> bool:
        return level <= _settings.verbosity

    def debug(self, message: str) -> None:
        self._emit(_DEBUG, message)

    def verbose(self, message: str) -> None:
        self._emit(_VERBOSE, message)

    def info(self, message: str) -> None:
        self._emit(_INFO, message)

    def warning(self, message: str) -> None:
        self._emit(_WARNING, message)

    def error(self, message: str) -> None:
        self._emit(_ERROR, message)

    def _emit(self, level: _Level, message: str) -> None:
        if not self.is_enabled_for(level.threshold):
            return

        tag = f"[{level.name.lower()}]"
        plain = f"{tag} {message}"
        get_log_bus().publish(LogRecord(level_name=level.name, plain=plain, logger_name=self.name))

        if not _settings.console:
            return
        stream = sys.stderr if level.to_stderr else sys.stdout
        if _settings.colors and stream.isatty():
            print(f"{level.color}{tag}{_RESET} {message}", file=stream)
        else:
            print(plain, file=stream)


_loggers: dict[str, ZipTreeLogger] = {}


def get_logger(name: str = "ziptree") -> ZipTreeLogger:
    """Return the shared logger for name (usually __name__)."""
    logger = _loggers.get(name)
    if logger is None:
        logger = _loggers[name] = ZipTreeLogger(name)
    return logger
