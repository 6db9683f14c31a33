"""ziptree core: configuration, errors, logging and operation events."""

from ziptree.core.config import ConfigResolver, LoggingPolicy
from ziptree.core.errors import (
    AccessDeniedError,
    ConfigError,
    CorruptArchiveError,
    DirectoryNotFoundError,
    DiskFullError,
    ErrorKind,
    FileError,
    InvalidArgumentError,
    IOFailureError,
    NotFoundError,
    PathTooLongError,
    UnsupportedPathError,
    ZipTreeError,
)
from ziptree.core.events import EventBus, get_event_bus
from ziptree.core.logging import (
    VerbosityLevel,
    apply_logging_policy,
    get_logger,
    get_verbosity,
    set_colors,
    set_console,
    set_verbosity,
)

__all__ = [
    # Config
    "ConfigResolver",
    "LoggingPolicy",
    # Errors
    "AccessDeniedError",
    "ConfigError",
    "CorruptArchiveError",
    "DirectoryNotFoundError",
    "DiskFullError",
    "ErrorKind",
    "FileError",
    "IOFailureError",
    "InvalidArgumentError",
    "NotFoundError",
    "PathTooLongError",
    "UnsupportedPathError",
    "ZipTreeError",
    # Events
    "EventBus",
    "get_event_bus",
    # Logging
    "VerbosityLevel",
    "apply_logging_policy",
    "get_logger",
    "get_verbosity",
    "set_colors",
    "set_console",
    "set_verbosity",
]
