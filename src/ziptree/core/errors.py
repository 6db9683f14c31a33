"""Error taxonomy with friendly messages.

Every failure surfaced by ziptree belongs to exactly one ErrorKind so callers
(and the CLI) can tell causes apart without parsing messages.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    INVALID_ARGUMENT = "invalid_argument"
    UNSUPPORTED_PATH = "unsupported_path"
    PATH_TOO_LONG = "path_too_long"
    NOT_FOUND = "not_found"
    DIRECTORY_NOT_FOUND = "directory_not_found"
    ACCESS_DENIED = "access_denied"
    CORRUPT_ARCHIVE = "corrupt_archive"
    IO_FAILURE = "io_failure"
    CONFIG = "config"


EXIT_CODES: dict[ErrorKind, int] = {
    ErrorKind.INVALID_ARGUMENT: 2,
    ErrorKind.UNSUPPORTED_PATH: 3,
    ErrorKind.PATH_TOO_LONG: 4,
    ErrorKind.NOT_FOUND: 5,
    ErrorKind.DIRECTORY_NOT_FOUND: 6,
    ErrorKind.ACCESS_DENIED: 7,
    ErrorKind.CORRUPT_ARCHIVE: 8,
    ErrorKind.IO_FAILURE: 9,
    ErrorKind.CONFIG: 10,
}


class ZipTreeError(Exception):
    """Base exception for all ziptree errors."""

    kind: ErrorKind = ErrorKind.IO_FAILURE

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(message)

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message}\nSuggestion: {self.suggestion}"
        return self.message

    @property
    def exit_code(self) -> int:
        return EXIT_CODES[self.kind]


class ConfigError(ZipTreeError):
    """Configuration error."""

    kind = ErrorKind.CONFIG


class InvalidArgumentError(ZipTreeError):
    """Missing, blank or otherwise malformed argument."""

    kind = ErrorKind.INVALID_ARGUMENT


class UnsupportedPathError(ZipTreeError):
    """Path uses a format the host cannot interpret."""

    kind = ErrorKind.UNSUPPORTED_PATH

    def __init__(self, path: str) -> None:
        super().__init__(
            f"Path format is not supported: {path!r}",
            "Use a plain file-system path, not a URI",
        )


class PathTooLongError(ZipTreeError):
    """Path or one of its components exceeds the host limit."""

    kind = ErrorKind.PATH_TOO_LONG


class FileError(ZipTreeError):
    """File operation error."""

    pass


class NotFoundError(FileError):
    """Referenced file or entry does not exist."""

    kind = ErrorKind.NOT_FOUND


class DirectoryNotFoundError(FileError):
    """Source directory is absent or is not a directory."""

    kind = ErrorKind.DIRECTORY_NOT_FOUND

    def __init__(self, path: str) -> None:
        super().__init__(
            f"Directory not found: {path}",
            "Check that the source path exists and points at a directory",
        )


class AccessDeniedError(FileError):
    """Permission refused for read, write or create."""

    kind = ErrorKind.ACCESS_DENIED


class CorruptArchiveError(FileError):
    """Stream is not a structurally valid archive."""

    kind = ErrorKind.CORRUPT_ARCHIVE


class IOFailureError(FileError):
    """Any other I/O fault."""

    kind = ErrorKind.IO_FAILURE


class DiskFullError(IOFailureError):
    """Disk is full."""

    def __init__(self, path: str) -> None:
        super().__init__(
            f"Disk full: Cannot write to '{path}'",
            "Free up space and try again",
        )
