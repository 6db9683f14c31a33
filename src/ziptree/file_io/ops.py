"""OSError translation into the ziptree error taxonomy."""

from __future__ import annotations

import errno
from collections.abc import Iterator
from contextlib import contextmanager

from ziptree.core.errors import (
    AccessDeniedError,
    DiskFullError,
    IOFailureError,
    NotFoundError,
    PathTooLongError,
)

_NO_SPACE = {errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)}


def translate_os_error(e: OSError, path: str) -> Exception:
    """Map an OSError raised for path onto one taxonomy error."""
    if isinstance(e, FileNotFoundError):
        return NotFoundError(f"Not found: {path}")
    if isinstance(e, PermissionError):
        return AccessDeniedError(
            f"Access denied: {path}",
            "Check file permissions and the read-only attribute",
        )
    if e.errno in _NO_SPACE:
        return DiskFullError(path)
    if e.errno == errno.ENAMETOOLONG:
        return PathTooLongError(f"Path too long for the file system: {path}")
    return IOFailureError(f"I/O error on {path}: {e.strerror or e}")


@contextmanager
def translate_os_errors(path: str) -> Iterator[None]:
    """Re-raise any OSError in the block as its taxonomy error, chained."""
    try:
        yield
    except OSError as e:
        raise translate_os_error(e, path) from e
