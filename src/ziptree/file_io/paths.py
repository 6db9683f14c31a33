"""Path validation and separator normalization.

validate_path runs at the outer boundary of every public operation, before
the file system is touched. to_entry_name / to_host_path are the only places
where names cross between the archive's forward-slash form and host paths.
"""

from __future__ import annotations

import os
import re

from ziptree.core.errors import (
    CorruptArchiveError,
    InvalidArgumentError,
    PathTooLongError,
    UnsupportedPathError,
)

IS_WINDOWS = os.name == "nt"

MAX_COMPONENT_LENGTH = 255
MAX_PATH_LENGTH = 260 if IS_WINDOWS else 4096

ENTRY_SEPARATOR = "/"

if IS_WINDOWS:
    INVALID_PATH_CHARS = frozenset('"<>|' + "".join(chr(i) for i in range(32)))
else:
    INVALID_PATH_CHARS = frozenset("\0")

_URI_PREFIX = re.compile(r"^(?:[A-Za-z][A-Za-z0-9+.\-]*)?://")
_DRIVE_PREFIX = re.compile(r"^[A-Za-z]:")


def validate_path(path: str | os.PathLike[str] | None, *, name: str = "path") -> str:
    """Validate a caller-supplied path and return it unchanged.

    Raises:
        InvalidArgumentError: missing, blank, or containing a forbidden character
        UnsupportedPathError: URI-style or otherwise uninterpretable format
        PathTooLongError: longer than the host path or component limit
    """
    if path is None:
        raise InvalidArgumentError(f"{name} is required")
    if isinstance(path, os.PathLike):
        path = os.fspath(path)
    if not isinstance(path, str):
        raise InvalidArgumentError(f"{name} must be a string, got {type(path).__name__}")
    if not path.strip():
        raise InvalidArgumentError(f"{name} must not be empty or whitespace")

    bad = sorted({c for c in path if c in INVALID_PATH_CHARS})
    if bad:
        raise InvalidArgumentError(
            f"{name} contains invalid characters: {', '.join(repr(c) for c in bad)}"
        )

    if _URI_PREFIX.match(path):
        raise UnsupportedPathError(path)
    if IS_WINDOWS:
        rest = path[2:] if _DRIVE_PREFIX.match(path) else path
        if ":" in rest:
            raise UnsupportedPathError(path)

    if len(path) > MAX_PATH_LENGTH:
        raise PathTooLongError(
            f"{name} is {len(path)} characters long; the limit is {MAX_PATH_LENGTH}"
        )
    for part in re.split(r"[\\/]", path):
        if len(part) > MAX_COMPONENT_LENGTH:
            raise PathTooLongError(
                f"{name} has a component of {len(part)} characters; "
                f"the limit is {MAX_COMPONENT_LENGTH}"
            )
    return path


def to_entry_name(rel_path: str, *, sep: str = os.sep) -> str:
    """Rewrite a host relative path into the canonical archive entry name."""
    if sep == ENTRY_SEPARATOR:
        return rel_path
    return rel_path.replace(sep, ENTRY_SEPARATOR)


def to_host_path(entry_name: str, *, sep: str = os.sep) -> str:
    """Rewrite a stored entry name to the host separator convention.

    Both separators are accepted on input so archives written on Windows
    (backslash names) extract verbatim on POSIX and vice versa.
    """
    return entry_name.replace("\\", sep).replace("/", sep)


def resolve_entry_target(
    destination_dir: str, host_rel_path: str, *, windows: bool = IS_WINDOWS
) -> str:
    """Join an entry's host-relative path onto destination_dir.

    Raises:
        CorruptArchiveError: if the entry is absolute or climbs out of the
            destination through '..' segments, or (windows) names an
            alternate data stream with a ':' in any component.
    """
    parts = [p for p in re.split(r"[\\/]", host_rel_path) if p not in ("", ".")]
    if (
        os.path.isabs(host_rel_path)
        or host_rel_path.startswith(("/", "\\"))
        or _DRIVE_PREFIX.match(host_rel_path)
        or ".." in parts
        or (windows and any(":" in p for p in parts))
    ):
        raise CorruptArchiveError(
            f"Archive entry escapes destination: {host_rel_path!r}",
            "The archive was not produced by a trusted packer",
        )
    if not parts:
        raise CorruptArchiveError(f"Archive entry has an empty name: {host_rel_path!r}")
    return os.path.join(destination_dir, *parts)
