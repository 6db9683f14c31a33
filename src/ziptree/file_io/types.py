"""Types for the file-system boundary.

ASCII-only.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FileAttributes:
    """Attributes returned by FileSystem.get_attributes.

    is_reparse_point covers POSIX symlinks and Windows reparse points
    (symlinks, junctions); such entries are never followed or packed.
    """

    is_reparse_point: bool
    is_read_only: bool
    is_hidden: bool
    is_dir: bool
    size: int
