"""File-system boundary.

Archive services never call os/open directly; they receive a FileSystem at
construction. LocalFileSystem talks to the real disk, MemoryFileSystem
(see memory.py) keeps everything in a dict for tests and dry runs.
"""

from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import BinaryIO, Protocol, TypeAlias, runtime_checkable

from ziptree.core.logging import get_logger

from .ops import translate_os_errors
from .types import FileAttributes

_logger = get_logger(__name__)

StrPath: TypeAlias = str | os.PathLike[str]


@runtime_checkable
class FileSystem(Protocol):
    """Capabilities the archive services need from a file system.

    Implementations raise ziptree taxonomy errors (NotFoundError,
    AccessDeniedError, IOFailureError, ...), never raw OSError.
    """

    def exists(self, path: str) -> bool: ...

    def is_dir(self, path: str) -> bool: ...

    def create_directory(self, path: str) -> None: ...

    def open_read(self, path: str) -> BinaryIO: ...

    def open_write(self, path: str) -> BinaryIO: ...

    def list_files(self, directory: str, *, recursive: bool = True) -> list[str]: ...

    def get_attributes(self, path: str) -> FileAttributes: ...


class LocalFileSystem:
    """FileSystem backed by the host operating system.

    Accepts str or Path arguments; list_files always returns str paths
    rooted at the directory the caller passed in.
    """

    def exists(self, path: StrPath) -> bool:
        p = Path(path)
        return p.is_symlink() or p.exists()

    def is_dir(self, path: StrPath) -> bool:
        return Path(path).is_dir()

    def create_directory(self, path: StrPath) -> None:
        with translate_os_errors(str(path)):
            Path(path).mkdir(parents=True, exist_ok=True)

    def open_read(self, path: StrPath) -> BinaryIO:
        with translate_os_errors(str(path)):
            return Path(path).open("rb")

    def open_write(self, path: StrPath) -> BinaryIO:
        """Create or truncate path for binary writing."""
        with translate_os_errors(str(path)):
            return Path(path).open("wb")

    def list_files(self, directory: StrPath, *, recursive: bool = True) -> list[str]:
        """List files under directory, plus every link found in it.

        File links and directory links are both reported so callers can see
        (and skip) them; directory links are never descended into.
        """

        def _raise(e: OSError) -> None:
            raise e

        root = Path(directory)
        files: list[str] = []
        with translate_os_errors(str(directory)):
            for dirpath, dirnames, filenames in os.walk(root, onerror=_raise, followlinks=False):
                base = Path(dirpath)
                files.extend(str(base / name) for name in filenames)
                files.extend(str(base / name) for name in dirnames if _is_link(base / name))
                if not recursive:
                    break
        files.sort()
        _logger.debug(f"list_files directory={str(directory)!r} files={len(files)}")
        return files

    def get_attributes(self, path: StrPath) -> FileAttributes:
        p = Path(path)
        with translate_os_errors(str(path)):
            st = p.lstat()
        win_attrs = getattr(st, "st_file_attributes", 0)
        return FileAttributes(
            is_reparse_point=_stat_is_link(st),
            is_read_only=not (st.st_mode & stat.S_IWUSR)
            or bool(win_attrs & stat.FILE_ATTRIBUTE_READONLY),
            is_hidden=p.name.startswith(".") or bool(win_attrs & stat.FILE_ATTRIBUTE_HIDDEN),
            is_dir=stat.S_ISDIR(st.st_mode),
            size=int(st.st_size),
        )


def _stat_is_link(st: os.stat_result) -> bool:
    # Windows junctions are reparse points without S_IFLNK.
    win_attrs = getattr(st, "st_file_attributes", 0)
    return stat.S_ISLNK(st.st_mode) or bool(win_attrs & stat.FILE_ATTRIBUTE_REPARSE_POINT)


def _is_link(path: Path) -> bool:
    try:
        return _stat_is_link(path.lstat())
    except FileNotFoundError:
        return False
