"""In-memory FileSystem.

Paths are normalized to absolute POSIX form internally; backslashes are
treated as separators. Files written through open_write become visible when
the stream is closed.
"""

from __future__ import annotations

import io
import posixpath
from dataclasses import dataclass
from typing import BinaryIO

from ziptree.core.errors import AccessDeniedError, IOFailureError, NotFoundError

from .types import FileAttributes


@dataclass
class _Node:
    data: bytes = b""
    read_only: bool = False
    hidden: bool = False
    link_target: str | None = None


def _norm(path: str) -> str:
    p = path.replace("\\", "/")
    if not p.startswith("/"):
        p = "/" + p
    return posixpath.normpath(p)


class _CommitOnClose(io.BytesIO):
    def __init__(self, fs: MemoryFileSystem, key: str) -> None:
        super().__init__()
        self._fs = fs
        self._key = key

    def close(self) -> None:
        if not self.closed:
            self._fs._files.setdefault(self._key, _Node()).data = self.getvalue()
        super().close()


class MemoryFileSystem:
    """FileSystem kept entirely in memory.

    Example:
        fs = MemoryFileSystem()
        fs.add_file("/src/a.txt", b"a")
        fs.add_symlink("/src/loop", "/src")
    """

    def __init__(self) -> None:
        self._files: dict[str, _Node] = {}
        self._dirs: set[str] = {"/"}

    # Setup helpers

    def add_file(
        self, path: str, data: bytes = b"", *, read_only: bool = False, hidden: bool = False
    ) -> None:
        key = _norm(path)
        self.create_directory(posixpath.dirname(key))
        self._files[key] = _Node(data=data, read_only=read_only, hidden=hidden)

    def add_symlink(self, path: str, target: str) -> None:
        """Add a link entry; it is listed like a file and flagged as a reparse point."""
        key = _norm(path)
        self.create_directory(posixpath.dirname(key))
        self._files[key] = _Node(link_target=target)

    def remove(self, path: str) -> None:
        key = _norm(path)
        if self._files.pop(key, None) is None:
            raise NotFoundError(f"Not found: {path}")

    def set_read_only(self, path: str, read_only: bool = True) -> None:
        self._node(path).read_only = read_only

    def read_bytes(self, path: str) -> bytes:
        return self._node(path).data

    # FileSystem protocol

    def exists(self, path: str) -> bool:
        key = _norm(path)
        return key in self._files or key in self._dirs

    def is_dir(self, path: str) -> bool:
        return _norm(path) in self._dirs

    def create_directory(self, path: str) -> None:
        key = _norm(path)
        chain = []
        while key not in self._dirs:
            if key in self._files:
                raise IOFailureError(f"Cannot create directory, a file exists: {path}")
            chain.append(key)
            key = posixpath.dirname(key)
        self._dirs.update(chain)

    def open_read(self, path: str) -> BinaryIO:
        if self.is_dir(path):
            raise IOFailureError(f"Is a directory: {path}")
        return io.BytesIO(self._node(path).data)

    def open_write(self, path: str) -> BinaryIO:
        key = _norm(path)
        if key in self._dirs:
            raise IOFailureError(f"Is a directory: {path}")
        if posixpath.dirname(key) not in self._dirs:
            raise NotFoundError(f"Parent directory not found: {path}")
        node = self._files.get(key)
        if node is not None and node.read_only:
            raise AccessDeniedError(f"Access denied: {path}")
        if node is None:
            self._files[key] = _Node()
        else:
            node.data = b""
        return _CommitOnClose(self, key)

    def list_files(self, directory: str, *, recursive: bool = True) -> list[str]:
        base = _norm(directory)
        if base not in self._dirs:
            raise NotFoundError(f"Not found: {directory}")
        out: list[str] = []
        for key in self._files:
            if posixpath.commonpath([base, key]) != base or key == base:
                continue
            rel = posixpath.relpath(key, base)
            if not recursive and "/" in rel:
                continue
            out.append(posixpath.join(directory, rel) if directory else rel)
        return sorted(out)

    def get_attributes(self, path: str) -> FileAttributes:
        key = _norm(path)
        if key in self._dirs:
            return FileAttributes(
                is_reparse_point=False,
                is_read_only=False,
                is_hidden=posixpath.basename(key).startswith("."),
                is_dir=True,
                size=0,
            )
        node = self._node(path)
        return FileAttributes(
            is_reparse_point=node.link_target is not None,
            is_read_only=node.read_only,
            is_hidden=node.hidden or posixpath.basename(key).startswith("."),
            is_dir=False,
            size=len(node.data),
        )

    def _node(self, path: str) -> _Node:
        node = self._files.get(_norm(path))
        if node is None:
            raise NotFoundError(f"Not found: {path}")
        return node
