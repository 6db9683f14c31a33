"""File-system boundary package."""

from .memory import MemoryFileSystem
from .paths import to_entry_name, to_host_path, validate_path
from .service import FileSystem, LocalFileSystem
from .types import FileAttributes

__all__ = [
    "FileAttributes",
    "FileSystem",
    "LocalFileSystem",
    "MemoryFileSystem",
    "to_entry_name",
    "to_host_path",
    "validate_path",
]
