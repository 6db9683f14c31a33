"""ziptree - pack directory trees into ZIP archives and unpack them again.

Module-level helpers operate on the local disk; construct an ArchiveService
with another FileSystem (e.g. MemoryFileSystem) to redirect all I/O.
"""

from __future__ import annotations

__version__ = "1.0.0"

from ziptree.archives import ArchiveHandle, ArchiveService, PackResult, UnpackResult
from ziptree.file_io import LocalFileSystem, MemoryFileSystem


def open_for_read(path: str) -> ArchiveHandle:
    """Open the archive at path on the local disk for reading."""
    return ArchiveService(LocalFileSystem()).open_for_read(path)


def extract_to_directory(handle: ArchiveHandle, destination_dir: str) -> UnpackResult:
    """Extract every entry of handle under destination_dir on the local disk."""
    return ArchiveService(LocalFileSystem()).extract(handle, destination_dir)


async def create_from_directory(source_path: str, destination_path: str) -> PackResult:
    """Pack source_path into a new archive at destination_path on the local disk."""
    return await ArchiveService(LocalFileSystem()).create_from_directory(
        source_path, destination_path
    )


__all__ = [
    "ArchiveHandle",
    "ArchiveService",
    "LocalFileSystem",
    "MemoryFileSystem",
    "PackResult",
    "UnpackResult",
    "__version__",
    "create_from_directory",
    "extract_to_directory",
    "open_for_read",
]
