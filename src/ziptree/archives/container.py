"""Archive container boundary backed by the stdlib zipfile module.

The container format is treated as a black box: open a stream in a mode,
list entries, create entries, open entries for read or write, close.
An ArchiveHandle exclusively owns the stream it was opened over.
"""

from __future__ import annotations

import zipfile
import zlib
from collections.abc import Iterator
from contextlib import contextmanager
from types import TracebackType
from typing import BinaryIO, cast

from ziptree.core.errors import CorruptArchiveError, InvalidArgumentError, ZipTreeError
from ziptree.core.logging import get_logger
from ziptree.file_io.ops import translate_os_errors

from .types import ArchiveMode, Compression

_logger = get_logger(__name__)

# Fixed timestamp keeps output byte-identical for identical input trees.
_ZIP_DATE = (1980, 1, 1, 0, 0, 0)

_COMPRESS_TYPES = {
    Compression.STORED: zipfile.ZIP_STORED,
    Compression.DEFLATED: zipfile.ZIP_DEFLATED,
}


@contextmanager
def translate_archive_errors(name: str) -> Iterator[None]:
    """Re-raise container-level decoding failures as CorruptArchiveError."""
    try:
        yield
    except (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError) as e:
        raise CorruptArchiveError(
            f"Not a valid archive: {name} ({e})",
            "Check that the file is a complete ZIP archive",
        ) from e


class ArchiveEntry:
    """One named byte stream inside an archive."""

    def __init__(self, handle: ArchiveHandle, info: zipfile.ZipInfo) -> None:
        self._handle = handle
        self._info = info

    @property
    def name(self) -> str:
        return self._info.filename

    @property
    def is_dir(self) -> bool:
        return self._info.is_dir() or self._info.filename.endswith("\\")

    @property
    def size(self) -> int:
        return int(self._info.file_size)

    def open_read(self) -> BinaryIO:
        return self._handle._open_entry(self._info, "r")

    def open_write(self) -> BinaryIO:
        return self._handle._open_entry(self._info, "w")

    def __repr__(self) -> str:
        return f"ArchiveEntry(name={self.name!r}, size={self.size})"


class ArchiveHandle:
    """Open archive container.

    READ handles expose entries in stored order; CREATE handles accept new
    entries. Closing releases the underlying stream. Usable as a context
    manager.
    """

    def __init__(
        self,
        zf: zipfile.ZipFile,
        stream: BinaryIO,
        mode: ArchiveMode,
        *,
        name: str,
        compression: Compression,
    ) -> None:
        self._zf = zf
        self._stream = stream
        self._mode = mode
        self._name = name
        self._compression = compression
        self._closed = False
        self._entries: list[ArchiveEntry] = []
        if mode == ArchiveMode.READ:
            self._entries = [ArchiveEntry(self, info) for info in zf.infolist()]

    @property
    def mode(self) -> ArchiveMode:
        return self._mode

    @property
    def name(self) -> str:
        return self._name

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def entries(self) -> list[ArchiveEntry]:
        if self._mode != ArchiveMode.READ:
            raise InvalidArgumentError("Entries can only be listed on a read-mode archive")
        self._check_open()
        return list(self._entries)

    def create_entry(self, name: str, *, size: int = 0) -> ArchiveEntry:
        """Add a new entry named name (forward-slash form).

        size is a hint used to decide whether ZIP64 headers are needed.
        """
        if self._mode != ArchiveMode.CREATE:
            raise InvalidArgumentError("Entries can only be created on a create-mode archive")
        self._check_open()
        if not name or name.startswith("/"):
            raise InvalidArgumentError(f"Invalid entry name: {name!r}")
        info = zipfile.ZipInfo(filename=name, date_time=_ZIP_DATE)
        info.compress_type = _COMPRESS_TYPES[self._compression]
        info.file_size = size
        info.external_attr = 0o644 << 16
        return ArchiveEntry(self, info)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            with translate_os_errors(self._name):
                self._zf.close()
        finally:
            with translate_os_errors(self._name):
                self._stream.close()

    def __enter__(self) -> ArchiveHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.close()
        else:
            self.abort()

    def abort(self) -> None:
        """Close after a failure; a failing close is logged, never raised."""
        try:
            self.close()
        except ZipTreeError as close_err:
            _logger.warning(f"archive close failed after error: {close_err.message}")

    def _check_open(self) -> None:
        if self._closed:
            raise InvalidArgumentError(f"Archive is closed: {self._name}")

    def _open_entry(self, info: zipfile.ZipInfo, mode: str) -> BinaryIO:
        self._check_open()
        with translate_os_errors(self._name), translate_archive_errors(self._name):
            if mode == "r":
                return cast(BinaryIO, self._zf.open(info, "r"))
            return cast(BinaryIO, self._zf.open(info, "w"))


def open_archive(
    stream: BinaryIO,
    mode: ArchiveMode,
    *,
    name: str = "<stream>",
    compression: Compression = Compression.DEFLATED,
) -> ArchiveHandle:
    """Open stream as an archive; the returned handle owns the stream.

    The stream is closed before any error propagates.

    Raises:
        CorruptArchiveError: READ mode and stream is not a valid archive
        IOFailureError: the stream could not be read or written
    """
    try:
        with translate_os_errors(name), translate_archive_errors(name):
            zf = zipfile.ZipFile(
                stream,
                "r" if mode == ArchiveMode.READ else "w",
                compression=_COMPRESS_TYPES[compression],
                allowZip64=True,
            )
    except Exception:
        stream.close()
        raise
    return ArchiveHandle(zf, stream, mode, name=name, compression=compression)
