"""Archive capability service.

Packs a directory tree into a ZIP archive and extracts archives back onto a
file system. Every file-system call goes through the injected FileSystem;
every public operation validates its path arguments before touching it.

Snapshot consistency: the source tree is enumerated exactly once, before
the first entry is written. Files created later are not packed; files
removed later fail the call with NotFoundError/IOFailureError for that file.
Callers wanting best-effort packing catch and continue themselves.
"""

from __future__ import annotations

import asyncio
import os
from typing import Any, BinaryIO

from ziptree.core.config import ALLOWED_COMPRESSION, ConfigResolver
from ziptree.core.diagnostics import observe_operation, short_traceback
from ziptree.core.errors import (
    DirectoryNotFoundError,
    InvalidArgumentError,
    IOFailureError,
    ZipTreeError,
)
from ziptree.core.logging import get_logger
from ziptree.file_io.ops import translate_os_errors
from ziptree.file_io.paths import (
    resolve_entry_target,
    to_entry_name,
    to_host_path,
    validate_path,
)
from ziptree.file_io.service import FileSystem, LocalFileSystem
from ziptree.file_io.streams import DEFAULT_CHUNK_SIZE, copy_stream, copy_stream_async

from .container import ArchiveHandle, open_archive, translate_archive_errors
from .types import (
    ArchiveMode,
    Compression,
    OpEvent,
    OpPhase,
    PackPlan,
    PackResult,
    SourceFileRecord,
    UnpackResult,
)

log = get_logger(__name__)

_COMPONENT = "archives"


class ArchiveService:
    """Archive capability.

    Stateless between calls: each operation owns its handle and streams for
    its own duration only.
    """

    def __init__(
        self,
        file_system: FileSystem | None = None,
        resolver: ConfigResolver | None = None,
    ) -> None:
        self._fs: FileSystem = file_system if file_system is not None else LocalFileSystem()
        self._resolver = resolver or ConfigResolver(cli_args={})

    @property
    def file_system(self) -> FileSystem:
        return self._fs

    def open_for_read(self, path: str) -> ArchiveHandle:
        """Open an existing archive for reading.

        The caller owns the returned handle and must close it (or use it as
        a context manager).

        Raises:
            InvalidArgumentError, UnsupportedPathError, PathTooLongError
            NotFoundError: path does not exist
            AccessDeniedError: read permission refused
            IOFailureError: any other I/O error while opening
            CorruptArchiveError: content is not a valid archive
        """
        path = validate_path(path, name="archive_path")
        with observe_operation(
            component=_COMPONENT, operation="archives.open_read", base={"path": path}
        ) as summary:
            stream = self._fs.open_read(path)
            handle = open_archive(stream, ArchiveMode.READ, name=path)
            summary["entries_count"] = len(handle.entries)
            return handle

    def list_entries(self, path: str) -> list[str]:
        """Return stored entry names of the archive at path, in stored order."""
        with self.open_for_read(path) as handle:
            return [e.name for e in handle.entries]

    def extract(self, handle: ArchiveHandle, destination_dir: str) -> UnpackResult:
        """Materialize every entry of handle under destination_dir.

        destination_dir is created when missing. Already written files are
        left in place when a later entry fails.
        """
        if handle is None:
            raise InvalidArgumentError("handle is required")
        destination_dir = validate_path(destination_dir, name="destination_dir")
        if handle.mode != ArchiveMode.READ:
            raise InvalidArgumentError("Only read-mode archives can be extracted")

        include_trace, include_stack, chunk_size = self._debug_options()
        trace: list[OpEvent] = [
            OpEvent(op="unpack", phase=OpPhase.PLANNED, details={"archive": handle.name})
        ]
        with observe_operation(
            component=_COMPONENT,
            operation="archives.extract",
            base={"archive": handle.name, "destination_dir": destination_dir},
        ) as summary:
            try:
                files, dirs, total = self._extract_entries(handle, destination_dir, chunk_size)
            except Exception as e:
                trace.append(_error_event("unpack", e, include_stack))
                if isinstance(e, ZipTreeError):
                    raise
                raise IOFailureError(str(e)) from e
            trace.append(
                OpEvent(op="unpack", phase=OpPhase.OK, details={"files": files, "bytes": total})
            )
            summary["files_count"] = files
            summary["bytes"] = total
            return UnpackResult(
                destination_dir=destination_dir,
                files_unpacked=files,
                dirs_created=dirs,
                total_bytes=total,
                trace=trace if include_trace else [],
            )

    def plan_pack(self, source_path: str) -> PackPlan:
        """Dry run of create_from_directory: entry names that would be written."""
        source_path = validate_path(source_path, name="source_path")
        records, skipped = self._snapshot(source_path, exclude=None)
        return PackPlan(
            source_path=source_path,
            entries=[to_entry_name(r.rel_path) for r in records],
            skipped_links=skipped,
        )

    async def create_from_directory(self, source_path: str, destination_path: str) -> PackResult:
        """Create (or overwrite) destination_path with every file under source_path.

        Symlinks and reparse points are never packed and never descended
        into. Returns once the archive is fully written and closed.

        Raises:
            InvalidArgumentError, UnsupportedPathError, PathTooLongError
            DirectoryNotFoundError: source_path missing or not a directory
            AccessDeniedError: destination not writable or a source file not readable
            NotFoundError: a snapshotted file disappeared before it was read
            IOFailureError: any other I/O error, including a full disk
        """
        source_path = validate_path(source_path, name="source_path")
        destination_path = validate_path(destination_path, name="destination_path")

        include_trace, include_stack, chunk_size = self._debug_options()
        compression = Compression(
            self._resolver.resolve_choice(
                "archives.compression", ALLOWED_COMPRESSION, Compression.DEFLATED.value
            )
        )
        trace: list[OpEvent] = []

        with observe_operation(
            component=_COMPONENT,
            operation="archives.create_from_directory",
            base={"source_path": source_path, "destination_path": destination_path},
        ) as summary:
            records, skipped = await asyncio.to_thread(
                self._snapshot, source_path, destination_path
            )
            trace.append(
                OpEvent(
                    op="pack",
                    phase=OpPhase.PLANNED,
                    details={"files": len(records), "skipped": len(skipped)},
                )
            )
            try:
                total = await self._write_archive(
                    records, destination_path, compression, chunk_size
                )
            except Exception as e:
                trace.append(_error_event("pack", e, include_stack))
                if isinstance(e, ZipTreeError):
                    raise
                raise IOFailureError(str(e)) from e

            trace.append(
                OpEvent(
                    op="pack",
                    phase=OpPhase.OK,
                    details={"files": len(records), "bytes": total},
                )
            )
            summary["files_count"] = len(records)
            summary["skipped_count"] = len(skipped)
            summary["bytes"] = total
            return PackResult(
                source_path=source_path,
                destination_path=destination_path,
                compression=compression,
                files_packed=len(records),
                total_bytes=total,
                skipped_links=skipped,
                trace=trace if include_trace else [],
            )

    def _snapshot(
        self, source_path: str, exclude: str | None
    ) -> tuple[list[SourceFileRecord], list[str]]:
        """Enumerate source_path once.

        Returns (records sorted by entry name, skipped link rel paths).
        exclude drops the destination archive when it lives inside the
        source tree.
        """
        if not self._fs.is_dir(source_path):
            raise DirectoryNotFoundError(source_path)

        exclude_key = _same_file_key(exclude) if exclude is not None else None
        records: list[SourceFileRecord] = []
        skipped: list[str] = []
        for path in self._fs.list_files(source_path, recursive=True):
            rel = os.path.relpath(path, source_path)
            attrs = self._fs.get_attributes(path)
            if attrs.is_reparse_point:
                log.verbose(f"skip link: {rel}")
                skipped.append(to_entry_name(rel))
                continue
            if attrs.is_dir:
                continue
            if exclude_key is not None and _same_file_key(path) == exclude_key:
                log.verbose(f"skip destination archive inside source: {rel}")
                continue
            records.append(SourceFileRecord(abs_path=path, rel_path=rel, size=attrs.size))

        records.sort(key=lambda r: to_entry_name(r.rel_path))
        return records, sorted(skipped)

    async def _write_archive(
        self,
        records: list[SourceFileRecord],
        destination_path: str,
        compression: Compression,
        chunk_size: int,
    ) -> int:
        """Write every record into a new archive at destination_path.

        Opening, header writes and the final central-directory write all
        run in worker threads; the event loop only sequences them.
        """
        stream = await asyncio.to_thread(self._fs.open_write, destination_path)
        archive = await asyncio.to_thread(
            open_archive,
            stream,
            ArchiveMode.CREATE,
            name=destination_path,
            compression=compression,
        )
        total = 0
        try:
            for record in records:
                total += await self._add_file(archive, record, destination_path, chunk_size)
        except BaseException:
            await asyncio.to_thread(archive.abort)
            raise
        await asyncio.to_thread(archive.close)
        return total

    async def _add_file(
        self,
        archive: ArchiveHandle,
        record: SourceFileRecord,
        destination_path: str,
        chunk_size: int,
    ) -> int:
        entry_name = to_entry_name(record.rel_path)
        # Open the source first so a vanished file never leaves an empty entry.
        src = await asyncio.to_thread(self._fs.open_read, record.abs_path)
        try:
            dst = await asyncio.to_thread(_open_entry_writer, archive, entry_name, record.size)
            try:
                n = await copy_stream_async(
                    src,
                    dst,
                    chunk_size=chunk_size,
                    src_path=record.abs_path,
                    dst_path=destination_path,
                )
            finally:
                # Closing the entry writer flushes compressed data and patches sizes.
                with translate_os_errors(destination_path):
                    await asyncio.to_thread(dst.close)
        finally:
            await asyncio.to_thread(src.close)
        log.debug(f"packed {entry_name} bytes={n}")
        return n

    def _extract_entries(
        self, handle: ArchiveHandle, destination_dir: str, chunk_size: int
    ) -> tuple[int, int, int]:
        if not self._fs.is_dir(destination_dir):
            self._fs.create_directory(destination_dir)

        files = 0
        dirs = 0
        total = 0
        for entry in handle.entries:
            target = resolve_entry_target(destination_dir, to_host_path(entry.name))
            if entry.is_dir:
                self._fs.create_directory(target)
                dirs += 1
                continue

            parent = os.path.dirname(target)
            if parent and not self._fs.is_dir(parent):
                self._fs.create_directory(parent)

            with (
                entry.open_read() as src,
                self._fs.open_write(target) as dst,
                translate_archive_errors(handle.name),
            ):
                total += copy_stream(
                    src, dst, chunk_size=chunk_size, src_path=handle.name, dst_path=target
                )
            files += 1
            log.debug(f"extracted {entry.name} -> {target}")
        return files, dirs, total

    def _debug_options(self) -> tuple[bool, bool, int]:
        return (
            self._resolver.resolve_bool("archives.debug.include_trace", False),
            self._resolver.resolve_bool("archives.debug.include_stack", False),
            self._resolver.resolve_int("archives.chunk_size", DEFAULT_CHUNK_SIZE),
        )


def _error_event(op: str, e: Exception, include_stack: bool) -> OpEvent:
    details: dict[str, Any] = {"error": str(e), "error_type": type(e).__name__}
    if include_stack:
        details["stack"] = short_traceback()
    return OpEvent(op=op, phase=OpPhase.ERROR, details=details)


def _same_file_key(path: str) -> str:
    return os.path.normcase(os.path.abspath(path))


def _open_entry_writer(archive: ArchiveHandle, name: str, size: int) -> BinaryIO:
    return archive.create_entry(name, size=size).open_write()
