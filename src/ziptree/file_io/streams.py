"""Streaming copy helpers.

Reads are attributed to src_path and writes to dst_path so an OSError
surfaces against the file that actually failed.
"""

from __future__ import annotations

import asyncio
from typing import BinaryIO

from .ops import translate_os_errors

DEFAULT_CHUNK_SIZE = 64 * 1024


def copy_stream(
    src: BinaryIO,
    dst: BinaryIO,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    src_path: str = "<source>",
    dst_path: str = "<destination>",
) -> int:
    """Copy src to dst end-to-end. Returns the number of bytes copied."""
    total = 0
    while True:
        with translate_os_errors(src_path):
            chunk = src.read(chunk_size)
        if not chunk:
            return total
        with translate_os_errors(dst_path):
            dst.write(chunk)
        total += len(chunk)


async def copy_stream_async(
    src: BinaryIO,
    dst: BinaryIO,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    src_path: str = "<source>",
    dst_path: str = "<destination>",
) -> int:
    """Like copy_stream, but every read and write is a suspension point.

    Blocking I/O runs in the default executor via asyncio.to_thread; chunks
    are still copied strictly in order.
    """
    total = 0
    while True:
        with translate_os_errors(src_path):
            chunk = await asyncio.to_thread(src.read, chunk_size)
        if not chunk:
            return total
        with translate_os_errors(dst_path):
            await asyncio.to_thread(dst.write, chunk)
        total += len(chunk)
