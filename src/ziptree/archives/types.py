"""Archive capability types.

All public strings and paths must be ASCII-safe in logs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class ArchiveMode(StrEnum):
    READ = "read"
    CREATE = "create"


class Compression(StrEnum):
    STORED = "stored"
    DEFLATED = "deflated"


class OpPhase(StrEnum):
    PLANNED = "planned"
    STARTED = "started"
    OK = "ok"
    ERROR = "error"


@dataclass(frozen=True)
class OpEvent:
    op: str
    phase: OpPhase
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SourceFileRecord:
    """A file discovered in the source snapshot.

    rel_path uses the host separator; it becomes an entry name only
    through to_entry_name.
    """

    abs_path: str
    rel_path: str
    size: int


@dataclass(frozen=True)
class PackPlan:
    source_path: str
    entries: list[str]
    skipped_links: list[str]


@dataclass(frozen=True)
class PackResult:
    source_path: str
    destination_path: str
    compression: Compression
    files_packed: int
    total_bytes: int
    skipped_links: list[str]
    trace: list[OpEvent]


@dataclass(frozen=True)
class UnpackResult:
    destination_dir: str
    files_unpacked: int
    dirs_created: int
    total_bytes: int
    trace: list[OpEvent]
