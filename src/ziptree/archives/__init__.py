"""Archive capability package."""

from .container import ArchiveEntry, ArchiveHandle, open_archive
from .service import ArchiveService
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

__all__ = [
    "ArchiveEntry",
    "ArchiveHandle",
    "ArchiveMode",
    "ArchiveService",
    "Compression",
    "OpEvent",
    "OpPhase",
    "PackPlan",
    "PackResult",
    "SourceFileRecord",
    "UnpackResult",
    "open_archive",
]
