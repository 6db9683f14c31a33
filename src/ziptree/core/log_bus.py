"""Fan-out of log records to in-process subscribers.

The CLI and tests attach here to see exactly what ZipTreeLogger emitted,
independent of whether console output is enabled.
"""

from __future__ import annotations

import contextlib
import sys
import traceback
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class LogRecord:
    level_name: str  # DEBUG | VERBOSE | INFO | WARNING | ERROR
    plain: str  # uncolored "[level] message" line
    logger_name: str


LogSubscriber = Callable[[LogRecord], None]


class LogBus:
    def __init__(self) -> None:
        self._by_level: dict[str | None, list[LogSubscriber]] = {}

    def subscribe(self, cb: LogSubscriber, *, level_name: str | None = None) -> None:
        """Register cb for every record, or only for records of level_name."""
        self._by_level.setdefault(level_name, []).append(cb)

    def unsubscribe(self, cb: LogSubscriber) -> None:
        for subs in self._by_level.values():
            subs[:] = [s for s in subs if s != cb]

    def publish(self, record: LogRecord) -> None:
        targets = [*self._by_level.get(None, ()), *self._by_level.get(record.level_name, ())]
        for cb in targets:
            try:
                cb(record)
            except Exception:
                # Logging from here would recurse into publish.
                with contextlib.suppress(OSError):
                    sys.stderr.write(f"log subscriber {cb!r} failed:\n{traceback.format_exc()}")

    def clear(self) -> None:
        self._by_level.clear()


_bus: LogBus | None = None


def get_log_bus() -> LogBus:
    global _bus
    if _bus is None:
        _bus = LogBus()
    return _bus
