"""Operation diagnostics: canonical envelope and start/end observation."""

from __future__ import annotations

import time
import traceback
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any

from ziptree.core.events import OPERATION_END, OPERATION_START, get_event_bus
from ziptree.core.logging import get_logger

_logger = get_logger(__name__)

_SUMMARY_KEYS = ("files_count", "skipped_count", "entries_count", "bytes")


def build_envelope(
    *,
    event: str,
    component: str,
    operation: str,
    data: dict[str, Any],
) -> dict[str, Any]:
    """Build the canonical diagnostics envelope.

    Schema:
        {
          "event": "<string>",
          "component": "<string>",
          "operation": "<string>",
          "timestamp": "<iso8601 utc>",
          "data": { ... }
        }
    """
    ts = datetime.now(UTC).replace(microsecond=0).isoformat().replace("+00:00", "Z")
    return {
        "event": event,
        "component": component,
        "operation": operation,
        "timestamp": ts,
        "data": data,
    }


def short_traceback(*, max_lines: int = 20) -> str:
    tb_lines = traceback.format_exc().strip().splitlines()
    return "\n".join(tb_lines[-max_lines:])


def _publish(event: str, component: str, operation: str, data: dict[str, Any]) -> None:
    get_event_bus().publish(
        event,
        build_envelope(event=event, component=component, operation=operation, data=data),
    )


@contextmanager
def observe_operation(
    *,
    component: str,
    operation: str,
    base: dict[str, Any],
) -> Iterator[dict[str, Any]]:
    """Publish operation.start/operation.end around a block.

    The yielded dict collects summary fields that are merged into the end
    event and the single summary log line.
    """
    start = time.perf_counter()
    _publish(OPERATION_START, component, operation, dict(base))

    summary: dict[str, Any] = {}
    try:
        yield summary
    except Exception as e:
        duration_ms = int((time.perf_counter() - start) * 1000)
        end_data = dict(base)
        end_data.update(
            {
                "status": "failed",
                "duration_ms": duration_ms,
                "error_type": type(e).__name__,
                "error_message": str(e),
                "traceback": short_traceback(),
            }
        )
        _publish(OPERATION_END, component, operation, end_data)
        _logger.warning(
            f"{operation} status=failed duration_ms={duration_ms} "
            f"error_type={type(e).__name__!r} {_format_base(base)}"
        )
        raise
    else:
        duration_ms = int((time.perf_counter() - start) * 1000)
        end_data = dict(base)
        end_data.update(summary)
        end_data.update({"status": "succeeded", "duration_ms": duration_ms})
        _publish(OPERATION_END, component, operation, end_data)

        parts = ["status=succeeded", f"duration_ms={duration_ms}", _format_base(base)]
        for k in _SUMMARY_KEYS:
            if k in end_data:
                parts.append(f"{k}={end_data[k]!r}")
        _logger.info(f"{operation} " + " ".join(p for p in parts if p))


def _format_base(base: dict[str, Any]) -> str:
    return " ".join(f"{k}={v!r}" for k, v in base.items())
