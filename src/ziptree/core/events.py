"""Operation event bus.

Archive operations announce themselves here (see diagnostics.observe_operation);
listeners such as progress displays or audit sinks subscribe without the
services knowing about them. A listener that raises is logged and skipped.
"""

from __future__ import annotations

import traceback
from collections.abc import Callable
from typing import Any

from ziptree.core.logging import get_logger

OPERATION_START = "operation.start"
OPERATION_END = "operation.end"

EventListener = Callable[[dict[str, Any]], None]
WildcardListener = Callable[[str, dict[str, Any]], None]

_logger = get_logger(__name__)


class EventBus:
    """Named-event fan-out.

    Example:
        def on_end(envelope):
            print(envelope["operation"], envelope["data"]["status"])

        get_event_bus().subscribe(OPERATION_END, on_end)
    """

    def __init__(self) -> None:
        # (event name, listener); a None name marks a wildcard listener.
        self._listeners: list[tuple[str | None, Callable[..., None]]] = []

    def subscribe(self, event: str, callback: EventListener) -> None:
        self._listeners.append((event, callback))

    def subscribe_all(self, callback: WildcardListener) -> None:
        """Receive every event as callback(event_name, envelope)."""
        self._listeners.append((None, callback))

    def unsubscribe(self, event: str, callback: EventListener) -> None:
        """Drop callback from event; unknown pairs are ignored."""
        self._listeners = [
            (name, cb) for name, cb in self._listeners if not (name == event and cb == callback)
        ]

    def publish(self, event: str, data: dict[str, Any] | None = None) -> None:
        payload = data if data is not None else {}
        for name, cb in list(self._listeners):
            if name is None:
                self._deliver(event, cb, event, payload)
            elif name == event:
                self._deliver(event, cb, payload)

    def clear(self) -> None:
        self._listeners.clear()

    @staticmethod
    def _deliver(event: str, cb: Callable[..., None], *args: Any) -> None:
        try:
            cb(*args)
        except Exception as e:
            _logger.error(
                f"listener {getattr(cb, '__name__', cb)!r} failed on {event!r}: "
                f"{type(e).__name__}: {e}\n{traceback.format_exc()}"
            )


_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Process-wide bus used by the archive services."""
    global _bus
    if _bus is None:
        _bus = EventBus()
    return _bus
