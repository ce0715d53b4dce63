from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, Dict, List, Tuple

from tumble.events.bus import (
    EVENT_BOARD_CHANGED,
    EVENT_BONUS_TRIGGERED,
    EVENT_GAME_STATE_CHANGED,
    EVENT_PACK_LOADED,
    EVENT_REPLAY_CLOSED,
    EVENT_REPLAY_OPENED,
    EVENT_SEQUENCE_COMPLETED,
    EVENT_STEP_STARTED,
    EVENT_WIN_INCREMENTED,
    EventBus,
)

logger = logging.getLogger("tumble.telemetry")

TRACKED_EVENTS = (
    EVENT_BOARD_CHANGED,
    EVENT_STEP_STARTED,
    EVENT_WIN_INCREMENTED,
    EVENT_BONUS_TRIGGERED,
    EVENT_SEQUENCE_COMPLETED,
    EVENT_GAME_STATE_CHANGED,
    EVENT_PACK_LOADED,
    EVENT_REPLAY_OPENED,
    EVENT_REPLAY_CLOSED,
)


def _describe(value: Any) -> Any:
    # Enums are logged by name so records stay readable.
    name = getattr(value, "name", None)
    if isinstance(name, str):
        return name
    return value


class TelemetrySystem:
    """Logs engine notifications with a per-process session id."""

    def __init__(self, event_bus: EventBus, *, session_id: str | None = None):
        self.event_bus = event_bus
        self.session_id = session_id or str(uuid.uuid4())
        self.records: List[Tuple[str, Dict[str, Any]]] = []
        self._handlers: List[Tuple[str, Callable]] = []
        for name in TRACKED_EVENTS:
            handler = self._make_handler(name)
            self.event_bus.subscribe(name, handler)
            self._handlers.append((name, handler))
        self._log("game_loaded", {})

    def _make_handler(self, name: str):
        def handler(sender, **payload):
            self._log(name, payload)
        return handler

    def _log(self, name: str, payload: Dict[str, Any]) -> None:
        cleaned = {key: _describe(value) for key, value in payload.items()}
        self.records.append((name, cleaned))
        logger.info("[telemetry] %s session=%s payload=%s", name, self.session_id, cleaned)

    def close(self) -> None:
        for name, handler in self._handlers:
            self.event_bus.unsubscribe(name, handler)
        self._handlers.clear()
