"""
Append-only log of every protocol event a session sends or receives.
"""

import logging
import time
import uuid
from typing import Any, Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from app.config.constants import LOGGER_NAME
from app.models.transcript import format_timestamp

logger = logging.getLogger(LOGGER_NAME)

Direction = Literal["client", "server"]


class LoggedEvent(BaseModel):
    id: str
    direction: Direction
    event_name: str
    payload: Dict[str, Any] = Field(default_factory=dict)
    timestamp: str
    created_at_ms: int
    expanded: bool = False


class EventLog:
    """
    Raw record of the session's protocol traffic.

    Entries are never merged or edited; the only mutable field is the UI expand flag.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or time.time
        self._events: List[LoggedEvent] = []

    def __len__(self) -> int:
        return len(self._events)

    @property
    def events(self) -> List[LoggedEvent]:
        return list(self._events)

    def record(self, direction: Direction, event_name: str, payload: Dict[str, Any]) -> LoggedEvent:
        created_at_ms = int(self._clock() * 1000)
        event = LoggedEvent(
            id=payload.get("event_id") or str(uuid.uuid4()),
            direction=direction,
            event_name=event_name,
            payload=payload,
            timestamp=format_timestamp(created_at_ms),
            created_at_ms=created_at_ms,
        )
        self._events.append(event)
        logger.debug(f"[{direction}] {event_name}")
        return event

    def log_client_event(self, payload: Dict[str, Any], suffix: str = "") -> LoggedEvent:
        return self.record("client", f"{payload.get('type', '')} {suffix}".strip(), payload)

    def log_server_event(self, payload: Dict[str, Any], suffix: str = "") -> LoggedEvent:
        return self.record("server", f"{payload.get('type', '')} {suffix}".strip(), payload)

    def log_history_item(self, item: Dict[str, Any]) -> LoggedEvent:
        """Record a history item named role.status, or function.<name>.<status> for calls."""
        status = item.get("status", "")
        if item.get("type") == "function_call":
            name = f"function.{item.get('name', '')}.{status}"
        else:
            name = f"{item.get('role', '')}.{status}"
        return self.record("server", name, item)

    def toggle_expand(self, event_id: str) -> bool:
        for event in self._events:
            if event.id == event_id:
                event.expanded = not event.expanded
                return event.expanded
        raise KeyError(event_id)

    def named(self, event_name: str) -> List[LoggedEvent]:
        return [event for event in self._events if event.event_name == event_name]
