"""Domain primitives: events, the event type registry and the outbox message."""

from __future__ import annotations

from .event_registry import EventTypeRegistry
from .events import DomainEvent
from .message import OutboxMessage

__all__: list[str] = [
    "DomainEvent",
    "EventTypeRegistry",
    "OutboxMessage",
]
