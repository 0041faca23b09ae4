"""Relay primitives: event dispatching, outbox processing and scheduling."""

from __future__ import annotations

from .event_dispatcher import EventDispatcher
from .outbox import (
    FailurePolicy,
    OutboxProcessor,
    OutboxWorker,
    OutboxWorkerConfig,
    ProcessingResult,
)

__all__ = [
    "EventDispatcher",
    "FailurePolicy",
    "OutboxProcessor",
    "OutboxWorker",
    "OutboxWorkerConfig",
    "ProcessingResult",
]
