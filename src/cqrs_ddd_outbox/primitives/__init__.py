"""Primitives: exceptions."""

from __future__ import annotations

from .exceptions import (
    CQRSDDDError,
    EventDecodeError,
    EventTypeConflictError,
    HandlerError,
    HandlerNotFoundError,
    InfrastructureError,
    InvalidOutboxMessageError,
    MessageNotFoundError,
    OutboxError,
    PersistenceError,
    PublishError,
)

__all__ = [
    "CQRSDDDError",
    "EventDecodeError",
    "EventTypeConflictError",
    "HandlerError",
    "HandlerNotFoundError",
    "InfrastructureError",
    "InvalidOutboxMessageError",
    "MessageNotFoundError",
    "OutboxError",
    "PersistenceError",
    "PublishError",
]
