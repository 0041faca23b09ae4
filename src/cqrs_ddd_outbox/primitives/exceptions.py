"""Domain and infrastructure exceptions for cqrs-ddd-outbox."""

from __future__ import annotations


class CQRSDDDError(Exception):
    """Root exception for the outbox toolkit."""


class OutboxError(CQRSDDDError):
    """Raised when outbox operations fail."""


class InvalidOutboxMessageError(OutboxError, ValueError):
    """Raised when an outbox message is built from absent content."""


class EventDecodeError(OutboxError):
    """Raised when a stored payload cannot be rebuilt as its event type."""

    def __init__(self, event_type: str, reason: str) -> None:
        self.event_type = event_type
        self.reason = reason
        super().__init__(f"Cannot decode event {event_type!r}: {reason}")


class EventTypeConflictError(OutboxError, ValueError):
    """Raised when a type tag is already bound to a different event class."""

    def __init__(
        self, event_type: str, existing: type, conflicting: type
    ) -> None:
        self.event_type = event_type
        self.existing = existing
        self.conflicting = conflicting
        super().__init__(
            f"Event type {event_type!r} is already registered to "
            f"{existing.__module__}.{existing.__qualname__}, cannot register "
            f"{conflicting.__module__}.{conflicting.__qualname__}"
        )


class PublishError(OutboxError):
    """Raised when an outbox message could not be delivered to the notifier.

    The message is left unprocessed and will be picked up by the next pass.
    """

    def __init__(self, message_id: str, event_type: str) -> None:
        self.message_id = message_id
        self.event_type = event_type
        super().__init__(
            f"Failed to publish outbox message {message_id} ({event_type})"
        )


class MessageNotFoundError(OutboxError):
    """Raised when updating an outbox message the store does not hold."""

    def __init__(self, message_id: str) -> None:
        self.message_id = message_id
        super().__init__(f"Outbox message with id={message_id!r} not found")


class HandlerError(CQRSDDDError):
    """Base class for handler related errors (lookup, execution)."""


class HandlerNotFoundError(HandlerError):
    """Raised by a strict dispatcher when no handler exists for an event.

    Usage: ``EventDispatcher(require_handlers=True)`` raises this instead of
    treating the delivery as a silent no-op.
    """

    def __init__(self, event_type: str) -> None:
        self.event_type = event_type
        super().__init__(f"No handler registered for event {event_type!r}")


class InfrastructureError(CQRSDDDError):
    """Base class for all infrastructure-related errors."""


class PersistenceError(InfrastructureError):
    """Base class for all persistence-related errors."""
