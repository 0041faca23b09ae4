"""OutboxMessage — the envelope stored in the transactional outbox."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from ..correlation import get_correlation_id
from ..primitives.exceptions import InvalidOutboxMessageError

if TYPE_CHECKING:
    from pydantic import BaseModel

    from .event_registry import EventTypeRegistry


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are taken to be UTC already.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass
class OutboxMessage:
    """A domain event waiting in the transactional outbox.

    The payload is kept in its stored (JSON-compatible) form next to an
    explicit ``event_type`` tag; the concrete event is rebuilt through an
    ``EventTypeRegistry`` when the message is relayed.

    ``processed`` only ever moves from ``False`` to ``True`` and always
    together with ``processed_at``. Use :meth:`create` to build new messages
    and :meth:`mark_processed` to complete them.
    """

    message_id: str = field(default_factory=lambda: str(uuid4()))
    event_type: str = ""
    payload: dict[str, Any] | None = None
    created_at: datetime = field(default_factory=_utcnow)
    processed: bool = False
    processed_at: datetime | None = None
    correlation_id: str | None = field(
        default=None, metadata={"description": "Traces entire request chain"}
    )

    def __post_init__(self) -> None:
        self.created_at = _as_utc(self.created_at)
        if self.processed_at is not None:
            self.processed_at = _as_utc(self.processed_at)

    @classmethod
    def create(
        cls, content: BaseModel, correlation_id: str | None = None
    ) -> OutboxMessage:
        """Wrap *content* in a fresh, unprocessed outbox message.

        The correlation ID falls back to the content's own ``correlation_id``
        and then to the ambient one from :mod:`cqrs_ddd_outbox.correlation`.

        Raises:
            InvalidOutboxMessageError: *content* is ``None``.
        """
        if content is None:
            raise InvalidOutboxMessageError(
                "Outbox message content must not be None"
            )

        return cls(
            event_type=type(content).__name__,
            payload=content.model_dump(mode="json"),
            correlation_id=(
                correlation_id
                if correlation_id is not None
                else getattr(content, "correlation_id", None) or get_correlation_id()
            ),
        )

    def mark_processed(self) -> None:
        """Record successful delivery.

        ``processed_at`` never precedes ``created_at``, even if the wall clock
        moved backwards between creation and delivery.
        """
        self.processed_at = max(_utcnow(), _as_utc(self.created_at))
        self.processed = True

    def decode_content(self, registry: EventTypeRegistry) -> BaseModel:
        """Rebuild the concrete event this message carries."""
        return registry.decode(self.event_type, self.payload or {})
