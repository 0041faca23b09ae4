"""Domain Event base class."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class DomainEvent(BaseModel):
    """Base class for all Domain Events relayed through the outbox.

    Events are immutable and carry their own tracing context. Concrete event
    types must be registered with an ``EventTypeRegistry`` so the relay can
    rebuild them from their stored payload.
    """

    model_config = ConfigDict(frozen=True)

    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    aggregate_id: str | None = None
    correlation_id: str | None = None
