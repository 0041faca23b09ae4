"""cqrs-ddd-outbox — transactional outbox relay for the CQRS/DDD toolkit.

No infrastructure dependencies beyond pydantic. The SQLAlchemy adapter lives in
``cqrs_ddd_outbox.persistence.sqlalchemy`` behind the ``sqlalchemy`` extra.
"""

from __future__ import annotations

# ── Adapters ────────────────────────────────────────────────────
from .adapters.memory import InMemoryOutboxStore, InMemoryUnitOfWork
from .correlation import (
    correlation_scope,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)

# ── Relay ────────────────────────────────────────────────────────
from .cqrs import (
    EventDispatcher,
    FailurePolicy,
    OutboxProcessor,
    OutboxWorker,
    OutboxWorkerConfig,
    ProcessingResult,
)

# ── Domain ───────────────────────────────────────────────────────
from .domain import DomainEvent, EventTypeRegistry, OutboxMessage

# ── Ports ────────────────────────────────────────────────────────
from .ports import IBackgroundWorker, INotifier, IOutboxStore, UnitOfWork

# ── Primitives ──────────────────────────────────────────────────
from .primitives import (
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

__all__: list[str] = [
    # Domain
    "DomainEvent",
    "EventTypeRegistry",
    "OutboxMessage",
    # Relay
    "EventDispatcher",
    "FailurePolicy",
    "OutboxProcessor",
    "OutboxWorker",
    "OutboxWorkerConfig",
    "ProcessingResult",
    "correlation_scope",
    "generate_correlation_id",
    "get_correlation_id",
    "set_correlation_id",
    # Ports
    "IBackgroundWorker",
    "INotifier",
    "IOutboxStore",
    "UnitOfWork",
    # Primitives
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
    # Adapters
    "InMemoryOutboxStore",
    "InMemoryUnitOfWork",
]
