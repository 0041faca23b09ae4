"""SQLAlchemy persistence adapter for the outbox.

Requires the ``sqlalchemy`` extra.
"""

from __future__ import annotations

from .exceptions import (
    SessionManagementError,
    SQLAlchemyPersistenceError,
    UnitOfWorkError,
)
from .models import Base, JSONType, OutboxMessageModel
from .outbox import SQLAlchemyOutboxStore
from .uow import SQLAlchemyUnitOfWork

__all__ = [
    "Base",
    "JSONType",
    "OutboxMessageModel",
    "SQLAlchemyOutboxStore",
    "SQLAlchemyUnitOfWork",
    # Exceptions
    "SQLAlchemyPersistenceError",
    "SessionManagementError",
    "UnitOfWorkError",
]
