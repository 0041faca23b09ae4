"""
SQLAlchemy implementation of the transactional outbox store.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import select, update

from ...domain.message import OutboxMessage
from ...ports.outbox import IOutboxStore
from ...primitives.exceptions import MessageNotFoundError
from .exceptions import SessionManagementError
from .models import OutboxMessageModel
from .uow import SQLAlchemyUnitOfWork

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from ...ports.unit_of_work import UnitOfWork


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SQLAlchemyOutboxStore(IOutboxStore):
    """
    Outbox store implementation using SQLAlchemy.

    Statements run on the session of the ``SQLAlchemyUnitOfWork`` passed to
    each call, falling back to the session given at construction.
    """

    def __init__(self, session: AsyncSession | None = None) -> None:
        self.session = session

    def _session_for(self, uow: UnitOfWork | None) -> AsyncSession:
        if isinstance(uow, SQLAlchemyUnitOfWork):
            return uow.session
        if self.session is None:
            raise SessionManagementError(
                "SQLAlchemyOutboxStore needs a SQLAlchemyUnitOfWork "
                "or a session given at construction."
            )
        return self.session

    async def add(
        self,
        messages: list[OutboxMessage],
        uow: UnitOfWork | None = None,
    ) -> None:
        """
        Persist outbox messages in the same transaction as the business data.
        """
        session = self._session_for(uow)
        session.add_all(
            [
                OutboxMessageModel(
                    message_id=msg.message_id,
                    event_type=msg.event_type,
                    payload=msg.payload,
                    created_at=msg.created_at,
                    processed=msg.processed,
                    processed_at=msg.processed_at,
                    correlation_id=msg.correlation_id,
                )
                for msg in messages
            ]
        )

    async def fetch_unprocessed(
        self,
        uow: UnitOfWork | None = None,
    ) -> list[OutboxMessage]:
        """
        Retrieve unprocessed messages, oldest first.
        """
        session = self._session_for(uow)
        stmt = (
            select(OutboxMessageModel)
            .where(OutboxMessageModel.processed.is_(False))
            .order_by(OutboxMessageModel.created_at, OutboxMessageModel.id)
        )
        result = await session.execute(stmt)
        models = result.scalars().all()

        return [
            OutboxMessage(
                message_id=m.message_id,
                event_type=m.event_type,
                payload=m.payload,
                created_at=_as_utc(m.created_at),
                processed=m.processed,
                processed_at=_as_utc(m.processed_at) if m.processed_at else None,
                correlation_id=m.correlation_id,
            )
            for m in models
        ]

    async def update(
        self,
        message: OutboxMessage,
        uow: UnitOfWork | None = None,
    ) -> None:
        """
        Write back the mutable state of *message*.
        """
        session = self._session_for(uow)
        stmt = (
            update(OutboxMessageModel)
            .where(OutboxMessageModel.message_id == message.message_id)
            .values(
                processed=message.processed,
                processed_at=message.processed_at,
                correlation_id=message.correlation_id,
            )
        )
        result = await session.execute(stmt)
        if result.rowcount == 0:
            raise MessageNotFoundError(message.message_id)
