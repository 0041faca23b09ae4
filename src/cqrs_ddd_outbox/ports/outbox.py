"""IOutboxStore — transactional outbox protocol."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..domain.message import OutboxMessage
    from .unit_of_work import UnitOfWork


@runtime_checkable
class IOutboxStore(Protocol):
    """Protocol for durable outbox message storage."""

    async def add(
        self, messages: list[OutboxMessage], uow: UnitOfWork | None = None
    ) -> None:
        """
        Persist new outbox messages in the same transaction as business data.

        Args:
            messages: Messages created with ``OutboxMessage.create``
            uow: The caller's UnitOfWork. Writes become durable on its commit.
        """
        ...

    async def fetch_unprocessed(
        self, uow: UnitOfWork | None = None
    ) -> list[OutboxMessage]:
        """
        Return every message with ``processed=False``, oldest first.

        The result is a snapshot: mutating the returned messages does not
        change stored state until they are passed to ``update`` and committed.
        """
        ...

    async def update(
        self, message: OutboxMessage, uow: UnitOfWork | None = None
    ) -> None:
        """
        Persist the current state of *message*.

        Args:
            message: A message previously returned by ``fetch_unprocessed``
            uow: UnitOfWork whose next commit makes the change durable

        Raises:
            MessageNotFoundError: the store holds no message with that id
        """
        ...
