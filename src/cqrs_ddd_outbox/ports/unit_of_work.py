"""UnitOfWork — explicit transaction object shared by store and processor."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

logger = logging.getLogger("cqrs_ddd.uow")


class UnitOfWork(ABC):
    """
    Abstract base class for Unit of Work implementations.

    A unit of work is handed explicitly to every store call and to
    ``OutboxProcessor.process``; nothing is shared through ambient state.

    ``commit()`` makes every write staged since the previous commit durable and
    may be called any number of times within one ``async with`` block, which is
    how the processor commits after each relayed message.

    Example:
        ```python
        from cqrs_ddd_outbox.ports import UnitOfWork

        class SQLAlchemyUnitOfWork(UnitOfWork):
            def __init__(self, session):
                self._session = session

            async def commit(self):
                await self._session.commit()

            async def rollback(self):
                await self._session.rollback()
        ```
    """

    @abstractmethod
    async def commit(self) -> None:
        """Commit pending writes. Must be implemented by subclasses."""
        ...

    @abstractmethod
    async def rollback(self) -> None:
        """Discard pending writes. Must be implemented by subclasses."""
        ...

    async def __aenter__(self) -> UnitOfWork:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Commit trailing writes on success, roll back on error."""
        if exc_type is None:
            await self.commit()
        else:
            logger.debug("Rolling back unit of work after %s", exc_type.__name__)
            await self.rollback()
