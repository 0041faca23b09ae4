"""InMemoryOutboxStore — dict-backed fake for unit tests."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING

from ...ports.outbox import IOutboxStore
from ...primitives.exceptions import MessageNotFoundError
from .unit_of_work import InMemoryUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Callable

    from ...domain.message import OutboxMessage
    from ...ports.unit_of_work import UnitOfWork


class InMemoryOutboxStore(IOutboxStore):
    """In-memory implementation of ``IOutboxStore``.

    Holds committed messages keyed by ``message_id`` in insertion order.
    Reads hand out copies; writes go through ``InMemoryUnitOfWork.stage`` when
    one is supplied and apply immediately otherwise.
    """

    def __init__(self) -> None:
        self._messages: dict[str, OutboxMessage] = {}

    async def add(
        self,
        messages: list[OutboxMessage],
        uow: UnitOfWork | None = None,
    ) -> None:
        for msg in messages:
            snapshot = copy.deepcopy(msg)
            self._write(
                uow,
                lambda m=snapshot: self._messages.__setitem__(m.message_id, m),
            )

    async def fetch_unprocessed(
        self,
        uow: UnitOfWork | None = None,  # noqa: ARG002
    ) -> list[OutboxMessage]:
        pending = [m for m in self._messages.values() if not m.processed]
        # sort() is stable, so ties keep insertion order
        pending.sort(key=lambda m: m.created_at)
        return [copy.deepcopy(m) for m in pending]

    async def update(
        self,
        message: OutboxMessage,
        uow: UnitOfWork | None = None,
    ) -> None:
        if message.message_id not in self._messages:
            raise MessageNotFoundError(message.message_id)
        snapshot = copy.deepcopy(message)
        self._write(
            uow,
            lambda: self._messages.__setitem__(snapshot.message_id, snapshot),
        )

    @staticmethod
    def _write(uow: UnitOfWork | None, write: Callable[[], None]) -> None:
        if isinstance(uow, InMemoryUnitOfWork):
            uow.stage(write)
        else:
            write()

    # ── Test helpers ─────────────────────────────────────────────

    def get(self, message_id: str) -> OutboxMessage | None:
        msg = self._messages.get(message_id)
        return copy.deepcopy(msg) if msg is not None else None

    def all(self) -> list[OutboxMessage]:
        return [copy.deepcopy(m) for m in self._messages.values()]

    def clear(self) -> None:
        self._messages.clear()

    def __len__(self) -> int:
        return len(self._messages)
