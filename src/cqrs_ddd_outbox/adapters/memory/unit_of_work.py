"""InMemoryUnitOfWork — staged writes and commit tracking for unit tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...ports.unit_of_work import UnitOfWork

if TYPE_CHECKING:
    from collections.abc import Callable


class InMemoryUnitOfWork(UnitOfWork):
    """In-memory implementation of UnitOfWork for testing.

    In-memory adapters stage their writes here; ``commit()`` applies them and
    ``rollback()`` drops them, so an uncommitted update behaves like one lost
    to a crash. Records commit/rollback calls for assertions.
    """

    def __init__(self) -> None:
        self._pending: list[Callable[[], None]] = []
        self.commit_count: int = 0
        self.rollback_count: int = 0

    def stage(self, write: Callable[[], None]) -> None:
        """Queue *write* until the next commit."""
        self._pending.append(write)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def committed(self) -> bool:
        return self.commit_count > 0

    @property
    def rolled_back(self) -> bool:
        return self.rollback_count > 0

    async def commit(self) -> None:
        """Apply staged writes in order."""
        writes, self._pending = self._pending, []
        for write in writes:
            write()
        self.commit_count += 1

    async def rollback(self) -> None:
        """Discard staged writes."""
        self._pending.clear()
        self.rollback_count += 1

    # ── Test helpers ─────────────────────────────────────────────

    def reset(self) -> None:
        """Reset commit/rollback tracking (for test setup)."""
        self._pending.clear()
        self.commit_count = 0
        self.rollback_count = 0


def in_memory_unit_of_work_factory() -> InMemoryUnitOfWork:
    return InMemoryUnitOfWork()
