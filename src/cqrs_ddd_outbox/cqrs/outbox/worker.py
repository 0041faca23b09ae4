"""OutboxWorker — background scheduler driving the outbox processor."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ...ports.background_worker import IBackgroundWorker

if TYPE_CHECKING:
    from collections.abc import Callable

    from ...ports.unit_of_work import UnitOfWork
    from .processor import OutboxProcessor, ProcessingResult

logger = logging.getLogger("cqrs_ddd.outbox")


@dataclass(frozen=True, slots=True)
class OutboxWorkerConfig:
    """Timing configuration for ``OutboxWorker``.

    Attributes:
        poll_interval: Seconds between passes when nothing triggers the loop.
        wait_delay: Debounce window after a trigger.
        max_delay: Upper bound on debouncing a burst of triggers.
        error_backoff: Seconds to sleep after a failed pass.
        shutdown_timeout: Seconds ``stop()`` waits for an in-flight pass
            before cancelling it.
    """

    poll_interval: float = 10.0
    wait_delay: float = 0.1
    max_delay: float = 1.0
    error_backoff: float = 1.0
    shutdown_timeout: float = 5.0


class OutboxWorker(IBackgroundWorker):
    """
    Runs ``OutboxProcessor`` passes on a timer or on demand.

    Every pass gets a fresh unit of work from *uow_factory*. Only one pass
    runs at a time; this is the single poller per store.

    Usage::

        worker = OutboxWorker(
            processor,
            lambda: SQLAlchemyUnitOfWork(session_factory=factory),
            config=OutboxWorkerConfig(poll_interval=5.0),
        )
        await worker.start()

        # after committing new outbox messages
        worker.trigger()
    """

    def __init__(
        self,
        processor: OutboxProcessor,
        uow_factory: Callable[[], UnitOfWork],
        *,
        config: OutboxWorkerConfig | None = None,
    ) -> None:
        self.processor = processor
        self.uow_factory = uow_factory
        self.config = config or OutboxWorkerConfig()

        self._running = False
        self._task: asyncio.Task[None] | None = None
        self._trigger_event = asyncio.Event()
        self._stop_event = asyncio.Event()

    async def run_once(self) -> ProcessingResult:
        """Run a single pass inside its own unit of work.

        Can be called on a stopped worker; a later ``stop()`` still cancels
        the pass at the next message boundary.
        """
        if not self._running:
            self._stop_event.clear()
        async with self.uow_factory() as uow:
            return await self.processor.process(uow, cancel_event=self._stop_event)

    def trigger(self) -> None:
        """Wake up the background loop to process messages."""
        self._trigger_event.set()

    # ── Worker Lifecycle ─────────────────────────────────────────────

    async def start(self) -> None:
        """Start the background processing loop."""
        if self._running:
            return
        self._running = True
        self._stop_event.clear()

        # Initial drain
        try:
            await self.run_once()
        except Exception as exc:
            logger.error("Initial outbox drain failed: %s", exc, exc_info=True)

        self._task = asyncio.create_task(self._run_loop())
        logger.info(
            "OutboxWorker started (wait: %.1fs, fallback: %.1fs)",
            self.config.wait_delay,
            self.config.poll_interval,
        )

    async def stop(self) -> None:
        """Stop the loop, letting an in-flight pass finish its current message."""
        self._running = False
        self._stop_event.set()
        self.trigger()
        if self._task is not None:
            try:
                await asyncio.wait_for(
                    asyncio.shield(self._task), timeout=self.config.shutdown_timeout
                )
            except asyncio.TimeoutError:
                self._task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await self._task
            self._task = None
        logger.info("OutboxWorker stopped")

    # ── Internal loop ────────────────────────────────────────────────

    async def _run_loop(self) -> None:
        while self._running:
            try:
                # 1. Wait for trigger or polling timeout
                with contextlib.suppress(asyncio.TimeoutError):
                    await asyncio.wait_for(
                        self._trigger_event.wait(), timeout=self.config.poll_interval
                    )
                if not self._running:
                    break

                # 2. Debouncing
                if self._trigger_event.is_set():
                    await self._debounce()
                    self._trigger_event.clear()

                # 3. Process
                await self.run_once()

            except Exception as exc:
                logger.error("OutboxWorker loop error: %s", exc, exc_info=True)
                await asyncio.sleep(self.config.error_backoff)

    async def _debounce(self) -> None:
        loop = asyncio.get_running_loop()
        start_time = loop.time()
        while (loop.time() - start_time) < self.config.max_delay:
            self._trigger_event.clear()
            try:
                await asyncio.wait_for(
                    self._trigger_event.wait(), timeout=self.config.wait_delay
                )
            except asyncio.TimeoutError:
                return
