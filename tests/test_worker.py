"""Tests for OutboxWorker — polling, triggering and lifecycle."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest

from cqrs_ddd_outbox.adapters.memory import (
    InMemoryOutboxStore,
    InMemoryUnitOfWork,
    in_memory_unit_of_work_factory,
)
from cqrs_ddd_outbox.cqrs import (
    EventDispatcher,
    OutboxProcessor,
    OutboxWorker,
    OutboxWorkerConfig,
    ProcessingResult,
)
from cqrs_ddd_outbox.domain import DomainEvent, EventTypeRegistry, OutboxMessage
from cqrs_ddd_outbox.ports import IBackgroundWorker


class PaymentCaptured(DomainEvent):
    payment_id: str


def _make_worker(
    config: OutboxWorkerConfig | None = None,
) -> tuple[OutboxWorker, InMemoryOutboxStore, list[DomainEvent]]:
    store = InMemoryOutboxStore()
    registry = EventTypeRegistry()
    dispatcher: EventDispatcher[DomainEvent] = EventDispatcher(registry)
    delivered: list[DomainEvent] = []
    dispatcher.register(PaymentCaptured, delivered.append)
    processor = OutboxProcessor(store, dispatcher, registry)
    worker = OutboxWorker(processor, in_memory_unit_of_work_factory, config=config)
    return worker, store, delivered


def _message(payment_id: str = "pay-1") -> OutboxMessage:
    return OutboxMessage.create(PaymentCaptured(payment_id=payment_id))


def test_worker_is_a_background_worker() -> None:
    worker, _, _ = _make_worker()
    assert isinstance(worker, IBackgroundWorker)


def test_default_config() -> None:
    config = OutboxWorkerConfig()
    assert config.poll_interval == 10.0
    assert config.wait_delay == 0.1
    assert config.max_delay == 1.0


class TestOutboxWorker:
    @pytest.mark.asyncio
    async def test_run_once(self) -> None:
        worker, store, delivered = _make_worker()
        await store.add([_message()])

        result = await worker.run_once()

        assert result.processed_count == 1
        assert len(delivered) == 1
        assert await store.fetch_unprocessed() == []

    @pytest.mark.asyncio
    async def test_run_once_uses_fresh_unit_of_work(self) -> None:
        created: list[InMemoryUnitOfWork] = []

        def factory() -> InMemoryUnitOfWork:
            uow = InMemoryUnitOfWork()
            created.append(uow)
            return uow

        worker, store, _ = _make_worker()
        worker.uow_factory = factory
        await store.add([_message()])

        await worker.run_once()
        await worker.run_once()

        assert len(created) == 2
        # one per relayed message plus the closing commit of the block
        assert created[0].commit_count == 2
        assert created[1].commit_count == 1

    @pytest.mark.asyncio
    async def test_start_drains_existing_messages(self) -> None:
        worker, store, delivered = _make_worker(
            OutboxWorkerConfig(poll_interval=10.0)
        )
        await store.add([_message("a"), _message("b")])

        await worker.start()
        await worker.stop()

        assert len(delivered) == 2

    @pytest.mark.asyncio
    async def test_start_and_stop(self) -> None:
        worker, _, _ = _make_worker(OutboxWorkerConfig(poll_interval=0.01))

        await worker.start()
        await asyncio.sleep(0.05)
        await worker.stop()

        assert not worker._running
        assert worker._task is None

    @pytest.mark.asyncio
    async def test_polling_picks_up_new_messages(self) -> None:
        worker, store, delivered = _make_worker(
            OutboxWorkerConfig(poll_interval=0.01)
        )

        await worker.start()
        await store.add([_message()])
        await asyncio.sleep(0.1)
        await worker.stop()

        assert len(delivered) == 1

    @pytest.mark.asyncio
    async def test_trigger_wakes_loop(self) -> None:
        worker, store, delivered = _make_worker(
            OutboxWorkerConfig(poll_interval=10.0, wait_delay=0.01, max_delay=0.05)
        )

        await worker.start()
        await store.add([_message()])
        worker.trigger()
        await asyncio.sleep(0.15)
        await worker.stop()

        assert len(delivered) == 1
        assert await store.fetch_unprocessed() == []

    @pytest.mark.asyncio
    async def test_start_idempotent(self) -> None:
        worker, _, _ = _make_worker(OutboxWorkerConfig(poll_interval=10.0))
        with patch.object(
            worker.processor, "process", new_callable=AsyncMock
        ) as mock_process:
            mock_process.return_value = ProcessingResult()
            await worker.start()
            await worker.start()
            await worker.stop()

        assert mock_process.await_count == 1
        assert not worker._running

    @pytest.mark.asyncio
    async def test_initial_drain_failure_is_logged(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        worker, _, _ = _make_worker(OutboxWorkerConfig(poll_interval=10.0))
        with patch.object(
            worker.processor, "process", side_effect=RuntimeError("db down")
        ):
            await worker.start()
            await worker.stop()

        assert any("Initial outbox drain failed" in r.message for r in caplog.records)

    @pytest.mark.asyncio
    async def test_run_loop_logs_and_continues_on_error(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        worker, _, _ = _make_worker(
            OutboxWorkerConfig(
                poll_interval=0.01, wait_delay=0.01, max_delay=0.02, error_backoff=0.01
            )
        )
        call_count = 0

        async def _raise_after_first(*args: Any, **kwargs: Any) -> ProcessingResult:
            nonlocal call_count
            call_count += 1
            if call_count >= 2:
                raise RuntimeError("pass failed")
            return ProcessingResult()

        with patch.object(worker.processor, "process", side_effect=_raise_after_first):
            await worker.start()
            await asyncio.sleep(0.1)
            await worker.stop()

        assert call_count >= 3
        assert any("loop error" in rec.message.lower() for rec in caplog.records)

    @pytest.mark.asyncio
    async def test_stop_cancels_in_flight_pass_at_message_boundary(self) -> None:
        worker, store, _ = _make_worker(OutboxWorkerConfig(poll_interval=10.0))
        started = asyncio.Event()
        release = asyncio.Event()
        delivered: list[str] = []

        async def slow(event: PaymentCaptured) -> None:
            delivered.append(event.payment_id)
            started.set()
            await release.wait()

        dispatcher = worker.processor.notifier
        assert isinstance(dispatcher, EventDispatcher)
        dispatcher.clear()
        dispatcher.register(PaymentCaptured, slow)
        await store.add([_message("a"), _message("b"), _message("c")])

        pass_task = asyncio.create_task(worker.run_once())
        await started.wait()
        stop_task = asyncio.create_task(worker.stop())
        await asyncio.sleep(0)
        release.set()
        result = await pass_task
        await stop_task

        assert result.cancelled
        assert delivered == ["a"]
        remaining = await store.fetch_unprocessed()
        assert len(remaining) == 2

    @pytest.mark.asyncio
    async def test_stop_without_start(self) -> None:
        worker, _, _ = _make_worker()

        await worker.stop()

        assert not worker._running

    @pytest.mark.asyncio
    async def test_run_once_after_stop_still_relays(self) -> None:
        worker, store, delivered = _make_worker(OutboxWorkerConfig(poll_interval=10.0))
        await worker.start()
        await worker.stop()
        await store.add([_message("late")])

        result = await worker.run_once()

        assert not result.cancelled
        assert result.processed_count == 1
        assert len(delivered) == 1
