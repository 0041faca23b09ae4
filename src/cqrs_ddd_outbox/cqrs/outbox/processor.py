"""OutboxProcessor — core relay loop for the transactional outbox."""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ...correlation import correlation_scope
from ...primitives.exceptions import PublishError

if TYPE_CHECKING:
    from ...domain.event_registry import EventTypeRegistry
    from ...domain.message import OutboxMessage
    from ...ports.notifier import INotifier
    from ...ports.outbox import IOutboxStore
    from ...ports.unit_of_work import UnitOfWork

logger = logging.getLogger("cqrs_ddd.outbox")


class FailurePolicy(str, enum.Enum):
    """What a pass does when one message cannot be published."""

    ABORT = "abort"
    """Raise ``PublishError`` and leave the rest of the batch for the next pass."""

    ISOLATE = "isolate"
    """Log the failure, leave that message unprocessed and keep going."""


@dataclass
class ProcessingResult:
    """Outcome of a single processing pass."""

    fetched: int = 0
    processed: list[str] = field(default_factory=list)
    skipped: int = 0
    failed: list[str] = field(default_factory=list)
    cancelled: bool = False

    @property
    def processed_count(self) -> int:
        return len(self.processed)


class OutboxProcessor:
    """
    Relays unprocessed outbox messages to an ``INotifier``, one at a time.

    Lifecycle per message:
    1. Decode the stored payload to its concrete event type via the registry.
    2. Publish through the notifier (awaiting every handler).
    3. ``mark_processed`` and ``store.update``.
    4. ``uow.commit()`` before the next message is touched.

    At most one message is ever published-but-uncommitted, which bounds
    redelivery after a crash to that message. Delivery is at-least-once;
    handlers must be idempotent.

    Passes on the same processor are serialized. Running two processors
    against one store concurrently may publish a message twice.
    """

    def __init__(
        self,
        store: IOutboxStore,
        notifier: INotifier,
        registry: EventTypeRegistry,
        *,
        failure_policy: FailurePolicy = FailurePolicy.ABORT,
    ) -> None:
        self.store = store
        self.notifier = notifier
        self.registry = registry
        self.failure_policy = failure_policy
        self._pass_lock = asyncio.Lock()

    async def process(
        self,
        uow: UnitOfWork,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> ProcessingResult:
        """
        Run one pass over the currently unprocessed messages.

        Args:
            uow: Unit of work used for every store call and committed after
                each relayed message.
            cancel_event: When set, the pass stops before publishing the next
                message and reports ``cancelled=True``. Messages already
                committed stay processed.

        Raises:
            PublishError: a message failed to publish under
                ``FailurePolicy.ABORT``. Earlier messages remain committed.
            Exception: store and commit failures propagate unchanged.
        """
        async with self._pass_lock:
            messages = await self.store.fetch_unprocessed(uow=uow)
            result = ProcessingResult(fetched=len(messages))
            if not messages:
                return result

            logger.debug("Processing %d unprocessed outbox message(s)", len(messages))

            for message in messages:
                if cancel_event is not None and cancel_event.is_set():
                    result.cancelled = True
                    logger.info(
                        "Outbox pass cancelled after %d/%d message(s)",
                        result.processed_count,
                        len(messages),
                    )
                    break

                if message is None or message.payload is None:
                    result.skipped += 1
                    logger.warning(
                        "Skipping malformed outbox message %s",
                        getattr(message, "message_id", None),
                    )
                    continue

                try:
                    await self._publish(message)
                except Exception as exc:
                    if self.failure_policy is FailurePolicy.ABORT:
                        raise PublishError(
                            message.message_id, message.event_type
                        ) from exc
                    logger.error(
                        "Failed to publish outbox message %s (%s): %s",
                        message.message_id,
                        message.event_type,
                        exc,
                    )
                    result.failed.append(message.message_id)
                    continue

                message.mark_processed()
                await self.store.update(message, uow=uow)
                await uow.commit()
                result.processed.append(message.message_id)

            if result.processed or result.failed:
                logger.info(
                    "Outbox pass finished: %d processed, %d failed, %d skipped",
                    result.processed_count,
                    len(result.failed),
                    result.skipped,
                )
            return result

    async def _publish(self, message: OutboxMessage) -> None:
        event = message.decode_content(self.registry)
        with correlation_scope(message.correlation_id):
            await self.notifier.publish(event)
