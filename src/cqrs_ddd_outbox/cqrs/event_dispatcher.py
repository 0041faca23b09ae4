"""EventDispatcher — in-process notifier fanning events out to handlers."""

from __future__ import annotations

import asyncio
import logging
from inspect import isawaitable
from typing import (
    TYPE_CHECKING,
    Generic,
    TypeVar,
    cast,
)

from pydantic import BaseModel

from ..correlation import get_correlation_id
from ..primitives.exceptions import HandlerNotFoundError

if TYPE_CHECKING:
    from ..domain.event_registry import EventTypeRegistry
    from ..ports.notifier import EventHandler

logger = logging.getLogger("cqrs_ddd.dispatcher")

E = TypeVar("E", bound=BaseModel)


class EventDispatcher(Generic[E]):
    """Local execution engine for relayed events.

    Implements ``INotifier``. Handlers are registered against **concrete**
    event types and looked up by ``type(event)``, so a handler for
    ``OrderCreated`` never sees an ``OrderShipped``.

    When constructed with an ``EventTypeRegistry``, every ``register`` call
    also records the event type there, keeping the decode table and the
    handler table in step.

    A delivery with no registered handler is a silent no-op unless
    ``require_handlers=True``, in which case it raises
    ``HandlerNotFoundError``.
    """

    def __init__(
        self,
        registry: EventTypeRegistry | None = None,
        *,
        require_handlers: bool = False,
        max_concurrency: int = 10,
    ) -> None:
        self._handlers: dict[type[E], list[EventHandler[E]]] = {}
        self._registry = registry
        self.require_handlers = require_handlers
        self._semaphore = asyncio.Semaphore(max_concurrency)

    # ── Registration ─────────────────────────────────────────────

    def register(
        self,
        event_type: type[E],
        handler: EventHandler[E],
    ) -> None:
        """Register a handler for a specific event type.

        Raises:
            EventTypeConflictError: the shared registry already maps
                ``event_type.__name__`` to a different class.
        """
        if self._registry is not None:
            self._registry.register(event_type)
        handlers = self._handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)

    # ── Publishing ───────────────────────────────────────────────

    async def publish(self, event: BaseModel) -> None:
        """Deliver *event* to all handlers registered for its concrete type."""
        event_type = type(event)
        handlers = self._handlers.get(cast("type[E]", event_type), [])
        if not handlers:
            if self.require_handlers:
                raise HandlerNotFoundError(event_type.__name__)
            logger.debug(
                "No handlers registered for %s, delivery is a no-op",
                event_type.__name__,
            )
            return

        logger.debug(
            "Publishing %s to %d handler(s) (correlation_id=%s)",
            event_type.__name__,
            len(handlers),
            get_correlation_id(),
        )
        # Every handler settles before publish returns, even when one fails.
        results = await asyncio.gather(
            *(self._invoke(h, event) for h in handlers), return_exceptions=True
        )
        for outcome in results:
            if isinstance(outcome, Exception):
                raise outcome

    async def _invoke(self, handler: EventHandler[E], event: BaseModel) -> None:
        """Invoke a single handler within the concurrency limit."""
        async with self._semaphore:
            try:
                if hasattr(handler, "handle"):
                    result = handler.handle(cast("E", event))
                elif callable(handler):
                    result = handler(cast("E", event))
                else:
                    raise TypeError(
                        "Handler must be a callable or have a handle() method"
                    )

                if isawaitable(result):
                    await result
            except Exception:
                logger.exception(
                    "Error executing handler %s for event %s",
                    type(handler).__name__,
                    type(event).__name__,
                )
                raise

    # ── Introspection ────────────────────────────────────────────

    def get_registered_handlers(self) -> dict[type[E], list[EventHandler[E]]]:
        """Return all registered handlers (debugging utility)."""
        return {k: list(v) for k, v in self._handlers.items()}

    def clear(self) -> None:
        """Remove all handler registrations (testing utility)."""
        self._handlers.clear()
