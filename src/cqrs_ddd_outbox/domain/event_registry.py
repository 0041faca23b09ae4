"""EventTypeRegistry — maps type tags to event classes for decoding."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import ValidationError as PydanticValidationError

from ..primitives.exceptions import EventDecodeError, EventTypeConflictError

if TYPE_CHECKING:
    from pydantic import BaseModel

M = TypeVar("M", bound="BaseModel")


class EventTypeRegistry:
    """Registry for mapping ``type_tag: str`` → ``type[BaseModel]``.

    Outbox messages store an opaque payload next to the tag of the concrete
    event type. The registry is the dispatch table that turns that pair back
    into the concrete event, so subscribers registered against
    ``OrderCreated`` receive an ``OrderCreated`` and not a generic envelope.

    Usage::

        registry = EventTypeRegistry()

        @registry.register
        class OrderCreated(DomainEvent):
            order_id: str

        event = registry.decode("OrderCreated", {"order_id": "123"})
    """

    def __init__(self) -> None:
        self._registry: dict[str, type[BaseModel]] = {}

    def register(self, event_class: type[M], name: str | None = None) -> type[M]:
        """Register *event_class* under *name* (defaults to the class name).

        Returns the class unchanged so this can be used as a decorator.
        Registering the same class again under its tag is a no-op.

        Raises:
            EventTypeConflictError: the tag is already bound to another class.
        """
        event_type = name or event_class.__name__
        existing = self._registry.get(event_type)
        if existing is not None and existing is not event_class:
            raise EventTypeConflictError(event_type, existing, event_class)
        self._registry[event_type] = event_class
        return event_class

    def get(self, event_type: str) -> type[BaseModel] | None:
        """Look up an event class by type tag."""
        return self._registry.get(event_type)

    def has(self, event_type: str) -> bool:
        """Return ``True`` if *event_type* is registered."""
        return event_type in self._registry

    def decode(self, event_type: str, payload: dict[str, Any]) -> BaseModel:
        """Rebuild the concrete event for *event_type* from *payload*.

        Raises:
            EventDecodeError: the tag is unknown or the payload does not
                validate against the registered class.
        """
        event_class = self.get(event_type)
        if event_class is None:
            raise EventDecodeError(event_type, "event type is not registered")

        try:
            return event_class.model_validate(payload)
        except PydanticValidationError as exc:
            raise EventDecodeError(event_type, str(exc)) from exc

    def hydrate(self, event_type: str, payload: dict[str, Any]) -> BaseModel | None:
        """Lenient ``decode``: returns ``None`` instead of raising."""
        try:
            return self.decode(event_type, payload)
        except EventDecodeError:
            return None

    def list_registered(self) -> list[str]:
        """Return all registered type tags."""
        return list(self._registry.keys())

    def clear(self) -> None:
        """Remove all registrations (testing utility)."""
        self._registry.clear()
