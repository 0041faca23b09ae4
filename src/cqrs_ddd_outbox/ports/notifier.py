from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Protocol,
    TypeAlias,
    TypeVar,
    runtime_checkable,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from pydantic import BaseModel

E = TypeVar("E", bound="BaseModel")
E_contra = TypeVar("E_contra", bound="BaseModel", contravariant=True)


class EventHandlerProtocol(Protocol[E_contra]):
    """
    Protocol for handler objects with a handle(event) method.

    Contravariant TypeVar ensures proper Liskov substitution:
    a handler for a supertype can be used where a handler for
    a subtype is expected.
    """

    def handle(self, event: E_contra) -> Awaitable[None] | None:
        ...


class EventHandlerCallable(Protocol[E_contra]):
    def __call__(self, event: E_contra) -> Awaitable[None] | None:
        ...


EventHandler: TypeAlias = EventHandlerCallable[E] | EventHandlerProtocol[E]


@runtime_checkable
class INotifier(Protocol):
    """Protocol for delivering a decoded event to its subscribers."""

    async def publish(self, event: BaseModel) -> None:
        """
        Deliver *event* to every handler registered for its concrete type.

        Completes only after all handlers have finished; a handler failure
        propagates to the caller.
        """
        ...
