"""Projector and event handler capability protocols.

Each method may be a plain function or a coroutine; callers await the
result when it is awaitable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Awaitable


@runtime_checkable
class IProjector(Protocol):
    """A stateful listener that folds events into a read model."""

    def apply(self, event: Any) -> Awaitable[None] | None:
        """Apply one event to the read model."""
        ...

    def reset(self) -> Awaitable[None] | None:
        """Return to a state equivalent to having applied zero events."""
        ...

    def is_empty(self) -> Awaitable[bool] | bool:
        """Tell whether the read model holds no data."""
        ...


@runtime_checkable
class IEventHandler(Protocol):
    """A listener invoked synchronously when a matching event is dispatched."""

    def handle(self, event: Any) -> Awaitable[None] | None: ...

