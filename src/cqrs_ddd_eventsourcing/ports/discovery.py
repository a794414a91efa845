"""Protocols for the declarative listener discovery source."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterator


@runtime_checkable
class IBindingSource(Protocol):
    """Yields ``(event_type, listener_identifier)`` pairs known at process start.

    Built by the host application (an explicit list or generated code); the
    core never scans modules itself.
    """

    def __iter__(self) -> Iterator[tuple[str, str]]: ...


@runtime_checkable
class IListenerEventTypes(Protocol):
    """Answers which event types a listener (handler or projector) consumes."""

    def get_event_types_for_listener(self, listener_identifier: str) -> set[str]:
        """Return the event type names bound to *listener_identifier*."""
        ...
