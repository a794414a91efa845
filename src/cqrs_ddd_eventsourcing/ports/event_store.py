"""IEventStore / IEventStoreManager protocols + StoredEvent dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable
from uuid import uuid4

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Sequence

#: Pseudo stream id that enumerates every stream of a store in position order.
ALL_STREAMS = "$all"


def _empty_dict() -> dict[str, object]:
    return {}


@dataclass(frozen=True)
class StoredEvent:
    """Persistent representation of a domain event.

    - ``position``: global sequence number in the store, strictly increasing.
    - ``version``: 1-based sequence number of the event inside its stream.
    """

    event_id: str = field(default_factory=lambda: str(uuid4()))
    event_type: str = ""
    stream_id: str = ""
    version: int = 0
    position: int | None = None
    payload: dict[str, object] = field(default_factory=_empty_dict)
    metadata: dict[str, object] = field(default_factory=_empty_dict)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    correlation_id: str | None = None
    causation_id: str | None = None


@runtime_checkable
class IEventStore(Protocol):
    """Protocol for appending and enumerating stored events."""

    async def append_events(
        self, stream_id: str, events: Sequence[Any]
    ) -> list[StoredEvent]:
        """Append events to *stream_id* atomically and return them as stored."""
        ...

    def read_events_from(
        self,
        stream_id: str,
        position: int = 0,
        *,
        batch_size: int = 1000,
    ) -> AsyncIterator[StoredEvent]:
        """Stream events of *stream_id* whose position is greater than *position*.

        The iterator is lazy, finite and forward-only; events are yielded in
        strictly increasing position order. ``ALL_STREAMS`` enumerates every
        stream. ``batch_size`` bounds how many events are fetched per read.
        """
        ...


@runtime_checkable
class IEventStoreManager(Protocol):
    """Resolves which of several configured stores a listener reads from."""

    def get_event_store_for_listener(self, listener_identifier: str) -> IEventStore:
        """Return the store owning the stream of *listener_identifier*.

        Raises:
            UnknownEventStoreError: if no store is configured for the listener.
        """
        ...
