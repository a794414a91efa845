"""InMemoryEventStore / InMemoryEventStoreManager — list-backed fakes."""

from __future__ import annotations

import dataclasses
import fnmatch
import itertools
import logging
from typing import TYPE_CHECKING, Any

from ...correlation import get_causation_id, get_correlation_id
from ...domain.decorators import collect_decorations, unwrap_event
from ...domain.events import DomainEvent
from ...instrumentation import instrument
from ...ports.event_store import (
    ALL_STREAMS,
    IEventStore,
    IEventStoreManager,
    StoredEvent,
)
from ...primitives.exceptions import EventStoreError, UnknownEventStoreError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Sequence

logger = logging.getLogger("cqrs_ddd.event_store")


class InMemoryEventStore(IEventStore):
    """In-memory implementation of ``IEventStore``.

    Positions are 1-based and contiguous: the event at position ``p`` lives
    at index ``p - 1`` of the backing list.
    """

    def __init__(self, name: str = "default") -> None:
        self.name = name
        self._events: list[StoredEvent] = []
        self._stream_versions: dict[str, int] = {}

    async def append_events(
        self, stream_id: str, events: Sequence[Any]
    ) -> list[StoredEvent]:
        if stream_id == ALL_STREAMS:
            raise EventStoreError(f"Cannot append to the '{ALL_STREAMS}' stream")
        if not events:
            return []
        return await instrument(  # type: ignore[no-any-return]
            f"event_store.append.{stream_id}",
            {
                "event_store.name": self.name,
                "stream.id": stream_id,
                "event_count": len(events),
            },
            lambda: self._append_internal(stream_id, list(events)),
        )

    async def _append_internal(
        self, stream_id: str, events: list[Any]
    ) -> list[StoredEvent]:
        version = self._stream_versions.get(stream_id, 0)
        position = len(self._events)
        stored: list[StoredEvent] = []
        for event in events:
            version += 1
            position += 1
            stored.append(self._to_stored(event, stream_id, version, position))
        self._events.extend(stored)
        self._stream_versions[stream_id] = version
        logger.debug(
            "Appended %d event(s) to stream %s (version %d)",
            len(stored),
            stream_id,
            version,
        )
        return stored

    @staticmethod
    def _to_stored(
        event: Any, stream_id: str, version: int, position: int
    ) -> StoredEvent:
        identifier, extra_metadata = collect_decorations(event)
        inner = unwrap_event(event)
        if isinstance(inner, StoredEvent):
            return dataclasses.replace(
                inner,
                event_id=identifier or inner.event_id,
                stream_id=stream_id,
                version=version,
                position=position,
                metadata={**inner.metadata, **extra_metadata},
            )
        if isinstance(inner, DomainEvent):
            return StoredEvent(
                event_id=identifier or inner.event_id,
                event_type=type(inner).__name__,
                stream_id=stream_id,
                version=version,
                position=position,
                payload=inner.model_dump(mode="json"),
                metadata={**inner.metadata, **extra_metadata},
                occurred_at=inner.occurred_at,
                correlation_id=inner.correlation_id or get_correlation_id(),
                causation_id=inner.causation_id or get_causation_id(),
            )
        raise EventStoreError(
            f"Cannot store event of type {type(inner).__name__}; "
            "expected a DomainEvent or StoredEvent"
        )

    def _events_after(
        self, stream_id: str, position: int, limit: int
    ) -> list[StoredEvent]:
        start = max(position, 0)
        if stream_id == ALL_STREAMS:
            return self._events[start : start + limit]
        matching = (e for e in self._events[start:] if e.stream_id == stream_id)
        return list(itertools.islice(matching, limit))

    async def read_events_from(
        self,
        stream_id: str,
        position: int = 0,
        *,
        batch_size: int = 1000,
    ) -> AsyncIterator[StoredEvent]:
        """Stream events of *stream_id* after *position* (exclusive)."""
        current = position
        while True:
            batch = self._events_after(stream_id, current, batch_size)
            for event in batch:
                yield event
            if len(batch) < batch_size:
                break
            last = batch[-1].position
            current = current + len(batch) if last is None else last

    async def get_latest_position(self) -> int | None:
        """Return the highest position in the store, or None if empty."""
        if not self._events:
            return None
        return self._events[-1].position

    def stream_version(self, stream_id: str) -> int:
        """Return the current version of *stream_id* (0 if it does not exist)."""
        return self._stream_versions.get(stream_id, 0)

    # ── Test helpers ─────────────────────────────────────────────

    def clear(self) -> None:
        self._events.clear()
        self._stream_versions.clear()

    def __len__(self) -> int:
        return len(self._events)


class InMemoryEventStoreManager(IEventStoreManager):
    """Maps listener identifiers to one of several named stores.

    Bindings are ``fnmatch`` patterns checked in registration order; the
    first match wins, otherwise the default store is used.

    Usage::

        manager = InMemoryEventStoreManager(InMemoryEventStore())
        manager.register_store("audit", audit_store)
        manager.bind_listener("acme.audit.*", "audit")
    """

    def __init__(
        self,
        default_store: IEventStore | None = None,
        *,
        default_store_name: str = "default",
    ) -> None:
        self._stores: dict[str, IEventStore] = {}
        self._bindings: list[tuple[str, str]] = []
        self._default_store_name = default_store_name
        if default_store is not None:
            self._stores[default_store_name] = default_store

    def register_store(self, name: str, store: IEventStore) -> None:
        """Register *store* under *name*."""
        self._stores[name] = store

    def bind_listener(self, pattern: str, store_name: str) -> None:
        """Route listeners whose identifier matches *pattern* to *store_name*."""
        self._bindings.append((pattern, store_name))

    def get_event_store_for_listener(self, listener_identifier: str) -> IEventStore:
        store_name = self._default_store_name
        for pattern, name in self._bindings:
            if fnmatch.fnmatchcase(listener_identifier, pattern):
                store_name = name
                break
        store = self._stores.get(store_name)
        if store is None:
            raise UnknownEventStoreError(listener_identifier, store_name)
        return store
