"""EventListenerInvoker — feeds stored events to one projector in batches."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeAlias

from ..instrumentation import instrument
from ..ports.event_store import ALL_STREAMS
from ..primitives.exceptions import (
    CheckpointError,
    EventCouldNotBeAppliedError,
    EventSequenceError,
)
from ..utils import maybe_await

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, AsyncIterator

    from ..domain.event_registry import EventTypeRegistry
    from ..ports.checkpoint import ICheckpointStore
    from ..ports.event_store import IEventStore, StoredEvent
    from ..ports.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

#: Called with ``(sequence_number, stream_version)``; may be a coroutine function.
ProgressCallback: TypeAlias = Callable[[int | None, int], Awaitable[None] | None]


class CancellationToken:
    """Cooperative stop signal for a running replay.

    The engine checks it after each applied event; the batch in flight is
    committed before the run returns.
    """

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class EventListenerInvoker:
    """Applies the events a projection consumes, committing every *batch_size*.

    One invoker drives one run; counters are readable after :meth:`catch_up`
    returned or raised.
    """

    def __init__(
        self,
        event_store: IEventStore,
        projector: Any,
        uow_factory: Callable[[], UnitOfWork],
        *,
        projection: str,
        event_types: frozenset[str],
        batch_size: int,
        event_registry: EventTypeRegistry | None = None,
        checkpoint_store: ICheckpointStore | None = None,
    ) -> None:
        self._event_store = event_store
        self._projector = projector
        self._uow_factory = uow_factory
        self._projection = projection
        self._event_types = event_types
        self._batch_size = batch_size
        self._event_registry = event_registry
        self._checkpoint_store = checkpoint_store
        self._progress_callback: ProgressCallback | None = None

        self.applied_count = 0
        self.commit_count = 0
        self.last_committed_position: int | None = None
        self.cancelled = False

    def on_progress(self, callback: ProgressCallback | None) -> None:
        self._progress_callback = callback

    async def catch_up(
        self,
        *,
        from_position: int = 0,
        cancellation: CancellationToken | None = None,
    ) -> None:
        """Apply every consumed event after *from_position*.

        Raises:
            EventCouldNotBeAppliedError: the projector (or hydration) failed;
                the batch in flight was rolled back.
            EventSequenceError: the store yielded a non-increasing position.
            CheckpointError: a batch committed but its position was not saved.
        """
        if from_position:
            self.last_committed_position = from_position
        events = self._consumed_events(from_position)
        try:
            pending = await self._next(events)
            batch = 0
            while pending is not None:
                batch += 1
                pending = await instrument(
                    f"projection.commit.{self._projection}",
                    {
                        "projection.name": self._projection,
                        "projection.batch": batch,
                    },
                    lambda first=pending: self._run_batch(
                        first, events, cancellation
                    ),
                )
        finally:
            await events.aclose()

    async def _run_batch(
        self,
        first: StoredEvent,
        events: AsyncIterator[StoredEvent],
        cancellation: CancellationToken | None,
    ) -> StoredEvent | None:
        """Apply up to *batch_size* events in one unit of work.

        Returns the first event of the next batch, ``None`` once done.
        """
        pending: StoredEvent | None = first
        batch_last: int | None = None
        applied = 0
        async with self._uow_factory():
            while pending is not None and applied < self._batch_size:
                await self._apply(pending)
                applied += 1
                self.applied_count += 1
                batch_last = pending.position
                await self._report_progress(pending)
                if cancellation is not None and cancellation.cancelled:
                    self.cancelled = True
                    pending = None
                else:
                    pending = await self._next(events)

        self.commit_count += 1
        self.last_committed_position = batch_last
        logger.debug(
            "Committed batch for projection %s at position %s (%d applied)",
            self._projection,
            batch_last,
            self.applied_count,
        )
        if self._checkpoint_store is not None and batch_last is not None:
            await self._save_checkpoint(self._checkpoint_store, batch_last)
        return pending

    async def _save_checkpoint(self, store: ICheckpointStore, position: int) -> None:
        try:
            await store.save_position(self._projection, position)
        except Exception as exc:
            logger.error(
                "Projection %s committed position %d but its checkpoint was not saved",
                self._projection,
                position,
                exc_info=True,
            )
            raise CheckpointError(self._projection, position) from exc

    async def _consumed_events(
        self, from_position: int
    ) -> AsyncGenerator[StoredEvent, None]:
        previous: int | None = from_position or None
        async for stored in self._event_store.read_events_from(
            ALL_STREAMS, from_position, batch_size=self._batch_size
        ):
            if stored.position is not None:
                if previous is not None and stored.position <= previous:
                    raise EventSequenceError(previous, stored.position)
                previous = stored.position
            if stored.event_type in self._event_types:
                yield stored

    @staticmethod
    async def _next(events: AsyncIterator[StoredEvent]) -> StoredEvent | None:
        try:
            return await events.__anext__()
        except StopAsyncIteration:
            return None

    async def _apply(self, stored: StoredEvent) -> None:
        try:
            await maybe_await(self._projector.apply(self._hydrate(stored)))
        except Exception as exc:
            logger.error(
                "Projection %s failed to apply event %s at position %s",
                self._projection,
                stored.event_id,
                stored.position,
                exc_info=True,
            )
            raise EventCouldNotBeAppliedError(
                projection=self._projection,
                event_id=stored.event_id,
                event_type=stored.event_type,
                position=stored.position,
                last_committed_position=self.last_committed_position,
                reason=str(exc),
            ) from exc

    def _hydrate(self, stored: StoredEvent) -> Any:
        if self._event_registry is None:
            return stored
        event = self._event_registry.hydrate_stored(stored)
        if event is None:
            raise ValueError(
                f"Stored event of type '{stored.event_type}' could not be hydrated"
            )
        return event

    async def _report_progress(self, stored: StoredEvent) -> None:
        if self._progress_callback is None:
            return
        await maybe_await(self._progress_callback(stored.position, stored.version))
