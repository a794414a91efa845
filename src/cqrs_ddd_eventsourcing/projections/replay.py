"""ReplayEngine — rebuild a projection from the full event history."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..correlation import ensure_correlation_id
from ..instrumentation import instrument
from ..ports.locking import REPLAY_LOCK_TTL_SECONDS
from ..primitives.exceptions import ReplayConfigurationError
from ..primitives.locking import ResourceIdentifier
from ..utils import maybe_await
from .invoker import CancellationToken, EventListenerInvoker, ProgressCallback

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..domain.event_registry import EventTypeRegistry
    from ..ports.checkpoint import ICheckpointStore
    from ..ports.event_store import IEventStoreManager
    from ..ports.locking import ILockStrategy
    from ..ports.unit_of_work import UnitOfWork
    from .catalog import Projection, ProjectionCatalog

logger = logging.getLogger(__name__)

DEFAULT_TRANSACTION_BATCH_SIZE = 1000
REPLAY_LOCK_RESOURCE_TYPE = "projection_replay"


@dataclass(frozen=True)
class ReplayResult:
    """Outcome of one completed (or cancelled) replay run."""

    identifier: str
    applied_count: int
    commit_count: int
    last_committed_position: int | None
    cancelled: bool = False


def _validate_batch_size(batch_size: int) -> int:
    if batch_size < 1:
        raise ReplayConfigurationError(
            f"Transaction batch size must be at least 1, got {batch_size}"
        )
    return batch_size


class ReplayEngine:
    """Resets a projector and folds every consumed event back into it.

    Events are read from the ``$all`` stream of the store that owns the
    projector, in position order, and applied inside one unit of work per
    *batch_size* events. A failing event stops the run: earlier batches stay
    committed, the batch in flight is rolled back.

    Optional collaborators:

    - ``lock_strategy``: serializes replays of the same projection.
    - ``checkpoint_store``: records the position after each commit and enables
      ``replay(..., resume=True)``.
    - ``event_registry``: hydrates stored events into domain events before
      they are applied.
    """

    def __init__(
        self,
        catalog: ProjectionCatalog,
        event_store_manager: IEventStoreManager,
        uow_factory: Callable[[], UnitOfWork],
        *,
        lock_strategy: ILockStrategy | None = None,
        checkpoint_store: ICheckpointStore | None = None,
        event_registry: EventTypeRegistry | None = None,
        batch_size: int = DEFAULT_TRANSACTION_BATCH_SIZE,
        lock_timeout: float = 10.0,
    ) -> None:
        self._catalog = catalog
        self._event_store_manager = event_store_manager
        self._uow_factory = uow_factory
        self._lock_strategy = lock_strategy
        self._checkpoint_store = checkpoint_store
        self._event_registry = event_registry
        self._batch_size = _validate_batch_size(batch_size)
        self._lock_timeout = lock_timeout

    async def replay(
        self,
        identifier: str,
        progress_callback: ProgressCallback | None = None,
        *,
        batch_size: int | None = None,
        cancellation: CancellationToken | None = None,
        resume: bool = False,
    ) -> ReplayResult:
        """Replay the projection designated by *identifier*.

        Args:
            identifier: Full or short projection identifier.
            progress_callback: Called with ``(sequence_number, stream_version)``
                after every applied event; may be a coroutine function.
            batch_size: Events per transaction; defaults to the engine's.
            cancellation: Token checked after each event.
            resume: Continue after the saved checkpoint instead of resetting
                (requires a checkpoint store).

        Raises:
            ResolutionError: *identifier* does not designate one projection.
            ReplayConfigurationError: invalid *batch_size*, or *resume* without
                a checkpoint store.
            EventCouldNotBeAppliedError: a projector failed on an event.
        """
        size = (
            self._batch_size if batch_size is None else _validate_batch_size(batch_size)
        )
        if resume and self._checkpoint_store is None:
            raise ReplayConfigurationError(
                "Resuming a replay requires a checkpoint store"
            )
        projection = self._catalog.get_projection(identifier)
        name = str(projection.identifier)
        correlation_id = ensure_correlation_id()

        return await instrument(
            f"projection.replay.{name}",
            {
                "projection.name": name,
                "projection.batch_size": size,
                "projection.resume": resume,
                "correlation_id": correlation_id,
            },
            lambda: self._locked_replay(
                projection, progress_callback, size, cancellation, resume
            ),
        )

    async def _locked_replay(
        self,
        projection: Projection,
        progress_callback: ProgressCallback | None,
        batch_size: int,
        cancellation: CancellationToken | None,
        resume: bool,
    ) -> ReplayResult:
        if self._lock_strategy is None:
            return await self._replay_internal(
                projection, progress_callback, batch_size, cancellation, resume
            )

        resource = ResourceIdentifier(
            REPLAY_LOCK_RESOURCE_TYPE, str(projection.identifier)
        )
        token = await self._lock_strategy.acquire(
            resource, timeout=self._lock_timeout, ttl=REPLAY_LOCK_TTL_SECONDS
        )
        try:
            return await self._replay_internal(
                projection, progress_callback, batch_size, cancellation, resume
            )
        finally:
            await self._lock_strategy.release(resource, token)

    async def _replay_internal(
        self,
        projection: Projection,
        progress_callback: ProgressCallback | None,
        batch_size: int,
        cancellation: CancellationToken | None,
        resume: bool,
    ) -> ReplayResult:
        name = str(projection.identifier)
        store = self._event_store_manager.get_event_store_for_listener(
            projection.projector_class_name
        )
        projector = self._catalog.get_projector(name)
        from_position = await self._start_position(name, projector, resume)

        invoker = EventListenerInvoker(
            store,
            projector,
            self._uow_factory,
            projection=name,
            event_types=projection.event_types,
            batch_size=batch_size,
            event_registry=self._event_registry,
            checkpoint_store=self._checkpoint_store,
        )
        invoker.on_progress(progress_callback)

        logger.info(
            "Replaying projection %s from position %d (batch size %d)",
            name,
            from_position,
            batch_size,
        )
        await invoker.catch_up(from_position=from_position, cancellation=cancellation)

        result = ReplayResult(
            identifier=name,
            applied_count=invoker.applied_count,
            commit_count=invoker.commit_count,
            last_committed_position=invoker.last_committed_position,
            cancelled=invoker.cancelled,
        )
        if result.cancelled:
            logger.warning(
                "Replay of projection %s cancelled after %d event(s), "
                "last committed position %s",
                name,
                result.applied_count,
                result.last_committed_position,
            )
        else:
            logger.info(
                "Replayed projection %s: %d event(s) in %d batch(es)",
                name,
                result.applied_count,
                result.commit_count,
            )
        return result

    async def _start_position(self, name: str, projector: Any, resume: bool) -> int:
        if resume and self._checkpoint_store is not None:
            position = await self._checkpoint_store.get_position(name)
            if position is not None:
                logger.info("Resuming projection %s after position %d", name, position)
                return position

        await maybe_await(projector.reset())
        if self._checkpoint_store is not None:
            await self._checkpoint_store.delete_position(name)
        return 0
