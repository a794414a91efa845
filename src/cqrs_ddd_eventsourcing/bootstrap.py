"""bootstrap_event_sourcing — one-call wiring for dispatch and replay."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeAlias

from .adapters.memory.bindings import StaticBindingTable
from .dispatch import DispatchFailurePolicy, EventDispatcher
from .ports.discovery import IListenerEventTypes
from .ports.listeners import IEventHandler, IProjector
from .projections.catalog import ProjectionCatalog
from .projections.manager import ProjectionManager
from .projections.replay import DEFAULT_TRANSACTION_BATCH_SIZE, ReplayEngine
from .registry.factories import FactoryRegistry
from .registry.handlers import HandlerRegistry

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .domain.event_registry import EventTypeRegistry
    from .ports.checkpoint import ICheckpointStore
    from .ports.discovery import IBindingSource
    from .ports.event_store import IEventStoreManager
    from .ports.locking import ILockStrategy
    from .ports.unit_of_work import UnitOfWork
    from .projections.catalog import ProjectorDefinition

logger = logging.getLogger("cqrs_ddd.eventsourcing")

#: A handler class, a ready instance, or an ``(identifier, factory)`` pair.
HandlerSpec: TypeAlias = (
    type[Any]
    | tuple[str, Callable[[], Any]]
    | IEventHandler
    | IProjector
    | Callable[[Any], Any]
)


class EventSourcingContext:
    """Container returned by :func:`bootstrap_event_sourcing`.

    Attributes:
        factories: Builds every handler and projector instance.
        handler_registry: Event type → handler bindings.
        dispatcher: Live dispatch facade.
        catalog: Known projections.
        replay_engine: Rebuilds projections from the event history.
        projection_manager: Administrative facade over catalog and engine.
    """

    def __init__(
        self,
        *,
        factories: FactoryRegistry,
        handler_registry: HandlerRegistry,
        dispatcher: EventDispatcher,
        catalog: ProjectionCatalog,
        replay_engine: ReplayEngine,
        projection_manager: ProjectionManager,
    ) -> None:
        self.factories = factories
        self.handler_registry = handler_registry
        self.dispatcher = dispatcher
        self.catalog = catalog
        self.replay_engine = replay_engine
        self.projection_manager = projection_manager


def _register_handlers(
    factories: FactoryRegistry, handlers: Iterable[HandlerSpec]
) -> int:
    count = 0
    for spec in handlers:
        if isinstance(spec, tuple):
            identifier, factory = spec
            factories.register(identifier, factory)
        elif isinstance(spec, type):
            factories.register_class(spec)
        else:
            factories.register_instance(spec)
        count += 1
    return count


def bootstrap_event_sourcing(
    *,
    event_store_manager: IEventStoreManager,
    uow_factory: Callable[[], UnitOfWork],
    handlers: Iterable[HandlerSpec] = (),
    projectors: Iterable[ProjectorDefinition | type[Any]] = (),
    bindings: IBindingSource | None = None,
    listener_event_types: IListenerEventTypes | None = None,
    lock_strategy: ILockStrategy | None = None,
    checkpoint_store: ICheckpointStore | None = None,
    event_registry: EventTypeRegistry | None = None,
    factories: FactoryRegistry | None = None,
    failure_policy: DispatchFailurePolicy = DispatchFailurePolicy.FAIL_FAST,
    batch_size: int = DEFAULT_TRANSACTION_BATCH_SIZE,
) -> EventSourcingContext:
    """Wire up dispatch and replay in one call.

    1. Registers every handler (class, instance or ``(identifier, factory)``
       pair) in the :class:`FactoryRegistry`.
    2. Builds the :class:`ProjectionCatalog`, which registers a factory for
       each projector class.
    3. Creates the :class:`HandlerRegistry` over *bindings*; discovery runs
       lazily on first dispatch.
    4. Creates the dispatcher, the replay engine and the projection manager.

    Parameters
    ----------
    bindings:
        ``(event_type, listener_identifier)`` pairs for handlers and
        projectors. Defaults to an empty :class:`StaticBindingTable`.
    listener_event_types:
        Event types per projector. Defaults to *bindings* when it can answer
        the question (a :class:`StaticBindingTable` does).

    Example
    -------
    ::

        table = StaticBindingTable()
        table.add_listener(InvoiceProjector, [InvoiceIssued, InvoicePaid])
        table.add_listener(SendReceipt, [InvoicePaid])

        context = bootstrap_event_sourcing(
            handlers=[SendReceipt],
            projectors=[InvoiceProjector],
            bindings=table,
            event_store_manager=InMemoryEventStoreManager(store),
            uow_factory=InMemoryUnitOfWorkFactory(),
        )
        await context.dispatcher.dispatch(InvoicePaid(invoice_id="42"))
        await context.projection_manager.replay("invoice")
    """
    factory_registry = factories or FactoryRegistry()
    handler_count = _register_handlers(factory_registry, handlers)

    binding_source = bindings if bindings is not None else StaticBindingTable()
    if listener_event_types is None:
        if not isinstance(binding_source, IListenerEventTypes):
            raise TypeError(
                "listener_event_types is required when bindings cannot list "
                "the event types of a listener"
            )
        listener_event_types = binding_source

    catalog = ProjectionCatalog(projectors, listener_event_types, factory_registry)
    handler_registry = HandlerRegistry(factory_registry, discovery=binding_source)
    dispatcher = EventDispatcher(handler_registry, failure_policy=failure_policy)
    replay_engine = ReplayEngine(
        catalog,
        event_store_manager,
        uow_factory,
        lock_strategy=lock_strategy,
        checkpoint_store=checkpoint_store,
        event_registry=event_registry,
        batch_size=batch_size,
    )

    logger.info(
        "Event sourcing bootstrap complete: %d handler(s), %d projection(s), "
        "failure policy=%s",
        handler_count,
        len(catalog.identifiers),
        failure_policy.value,
    )

    return EventSourcingContext(
        factories=factory_registry,
        handler_registry=handler_registry,
        dispatcher=dispatcher,
        catalog=catalog,
        replay_engine=replay_engine,
        projection_manager=ProjectionManager(catalog, replay_engine),
    )


__all__ = ["EventSourcingContext", "bootstrap_event_sourcing"]
