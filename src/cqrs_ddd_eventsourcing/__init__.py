"""cqrs-ddd-eventsourcing — dispatch and replay core for event-sourced systems.

Live dispatch routes each new event to the handlers bound to its type;
replay rebuilds a projection's read model from the full event history in
bounded transactional batches.

Quick start::

    from cqrs_ddd_eventsourcing import bootstrap_event_sourcing
    from cqrs_ddd_eventsourcing.adapters.memory import (
        InMemoryEventStore,
        InMemoryEventStoreManager,
        InMemoryUnitOfWorkFactory,
        StaticBindingTable,
    )

    context = bootstrap_event_sourcing(
        projectors=[InvoiceProjector],
        bindings=table,
        event_store_manager=InMemoryEventStoreManager(InMemoryEventStore()),
        uow_factory=InMemoryUnitOfWorkFactory(),
    )
    result = await context.projection_manager.replay("invoice")
"""

from __future__ import annotations

from .bootstrap import EventSourcingContext, bootstrap_event_sourcing
from .correlation import (
    correlation_scope,
    ensure_correlation_id,
    generate_correlation_id,
    get_causation_id,
    get_correlation_id,
    set_correlation_id,
)
from .dispatch import DispatchFailurePolicy, EventDispatcher
from .domain import (
    DomainEvent,
    DomainEventDecorator,
    EventTypeRegistry,
    EventWithIdentifier,
    EventWithMetadata,
)
from .instrumentation import (
    HookRegistry,
    InstrumentationHook,
    get_hook_registry,
    instrument,
    set_hook_registry,
)
from .ports import (
    ALL_STREAMS,
    IBindingSource,
    ICheckpointStore,
    IEventHandler,
    IEventStore,
    IEventStoreManager,
    IListenerEventTypes,
    ILockStrategy,
    IProjector,
    StoredEvent,
    UnitOfWork,
)
from .primitives import (
    AmbiguousProjectionIdentifierError,
    ApplicationError,
    ConfigurationError,
    DuplicateProjectionIdentifierError,
    EventCouldNotBeAppliedError,
    EventHandlerFailedError,
    EventSequenceError,
    EventSourcingError,
    MalformedProjectionIdentifierError,
    ProjectionNotFoundError,
    ReplayConfigurationError,
    ResolutionError,
    UnknownEventStoreError,
    UnknownHandlerError,
)
from .projections import (
    DEFAULT_TRANSACTION_BATCH_SIZE,
    CancellationToken,
    Projection,
    ProjectionCatalog,
    ProjectionManager,
    ProjectorDefinition,
    ReplayEngine,
    ReplayResult,
)
from .registry import (
    FactoryRegistry,
    HandlerRegistry,
    IdentifierRegistry,
    ProjectionIdentifier,
)

__version__ = "0.1.0"

__all__ = [
    "ALL_STREAMS",
    "DEFAULT_TRANSACTION_BATCH_SIZE",
    "AmbiguousProjectionIdentifierError",
    "ApplicationError",
    "CancellationToken",
    "ConfigurationError",
    "DispatchFailurePolicy",
    "DomainEvent",
    "DomainEventDecorator",
    "DuplicateProjectionIdentifierError",
    "EventCouldNotBeAppliedError",
    "EventDispatcher",
    "EventHandlerFailedError",
    "EventSequenceError",
    "EventSourcingContext",
    "EventSourcingError",
    "EventTypeRegistry",
    "EventWithIdentifier",
    "EventWithMetadata",
    "FactoryRegistry",
    "HandlerRegistry",
    "HookRegistry",
    "IBindingSource",
    "ICheckpointStore",
    "IEventHandler",
    "IEventStore",
    "IEventStoreManager",
    "IListenerEventTypes",
    "ILockStrategy",
    "IProjector",
    "IdentifierRegistry",
    "InstrumentationHook",
    "MalformedProjectionIdentifierError",
    "Projection",
    "ProjectionCatalog",
    "ProjectionIdentifier",
    "ProjectionManager",
    "ProjectionNotFoundError",
    "ProjectorDefinition",
    "ReplayConfigurationError",
    "ReplayEngine",
    "ReplayResult",
    "ResolutionError",
    "StoredEvent",
    "UnitOfWork",
    "UnknownEventStoreError",
    "UnknownHandlerError",
    "bootstrap_event_sourcing",
    "correlation_scope",
    "ensure_correlation_id",
    "generate_correlation_id",
    "get_causation_id",
    "get_correlation_id",
    "get_hook_registry",
    "instrument",
    "set_correlation_id",
    "set_hook_registry",
]
