from __future__ import annotations

import pytest
from fakes import CustomerProjector, InvoicePaid, InvoiceIssued, InvoiceProjector

from cqrs_ddd_eventsourcing.adapters.memory import (
    InMemoryCheckpointStore,
    InMemoryEventStore,
    InMemoryEventStoreManager,
    InMemoryLockStrategy,
    InMemoryUnitOfWorkFactory,
    StaticBindingTable,
)
from cqrs_ddd_eventsourcing.correlation import set_correlation_id
from cqrs_ddd_eventsourcing.projections import ProjectionCatalog, ReplayEngine
from cqrs_ddd_eventsourcing.registry import FactoryRegistry


@pytest.fixture(autouse=True)
def _reset_correlation() -> None:
    set_correlation_id(None)


@pytest.fixture
def event_store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def store_manager(event_store: InMemoryEventStore) -> InMemoryEventStoreManager:
    return InMemoryEventStoreManager(event_store)


@pytest.fixture
def uow_factory() -> InMemoryUnitOfWorkFactory:
    return InMemoryUnitOfWorkFactory()


@pytest.fixture
def checkpoint_store() -> InMemoryCheckpointStore:
    return InMemoryCheckpointStore()


@pytest.fixture
def lock_strategy() -> InMemoryLockStrategy:
    return InMemoryLockStrategy()


@pytest.fixture
def factories() -> FactoryRegistry:
    return FactoryRegistry()


@pytest.fixture
def bindings() -> StaticBindingTable:
    table = StaticBindingTable()
    table.add_listener(InvoiceProjector, [InvoiceIssued, InvoicePaid])
    table.add_listener(CustomerProjector, ["CustomerRegistered"])
    return table


@pytest.fixture
def catalog(
    bindings: StaticBindingTable, factories: FactoryRegistry
) -> ProjectionCatalog:
    return ProjectionCatalog([InvoiceProjector, CustomerProjector], bindings, factories)


@pytest.fixture
def engine(
    catalog: ProjectionCatalog,
    store_manager: InMemoryEventStoreManager,
    uow_factory: InMemoryUnitOfWorkFactory,
) -> ReplayEngine:
    return ReplayEngine(catalog, store_manager, uow_factory)


@pytest.fixture
def invoice_projector(catalog: ProjectionCatalog) -> InvoiceProjector:
    projector = catalog.get_projector("invoice")
    assert isinstance(projector, InvoiceProjector)
    return projector
