from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from fakes import InvoiceProjector, seed_invoices

from cqrs_ddd_eventsourcing.adapters.memory import InMemoryEventStore
from cqrs_ddd_eventsourcing.projections import (
    CancellationToken,
    ProjectionCatalog,
    ProjectionManager,
    ReplayEngine,
)


@pytest.fixture
def manager(catalog: ProjectionCatalog, engine: ReplayEngine) -> ProjectionManager:
    return ProjectionManager(catalog, engine)


def test_lists_and_gets_projections(manager: ProjectionManager) -> None:
    identifiers = [str(p.identifier) for p in manager.list_projections()]
    assert identifiers == ["acme.billing:invoice", "acme.crm:customer"]
    assert str(manager.get_projection("crm:customer").identifier) == (
        "acme.crm:customer"
    )


@pytest.mark.asyncio
async def test_replay_then_is_projection_empty(
    manager: ProjectionManager,
    event_store: InMemoryEventStore,
    invoice_projector: InvoiceProjector,
) -> None:
    assert await manager.is_projection_empty("invoice") is True
    await seed_invoices(event_store, 1500)
    progress: list[int] = []

    result = await manager.replay("invoice", lambda s, _v: progress.append(s))

    assert result.commit_count == 2
    assert len(progress) == 1500
    assert await manager.is_projection_empty("invoice") is False
    assert len(invoice_projector.applied) == 1500


@pytest.mark.asyncio
async def test_replay_forwards_options_to_engine(catalog: ProjectionCatalog) -> None:
    engine = AsyncMock(spec=ReplayEngine)
    manager = ProjectionManager(catalog, engine)
    token = CancellationToken()

    await manager.replay("invoice", batch_size=10, cancellation=token, resume=True)

    engine.replay.assert_awaited_once_with(
        "invoice", None, batch_size=10, cancellation=token, resume=True
    )
