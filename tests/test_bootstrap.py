from __future__ import annotations

import pytest
from fakes import (
    AuditTrail,
    InvoiceIssued,
    InvoicePaid,
    InvoiceProjector,
    SendReceipt,
    seed_invoices,
)

from cqrs_ddd_eventsourcing import (
    DispatchFailurePolicy,
    ProjectorDefinition,
    bootstrap_event_sourcing,
)
from cqrs_ddd_eventsourcing.adapters.memory import (
    InMemoryEventStore,
    InMemoryEventStoreManager,
    InMemoryUnitOfWorkFactory,
    StaticBindingTable,
)
from cqrs_ddd_eventsourcing.bootstrap import HandlerSpec
from cqrs_ddd_eventsourcing.utils import qualified_name


@pytest.mark.asyncio
async def test_bootstrap_wires_dispatch_and_replay() -> None:
    store = InMemoryEventStore()
    table = StaticBindingTable()
    table.add_listener(InvoiceProjector, [InvoiceIssued, InvoicePaid])
    table.add_listener(SendReceipt, [InvoicePaid])

    context = bootstrap_event_sourcing(
        handlers=[SendReceipt],
        projectors=[InvoiceProjector],
        bindings=table,
        event_store_manager=InMemoryEventStoreManager(store),
        uow_factory=InMemoryUnitOfWorkFactory(),
        batch_size=2,
    )

    paid = InvoicePaid(invoice_id="1")
    await store.append_events("invoice-1", [InvoiceIssued(invoice_id="1"), paid])
    await context.dispatcher.dispatch(paid)

    receipt = context.factories.get(qualified_name(SendReceipt))
    projector = context.factories.get(qualified_name(InvoiceProjector))
    assert receipt.handled == [paid]
    # projectors bound in the table also react to live events
    assert projector.applied == [paid]

    [projection] = context.projection_manager.list_projections()
    assert str(projection.identifier) == "acme.billing:invoice"
    assert await context.projection_manager.is_projection_empty("invoice") is False

    result = await context.projection_manager.replay("billing:invoice")

    assert result.applied_count == 2
    assert result.commit_count == 1
    assert [e.event_type for e in projector.applied] == ["InvoiceIssued", "InvoicePaid"]


def test_bootstrap_accepts_factories_and_definitions() -> None:
    context = bootstrap_event_sourcing(
        handlers=[("billing.receipts", SendReceipt)],
        projectors=[ProjectorDefinition(InvoiceProjector, name="ledger")],
        event_store_manager=InMemoryEventStoreManager(InMemoryEventStore()),
        uow_factory=InMemoryUnitOfWorkFactory(),
        failure_policy=DispatchFailurePolicy.CONTINUE,
    )

    assert context.factories.is_registered("billing.receipts")
    assert context.dispatcher.failure_policy is DispatchFailurePolicy.CONTINUE
    assert str(context.projection_manager.get_projection("ledger").identifier) == (
        "acme.billing:ledger"
    )


def test_bootstrap_accepts_every_handler_spec() -> None:
    receipts = SendReceipt()

    def notify_accounting(_event: object) -> None:
        return None

    specs: list[HandlerSpec] = [
        ("billing.audit", AuditTrail),
        receipts,
        notify_accounting,
    ]
    context = bootstrap_event_sourcing(
        handlers=specs,
        event_store_manager=InMemoryEventStoreManager(InMemoryEventStore()),
        uow_factory=InMemoryUnitOfWorkFactory(),
    )

    assert isinstance(context.factories.get("billing.audit"), AuditTrail)
    assert context.factories.get(qualified_name(SendReceipt)) is receipts
    assert context.factories.get(qualified_name(notify_accounting)) is notify_accounting

def test_bootstrap_requires_listener_event_types_for_plain_binding_sources() -> None:
    with pytest.raises(TypeError):
        bootstrap_event_sourcing(
            bindings=[("InvoicePaid", "fakes.SendReceipt")],  # type: ignore[arg-type]
            event_store_manager=InMemoryEventStoreManager(),
            uow_factory=InMemoryUnitOfWorkFactory(),
        )


@pytest.mark.asyncio
async def test_projection_manager_uses_the_configured_batch_size() -> None:
    store = InMemoryEventStore()
    table = StaticBindingTable()
    table.add_listener(InvoiceProjector, [InvoiceIssued, InvoicePaid])
    uow_factory = InMemoryUnitOfWorkFactory()
    context = bootstrap_event_sourcing(
        projectors=[InvoiceProjector],
        bindings=table,
        event_store_manager=InMemoryEventStoreManager(store),
        uow_factory=uow_factory,
        batch_size=10,
    )
    await seed_invoices(store, 100)

    result = await context.projection_manager.replay("invoice")

    assert result.applied_count == 100
    assert result.commit_count == 10
    assert uow_factory.commit_count == 10
