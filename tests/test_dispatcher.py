from __future__ import annotations

from typing import Any

import pytest
from fakes import (
    AuditTrail,
    BrokenHandler,
    CustomerRegistered,
    InvoiceIssued,
    InvoicePaid,
    SendReceipt,
)

from cqrs_ddd_eventsourcing.adapters.memory import InMemoryEventStore
from cqrs_ddd_eventsourcing.correlation import get_causation_id, set_correlation_id
from cqrs_ddd_eventsourcing.dispatch import DispatchFailurePolicy, EventDispatcher
from cqrs_ddd_eventsourcing.domain import EventWithIdentifier
from cqrs_ddd_eventsourcing.instrumentation import HookRegistry, set_hook_registry
from cqrs_ddd_eventsourcing.ports import ALL_STREAMS, IEventHandler
from cqrs_ddd_eventsourcing.primitives import EventHandlerFailedError
from cqrs_ddd_eventsourcing.registry import FactoryRegistry, HandlerRegistry
from cqrs_ddd_eventsourcing.utils import qualified_name


@pytest.fixture
def factories() -> FactoryRegistry:
    factories = FactoryRegistry()
    for handler in (SendReceipt, AuditTrail, BrokenHandler):
        factories.register_class(handler)
    return factories


@pytest.fixture
def handler_registry(factories: FactoryRegistry) -> HandlerRegistry:
    return HandlerRegistry(factories)


def _handler(factories: FactoryRegistry, cls: type) -> Any:
    return factories.get(qualified_name(cls))


class TestDispatch:
    @pytest.mark.asyncio
    async def test_invokes_sync_and_async_handlers_in_order(
        self, factories: FactoryRegistry, handler_registry: HandlerRegistry
    ) -> None:
        dispatcher = EventDispatcher(handler_registry)
        dispatcher.register_handler(InvoicePaid, SendReceipt)
        dispatcher.register_handler(InvoicePaid, AuditTrail)
        event = InvoicePaid(invoice_id="1")

        await dispatcher.dispatch(event)

        assert _handler(factories, SendReceipt).handled == [event]
        assert _handler(factories, AuditTrail).handled == [event]
        assert isinstance(_handler(factories, SendReceipt), IEventHandler)

    @pytest.mark.asyncio
    async def test_event_without_handlers_is_a_no_op(
        self, handler_registry: HandlerRegistry
    ) -> None:
        dispatcher = EventDispatcher(handler_registry)
        await dispatcher.dispatch(CustomerRegistered(customer_id="c-1"))

    @pytest.mark.asyncio
    async def test_plain_callables_and_projectors_are_supported(
        self, factories: FactoryRegistry, handler_registry: HandlerRegistry
    ) -> None:
        received: list[Any] = []

        def on_paid(event: Any) -> None:
            received.append(("callable", event))

        class TotalsProjector:
            def apply(self, event: Any) -> None:
                received.append(("projector", event))

        factories.register("billing.on_paid", lambda: on_paid)
        factories.register("billing.totals", TotalsProjector)
        handler_registry.register(InvoicePaid, "billing.on_paid")
        handler_registry.register(InvoicePaid, "billing.totals")
        event = InvoicePaid(invoice_id="1")

        await EventDispatcher(handler_registry).dispatch(event)

        assert received == [("callable", event), ("projector", event)]

    @pytest.mark.asyncio
    async def test_decorated_event_reaches_handlers_of_wrapped_type(
        self, factories: FactoryRegistry, handler_registry: HandlerRegistry
    ) -> None:
        handler_registry.register(InvoicePaid, SendReceipt)
        event = EventWithIdentifier(event=InvoicePaid(invoice_id="1"), identifier="e1")

        await EventDispatcher(handler_registry).dispatch(event)

        assert _handler(factories, SendReceipt).handled == [event]

    @pytest.mark.asyncio
    async def test_dispatch_all_keeps_event_order(
        self, factories: FactoryRegistry, handler_registry: HandlerRegistry
    ) -> None:
        handler_registry.register(InvoicePaid, SendReceipt)
        handler_registry.register(InvoiceIssued, SendReceipt)
        events = [
            InvoiceIssued(invoice_id="1"),
            InvoicePaid(invoice_id="1"),
            InvoiceIssued(invoice_id="2"),
        ]

        await EventDispatcher(handler_registry).dispatch_all(events)

        assert _handler(factories, SendReceipt).handled == events


class TestFailurePolicy:
    @pytest.mark.asyncio
    async def test_fail_fast_skips_remaining_handlers(
        self, factories: FactoryRegistry, handler_registry: HandlerRegistry
    ) -> None:
        handler_registry.register(InvoicePaid, SendReceipt)
        handler_registry.register(InvoicePaid, BrokenHandler)
        handler_registry.register(InvoicePaid, AuditTrail)
        dispatcher = EventDispatcher(handler_registry)
        assert dispatcher.failure_policy is DispatchFailurePolicy.FAIL_FAST

        with pytest.raises(EventHandlerFailedError) as exc_info:
            await dispatcher.dispatch(InvoicePaid(invoice_id="1"))

        error = exc_info.value
        assert error.event_type == "InvoicePaid"
        assert error.handler == qualified_name(BrokenHandler)
        assert len(error.errors) == 1
        assert isinstance(error.__cause__, ValueError)
        assert len(_handler(factories, SendReceipt).handled) == 1
        assert _handler(factories, AuditTrail).handled == []

    @pytest.mark.asyncio
    async def test_continue_runs_every_handler_and_collects_failures(
        self, factories: FactoryRegistry, handler_registry: HandlerRegistry
    ) -> None:
        async def also_broken(_event: Any) -> None:
            raise RuntimeError("down")

        factories.register("billing.also_broken", lambda: also_broken)
        handler_registry.register(InvoicePaid, BrokenHandler)
        handler_registry.register(InvoicePaid, AuditTrail)
        handler_registry.register(InvoicePaid, "billing.also_broken")
        dispatcher = EventDispatcher(
            handler_registry, failure_policy=DispatchFailurePolicy.CONTINUE
        )

        with pytest.raises(EventHandlerFailedError) as exc_info:
            await dispatcher.dispatch(InvoicePaid(invoice_id="1"))

        error = exc_info.value
        assert error.handler == qualified_name(BrokenHandler)
        assert [type(exc) for _, exc in error.errors] == [ValueError, RuntimeError]
        assert "2 handlers failed" in str(error)
        assert len(_handler(factories, AuditTrail).handled) == 1

    @pytest.mark.asyncio
    async def test_dispatch_all_stops_at_failing_event(
        self, factories: FactoryRegistry, handler_registry: HandlerRegistry
    ) -> None:
        handler_registry.register(InvoiceIssued, SendReceipt)
        handler_registry.register(InvoicePaid, BrokenHandler)

        with pytest.raises(EventHandlerFailedError):
            await EventDispatcher(handler_registry).dispatch_all(
                [
                    InvoiceIssued(invoice_id="1"),
                    InvoicePaid(invoice_id="1"),
                    InvoiceIssued(invoice_id="2"),
                ]
            )

        assert len(_handler(factories, SendReceipt).handled) == 1


@pytest.mark.asyncio
async def test_dispatch_runs_through_hooks(handler_registry: HandlerRegistry) -> None:
    operations: list[str] = []

    async def hook(operation: str, _attrs: dict[str, Any], next_handler: Any) -> Any:
        operations.append(operation)
        return await next_handler()

    registry = HookRegistry()
    registry.register(hook, operations=["event.*"])
    set_hook_registry(registry)
    handler_registry.register(InvoicePaid, SendReceipt)

    await EventDispatcher(handler_registry).dispatch(InvoicePaid(invoice_id="1"))

    assert operations == [
        "event.dispatch.InvoicePaid",
        "event.handler.InvoicePaid.SendReceipt",
    ]


@pytest.mark.asyncio
async def test_events_appended_by_a_handler_carry_causation(
    factories: FactoryRegistry, handler_registry: HandlerRegistry
) -> None:
    store = InMemoryEventStore()
    seen: list[str | None] = []

    async def issue_follow_up(event: Any) -> None:
        seen.append(get_causation_id())
        await store.append_events("invoice-1", [InvoiceIssued(invoice_id="2")])

    factories.register("billing.follow_up", lambda: issue_follow_up)
    handler_registry.register(InvoicePaid, "billing.follow_up")
    set_correlation_id("cid-7")
    paid = InvoicePaid(invoice_id="1")

    await EventDispatcher(handler_registry).dispatch(paid)

    [follow_up] = [e async for e in store.read_events_from(ALL_STREAMS)]
    assert seen == [str(paid.event_id)]
    assert follow_up.causation_id == str(paid.event_id)
    assert follow_up.correlation_id == "cid-7"
    assert get_causation_id() is None
