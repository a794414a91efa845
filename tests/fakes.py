"""Sample events, projectors and handlers shared by the test modules."""

from __future__ import annotations

from typing import Any

from cqrs_ddd_eventsourcing.domain import DomainEvent
from cqrs_ddd_eventsourcing.ports import IEventStore


class InvoiceIssued(DomainEvent):
    invoice_id: str
    amount: int = 0


class InvoicePaid(DomainEvent):
    invoice_id: str


class CustomerRegistered(DomainEvent):
    customer_id: str


class RecordingProjector:
    """Keeps every applied event in memory."""

    def __init__(self) -> None:
        self.applied: list[Any] = []
        self.reset_count = 0
        self.fail_at: int | None = None

    def apply(self, event: Any) -> None:
        position = getattr(event, "position", None)
        if self.fail_at is not None and position == self.fail_at:
            raise RuntimeError(f"cannot apply position {self.fail_at}")
        self.applied.append(event)

    def reset(self) -> None:
        self.applied.clear()
        self.reset_count += 1

    def is_empty(self) -> bool:
        return not self.applied

    @property
    def positions(self) -> list[int]:
        return [e.position for e in self.applied]


class InvoiceProjector(RecordingProjector):
    projection_namespace = "acme.billing"


class CustomerProjector:
    """Async flavour of a projector."""

    projection_namespace = "acme.crm"

    def __init__(self) -> None:
        self.customers: list[str] = []

    async def apply(self, event: Any) -> None:
        self.customers.append(event.payload["customer_id"])

    async def reset(self) -> None:
        self.customers.clear()

    async def is_empty(self) -> bool:
        return not self.customers


class SendReceipt:
    def __init__(self) -> None:
        self.handled: list[Any] = []

    def handle(self, event: Any) -> None:
        self.handled.append(event)


class AuditTrail:
    def __init__(self) -> None:
        self.handled: list[Any] = []

    async def handle(self, event: Any) -> None:
        self.handled.append(event)


class BrokenHandler:
    def handle(self, event: Any) -> None:
        raise ValueError("boom")


class ScriptedEventStore(IEventStore):
    """Yields a fixed list of stored events regardless of arguments."""

    def __init__(self, events: list[Any]) -> None:
        self._events = events

    async def append_events(self, stream_id: str, events: Any) -> list[Any]:
        raise NotImplementedError

    async def read_events_from(
        self, stream_id: str, position: int = 0, *, batch_size: int = 1000
    ) -> Any:
        for event in self._events:
            yield event


async def seed_invoices(
    store: IEventStore, count: int, *, stream_id: str = "invoice-1"
) -> None:
    await store.append_events(
        stream_id,
        [InvoiceIssued(invoice_id=f"inv-{i}", amount=i) for i in range(1, count + 1)],
    )
