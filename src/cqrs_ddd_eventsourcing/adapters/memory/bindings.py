"""StaticBindingTable — explicit event type ↔ listener table built at startup."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ...ports.discovery import IBindingSource, IListenerEventTypes
from ...utils import event_type_identifier, listener_identifier

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


class StaticBindingTable(IBindingSource, IListenerEventTypes):
    """Ordered, duplicate-free list of ``(event_type, listener_identifier)`` pairs.

    Serves both as the discovery source of the handler registry and as the
    event-types-per-listener lookup of the projection catalog.

    Usage::

        table = StaticBindingTable()
        table.add_listener(InvoiceProjector, [InvoiceIssued, InvoicePaid])
        table.add("InvoiceIssued", "acme.billing.handlers.SendReceipt")
    """

    def __init__(self, bindings: Iterable[tuple[str, str]] = ()) -> None:
        self._bindings: list[tuple[str, str]] = []
        for event_type, listener in bindings:
            self.add(event_type, listener)

    def add(self, event_type: str | type[Any], listener: str | type[Any]) -> None:
        """Bind *listener* to *event_type*; adding an existing pair is a no-op."""
        binding = (event_type_identifier(event_type), listener_identifier(listener))
        if binding not in self._bindings:
            self._bindings.append(binding)

    def add_listener(
        self,
        listener: str | type[Any],
        event_types: Iterable[str | type[Any]],
    ) -> None:
        """Bind *listener* to every event type in *event_types*."""
        for event_type in event_types:
            self.add(event_type, listener)

    def get_event_types_for_listener(self, listener_identifier: str) -> set[str]:
        return {
            event_type
            for event_type, listener in self._bindings
            if listener == listener_identifier
        }

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(list(self._bindings))

    def __len__(self) -> int:
        return len(self._bindings)
