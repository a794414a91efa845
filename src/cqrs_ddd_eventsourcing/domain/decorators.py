"""Event decorators — wrap an event with an identifier or extra metadata.

Decorators are transparent for routing: the handler registry and the event
store always look at the innermost event.

Usage::

    event = EventWithMetadata(
        event=EventWithIdentifier(event=InvoiceIssued(...), identifier="evt-1"),
        metadata={"tenant": "acme"},
    )
    unwrap_event(event)  # -> InvoiceIssued(...)
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DomainEventDecorator(BaseModel):
    """Base class for decorators; ``event`` is the wrapped event (maybe decorated)."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    event: Any


class EventWithIdentifier(DomainEventDecorator):
    """Pins the identifier the event is stored under."""

    identifier: str


class EventWithMetadata(DomainEventDecorator):
    """Attaches metadata that is merged into the stored event's metadata."""

    metadata: dict[str, object] = Field(default_factory=dict)


def unwrap_event(event: Any) -> Any:
    """Return the innermost event, following nested decorators."""
    while isinstance(event, DomainEventDecorator):
        event = event.event
    return event


def collect_decorations(event: Any) -> tuple[str | None, dict[str, object]]:
    """Return ``(identifier, metadata)`` gathered from all decorator layers.

    Outer layers win over inner ones for the same metadata key.
    """
    identifier: str | None = None
    layers: list[dict[str, object]] = []
    while isinstance(event, DomainEventDecorator):
        if isinstance(event, EventWithIdentifier) and identifier is None:
            identifier = event.identifier
        if isinstance(event, EventWithMetadata):
            layers.append(event.metadata)
        event = event.event
    metadata: dict[str, object] = {}
    for layer in reversed(layers):
        metadata.update(layer)
    return identifier, metadata
