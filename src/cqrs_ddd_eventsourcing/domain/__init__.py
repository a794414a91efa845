"""Domain layer — events, decorators and the event type registry."""

from __future__ import annotations

from .decorators import (
    DomainEventDecorator,
    EventWithIdentifier,
    EventWithMetadata,
    collect_decorations,
    unwrap_event,
)
from .event_registry import EventTypeRegistry
from .events import DomainEvent, event_identifier, event_type_name

__all__ = [
    "DomainEvent",
    "DomainEventDecorator",
    "EventTypeRegistry",
    "EventWithIdentifier",
    "EventWithMetadata",
    "collect_decorations",
    "event_identifier",
    "event_type_name",
    "unwrap_event",
]
