"""Domain Event base class and event type resolution."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from .decorators import collect_decorations, unwrap_event


class DomainEvent(BaseModel):
    """Base class for all Domain Events.

    Events are immutable and carry full tracing context. The event type
    name used to route an event to handlers and projectors is the class
    name (see :func:`event_type_name`).
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    version: int = 1
    metadata: dict[str, object] = Field(default_factory=dict)
    correlation_id: str | None = None
    causation_id: str | None = None


def event_type_name(event: object) -> str:
    """Return the routing name of *event*.

    Decorators are unwrapped first. Objects carrying a non-empty string
    ``event_type`` attribute (e.g. ``StoredEvent``) use it; everything else
    falls back to the class name.
    """
    inner = unwrap_event(event)
    name = getattr(inner, "event_type", None)
    if isinstance(name, str) and name:
        return name
    return type(inner).__name__


def event_identifier(event: object) -> str:
    """Best-effort identifier of *event* for diagnostics."""
    identifier, _ = collect_decorations(event)
    if identifier:
        return identifier
    inner = unwrap_event(event)
    event_id = getattr(inner, "event_id", None)
    return str(event_id) if event_id is not None else repr(inner)
