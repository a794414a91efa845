"""EventTypeRegistry — turns stored events back into domain events."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .events import DomainEvent

logger = logging.getLogger("cqrs_ddd.event_registry")

# Fields of a stored event that override whatever the payload says.
_ENVELOPE_FIELDS = ("event_id", "occurred_at", "correlation_id", "causation_id")


class EventTypeRegistry:
    """Maps stored ``event_type`` names to :class:`DomainEvent` classes.

    When handed to the replay engine, every stored event is rebuilt into its
    domain class before a projector sees it::

        registry = EventTypeRegistry()
        registry.register_many([InvoiceIssued, InvoicePaid])
        event = registry.hydrate_stored(stored)
    """

    def __init__(self) -> None:
        self._classes: dict[str, type[DomainEvent]] = {}

    def register(
        self, event_class: type[DomainEvent], *, name: str | None = None
    ) -> str:
        """Register *event_class* under *name* (its class name by default)."""
        event_type = name or event_class.__name__
        existing = self._classes.get(event_type)
        if existing is not None and existing is not event_class:
            logger.warning(
                "Event type %s re-registered: %s replaces %s",
                event_type,
                event_class.__qualname__,
                existing.__qualname__,
            )
        self._classes[event_type] = event_class
        return event_type

    def register_many(self, event_classes: Iterable[type[DomainEvent]]) -> None:
        for event_class in event_classes:
            self.register(event_class)

    def event_class(self, event_type: str) -> type[DomainEvent] | None:
        return self._classes.get(event_type)

    @property
    def names(self) -> list[str]:
        return sorted(self._classes)

    def __contains__(self, event_type: object) -> bool:
        return event_type in self._classes

    def __len__(self) -> int:
        return len(self._classes)

    # ── Hydration ────────────────────────────────────────────────

    def hydrate(self, event_type: str, payload: dict[str, Any]) -> DomainEvent | None:
        """Validate *payload* into the class registered for *event_type*.

        ``None`` means the type is unknown or the payload does not validate.
        """
        event_class = self._classes.get(event_type)
        if event_class is None:
            logger.debug("No event class registered for %s", event_type)
            return None
        try:
            return event_class.model_validate(payload)
        except ValidationError as exc:
            logger.debug(
                "Payload of %s does not validate: %d error(s)",
                event_type,
                exc.error_count(),
            )
            return None

    def hydrate_stored(self, stored: Any) -> DomainEvent | None:
        """Rebuild a stored event, keeping its stored id, timestamps and trace ids.

        Stored metadata is merged over the metadata found in the payload.
        """
        data = dict(stored.payload)
        for field_name in _ENVELOPE_FIELDS:
            value = getattr(stored, field_name, None)
            if value is not None:
                data[field_name] = value
        stored_metadata = getattr(stored, "metadata", None)
        if stored_metadata:
            data["metadata"] = {**data.get("metadata", {}), **stored_metadata}
        return self.hydrate(stored.event_type, data)
