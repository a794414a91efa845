"""Configuration, resolution, application and infrastructure exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .locking import ResourceIdentifier


class EventSourcingError(Exception):
    """Root exception for the event-sourcing dispatch and replay core."""


# ── Configuration (fatal, startup-time) ──────────────────────────────


class ConfigurationError(EventSourcingError):
    """Base class for invalid wiring detected at startup or registration time."""


class DuplicateProjectionIdentifierError(ConfigurationError):
    """Raised when two projector implementations map to the same identifier."""

    def __init__(self, identifier: str, first: str, second: str) -> None:
        self.identifier = identifier
        self.first = first
        self.second = second
        super().__init__(
            f'The projection identifier "{identifier}" is ambiguous, please '
            f'rename one of the classes "{first}" or "{second}"'
        )


class UnknownHandlerError(ConfigurationError):
    """Raised when a handler identifier has no registered factory."""

    def __init__(self, handler_identifier: str) -> None:
        self.handler_identifier = handler_identifier
        super().__init__(
            f"Event handler '{handler_identifier}' is not a registered object"
        )


class UnknownEventStoreError(ConfigurationError):
    """Raised when no event store is configured for a listener."""

    def __init__(self, listener_identifier: str, store_name: str | None = None) -> None:
        self.listener_identifier = listener_identifier
        self.store_name = store_name
        msg = f"No event store configured for listener '{listener_identifier}'"
        if store_name is not None:
            msg += f" (store '{store_name}' is not registered)"
        super().__init__(msg)


class ReplayConfigurationError(ConfigurationError):
    """Raised when replay options are invalid (e.g. a non-positive batch size)."""


# ── Resolution (caller-facing, recoverable) ──────────────────────────


class ResolutionError(EventSourcingError):
    """Base class for projection identifiers that cannot be resolved."""

    def __init__(self, identifier: str, message: str) -> None:
        self.identifier = identifier
        super().__init__(message)


class ProjectionNotFoundError(ResolutionError):
    """Raised when no projection matches the given identifier."""

    def __init__(self, identifier: str) -> None:
        super().__init__(
            identifier,
            "No projection could be found that matches the projection "
            f'identifier "{identifier}"',
        )


class AmbiguousProjectionIdentifierError(ResolutionError):
    """Raised when more than one projection matches; carries every candidate."""

    def __init__(self, identifier: str, candidates: list[str]) -> None:
        self.candidates = list(candidates)
        super().__init__(
            identifier,
            f'More than one projection matches the identifier "{identifier}":'
            f"\n{', '.join(self.candidates)}",
        )


class MalformedProjectionIdentifierError(ResolutionError):
    """Raised when an identifier is neither ``<name>`` nor ``<namespace>:<name>``."""

    def __init__(self, identifier: str) -> None:
        super().__init__(
            identifier,
            f'Invalid projection identifier "{identifier}", identifiers must have '
            'the format "<projection>" or "<namespace>:<projection>".',
        )


# ── Application (replay / dispatch time) ─────────────────────────────


class ApplicationError(EventSourcingError):
    """Base class for failures while applying a single event."""


class EventCouldNotBeAppliedError(ApplicationError):
    """Raised when a projector fails to apply an event during replay.

    ``last_committed_position`` is the checkpoint of the last committed batch
    (``None`` if nothing was committed in this run).
    """

    def __init__(
        self,
        *,
        projection: str,
        event_id: str,
        event_type: str,
        position: int | None,
        last_committed_position: int | None,
        reason: str = "",
    ) -> None:
        self.projection = projection
        self.event_id = event_id
        self.event_type = event_type
        self.position = position
        self.last_committed_position = last_committed_position
        msg = (
            f'Event "{event_id}" ({event_type}) at position {position} could not '
            f'be applied to projection "{projection}"; last committed position: '
            f"{last_committed_position}"
        )
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class EventHandlerFailedError(ApplicationError):
    """Raised when one or more handlers fail during live dispatch.

    ``handler`` names the first failing handler; ``errors`` holds every
    ``(handler_name, exception)`` pair collected for the event.
    """

    def __init__(
        self,
        event_type: str,
        handler: str,
        errors: list[tuple[str, Exception]] | None = None,
    ) -> None:
        self.event_type = event_type
        self.handler = handler
        self.errors = list(errors or [])
        msg = f"Handler '{handler}' failed for event '{event_type}'"
        if len(self.errors) > 1:
            msg += f" ({len(self.errors)} handlers failed)"
        super().__init__(msg)


# ── Infrastructure ───────────────────────────────────────────────────


class InfrastructureError(EventSourcingError):
    """Base class for all infrastructure-related errors."""


class EventStoreError(InfrastructureError):
    """Raised when event-store operations fail."""


class EventSequenceError(EventStoreError):
    """Raised when a store yields positions out of strictly increasing order."""

    def __init__(self, previous: int, current: int) -> None:
        self.previous = previous
        self.current = current
        super().__init__(
            f"Event position {current} does not follow previous position {previous}"
        )


class PersistenceError(InfrastructureError):
    """Base class for all persistence-related errors."""


class CheckpointError(PersistenceError):
    """Raised when the position of a committed batch could not be saved.

    The batch itself stays committed.
    """

    def __init__(self, projection: str, position: int) -> None:
        self.projection = projection
        self.position = position
        super().__init__(
            f"Could not save checkpoint {position} of projection '{projection}'"
        )


# ── Locking ──────────────────────────────────────────────────────────


class ConcurrencyError(EventSourcingError):
    """Base class for lock conflicts."""


class LockAcquisitionError(ConcurrencyError):
    """Failed to acquire lock with detailed context."""

    def __init__(
        self,
        resource: ResourceIdentifier,
        timeout: float,
        reason: str | None = None,
    ) -> None:
        self.resource = resource
        self.timeout = timeout
        self.reason = reason

        msg = (
            f"Failed to acquire {resource.lock_mode} lock on "
            f"{resource.resource_type}:{resource.resource_id} "
            f"within {timeout}s"
        )
        if reason:
            msg += f" - {reason}"

        super().__init__(msg)
