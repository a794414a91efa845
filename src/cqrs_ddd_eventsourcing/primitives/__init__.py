"""Primitives — exceptions and lock resource identity."""

from __future__ import annotations

from .exceptions import (
    AmbiguousProjectionIdentifierError,
    ApplicationError,
    CheckpointError,
    ConcurrencyError,
    ConfigurationError,
    DuplicateProjectionIdentifierError,
    EventCouldNotBeAppliedError,
    EventHandlerFailedError,
    EventSequenceError,
    EventSourcingError,
    EventStoreError,
    InfrastructureError,
    LockAcquisitionError,
    MalformedProjectionIdentifierError,
    PersistenceError,
    ProjectionNotFoundError,
    ReplayConfigurationError,
    ResolutionError,
    UnknownEventStoreError,
    UnknownHandlerError,
)
from .locking import ResourceIdentifier

__all__ = [
    "AmbiguousProjectionIdentifierError",
    "ApplicationError",
    "CheckpointError",
    "ConcurrencyError",
    "ConfigurationError",
    "DuplicateProjectionIdentifierError",
    "EventCouldNotBeAppliedError",
    "EventHandlerFailedError",
    "EventSequenceError",
    "EventSourcingError",
    "EventStoreError",
    "InfrastructureError",
    "LockAcquisitionError",
    "MalformedProjectionIdentifierError",
    "PersistenceError",
    "ProjectionNotFoundError",
    "ReplayConfigurationError",
    "ResolutionError",
    "ResourceIdentifier",
    "UnknownEventStoreError",
    "UnknownHandlerError",
]
