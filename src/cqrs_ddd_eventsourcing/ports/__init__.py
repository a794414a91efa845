"""Ports — protocols implemented by external collaborators."""

from __future__ import annotations

from .checkpoint import ICheckpointStore
from .discovery import IBindingSource, IListenerEventTypes
from .event_store import ALL_STREAMS, IEventStore, IEventStoreManager, StoredEvent
from .listeners import IEventHandler, IProjector
from .locking import REPLAY_LOCK_TTL_SECONDS, ILockStrategy
from .unit_of_work import UnitOfWork

__all__ = [
    "ALL_STREAMS",
    "REPLAY_LOCK_TTL_SECONDS",
    "IBindingSource",
    "ICheckpointStore",
    "IEventHandler",
    "IEventStore",
    "IEventStoreManager",
    "IListenerEventTypes",
    "ILockStrategy",
    "IProjector",
    "StoredEvent",
    "UnitOfWork",
]
