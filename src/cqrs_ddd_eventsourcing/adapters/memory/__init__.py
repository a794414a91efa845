from __future__ import annotations

from .bindings import StaticBindingTable
from .checkpoint import InMemoryCheckpointStore
from .event_store import InMemoryEventStore, InMemoryEventStoreManager
from .locking import InMemoryLockStrategy
from .unit_of_work import InMemoryUnitOfWork, InMemoryUnitOfWorkFactory

__all__ = [
    "InMemoryCheckpointStore",
    "InMemoryEventStore",
    "InMemoryEventStoreManager",
    "InMemoryLockStrategy",
    "InMemoryUnitOfWork",
    "InMemoryUnitOfWorkFactory",
    "StaticBindingTable",
]
