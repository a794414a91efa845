"""Projections — catalog, replay engine and the administrative facade."""

from __future__ import annotations

from .catalog import Projection, ProjectionCatalog, ProjectorDefinition
from .invoker import CancellationToken, EventListenerInvoker
from .manager import ProjectionManager
from .replay import DEFAULT_TRANSACTION_BATCH_SIZE, ReplayEngine, ReplayResult

__all__ = [
    "DEFAULT_TRANSACTION_BATCH_SIZE",
    "CancellationToken",
    "EventListenerInvoker",
    "Projection",
    "ProjectionCatalog",
    "ProjectionManager",
    "ProjectorDefinition",
    "ReplayEngine",
    "ReplayResult",
]
