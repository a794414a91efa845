"""ILockStrategy — protocol used to serialize replays of one projection.

Replays of the same projection race on its read model (each run starts with a
reset), so the replay engine takes a write lock keyed by the resolved
projection identifier. A replay can run for minutes: pass a TTL that covers the
whole run (see :data:`REPLAY_LOCK_TTL_SECONDS`).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

REPLAY_LOCK_TTL_SECONDS: float = 3600.0  # 1 hour

if TYPE_CHECKING:
    from ..primitives.locking import ResourceIdentifier


@runtime_checkable
class ILockStrategy(Protocol):
    """Lock strategy protocol for pessimistic concurrency control."""

    async def acquire(
        self,
        resource: ResourceIdentifier,
        *,
        timeout: float = 10.0,
        ttl: float = 30.0,
    ) -> str:
        """
        Acquire a lock for the given resource.

        Returns:
            A unique lock token required for release.

        Raises:
            LockAcquisitionError: If the lock cannot be acquired within the timeout.
        """
        ...

    async def release(
        self,
        resource: ResourceIdentifier,
        token: str,
    ) -> None:
        """Release a previously acquired lock."""
        ...
