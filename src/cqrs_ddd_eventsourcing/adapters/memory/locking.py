"""InMemoryLockStrategy — single-process implementation of ILockStrategy."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import uuid4

from ...ports.locking import ILockStrategy
from ...primitives.exceptions import LockAcquisitionError

if TYPE_CHECKING:
    from ...primitives.locking import ResourceIdentifier

logger = logging.getLogger("cqrs_ddd.locking")


@dataclass
class _LockState:
    """State for a single resource lock."""

    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    token: str | None = None
    waiters: int = 0


class InMemoryLockStrategy(ILockStrategy):
    """
    In-memory implementation of ILockStrategy.

    ``asyncio.Lock`` wakes waiters in FIFO order, so replays queued for the
    same projection run in the order they were requested. TTLs are not
    tracked: a lock is held until released.
    """

    def __init__(self) -> None:
        self._locks: dict[tuple[str, str], _LockState] = {}
        self._global_lock = asyncio.Lock()

    async def acquire(
        self,
        resource: ResourceIdentifier,
        *,
        timeout: float = 10.0,
        ttl: float = 30.0,  # noqa: ARG002
    ) -> str:
        key = (resource.resource_type, resource.resource_id)

        async with self._global_lock:
            state = self._locks.setdefault(key, _LockState())
            state.waiters += 1

        try:
            await asyncio.wait_for(state.lock.acquire(), timeout=timeout)
        except asyncio.TimeoutError as err:
            logger.warning(
                "Lock acquisition timed out after %.1fs: %s", timeout, resource
            )
            raise LockAcquisitionError(resource, timeout, "timed out") from err
        finally:
            async with self._global_lock:
                state.waiters -= 1

        token = str(uuid4())
        state.token = token
        logger.debug("Lock acquired: %s", resource)
        return token

    async def release(
        self,
        resource: ResourceIdentifier,
        token: str,
    ) -> None:
        key = (resource.resource_type, resource.resource_id)

        async with self._global_lock:
            state = self._locks.get(key)
            if state is None or state.token != token:
                logger.warning("Attempted to release invalid or expired lock: %s", key)
                return

            state.token = None
            state.lock.release()
            if state.waiters == 0:
                # Clean up to prevent memory leaks
                self._locks.pop(key, None)
            logger.debug("Lock released: %s", resource)

    def is_locked(self, resource: ResourceIdentifier) -> bool:
        """Return ``True`` if *resource* is currently held."""
        state = self._locks.get((resource.resource_type, resource.resource_id))
        return state is not None and state.lock.locked()
