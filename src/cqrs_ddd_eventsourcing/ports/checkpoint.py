"""ICheckpointStore — persisted replay position for the opt-in resume mode."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ICheckpointStore(Protocol):
    """Protocol for persisting the last committed position of a projection."""

    async def get_position(self, projection_name: str) -> int | None:
        """Return last committed position; None if never run."""
        ...

    async def save_position(self, projection_name: str, position: int) -> None:
        """Persist position after a committed batch."""
        ...

    async def delete_position(self, projection_name: str) -> None:
        """Forget the position (a full reset-and-replay is starting)."""
        ...
