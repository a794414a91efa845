"""In-memory checkpoint store for testing."""

from __future__ import annotations

from ...instrumentation import instrument
from ...ports.checkpoint import ICheckpointStore


class InMemoryCheckpointStore(ICheckpointStore):
    """In-memory checkpoint store for testing."""

    def __init__(self) -> None:
        self._positions: dict[str, int] = {}

    async def get_position(self, projection_name: str) -> int | None:
        return self._positions.get(projection_name)

    async def save_position(self, projection_name: str, position: int) -> None:
        await instrument(
            f"checkpoint.save.{projection_name}",
            {
                "projection.name": projection_name,
                "projection.position": position,
            },
            lambda: self._save_position_internal(projection_name, position),
        )

    async def _save_position_internal(
        self, projection_name: str, position: int
    ) -> None:
        self._positions[projection_name] = position

    async def delete_position(self, projection_name: str) -> None:
        self._positions.pop(projection_name, None)

    def clear(self) -> None:
        """Reset all positions (for tests)."""
        self._positions.clear()
