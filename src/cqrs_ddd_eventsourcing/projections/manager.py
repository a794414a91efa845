"""ProjectionManager — administrative entry point for projections."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .catalog import Projection, ProjectionCatalog
    from .invoker import CancellationToken, ProgressCallback
    from .replay import ReplayEngine, ReplayResult


class ProjectionManager:
    """Lists, inspects and replays projections by (short) identifier."""

    def __init__(self, catalog: ProjectionCatalog, replay_engine: ReplayEngine) -> None:
        self._catalog = catalog
        self._replay_engine = replay_engine

    def list_projections(self) -> list[Projection]:
        return self._catalog.list_projections()

    def get_projection(self, identifier: str) -> Projection:
        return self._catalog.get_projection(identifier)

    async def is_projection_empty(self, identifier: str) -> bool:
        return await self._catalog.is_empty(identifier)

    async def replay(
        self,
        identifier: str,
        progress_callback: ProgressCallback | None = None,
        batch_size: int | None = None,
        *,
        cancellation: CancellationToken | None = None,
        resume: bool = False,
    ) -> ReplayResult:
        """Reset the projection and replay every event it consumes.

        Without *batch_size* the engine's configured batch size applies.
        """
        return await self._replay_engine.replay(
            identifier,
            progress_callback,
            batch_size=batch_size,
            cancellation=cancellation,
            resume=resume,
        )
