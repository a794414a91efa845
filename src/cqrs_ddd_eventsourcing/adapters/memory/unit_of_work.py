"""InMemoryUnitOfWork — records how each replay batch ended."""

from __future__ import annotations

from ...ports.unit_of_work import UnitOfWork


class InMemoryUnitOfWork(UnitOfWork):
    """Remembers whether it committed or rolled back."""

    def __init__(self) -> None:
        super().__init__()
        self.committed = False
        self.rolled_back = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True


class InMemoryUnitOfWorkFactory:
    """Callable factory that keeps every unit of work it handed out.

    Usage::

        factory = InMemoryUnitOfWorkFactory()
        engine = ReplayEngine(catalog, stores, factory)
        await engine.replay("invoice")
        assert factory.commit_count == 3
    """

    def __init__(self) -> None:
        self.created: list[InMemoryUnitOfWork] = []

    def __call__(self) -> InMemoryUnitOfWork:
        uow = InMemoryUnitOfWork()
        self.created.append(uow)
        return uow

    @property
    def commit_count(self) -> int:
        return sum(1 for uow in self.created if uow.committed)

    @property
    def rollback_count(self) -> int:
        return sum(1 for uow in self.created if uow.rolled_back)
