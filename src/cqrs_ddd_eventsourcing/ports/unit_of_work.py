"""UnitOfWork — the transaction one replay batch is applied in."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger("cqrs_ddd.uow")


class UnitOfWork(ABC):
    """One transaction over the read model a projector writes to.

    Used as ``async with uow:``. Leaving the block normally commits; leaving
    it with an exception rolls back and lets the exception propagate. A unit
    of work finishes once, later exits are no-ops.

    Callbacks registered with :meth:`after_commit` run after a successful
    commit, in registration order. A failing callback is logged and does not
    undo the commit.

    Adapters only implement :meth:`commit` and :meth:`rollback`::

        class SessionUnitOfWork(UnitOfWork):
            def __init__(self, session):
                super().__init__()
                self._session = session

            async def commit(self):
                await self._session.commit()

            async def rollback(self):
                await self._session.rollback()
    """

    def __init__(self) -> None:
        self._callbacks: list[Callable[[], Awaitable[Any]]] = []
        self._finished = False

    @property
    def finished(self) -> bool:
        return self._finished

    def after_commit(self, callback: Callable[[], Awaitable[Any]]) -> None:
        self._callbacks.append(callback)

    @abstractmethod
    async def commit(self) -> None: ...

    @abstractmethod
    async def rollback(self) -> None: ...

    async def __aenter__(self) -> UnitOfWork:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if self._finished:
            return
        self._finished = True
        callbacks, self._callbacks = self._callbacks, []
        if exc_type is not None:
            await self.rollback()
            return
        await self.commit()
        for callback in callbacks:
            try:
                await callback()
            except Exception:
                logger.exception(
                    "after_commit callback %s failed",
                    getattr(callback, "__qualname__", repr(callback)),
                )
