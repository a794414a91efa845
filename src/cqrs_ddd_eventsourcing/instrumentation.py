"""Instrumentation hooks around dispatch, replay, commit and checkpoint calls.

Every instrumented call site goes through :func:`instrument`, which names the
operation (``event.dispatch.<type>``, ``event.handler.<type>.<handler>``,
``projection.replay.<id>``, ``projection.commit.<id>``,
``checkpoint.save.<id>``, ``event_store.append.<stream>``) and adds the
current correlation id to the attributes. Hooks registered on the context's
:class:`HookRegistry` wrap the call like middleware.
"""

from __future__ import annotations

import fnmatch
import logging
from contextvars import ContextVar
from dataclasses import dataclass, field
from functools import reduce
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from .correlation import get_correlation_id

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger("cqrs_ddd.instrumentation")

_MATCH_CACHE_MAX_SIZE = 2048


@runtime_checkable
class InstrumentationHook(Protocol):
    """Wraps one operation; must await ``next_handler()`` exactly once."""

    async def __call__(
        self,
        operation: str,
        attributes: dict[str, Any],
        next_handler: Callable[[], Awaitable[Any]],
    ) -> Any: ...


@dataclass
class HookRegistration:
    """A hook plus the operations it applies to.

    ``operations`` are ``fnmatch`` patterns (``"projection.*"``); an empty
    tuple matches everything. Lower ``priority`` runs further outside.
    """

    hook: InstrumentationHook
    operations: tuple[str, ...] = ()
    priority: int = 0
    predicate: Callable[[str, dict[str, Any]], bool] | None = None
    enabled: bool = True
    _seen: dict[str, bool] = field(default_factory=dict, repr=False)

    def matches(self, operation: str, attributes: dict[str, Any]) -> bool:
        if not self.enabled:
            return False
        if not self._matches_operation(operation):
            return False
        return self.predicate is None or self.predicate(operation, attributes)

    def _matches_operation(self, operation: str) -> bool:
        if not self.operations:
            return True
        matched = self._seen.get(operation)
        if matched is None:
            matched = any(fnmatch.fnmatchcase(operation, p) for p in self.operations)
            if len(self._seen) >= _MATCH_CACHE_MAX_SIZE:
                self._seen.clear()
            self._seen[operation] = matched
        return matched


class HookRegistry:
    """Ordered set of hook registrations for one context."""

    def __init__(self) -> None:
        self._registrations: list[HookRegistration] = []

    def register(
        self,
        hook: InstrumentationHook,
        *,
        operations: list[str] | tuple[str, ...] | None = None,
        priority: int = 0,
        predicate: Callable[[str, dict[str, Any]], bool] | None = None,
        enabled: bool = True,
    ) -> HookRegistration:
        registration = HookRegistration(
            hook=hook,
            operations=tuple(operations or ()),
            priority=priority,
            predicate=predicate,
            enabled=enabled,
        )
        self._registrations.append(registration)
        self._registrations.sort(key=lambda r: r.priority)
        logger.debug(
            "Registered instrumentation hook %s for %s",
            type(hook).__name__,
            registration.operations or "all operations",
        )
        return registration

    def unregister(self, registration: HookRegistration) -> None:
        if registration in self._registrations:
            self._registrations.remove(registration)

    async def execute_all(
        self,
        operation: str,
        attributes: dict[str, Any],
        next_handler: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Run *next_handler* wrapped by every matching hook, outermost first."""
        matching = [r for r in self._registrations if r.matches(operation, attributes)]
        if not matching:
            return await next_handler()

        def wrap(
            inner: Callable[[], Awaitable[Any]], registration: HookRegistration
        ) -> Callable[[], Awaitable[Any]]:
            return lambda: registration.hook(operation, attributes, inner)

        chain = reduce(wrap, reversed(matching), next_handler)
        return await chain()

    def clear(self) -> None:
        self._registrations.clear()

    def __len__(self) -> int:
        return len(self._registrations)


_hook_registry_var: ContextVar[HookRegistry | None] = ContextVar(
    "hook_registry", default=None
)


def get_hook_registry() -> HookRegistry:
    """Return the registry of the current context, creating it on first use."""
    registry = _hook_registry_var.get()
    if registry is None:
        registry = HookRegistry()
        _hook_registry_var.set(registry)
    return registry


def set_hook_registry(registry: HookRegistry) -> None:
    _hook_registry_var.set(registry)


async def instrument(
    operation: str,
    attributes: dict[str, Any],
    call: Callable[[], Awaitable[Any]],
) -> Any:
    """Run *call* through the context's hooks as *operation*.

    ``correlation_id`` is filled from the correlation context unless the
    caller already set it.
    """
    attributes.setdefault("correlation_id", get_correlation_id())
    return await get_hook_registry().execute_all(operation, attributes, call)
