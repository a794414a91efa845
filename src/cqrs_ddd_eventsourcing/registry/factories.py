"""FactoryRegistry — explicit listener factories keyed by identifier."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..primitives.exceptions import UnknownHandlerError
from ..utils import qualified_name

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


@dataclass
class _Registration:
    factory: Callable[[], Any]
    singleton: bool
    instance: Any = None
    created: bool = False


class FactoryRegistry:
    """Builds handler and projector instances from registered factories.

    Singleton factories run at most once; the instance is then shared by every
    consumer (handler lookup, replay, emptiness checks).

    Usage::

        factories = FactoryRegistry()
        factories.register_class(InvoiceProjector)
        factories.register("billing.mailer", lambda: Mailer(smtp), singleton=True)
        factories.get("billing.mailer")
    """

    def __init__(self) -> None:
        self._registrations: dict[str, _Registration] = {}
        self._lock = threading.RLock()

    def register(
        self,
        identifier: str,
        factory: Callable[[], Any],
        *,
        singleton: bool = True,
    ) -> None:
        """Register *factory* under *identifier*, replacing any previous one."""
        with self._lock:
            self._registrations[identifier] = _Registration(factory, singleton)
        logger.debug("Registered factory for %s (singleton=%s)", identifier, singleton)

    def register_class(
        self,
        cls: type[Any],
        *,
        identifier: str | None = None,
        singleton: bool = True,
    ) -> str:
        """Register a zero-argument class; returns the identifier used."""
        key = identifier or qualified_name(cls)
        self.register(key, cls, singleton=singleton)
        return key

    def register_instance(self, instance: Any, *, identifier: str | None = None) -> str:
        """Register an already constructed instance; returns the identifier used."""
        key = identifier or qualified_name(instance)
        with self._lock:
            self._registrations[key] = _Registration(
                factory=lambda: instance,
                singleton=True,
                instance=instance,
                created=True,
            )
        return key

    def is_registered(self, identifier: str) -> bool:
        return identifier in self._registrations

    def get(self, identifier: str) -> Any:
        """Return the instance for *identifier*.

        Raises:
            UnknownHandlerError: if nothing is registered under *identifier*.
        """
        registration = self._registrations.get(identifier)
        if registration is None:
            raise UnknownHandlerError(identifier)
        if not registration.singleton:
            return registration.factory()
        if registration.created:
            return registration.instance
        with self._lock:
            if not registration.created:
                registration.instance = registration.factory()
                registration.created = True
        return registration.instance

    def identifiers(self) -> list[str]:
        return list(self._registrations)
