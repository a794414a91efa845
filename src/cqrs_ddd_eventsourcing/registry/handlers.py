"""HandlerRegistry — event type → ordered listener bindings with lazy discovery."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from ..domain.events import event_type_name
from ..primitives.exceptions import UnknownHandlerError
from ..utils import content_hash, event_type_identifier, listener_identifier

if TYPE_CHECKING:
    from ..ports.discovery import IBindingSource
    from .factories import FactoryRegistry

logger = logging.getLogger(__name__)

# event type -> {content hash of listener identifier -> listener identifier}
_BindingMap = dict[str, dict[str, str]]


class HandlerRegistry:
    """Maps event type names to the listeners that must react to them.

    Bindings for one event type keep insertion order: everything the
    discovery source declares comes first, explicit :meth:`register` calls
    are appended afterwards. A listener is bound at most once per event type
    (bindings are keyed by a content hash of the listener identifier).

    Discovery runs lazily on first use, exactly once, even under concurrent
    first use from several threads.
    """

    def __init__(
        self,
        factories: FactoryRegistry,
        *,
        discovery: IBindingSource | None = None,
    ) -> None:
        self._factories = factories
        self._discovery = discovery
        self._map: _BindingMap = {}
        self._initialized = False
        self._lock = threading.RLock()

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    # ── Registration ─────────────────────────────────────────────

    def register(self, event_type: str | type[Any], handler: str | type[Any]) -> None:
        """Bind *handler* to *event_type*.

        Raises:
            UnknownHandlerError: if *handler* has no registered factory.
        """
        self._ensure_initialized()
        name = event_type_identifier(event_type)
        identifier = listener_identifier(handler)
        if not self._factories.is_registered(identifier):
            raise UnknownHandlerError(identifier)
        with self._lock:
            bindings = self._map.setdefault(name, {})
            key = content_hash(identifier)
            if key in bindings:
                return
            bindings[key] = identifier
        logger.debug("Registered event handler %s -> %s", name, identifier)

    # ── Lookup ───────────────────────────────────────────────────

    def handlers_for(self, event: Any) -> list[Any]:
        """Return live handler instances for *event* in binding order.

        Events nobody subscribed to yield an empty list.
        """
        return [
            self._factories.get(identifier)
            for identifier in self.identifiers_for(event_type_name(event))
        ]

    def identifiers_for(self, event_type: str | type[Any]) -> list[str]:
        self._ensure_initialized()
        with self._lock:
            bindings = self._map.get(event_type_identifier(event_type))
            return list(bindings.values()) if bindings else []

    def event_types_for(self, handler: str | type[Any]) -> set[str]:
        """Reverse lookup: every event type *handler* is bound to."""
        self._ensure_initialized()
        key = content_hash(listener_identifier(handler))
        with self._lock:
            return {
                event_type
                for event_type, bindings in self._map.items()
                if key in bindings
            }

    def get_bindings(self) -> dict[str, list[str]]:
        """Return a snapshot of all bindings (for debugging)."""
        self._ensure_initialized()
        with self._lock:
            return {k: list(v.values()) for k, v in self._map.items()}

    # ── Initialization ───────────────────────────────────────────

    def _ensure_initialized(self) -> None:
        if self._initialized:
            return
        with self._lock:
            if self._initialized:
                return
            discovered = self._load_bindings()
            self._map = self._merge(discovered, self._map)
            self._initialized = True
        logger.info(
            "Handler discovery complete: %d event type(s), %d binding(s)",
            len(self._map),
            sum(len(v) for v in self._map.values()),
        )

    def _load_bindings(self) -> _BindingMap:
        handlers: _BindingMap = {}
        if self._discovery is None:
            return handlers
        for event_type, identifier in self._discovery:
            if not self._factories.is_registered(identifier):
                raise UnknownHandlerError(identifier)
            handlers.setdefault(event_type, {})[content_hash(identifier)] = identifier
        return handlers

    @staticmethod
    def _merge(discovered: _BindingMap, existing: _BindingMap) -> _BindingMap:
        """Place *discovered* bindings underneath *existing* ones.

        Discovered listeners keep their positions; listeners only present in
        *existing* are appended, so no runtime binding is lost.
        """
        merged = {event_type: dict(b) for event_type, b in discovered.items()}
        for event_type, bindings in existing.items():
            target = merged.setdefault(event_type, {})
            for key, identifier in bindings.items():
                target.setdefault(key, identifier)
        return merged
