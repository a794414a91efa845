"""ProjectionCatalog — the set of projections known to the process."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..primitives.exceptions import DuplicateProjectionIdentifierError
from ..registry.identifiers import IdentifierRegistry, ProjectionIdentifier
from ..utils import maybe_await, qualified_name

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..ports.discovery import IListenerEventTypes
    from ..registry.factories import FactoryRegistry

logger = logging.getLogger(__name__)

PROJECTOR_SUFFIX = "Projector"


@dataclass(frozen=True)
class ProjectorDefinition:
    """A projector class plus optional overrides of its identifier parts."""

    projector_class: type[Any]
    namespace: str | None = None
    name: str | None = None

    def identifier(self) -> ProjectionIdentifier:
        return ProjectionIdentifier(self._namespace(), self._name())

    def _name(self) -> str:
        if self.name:
            return self.name
        name = self.projector_class.__name__
        if name.endswith(PROJECTOR_SUFFIX) and name != PROJECTOR_SUFFIX:
            name = name[: -len(PROJECTOR_SUFFIX)]
        return name

    def _namespace(self) -> str:
        if self.namespace:
            return self.namespace
        declared = getattr(self.projector_class, "projection_namespace", None)
        if isinstance(declared, str) and declared:
            return declared
        module = self.projector_class.__module__
        package, _, _ = module.rpartition(".")
        return package or module


@dataclass(frozen=True)
class Projection:
    """Read-only description of one projection, built on demand."""

    identifier: ProjectionIdentifier
    projector_class_name: str
    event_types: frozenset[str]


class ProjectionCatalog:
    """Projections indexed by canonical identifier.

    Args:
        projectors: Projector classes or :class:`ProjectorDefinition` entries.
        listener_event_types: Answers which event types a projector consumes.
        factories: Receives a factory for every projector class that does not
            have one yet; live projectors are always obtained from it.

    Raises:
        DuplicateProjectionIdentifierError: two distinct projector classes map
            to the same identifier.
    """

    def __init__(
        self,
        projectors: Iterable[ProjectorDefinition | type[Any]],
        listener_event_types: IListenerEventTypes,
        factories: FactoryRegistry,
    ) -> None:
        self._listener_event_types = listener_event_types
        self._factories = factories
        self._classes: dict[ProjectionIdentifier, str] = {}

        for entry in projectors:
            definition = (
                entry
                if isinstance(entry, ProjectorDefinition)
                else ProjectorDefinition(entry)
            )
            identifier = definition.identifier()
            class_name = qualified_name(definition.projector_class)
            existing = self._classes.get(identifier)
            if existing is not None:
                if existing == class_name:
                    continue
                raise DuplicateProjectionIdentifierError(
                    str(identifier), existing, class_name
                )
            self._classes[identifier] = class_name
            if not factories.is_registered(class_name):
                factories.register_class(definition.projector_class)

        self._identifiers = IdentifierRegistry(self._classes)
        logger.debug(
            "Projection catalog built with %d projection(s)", len(self._classes)
        )

    @property
    def identifiers(self) -> IdentifierRegistry:
        return self._identifiers

    def list_projections(self) -> list[Projection]:
        """All projections, ordered by canonical identifier."""
        return [self._build(identifier) for identifier in self._identifiers]

    def get_projection(self, identifier: str) -> Projection:
        """Resolve a short or full identifier to its projection.

        Resolution errors from :meth:`IdentifierRegistry.resolve` propagate.
        """
        return self._build(self._identifiers.resolve(identifier))

    def get_projector(self, identifier: str) -> Any:
        """Return the live projector instance for *identifier*."""
        projection = self.get_projection(identifier)
        return self._factories.get(projection.projector_class_name)

    async def is_empty(self, identifier: str) -> bool:
        projector = self.get_projector(identifier)
        return bool(await maybe_await(projector.is_empty()))

    def _build(self, identifier: ProjectionIdentifier) -> Projection:
        class_name = self._classes[identifier]
        return Projection(
            identifier=identifier,
            projector_class_name=class_name,
            event_types=frozenset(
                self._listener_event_types.get_event_types_for_listener(class_name)
            ),
        )
