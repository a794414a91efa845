"""Registries — listener factories, handler bindings, projection identifiers."""

from __future__ import annotations

from .factories import FactoryRegistry
from .handlers import HandlerRegistry
from .identifiers import IdentifierRegistry, ProjectionIdentifier, identifiers_match

__all__ = [
    "FactoryRegistry",
    "HandlerRegistry",
    "IdentifierRegistry",
    "ProjectionIdentifier",
    "identifiers_match",
]
