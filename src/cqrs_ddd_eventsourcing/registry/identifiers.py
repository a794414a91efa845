"""Projection identifiers and short-identifier resolution.

A full identifier has the form ``"<namespace>:<name>"`` and is always
lower-case, e.g. ``"acme.billing:invoice"``. Operators may type a shorter
form; :meth:`IdentifierRegistry.resolve` accepts

- the full identifier,
- the bare name (``"invoice"``),
- the name with a trailing part of the namespace (``"billing:invoice"``
  matches every ``"*.billing:invoice"``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..primitives.exceptions import (
    AmbiguousProjectionIdentifierError,
    MalformedProjectionIdentifierError,
    ProjectionNotFoundError,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

logger = logging.getLogger(__name__)

SEPARATOR = ":"


@dataclass(frozen=True)
class ProjectionIdentifier:
    """Canonical ``namespace:name`` identifier of a projection."""

    namespace: str
    name: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "namespace", self.namespace.lower())
        object.__setattr__(self, "name", self.name.lower())
        if (
            not self.namespace
            or not self.name
            or SEPARATOR in self.namespace + self.name
        ):
            raise MalformedProjectionIdentifierError(
                f"{self.namespace}{SEPARATOR}{self.name}"
            )

    @classmethod
    def parse(cls, identifier: str) -> ProjectionIdentifier:
        """Parse a full identifier; anything else is malformed."""
        parts = identifier.strip().split(SEPARATOR)
        if len(parts) != 2:
            raise MalformedProjectionIdentifierError(identifier)
        return cls(parts[0], parts[1])

    def __str__(self) -> str:
        return f"{self.namespace}{SEPARATOR}{self.name}"

    def __lt__(self, other: ProjectionIdentifier) -> bool:
        return str(self) < str(other)


def _split(identifier: str) -> list[str]:
    parts = identifier.split(SEPARATOR)
    if len(parts) > 2 or any(not part for part in parts):
        raise MalformedProjectionIdentifierError(identifier)
    return parts


def identifiers_match(short_identifier: str, full: ProjectionIdentifier) -> bool:
    """Tell whether *short_identifier* designates *full* (see module docstring)."""
    short = short_identifier.strip().lower()
    parts = _split(short)
    if short == str(full):
        return True
    if len(parts) == 1:
        return parts[0] == full.name
    namespace, name = parts
    return name == full.name and full.namespace.endswith(f".{namespace}")


class IdentifierRegistry:
    """Immutable set of known projection identifiers with resolution."""

    def __init__(self, identifiers: Iterable[ProjectionIdentifier] = ()) -> None:
        self._identifiers: tuple[ProjectionIdentifier, ...] = tuple(
            sorted(set(identifiers), key=str)
        )

    def resolve(self, identifier: str) -> ProjectionIdentifier:
        """Return the single identifier matching *identifier*.

        Raises:
            MalformedProjectionIdentifierError: empty input or more than one
                separator.
            ProjectionNotFoundError: nothing matches.
            AmbiguousProjectionIdentifierError: more than one match; the error
                lists every candidate.
        """
        normalized = identifier.strip().lower()
        _split(normalized)
        for full in self._identifiers:
            if str(full) == normalized:
                return full
        matches = [
            full for full in self._identifiers if identifiers_match(identifier, full)
        ]
        if not matches:
            raise ProjectionNotFoundError(identifier)
        if len(matches) > 1:
            raise AmbiguousProjectionIdentifierError(
                identifier, [str(m) for m in matches]
            )
        logger.debug("Resolved projection identifier %r to %s", identifier, matches[0])
        return matches[0]

    def __contains__(self, identifier: object) -> bool:
        if isinstance(identifier, str):
            return any(str(full) == identifier.lower() for full in self._identifiers)
        return identifier in self._identifiers

    def __iter__(self) -> Iterator[ProjectionIdentifier]:
        return iter(self._identifiers)

    def __len__(self) -> int:
        return len(self._identifiers)
