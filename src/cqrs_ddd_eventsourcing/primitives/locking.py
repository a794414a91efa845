"""Lockable resource identity used to serialize replays per projection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class ResourceIdentifier:
    """
    Identifies a single lockable resource.

    Examples:
        >>> ResourceIdentifier("projection_replay", "acme.billing:invoice")
        >>> ResourceIdentifier("handler_discovery", "default", lock_mode="read")
    """

    resource_type: str
    resource_id: str
    lock_mode: Literal["read", "write"] = "write"

    def __lt__(self, other: ResourceIdentifier) -> bool:
        return (self.resource_type, self.resource_id) < (
            other.resource_type,
            other.resource_id,
        )

    def __str__(self) -> str:
        mode = f":{self.lock_mode}" if self.lock_mode != "write" else ""
        return f"{self.resource_type}:{self.resource_id}{mode}"
