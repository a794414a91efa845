"""Common utility functions and helpers."""

from __future__ import annotations

import hashlib
from inspect import isawaitable, isfunction, ismethod
from typing import Any


def qualified_name(obj: Any) -> str:
    """Return ``"<module>.<qualname>"`` for a class (or the class of an instance).

    This is the listener identifier used for handler and projector classes.
    Plain functions and bound methods are named after themselves.
    """
    if isfunction(obj) or ismethod(obj):
        return f"{obj.__module__}.{obj.__qualname__}"
    cls = obj if isinstance(obj, type) else type(obj)
    return f"{cls.__module__}.{cls.__qualname__}"


def listener_identifier(listener: str | type[Any]) -> str:
    """Normalize a listener given as identifier string or class."""
    if isinstance(listener, str):
        return listener
    return qualified_name(listener)


def event_type_identifier(event_type: str | type[Any]) -> str:
    """Normalize an event type given as name or event class."""
    if isinstance(event_type, str):
        return event_type
    return event_type.__name__


def content_hash(value: str) -> str:
    """Stable content hash used to deduplicate bindings."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


async def maybe_await(result: Any) -> Any:
    """Await *result* if it is awaitable (sync or async listener methods)."""
    if isawaitable(result):
        return await result
    return result
