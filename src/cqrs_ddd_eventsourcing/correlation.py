"""Correlation and causation ids for dispatches and replay runs.

A replay run shares one correlation id across all of its batches. While a
handler runs, the causation id is the id of the event it is reacting to, so
events the handler appends are traced back to that event.
"""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)
_causation_id: ContextVar[str | None] = ContextVar("causation_id", default=None)


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None) -> None:
    _correlation_id.set(correlation_id)


def get_causation_id() -> str | None:
    return _causation_id.get()


def generate_correlation_id() -> str:
    return uuid.uuid4().hex


def ensure_correlation_id() -> str:
    """Return the current correlation id, generating and storing one if unset."""
    correlation_id = _correlation_id.get()
    if correlation_id is None:
        correlation_id = generate_correlation_id()
        _correlation_id.set(correlation_id)
    return correlation_id


@contextmanager
def correlation_scope(
    correlation_id: str | None = None, *, causation_id: str | None = None
) -> Iterator[str]:
    """Bind ids for the duration of a ``with`` block, restoring them on exit.

    Without *correlation_id* the current one is kept (or generated). The
    causation id is only replaced when *causation_id* is given.
    """
    bound = correlation_id or _correlation_id.get() or generate_correlation_id()
    correlation_token = _correlation_id.set(bound)
    causation_token = (
        _causation_id.set(causation_id) if causation_id is not None else None
    )
    try:
        yield bound
    finally:
        if causation_token is not None:
            _causation_id.reset(causation_token)
        _correlation_id.reset(correlation_token)
