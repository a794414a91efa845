"""EventDispatcher — live, in-order dispatch of new events to their listeners."""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING, Any

from .correlation import correlation_scope, get_correlation_id
from .domain.decorators import collect_decorations, unwrap_event
from .domain.events import event_identifier, event_type_name
from .instrumentation import instrument
from .primitives.exceptions import EventHandlerFailedError
from .utils import maybe_await, qualified_name

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .registry.handlers import HandlerRegistry

logger = logging.getLogger(__name__)


class DispatchFailurePolicy(str, enum.Enum):
    """What happens to the remaining handlers once one of them failed."""

    FAIL_FAST = "fail_fast"
    CONTINUE = "continue"


class EventDispatcher:
    """Invokes the handlers bound to an event one at a time, in binding order.

    Handlers are objects with ``handle(event)``, projectors (``apply(event)``)
    or plain callables; each may be sync or async.

    With ``FAIL_FAST`` the first failure stops the event and is raised as
    :class:`EventHandlerFailedError`. With ``CONTINUE`` every handler runs and
    the collected failures are raised together afterwards.
    """

    def __init__(
        self,
        handler_registry: HandlerRegistry,
        *,
        failure_policy: DispatchFailurePolicy = DispatchFailurePolicy.FAIL_FAST,
    ) -> None:
        self._handler_registry = handler_registry
        self._failure_policy = failure_policy

    @property
    def failure_policy(self) -> DispatchFailurePolicy:
        return self._failure_policy

    # ── Registration ─────────────────────────────────────────────

    def register_handler(
        self, event_type: str | type[Any], handler_identifier: str | type[Any]
    ) -> None:
        self._handler_registry.register(event_type, handler_identifier)

    # ── Dispatching ──────────────────────────────────────────────

    async def dispatch(self, event: Any) -> None:
        """Run every handler bound to *event*'s type.

        Raises:
            EventHandlerFailedError: a handler raised (see failure policy).
        """
        event_name = event_type_name(event)
        handlers = self._handler_registry.handlers_for(event)
        if not handlers:
            logger.debug("No handlers registered for event %s", event_name)
            return

        attributes: dict[str, object] = {
            "event.type": event_name,
            "event.id": event_identifier(event),
        }
        correlation_id = get_correlation_id() or getattr(
            unwrap_event(event), "correlation_id", None
        )
        with correlation_scope(correlation_id, causation_id=_causation_id(event)):
            await instrument(
                f"event.dispatch.{event_name}",
                attributes,
                lambda: self._dispatch_handlers(
                    event, event_name, handlers, attributes
                ),
            )

    async def dispatch_all(self, events: Iterable[Any]) -> None:
        """Dispatch *events* in order; the first raised failure propagates."""
        for event in events:
            await self.dispatch(event)

    async def _dispatch_handlers(
        self,
        event: Any,
        event_name: str,
        handlers: list[Any],
        attributes: dict[str, object],
    ) -> None:
        errors: list[tuple[str, Exception]] = []
        for handler in handlers:
            handler_name = qualified_name(handler)
            try:
                await instrument(
                    f"event.handler.{event_name}.{handler_name.rsplit('.', 1)[-1]}",
                    {"handler.type": handler_name, **attributes},
                    lambda h=handler: self._invoke(h, event, event_name),
                )
            except Exception as exc:
                errors.append((handler_name, exc))
                if self._failure_policy is DispatchFailurePolicy.FAIL_FAST:
                    raise EventHandlerFailedError(
                        event_name, handler_name, errors
                    ) from exc

        if errors:
            first_name, first_exc = errors[0]
            raise EventHandlerFailedError(event_name, first_name, errors) from first_exc

    async def _invoke(self, handler: Any, event: Any, event_name: str) -> None:
        try:
            if hasattr(handler, "handle"):
                result = handler.handle(event)
            elif hasattr(handler, "apply"):
                result = handler.apply(event)
            elif callable(handler):
                result = handler(event)
            else:
                raise TypeError(
                    "Handler must be a callable or have a handle() or apply() method"
                )
            await maybe_await(result)
        except Exception:
            logger.exception(
                "Error executing handler %s for event %s",
                type(handler).__name__,
                event_name,
            )
            raise


def _causation_id(event: Any) -> str | None:
    identifier, _ = collect_decorations(event)
    if identifier:
        return identifier
    event_id = getattr(unwrap_event(event), "event_id", None)
    return str(event_id) if event_id is not None else None
