"""
Webhook event dispatcher.

Routes one verified event to every matching handler, one after another,
in registration order. The first handler to raise stops the chain; the
handlers after it are not invoked and the delivery is reported as failed
so that Stripe redelivers it.

Events are not deduplicated. A redelivered event runs its handlers again,
so handlers must be idempotent (Stripe event ids are stable across
redeliveries and make a natural idempotency key).

Usage:
    from stripe_wrapper.webhooks.dispatcher import WebhookDispatcher

    outcome = await WebhookDispatcher().dispatch(event)
    if outcome.status == DispatchStatus.HANDLER_FAILED:
        ...
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from stripe_wrapper.exceptions import WebhookHandlerError
from stripe_wrapper.webhooks.handlers import call_handler_callable, handler_name
from stripe_wrapper.webhooks.registry import webhook_registry

if TYPE_CHECKING:
    from stripe_wrapper.webhooks.events import WebhookEvent
    from stripe_wrapper.webhooks.registry import HandlerRegistry

logger = logging.getLogger(__name__)


class DispatchStatus(str, enum.Enum):
    HANDLED = "handled"
    UNHANDLED = "unhandled"
    HANDLER_FAILED = "handler_failed"


@dataclass(frozen=True)
class DispatchOutcome:
    """
    Result of dispatching one event.

    Attributes:
        status: HANDLED, UNHANDLED (no handler matched) or HANDLER_FAILED
        event_id: Id of the dispatched event
        handlers_invoked: Handlers called, including a failing one
        handler_name: Name of the failing handler (HANDLER_FAILED only)
        error: Exception raised by the failing handler (HANDLER_FAILED only)
    """

    status: DispatchStatus
    event_id: str
    handlers_invoked: int = 0
    handler_name: str | None = None
    error: BaseException | None = None

    @property
    def handled(self) -> bool:
        return self.status == DispatchStatus.HANDLED

    @property
    def failed(self) -> bool:
        return self.status == DispatchStatus.HANDLER_FAILED

    def raise_for_failure(self) -> None:
        """Raise WebhookHandlerError, chained to the handler's exception, on failure."""
        if self.failed:
            raise WebhookHandlerError(
                handler_name=self.handler_name or "unknown",
                event_id=self.event_id,
                original=self.error,
            ) from self.error


class WebhookDispatcher:
    """
    Sequential, in-order dispatcher over a HandlerRegistry.

    Cancellation (asyncio.CancelledError) is not caught: if the request
    is abandoned mid-dispatch, the in-flight handler is cancelled and no
    further handlers run.
    """

    def __init__(self, registry: HandlerRegistry | None = None):
        self.registry = registry if registry is not None else webhook_registry

    async def dispatch(self, event: WebhookEvent) -> DispatchOutcome:
        handlers = self.registry.lookup(event.type)
        log_context = {"event_id": event.id, "event_type": event.type}

        if not handlers:
            logger.info(
                f"No handler registered for event type: {event.type}",
                extra=log_context,
            )
            return DispatchOutcome(status=DispatchStatus.UNHANDLED, event_id=event.id)

        invoked = 0
        for handler in handlers:
            name = handler_name(handler)
            invoked += 1

            logger.debug(
                f"Invoking handler {name} for event {event.type}",
                extra={**log_context, "handler": name},
            )

            start_time = time.time()
            try:
                await call_handler_callable(handler.handle, event)
            except Exception as e:
                duration_ms = (time.time() - start_time) * 1000
                logger.error(
                    f"Handler {name} failed for event {event.id}",
                    extra={**log_context, "handler": name, "duration_ms": duration_ms},
                    exc_info=True,
                )
                return DispatchOutcome(
                    status=DispatchStatus.HANDLER_FAILED,
                    event_id=event.id,
                    handlers_invoked=invoked,
                    handler_name=name,
                    error=e,
                )

        logger.info(
            f"Dispatched {event.type} to {invoked} handler(s)",
            extra={**log_context, "handlers_invoked": invoked},
        )

        return DispatchOutcome(
            status=DispatchStatus.HANDLED,
            event_id=event.id,
            handlers_invoked=invoked,
        )
