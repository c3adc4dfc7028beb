"""
Webhook handler types.

A handler is any object with an `event_type` and a `handle(event)` method,
sync or async. Three base shapes are provided:

- WebhookHandler: subclass and implement handle(event)
- TypedWebhookHandler: receives the payload as a specific Stripe class,
  and silently skips events whose payload is some other object
- FunctionHandler: wraps a plain function registered with @register_handler

Sync handlers run in a worker thread, so they may block on the ORM or on
other I/O without stalling the event loop.

Usage:
    import stripe

    from stripe_wrapper.webhooks.handlers import TypedWebhookHandler

    class PaymentSucceededHandler(TypedWebhookHandler[stripe.PaymentIntent]):
        event_type = "payment_intent.succeeded"
        payload_type = stripe.PaymentIntent

        def handle_event(self, event, payment_intent):
            logger.info(
                "Payment succeeded",
                extra={"payment_intent_id": payment_intent.id},
            )
"""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Generic, TypeVar

import stripe
from asgiref.sync import iscoroutinefunction, sync_to_async

from core.helpers import get_field, to_plain_dict

if TYPE_CHECKING:
    from collections.abc import Callable
    from typing import Any

    from stripe_wrapper.webhooks.events import WebhookEvent

logger = logging.getLogger(__name__)

T = TypeVar("T")


def handler_name(handler: Any) -> str:
    """Readable name for logs and failure reports."""
    name = getattr(handler, "name", None)
    if isinstance(name, str) and name:
        return name
    return type(handler).__name__


async def call_handler_callable(func: Callable[..., Any], *args: Any) -> Any:
    """
    Call a sync or async callable from async code.

    Coroutine functions are awaited directly. Anything else runs in the
    thread-sensitive executor; if it returns an awaitable, that is
    awaited too.
    """
    if iscoroutinefunction(func):
        return await func(*args)

    result = await sync_to_async(func, thread_sensitive=True)(*args)
    if inspect.isawaitable(result):
        return await result
    return result


class WebhookHandler:
    """
    Base class for webhook handlers.

    Attributes:
        event_type: Stripe event type handled, or "*" for every event
    """

    event_type: str = ""

    @property
    def name(self) -> str:
        return type(self).__name__

    def handle(self, event: WebhookEvent) -> Any:
        """
        React to a verified event.

        May be a plain method or `async def`. Raising marks the delivery
        as failed and stops the remaining handlers for this event.
        """
        raise NotImplementedError(f"{type(self).__name__} must implement handle()")


class TypedWebhookHandler(WebhookHandler, Generic[T]):
    """
    Handler that receives the event payload as `payload_type`.

    Attributes:
        payload_type: Expected payload class, usually a Stripe SDK class
            such as stripe.PaymentIntent or stripe.Invoice

    The payload is accepted when it already is a `payload_type`, or when
    it is a mapping whose "object" field equals `payload_type.OBJECT_NAME`
    (it is then constructed as `payload_type`). Any other payload is not
    an error: handle() returns without calling handle_event().
    """

    payload_type: type[T]

    def interpret(self, event: WebhookEvent) -> T | None:
        """Return the payload as `payload_type`, or None when it is something else."""
        payload = event.payload
        if payload is None:
            return None

        if isinstance(payload, self.payload_type):
            return payload

        object_name = getattr(self.payload_type, "OBJECT_NAME", None)
        if object_name and get_field(payload, "object") == object_name:
            construct_from = getattr(self.payload_type, "construct_from", None)
            if construct_from is not None:
                return construct_from(to_plain_dict(payload), stripe.api_key)

        return None

    async def handle(self, event: WebhookEvent) -> None:
        payload = self.interpret(event)

        if payload is None:
            logger.debug(
                f"{self.name} skipped event with unexpected payload",
                extra={
                    "event_id": event.id,
                    "event_type": event.type,
                    "object_type": event.object_type,
                },
            )
            return

        await call_handler_callable(self.handle_event, event, payload)

    def handle_event(self, event: WebhookEvent, payload: T) -> Any:
        """Handle the typed payload. May be a plain method or `async def`."""
        raise NotImplementedError(f"{type(self).__name__} must implement handle_event()")


class FunctionHandler(WebhookHandler):
    """Adapts a plain function (sync or async) taking the event."""

    def __init__(self, func: Callable[[WebhookEvent], Any], event_type: str = ""):
        self.func = func
        self.event_type = event_type

    @property
    def name(self) -> str:
        return getattr(self.func, "__qualname__", None) or repr(self.func)

    async def handle(self, event: WebhookEvent) -> Any:
        return await call_handler_callable(self.func, event)

    def __repr__(self) -> str:
        return f"<FunctionHandler {self.name} event_type={self.event_type!r}>"
