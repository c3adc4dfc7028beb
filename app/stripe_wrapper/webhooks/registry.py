"""
Webhook handler registry.

Maps event types to the handlers that react to them. A handler registered
under "*" receives every event.

Registration happens at startup (StripeWrapperConfig.ready() and
module-level @register_handler decorators) and is finished before the
first request is dispatched. Each registration replaces the stored tuple
instead of mutating it, so a lookup never observes a half-applied
registration.

Usage:
    from stripe_wrapper.webhooks.registry import register_handler

    @register_handler("payment_intent.succeeded")
    def fulfil_order(event):
        ...

    @register_handler("*")
    class AuditLogHandler(WebhookHandler):
        def handle(self, event):
            ...
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.utils.module_loading import import_string

from stripe_wrapper.webhooks.handlers import FunctionHandler, handler_name

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator
    from typing import Any

logger = logging.getLogger(__name__)

WILDCARD = "*"


class HandlerRegistry:
    """
    Ordered collection of (event_type, handler) registrations.

    Duplicates are allowed: registering the same handler twice for an
    event type makes it run twice.
    """

    def __init__(self) -> None:
        self._entries: tuple[tuple[str, Any], ...] = ()

    def register(self, event_type: str, handler: Any) -> Any:
        """
        Register `handler` for `event_type`.

        Plain callables are wrapped in a FunctionHandler; objects with a
        `handle` method are stored as they are.

        Returns:
            The stored handler

        Raises:
            ValueError: If event_type is blank
            TypeError: If handler is neither a handler nor callable
        """
        if not isinstance(event_type, str) or not event_type.strip():
            raise ValueError("event_type must be a non-empty string")

        if not callable(getattr(handler, "handle", None)):
            if not callable(handler):
                raise TypeError(f"{handler!r} is not a webhook handler or callable")
            handler = FunctionHandler(handler, event_type=event_type)

        self._entries = (*self._entries, (event_type, handler))

        logger.debug(
            f"Registered webhook handler for {event_type}",
            extra={"event_type": event_type, "handler": handler_name(handler)},
        )
        return handler

    def lookup(self, event_type: str) -> tuple[Any, ...]:
        """
        Handlers to run for `event_type`, in registration order.

        Exact and wildcard registrations are interleaved in the order
        they were registered.
        """
        return tuple(
            handler
            for registered_type, handler in self._entries
            if registered_type == event_type or registered_type == WILDCARD
        )

    def clear(self) -> None:
        self._entries = ()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[tuple[str, Any]]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"<HandlerRegistry entries={len(self._entries)}>"


# Process-wide registry used by the webhook endpoint
webhook_registry = HandlerRegistry()


def register_handler(
    event_type: str,
    registry: HandlerRegistry | None = None,
) -> Callable:
    """
    Decorator to register a webhook handler.

    Works on plain functions (sync or async) and on handler classes,
    which are instantiated with no arguments. The decorated object is
    returned unchanged.

    Usage:
        @register_handler("invoice.paid")
        async def mark_paid(event):
            ...

    Args:
        event_type: Stripe event type, or "*" for every event
        registry: Registry to add to (default: webhook_registry)
    """
    target = registry if registry is not None else webhook_registry

    def decorator(obj: Any) -> Any:
        handler = obj() if isinstance(obj, type) else obj
        target.register(event_type, handler)
        return obj

    return decorator


def register_from_paths(
    paths: Iterable[str],
    registry: HandlerRegistry | None = None,
) -> int:
    """
    Import and register handlers named by dotted path.

    Each path may name a handler class (instantiated with no arguments),
    a handler instance, or a function. Classes and instances must declare
    `event_type`; functions are registered for `event_type` if they carry
    one, otherwise for every event.

    Returns:
        Number of handlers registered

    Raises:
        ImportError: A path cannot be imported
        ValueError: A handler declares no usable event_type
    """
    target = registry if registry is not None else webhook_registry
    count = 0

    for path in paths:
        obj = import_string(path)
        handler = obj() if isinstance(obj, type) else obj

        if callable(getattr(handler, "handle", None)):
            event_type = getattr(handler, "event_type", None)
            if not event_type:
                raise ValueError(f"Webhook handler {path} does not declare event_type")
        else:
            event_type = getattr(handler, "event_type", None) or WILDCARD

        target.register(event_type, handler)
        count += 1

    if count:
        logger.info(
            f"Registered {count} webhook handler(s) from settings",
            extra={"handler_count": count},
        )

    return count
