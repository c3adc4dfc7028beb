"""
Stripe webhook ingestion and dispatch.

Inbound deliveries are verified against the endpoint signing secret,
parsed into a WebhookEvent and dispatched to the handlers registered for
their event type.

Public API:
    - WebhookEvent: Verified event envelope
    - WebhookHandler, TypedWebhookHandler: Handler base classes
    - register_handler: Decorator registering a handler
    - webhook_registry: Process-wide HandlerRegistry
    - WebhookDispatcher, DispatchOutcome: Dispatch to handlers
    - WebhookProcessor, WebhookResult: Verify + dispatch + HTTP mapping
    - construct_event, verify_signature: Signature verification

Views are NOT imported here; import them from stripe_wrapper.webhooks.views.
"""

from .dispatcher import DispatchOutcome, DispatchStatus, WebhookDispatcher
from .events import WebhookEvent
from .handlers import FunctionHandler, TypedWebhookHandler, WebhookHandler
from .processor import WebhookProcessor, WebhookResult, WebhookResultKind
from .registry import WILDCARD, HandlerRegistry, register_handler, webhook_registry
from .signature import construct_event, verify_signature

__all__ = [
    "DispatchOutcome",
    "DispatchStatus",
    "FunctionHandler",
    "HandlerRegistry",
    "TypedWebhookHandler",
    "WILDCARD",
    "WebhookDispatcher",
    "WebhookEvent",
    "WebhookHandler",
    "WebhookProcessor",
    "WebhookResult",
    "WebhookResultKind",
    "construct_event",
    "register_handler",
    "verify_signature",
    "webhook_registry",
]
