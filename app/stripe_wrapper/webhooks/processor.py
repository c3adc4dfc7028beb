"""
Webhook processing: verify, parse, dispatch, and classify the outcome.

WebhookProcessor ties the signature verifier to the dispatcher and turns
every possible result into a WebhookResult the transport maps to HTTP:

    HANDLED              200 {"received": true, "handled": true}
    UNHANDLED            200 {"received": true, "handled": false}
    VERIFICATION_FAILED  400 {"error": "..."}   (Stripe does not retry)
    CONFIGURATION_ERROR  500 {"error": "..."}   (Stripe retries)
    HANDLER_FAILED       500 {"error": "..."}   (Stripe retries)

A body that is correctly signed but is not a Stripe event is reported as
VERIFICATION_FAILED: it is the sender's fault, and redelivery cannot fix it.

Usage:
    processor = WebhookProcessor()
    result = await processor.process_webhook(request.body, signature)
    return JsonResponse(result.body(), status=result.status_code)
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from stripe_wrapper.conf import StripeOptions
from stripe_wrapper.exceptions import (
    WebhookConfigurationError,
    WebhookPayloadError,
    WebhookSignatureError,
)
from stripe_wrapper.webhooks.dispatcher import DispatchStatus, WebhookDispatcher
from stripe_wrapper.webhooks.signature import construct_event

if TYPE_CHECKING:
    from typing import Any

    from stripe_wrapper.webhooks.dispatcher import DispatchOutcome
    from stripe_wrapper.webhooks.events import WebhookEvent
    from stripe_wrapper.webhooks.registry import HandlerRegistry

logger = logging.getLogger(__name__)


class WebhookResultKind(str, enum.Enum):
    HANDLED = "handled"
    UNHANDLED = "unhandled"
    VERIFICATION_FAILED = "verification_failed"
    CONFIGURATION_ERROR = "configuration_error"
    HANDLER_FAILED = "handler_failed"


_STATUS_CODES: dict[WebhookResultKind, int] = {
    WebhookResultKind.HANDLED: 200,
    WebhookResultKind.UNHANDLED: 200,
    WebhookResultKind.VERIFICATION_FAILED: 400,
    WebhookResultKind.CONFIGURATION_ERROR: 500,
    WebhookResultKind.HANDLER_FAILED: 500,
}

_ERROR_MESSAGES: dict[WebhookResultKind, str] = {
    WebhookResultKind.CONFIGURATION_ERROR: "Webhook endpoint is not configured",
    WebhookResultKind.HANDLER_FAILED: "Webhook handler failed",
}


@dataclass(frozen=True)
class WebhookResult:
    """
    Tagged outcome of processing one delivery.

    Attributes:
        kind: Which outcome occurred
        event: The verified event (absent when verification failed)
        error: The exception behind a failed outcome
        error_code: Machine-readable code of that exception
        handler_name: Failing handler (HANDLER_FAILED only)
    """

    kind: WebhookResultKind
    event: WebhookEvent | None = None
    error: BaseException | None = None
    error_code: str | None = None
    handler_name: str | None = None

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self.kind]

    @property
    def is_success(self) -> bool:
        return self.status_code == 200

    def body(self) -> dict[str, Any]:
        """JSON body for the HTTP response."""
        if self.kind == WebhookResultKind.HANDLED:
            return {"received": True, "handled": True}
        if self.kind == WebhookResultKind.UNHANDLED:
            return {"received": True, "handled": False}
        if self.kind == WebhookResultKind.VERIFICATION_FAILED:
            message = getattr(self.error, "message", None) or "Invalid webhook"
            return {"error": message}
        return {"error": _ERROR_MESSAGES[self.kind]}


class WebhookProcessor:
    """
    Verifies deliveries and dispatches them to registered handlers.

    Secret and tolerance default to the current StripeOptions, read when
    the processor is created. A missing secret is only an error when a
    delivery arrives.
    """

    def __init__(
        self,
        webhook_secret: str | None = None,
        tolerance: int | None = None,
        registry: HandlerRegistry | None = None,
        dispatcher: WebhookDispatcher | None = None,
    ):
        options = StripeOptions.from_settings()
        self.webhook_secret = (
            webhook_secret if webhook_secret is not None else options.webhook_secret
        )
        self.tolerance = (
            tolerance if tolerance is not None else options.webhook_tolerance_seconds
        )
        self.dispatcher = dispatcher or WebhookDispatcher(registry)

    def validate_and_parse(self, payload: bytes | str, signature: str | None) -> WebhookEvent:
        """
        Verify `payload` against `signature` and build the event envelope.

        Raises:
            WebhookConfigurationError: No signing secret configured
            WebhookSignatureError: Signature missing, malformed, wrong or stale
            WebhookPayloadError: Signed body is not a Stripe event
        """
        try:
            event = construct_event(
                payload,
                signature,
                self.webhook_secret,
                tolerance=self.tolerance,
            )
        except WebhookConfigurationError:
            logger.error("Webhook secret is not configured (STRIPE_WEBHOOK_SECRET)")
            raise
        except WebhookSignatureError as e:
            logger.warning(
                "Webhook signature verification failed",
                extra={"reason": e.reason.value, "error": e.message},
            )
            raise
        except WebhookPayloadError as e:
            logger.warning(
                "Webhook payload could not be parsed",
                extra={"error": e.message},
            )
            raise

        logger.info(
            f"Received Stripe webhook: {event.type}",
            extra={"event_id": event.id, "event_type": event.type},
        )
        return event

    async def process_event(self, event: WebhookEvent) -> DispatchOutcome:
        """Dispatch an already verified event."""
        return await self.dispatcher.dispatch(event)

    async def process_webhook(self, payload: bytes | str, signature: str | None) -> WebhookResult:
        """
        Verify, parse and dispatch one delivery.

        Never raises for verification, configuration or handler failures;
        those become the matching WebhookResult. Cancellation propagates.
        """
        try:
            event = self.validate_and_parse(payload, signature)
        except WebhookConfigurationError as e:
            return WebhookResult(
                kind=WebhookResultKind.CONFIGURATION_ERROR,
                error=e,
                error_code=e.error_code,
            )
        except (WebhookSignatureError, WebhookPayloadError) as e:
            return WebhookResult(
                kind=WebhookResultKind.VERIFICATION_FAILED,
                error=e,
                error_code=e.error_code,
            )

        outcome = await self.process_event(event)

        if outcome.status == DispatchStatus.HANDLER_FAILED:
            return WebhookResult(
                kind=WebhookResultKind.HANDLER_FAILED,
                event=event,
                error=outcome.error,
                error_code="handler_failed",
                handler_name=outcome.handler_name,
            )

        if outcome.status == DispatchStatus.UNHANDLED:
            return WebhookResult(kind=WebhookResultKind.UNHANDLED, event=event)

        return WebhookResult(kind=WebhookResultKind.HANDLED, event=event)
