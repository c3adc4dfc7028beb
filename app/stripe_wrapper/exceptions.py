"""
Stripe-specific exceptions for API and webhook operations.

Exception Hierarchy:
    BaseApplicationError (core.exceptions)
    ├── ExternalServiceError
    │   └── StripeApiError - Any failed Stripe API call
    │       ├── CustomerNotFoundError - Customer missing or deleted (also a NotFoundError)
    │       ├── PaymentFailedError - Card declined / payment failure
    │       └── SubscriptionError - Subscription operation failure
    ├── ConfigurationError
    │   └── StripeConfigurationError - Missing API key, bad settings
    └── WebhookError - Base for inbound webhook failures
        ├── WebhookConfigurationError - Signing secret not configured (500)
        ├── WebhookSignatureError - Bad/missing/stale signature (400)
        ├── WebhookPayloadError - Signed body is not a valid event (400)
        └── WebhookHandlerError - A registered handler raised (500)

Usage:
    from stripe_wrapper.exceptions import PaymentFailedError, map_stripe_error

    try:
        stripe.PaymentIntent.create(...)
    except stripe.StripeError as e:
        raise map_stripe_error(e) from e
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING

import stripe

from core.exceptions import (
    BaseApplicationError,
    ConfigurationError,
    ExternalServiceError,
    NotFoundError,
)

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Stripe API Exceptions
# =============================================================================


class StripeApiError(ExternalServiceError):
    """
    Raised when a Stripe API call fails.

    Attributes:
        error_code: Stripe's error code (e.g. "resource_missing")
        error_type: Stripe's error type (e.g. "invalid_request_error")
        request_id: Stripe request id, useful when contacting support

    Critical errors (authentication_error, api_error) indicate an
    operational problem and should not be retried automatically.
    """

    default_error_code: str = "stripe_error"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        error_type: str | None = None,
        request_id: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if error_type:
            details["error_type"] = error_type
        if request_id:
            details["request_id"] = request_id
        super().__init__(message, error_code=error_code, details=details)
        self.error_type = error_type
        self.request_id = request_id

    @property
    def is_critical(self) -> bool:
        return self.error_type in ("authentication_error", "api_error")

    @property
    def retry_after_seconds(self) -> int | None:
        """Suggested delay before retrying, or None when retrying won't help."""
        return None if self.is_critical else 1


class CustomerNotFoundError(StripeApiError, NotFoundError):
    """Raised when a customer does not exist or has been deleted."""

    default_error_code: str = "resource_missing"

    def __init__(self, customer_id: str | None = None):
        if customer_id:
            message = f"Customer with ID '{customer_id}' was not found."
            details = {"customer_id": customer_id}
        else:
            message = "Customer not found."
            details = {}
        super().__init__(message, error_type="invalid_request_error", details=details)
        self.customer_id = customer_id

    @property
    def is_critical(self) -> bool:
        return False

    @property
    def retry_after_seconds(self) -> int | None:
        return None


DEFAULT_PAYMENT_USER_MESSAGE = "Your payment could not be processed. Please try again."

DECLINE_USER_MESSAGES: dict[str, str] = {
    "insufficient_funds": "Your card has insufficient funds. Please use a different payment method.",
    "expired_card": "Your card has expired. Please use a different card.",
    "incorrect_cvc": "The security code (CVC) is incorrect. Please check and try again.",
    "processing_error": "An error occurred while processing your card. Please try again.",
    "card_declined": "Your card was declined. Please contact your bank or use a different card.",
    "stolen_card": "This card cannot be used. Please use a different payment method.",
    "lost_card": "This card cannot be used. Please use a different payment method.",
    "invalid_card_number": "The card number is invalid. Please check and try again.",
    "card_not_supported": "This card type is not supported. Please use a different card.",
}

# Decline codes where asking the customer to try again cannot succeed
NON_RETRYABLE_DECLINE_CODES = frozenset({"expired_card", "stolen_card", "lost_card"})


class PaymentFailedError(StripeApiError):
    """
    Raised when a payment is declined or otherwise fails.

    Attributes:
        decline_code: Card decline code (e.g. "insufficient_funds")
        user_message: Message safe to show to the paying customer
        payment_intent_id: PaymentIntent the failure relates to, if known

    Example:
        except PaymentFailedError as e:
            return Response(
                {"error": e.user_message, "code": e.decline_code, "can_retry": e.can_retry},
                status=400,
            )
    """

    default_error_code: str = "payment_failed"

    def __init__(
        self,
        message: str,
        decline_code: str | None = None,
        user_message: str | None = None,
        payment_intent_id: str | None = None,
    ):
        details: dict[str, Any] = {}
        if decline_code:
            details["decline_code"] = decline_code
        if payment_intent_id:
            details["payment_intent_id"] = payment_intent_id
        super().__init__(
            message,
            error_code=decline_code,
            error_type="card_error",
            details=details,
        )
        self.decline_code = decline_code
        self.user_message = user_message or self.default_user_message(decline_code)
        self.payment_intent_id = payment_intent_id

    @staticmethod
    def default_user_message(decline_code: str | None) -> str:
        if decline_code is None:
            return DEFAULT_PAYMENT_USER_MESSAGE
        return DECLINE_USER_MESSAGES.get(
            decline_code,
            "Your payment could not be processed. Please try again or use a different payment method.",
        )

    @property
    def can_retry(self) -> bool:
        return self.decline_code not in NON_RETRYABLE_DECLINE_CODES

    @property
    def is_critical(self) -> bool:
        return False


class SubscriptionErrorReason(str, enum.Enum):
    """Why a subscription operation failed."""

    UNKNOWN = "unknown"
    CUSTOMER_NOT_FOUND = "customer_not_found"
    PAYMENT_FAILED = "payment_failed"
    INVALID_PRICE = "invalid_price"
    ALREADY_CANCELED = "already_canceled"
    INVALID_CONFIGURATION = "invalid_configuration"
    TRIAL_EXPIRED = "trial_expired"
    PLAN_NOT_FOUND = "plan_not_found"


SUBSCRIPTION_USER_MESSAGES: dict[SubscriptionErrorReason, str] = {
    SubscriptionErrorReason.CUSTOMER_NOT_FOUND: "The customer account was not found.",
    SubscriptionErrorReason.PAYMENT_FAILED: "Payment for the subscription failed.",
    SubscriptionErrorReason.INVALID_PRICE: "The selected plan is not available.",
    SubscriptionErrorReason.ALREADY_CANCELED: "This subscription has already been canceled.",
    SubscriptionErrorReason.INVALID_CONFIGURATION: "There was a configuration error. Please contact support.",
    SubscriptionErrorReason.TRIAL_EXPIRED: "The trial period has expired.",
    SubscriptionErrorReason.PLAN_NOT_FOUND: "The selected subscription plan was not found.",
}


class SubscriptionError(StripeApiError):
    """Raised when a subscription operation fails."""

    default_error_code: str = "subscription_error"

    def __init__(
        self,
        message: str,
        subscription_id: str | None = None,
        reason: SubscriptionErrorReason = SubscriptionErrorReason.UNKNOWN,
    ):
        details: dict[str, Any] = {"reason": reason.value}
        if subscription_id:
            details["subscription_id"] = subscription_id
        super().__init__(
            message,
            error_code=reason.value,
            error_type="subscription_error",
            details=details,
        )
        self.subscription_id = subscription_id
        self.reason = reason

    @property
    def is_critical(self) -> bool:
        return self.reason == SubscriptionErrorReason.INVALID_CONFIGURATION

    @property
    def user_message(self) -> str:
        return SUBSCRIPTION_USER_MESSAGES.get(
            self.reason, "An error occurred with your subscription."
        )


class StripeConfigurationError(ConfigurationError):
    """Raised when the Stripe settings needed for API calls are missing."""

    default_error_code: str = "configuration_error"
    error_type: str = "configuration_error"


# =============================================================================
# Webhook Exceptions
# =============================================================================


class WebhookError(BaseApplicationError):
    """Base exception for inbound webhook processing."""

    default_error_code: str = "webhook_error"


class WebhookConfigurationError(WebhookError, ConfigurationError):
    """
    Raised when the webhook signing secret is not configured.

    Fatal to the current request only; reported as a server error.
    """

    default_error_code: str = "webhook_secret_missing"


class SignatureFailureReason(str, enum.Enum):
    """Internal diagnostic for why a signature was rejected."""

    MISSING_HEADER = "missing_header"
    MALFORMED_HEADER = "malformed_header"
    NO_SIGNATURES = "no_signatures"
    SIGNATURE_MISMATCH = "signature_mismatch"
    TIMESTAMP_OUTSIDE_TOLERANCE = "timestamp_outside_tolerance"


class WebhookSignatureError(WebhookError):
    """
    Raised when a webhook signature cannot be verified.

    All reasons are treated identically by the transport (HTTP 400);
    `reason` exists for logging and diagnostics.
    """

    default_error_code: str = "invalid_signature"

    def __init__(
        self,
        message: str,
        reason: SignatureFailureReason,
        details: dict[str, Any] | None = None,
    ):
        details = {**(details or {}), "reason": reason.value}
        super().__init__(message, details=details)
        self.reason = reason


class WebhookPayloadError(WebhookError):
    """Raised when a correctly signed body is not a parseable Stripe event."""

    default_error_code: str = "invalid_payload"


class WebhookHandlerError(WebhookError):
    """
    Raised when a webhook handler fails.

    The original exception is kept on `original` and chained as __cause__.
    """

    default_error_code: str = "handler_failed"

    def __init__(self, handler_name: str, event_id: str, original: BaseException):
        super().__init__(
            f"Handler {handler_name} failed for event {event_id}: {original}",
            details={
                "handler": handler_name,
                "event_id": event_id,
                "error_class": type(original).__name__,
            },
        )
        self.handler_name = handler_name
        self.event_id = event_id
        self.original = original


# =============================================================================
# SDK Error Translation
# =============================================================================

# Fallback error types for SDK errors raised without an error object
# (network failures, client-side validation).
_ERROR_TYPE_BY_CLASS: tuple[tuple[type[Exception], str], ...] = (
    (stripe.CardError, "card_error"),
    (stripe.AuthenticationError, "authentication_error"),
    (stripe.APIConnectionError, "api_error"),
    (stripe.APIError, "api_error"),
    (stripe.RateLimitError, "rate_limit_error"),
    (stripe.InvalidRequestError, "invalid_request_error"),
)


def _error_object_attr(error: stripe.StripeError, name: str) -> Any:
    error_object = getattr(error, "error", None)
    if error_object is None:
        return None
    return getattr(error_object, name, None)


def stripe_error_type(error: stripe.StripeError) -> str | None:
    """Return Stripe's error type for an SDK exception."""
    error_type = _error_object_attr(error, "type")
    if error_type:
        return error_type
    for error_class, fallback in _ERROR_TYPE_BY_CLASS:
        if isinstance(error, error_class):
            return fallback
    return None


def stripe_error_code(error: stripe.StripeError) -> str | None:
    return getattr(error, "code", None) or _error_object_attr(error, "code")


def _payment_intent_id(error: stripe.StripeError) -> str | None:
    payment_intent = _error_object_attr(error, "payment_intent")
    if payment_intent is None:
        return None
    if isinstance(payment_intent, str):
        return payment_intent
    return getattr(payment_intent, "id", None)


def map_stripe_error(
    error: stripe.StripeError,
    resource: str | None = None,
    resource_id: str | None = None,
) -> StripeApiError:
    """
    Translate a Stripe SDK exception into a domain exception.

    Args:
        error: The exception raised by the Stripe SDK
        resource: Which resource was being operated on
            ("customer", "payment", "subscription", "invoice")
        resource_id: Id of that resource, when the call targeted one

    Returns:
        The domain exception; the caller raises it `from error`.
    """
    message = getattr(error, "user_message", None) or str(error)
    code = stripe_error_code(error)
    error_type = stripe_error_type(error)
    request_id = getattr(error, "request_id", None)

    if resource == "customer" and code == "resource_missing" and resource_id:
        return CustomerNotFoundError(resource_id)

    if resource == "subscription":
        if code == "resource_missing":
            return SubscriptionError(
                message, resource_id, SubscriptionErrorReason.PLAN_NOT_FOUND
            )
        if error_type == "card_error":
            return SubscriptionError(
                message, resource_id, SubscriptionErrorReason.PAYMENT_FAILED
            )

    if resource == "invoice" and code == "resource_missing":
        return StripeApiError(
            f"Invoice '{resource_id}' was not found.",
            error_code=code,
            error_type=error_type,
            request_id=request_id,
        )

    if error_type == "card_error":
        decline_code = _error_object_attr(error, "decline_code") or code
        return PaymentFailedError(
            message,
            decline_code=decline_code,
            user_message=_error_object_attr(error, "message"),
            payment_intent_id=_payment_intent_id(error) if resource != "invoice" else None,
        )

    return StripeApiError(
        message,
        error_code=code,
        error_type=error_type,
        request_id=request_id,
    )
