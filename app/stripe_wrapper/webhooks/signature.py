"""
Stripe webhook signature verification.

Stripe signs every delivery with HMAC-SHA256 over "<timestamp>.<raw body>"
using the endpoint's signing secret, and sends the result in the
Stripe-Signature header:

    Stripe-Signature: t=1614556800,v1=5257a869...,v1=9af6c2e1...,v0=6ffbb59b...

Several v1 entries appear while a secret is being rolled; any one of them
matching is enough. Other schemes (v0) are ignored.

The HMAC check itself is done by stripe.WebhookSignature. The SDK only
rejects stale timestamps, so the tolerance window (stale or future-dated)
is applied here after the signature has matched.

Verification must run over the exact bytes received. Re-serialising a
parsed body changes key order and whitespace and breaks the signature.

Usage:
    from stripe_wrapper.webhooks.signature import construct_event

    event = construct_event(request.body, request.headers["Stripe-Signature"], secret)
"""

from __future__ import annotations

import json
import logging
import time
from typing import TYPE_CHECKING

import stripe

from stripe_wrapper.exceptions import (
    SignatureFailureReason,
    WebhookConfigurationError,
    WebhookPayloadError,
    WebhookSignatureError,
)
from stripe_wrapper.webhooks.events import WebhookEvent

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE_SECONDS = 300

# SDK messages that mark a failure as something other than a plain mismatch
_SDK_FAILURE_REASONS = (
    ("Unable to extract timestamp", SignatureFailureReason.MALFORMED_HEADER),
    ("No signatures found with expected scheme", SignatureFailureReason.NO_SIGNATURES),
)


def _to_bytes(payload: bytes | str) -> bytes:
    if isinstance(payload, str):
        return payload.encode("utf-8")
    return bytes(payload)


def _to_text(payload: bytes | str) -> str:
    if isinstance(payload, str):
        return payload
    return bytes(payload).decode("utf-8")


def generate_signature_header(
    payload: bytes | str,
    secret: str,
    timestamp: int | None = None,
) -> str:
    """
    Build a Stripe-Signature header value for `payload`.

    Used to sign fixture payloads in tests and when replaying events
    locally against a development endpoint.
    """
    return stripe.WebhookSignature.generate_signature_header(
        _to_text(payload), secret, timestamp=timestamp
    )


def signature_timestamp(sig_header: str) -> int:
    """Signed timestamp of a header the SDK has already accepted."""
    for item in sig_header.split(","):
        key, _, value = item.partition("=")
        if key == "t":
            return int(value.split("=", 1)[0])
    raise WebhookSignatureError(
        "Unable to extract timestamp and signatures from header",
        reason=SignatureFailureReason.MALFORMED_HEADER,
    )


def _failure_reason(message: str) -> SignatureFailureReason:
    for prefix, reason in _SDK_FAILURE_REASONS:
        if message.startswith(prefix):
            return reason
    return SignatureFailureReason.SIGNATURE_MISMATCH


def verify_signature(
    payload: bytes | str,
    sig_header: str | None,
    secret: str | None,
    tolerance: int | None = DEFAULT_TOLERANCE_SECONDS,
    now: float | None = None,
) -> None:
    """
    Verify that `payload` was signed by Stripe with `secret`.

    Args:
        payload: Raw request body, exactly as received
        sig_header: Value of the Stripe-Signature header
        secret: Endpoint signing secret (whsec_...)
        tolerance: Maximum distance in seconds between the signed
            timestamp and `now`, in either direction. None or 0 disables
            the check.
        now: Current Unix time; defaults to time.time()

    Raises:
        WebhookConfigurationError: `secret` is blank. Checked before any
            other work, since no request can be verified without it.
        WebhookSignatureError: The header is missing or malformed, no
            candidate matches, or the timestamp is outside tolerance.
    """
    if not secret or not secret.strip():
        raise WebhookConfigurationError("Webhook secret is not configured.")

    if not sig_header or not sig_header.strip():
        raise WebhookSignatureError(
            "Missing Stripe-Signature header",
            reason=SignatureFailureReason.MISSING_HEADER,
        )

    # Stripe signs the UTF-8 JSON text; other bytes cannot carry its signature.
    try:
        text = _to_text(payload)
    except UnicodeDecodeError as e:
        raise WebhookSignatureError(
            "No signatures found matching the expected signature for payload",
            reason=SignatureFailureReason.SIGNATURE_MISMATCH,
        ) from e

    try:
        stripe.WebhookSignature.verify_header(text, sig_header, secret, tolerance=None)
    except stripe.SignatureVerificationError as e:
        message = e.user_message or "Webhook signature verification failed"
        raise WebhookSignatureError(message, reason=_failure_reason(message)) from e

    timestamp = signature_timestamp(sig_header)

    if tolerance:
        current = time.time() if now is None else now
        if abs(current - timestamp) > tolerance:
            raise WebhookSignatureError(
                "Timestamp outside the tolerance zone",
                reason=SignatureFailureReason.TIMESTAMP_OUTSIDE_TOLERANCE,
                details={"timestamp": timestamp, "tolerance": tolerance},
            )


def parse_event_payload(payload: bytes | str) -> dict[str, Any]:
    """
    Decode a verified body into the raw event document.

    Raises:
        WebhookPayloadError: The body is not a JSON object with a
            non-empty string `id` and `type`
    """
    try:
        data = json.loads(_to_bytes(payload).decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise WebhookPayloadError(
            "Webhook payload is not valid JSON.",
            details={"error": str(e)},
        ) from e

    if not isinstance(data, dict):
        raise WebhookPayloadError("Webhook payload is not a JSON object.")

    for required in ("id", "type"):
        value = data.get(required)
        if not isinstance(value, str) or not value.strip():
            raise WebhookPayloadError(
                f"Webhook payload is missing '{required}'.",
                details={"field": required},
            )

    return data


def construct_event(
    payload: bytes | str,
    sig_header: str | None,
    secret: str | None,
    tolerance: int | None = DEFAULT_TOLERANCE_SECONDS,
    now: float | None = None,
) -> WebhookEvent:
    """
    Verify a delivery and build its event envelope.

    Nothing is parsed until the signature has been verified, so a
    verification failure never produces a partial envelope.

    Raises:
        WebhookConfigurationError, WebhookSignatureError: See verify_signature
        WebhookPayloadError: The signed body is not a Stripe event, or one
            of its fields has the wrong shape for the envelope
    """
    verify_signature(payload, sig_header, secret, tolerance=tolerance, now=now)

    data = parse_event_payload(payload)
    try:
        event = stripe.Event.construct_from(data, stripe.api_key)
        envelope = WebhookEvent.from_stripe_event(event)
    except (TypeError, ValueError, OverflowError) as e:
        raise WebhookPayloadError(
            "Webhook payload has malformed event fields.",
            details={"event_id": data["id"], "error": str(e)},
        ) from e

    logger.debug(
        "Webhook signature verified",
        extra={"event_id": data["id"], "event_type": data["type"]},
    )

    return envelope
