"""
Webhook endpoint view for Stripe.

This module provides the HTTP endpoint for receiving Stripe webhooks.
The view:
1. Reads the raw body and the signature header
2. Verifies the signature and parses the event
3. Dispatches the event to every registered handler
4. Maps the outcome to an HTTP status Stripe understands

Handlers run before the response is sent, so a failing handler yields a
500 and Stripe redelivers the event later. Stripe expects a response
within 20 seconds; handlers doing slow work should hand it off.

Usage:
    # In urls.py
    from stripe_wrapper.webhooks.views import stripe_webhook

    urlpatterns = [
        path("stripe/", stripe_webhook, name="stripe_webhook"),
    ]
"""

from __future__ import annotations

import logging

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from stripe_wrapper.conf import StripeOptions
from stripe_wrapper.webhooks.processor import WebhookProcessor

logger = logging.getLogger(__name__)


@csrf_exempt
@require_POST
async def stripe_webhook(request: HttpRequest) -> JsonResponse:
    """
    Receive, verify and dispatch a Stripe webhook event.

    Security:
    - Signature verification prevents spoofed webhooks
    - CSRF exemption required for external webhooks
    - Only POST requests accepted

    Returns:
        JsonResponse with status:
        - 200: Event verified; {"received": true, "handled": true|false}
        - 400: Missing or invalid signature, or a body that is not an event
        - 500: Signing secret not configured, or a handler failed

    Example Stripe-Signature header:
        t=1614556800,v1=xxx,v0=yyy
    """
    options = StripeOptions.from_settings()
    signature = request.headers.get(options.signature_header, "")

    if not signature:
        logger.warning(f"Webhook received without {options.signature_header} header")
        return JsonResponse(
            {"error": f"Missing {options.signature_header} header"},
            status=400,
        )

    processor = WebhookProcessor()
    result = await processor.process_webhook(request.body, signature)

    return JsonResponse(result.body(), status=result.status_code)
