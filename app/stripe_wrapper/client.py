"""
Stripe SDK configuration.

The services call the SDK's module-level resources (stripe.Customer,
stripe.PaymentIntent, ...), which read their configuration from module
globals. configure_stripe() sets those globals from StripeOptions and is
called at the start of every service operation, so settings overridden
in tests or at runtime take effect on the next call.

Usage:
    from stripe_wrapper.client import configure_stripe

    configure_stripe()
    intent = stripe.PaymentIntent.retrieve("pi_123")
"""

from __future__ import annotations

import logging

import stripe

import stripe_wrapper
from stripe_wrapper.conf import StripeOptions

logger = logging.getLogger(__name__)

APP_NAME = "stripe-wrapper"

# HTTP clients keyed by timeout; building one per call would discard its
# connection pool.
_http_clients: dict[int, stripe.HTTPClient] = {}


def _http_client(timeout: int) -> stripe.HTTPClient:
    client = _http_clients.get(timeout)
    if client is None:
        client = stripe.RequestsClient(timeout=timeout)
        _http_clients[timeout] = client
    return client


def configure_stripe(options: StripeOptions | None = None) -> StripeOptions:
    """
    Configure the Stripe SDK for API calls.

    Sets the API key, network retries, HTTP timeout and app info.

    Args:
        options: Options to apply (default: read from Django settings)

    Returns:
        The applied options

    Raises:
        StripeConfigurationError: If the secret key is missing
    """
    options = options or StripeOptions.from_settings()
    options.validate()

    stripe.api_key = options.secret_key
    stripe.max_network_retries = options.max_retries
    stripe.default_http_client = _http_client(options.api_timeout_seconds)
    stripe.set_app_info(APP_NAME, version=stripe_wrapper.__version__)

    if options.test_mode:
        logger.debug(
            "Stripe configured",
            extra={
                "live_key": options.is_live_key,
                "max_retries": options.max_retries,
                "timeout_seconds": options.api_timeout_seconds,
            },
        )

    return options
