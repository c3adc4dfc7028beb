"""
Stripe configuration options.

Reads the STRIPE_* values from Django settings (populated from the
environment in config/settings.py) into a single
typed object.

Settings:
    - STRIPE_SECRET_KEY: API secret key (required for API calls)
    - STRIPE_PUBLISHABLE_KEY: Client-side key (optional, informational)
    - STRIPE_WEBHOOK_SECRET: Webhook signing secret (required for webhooks,
      checked per request rather than at startup)
    - STRIPE_TEST_MODE: Extra logging/validation for development
    - STRIPE_MAX_RETRIES: SDK network retries (default: 2)
    - STRIPE_API_TIMEOUT_SECONDS: HTTP timeout (default: 10)
    - STRIPE_WEBHOOK_TOLERANCE_SECONDS: Signature timestamp tolerance (default: 300)
    - STRIPE_WEBHOOK_SIGNATURE_HEADER: Signature header name (default: Stripe-Signature)
    - STRIPE_WEBHOOK_HANDLERS: Dotted paths of handlers registered at startup

Usage:
    from stripe_wrapper.conf import StripeOptions

    options = StripeOptions.from_settings()
    options.validate()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from django.conf import settings

from stripe_wrapper.exceptions import StripeConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 2
DEFAULT_API_TIMEOUT_SECONDS = 10
DEFAULT_WEBHOOK_TOLERANCE_SECONDS = 300
DEFAULT_SIGNATURE_HEADER = "Stripe-Signature"


@dataclass(frozen=True)
class StripeOptions:
    """
    Configuration options for the Stripe integration.

    Attributes:
        secret_key: Stripe secret API key (sk_test_... or sk_live_...)
        webhook_secret: Webhook signing secret (whsec_...)
        publishable_key: Publishable key, safe to expose client-side
        test_mode: Enables additional logging and validation
        max_retries: Network retries performed by the SDK
        api_timeout_seconds: HTTP timeout for API calls
        webhook_tolerance_seconds: Accepted signature timestamp skew
        signature_header: Name of the webhook signature header
        webhook_handlers: Dotted paths of handlers to register at startup
    """

    secret_key: str = ""
    webhook_secret: str = ""
    publishable_key: str | None = None
    test_mode: bool = False
    max_retries: int = DEFAULT_MAX_RETRIES
    api_timeout_seconds: int = DEFAULT_API_TIMEOUT_SECONDS
    webhook_tolerance_seconds: int = DEFAULT_WEBHOOK_TOLERANCE_SECONDS
    signature_header: str = DEFAULT_SIGNATURE_HEADER
    webhook_handlers: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_settings(cls) -> StripeOptions:
        """Build options from the current Django settings."""
        return cls(
            secret_key=getattr(settings, "STRIPE_SECRET_KEY", "") or "",
            webhook_secret=getattr(settings, "STRIPE_WEBHOOK_SECRET", "") or "",
            publishable_key=getattr(settings, "STRIPE_PUBLISHABLE_KEY", None) or None,
            test_mode=bool(getattr(settings, "STRIPE_TEST_MODE", False)),
            max_retries=getattr(settings, "STRIPE_MAX_RETRIES", DEFAULT_MAX_RETRIES),
            api_timeout_seconds=getattr(
                settings, "STRIPE_API_TIMEOUT_SECONDS", DEFAULT_API_TIMEOUT_SECONDS
            ),
            webhook_tolerance_seconds=getattr(
                settings,
                "STRIPE_WEBHOOK_TOLERANCE_SECONDS",
                DEFAULT_WEBHOOK_TOLERANCE_SECONDS,
            ),
            signature_header=getattr(
                settings, "STRIPE_WEBHOOK_SIGNATURE_HEADER", DEFAULT_SIGNATURE_HEADER
            )
            or DEFAULT_SIGNATURE_HEADER,
            webhook_handlers=tuple(getattr(settings, "STRIPE_WEBHOOK_HANDLERS", ()) or ()),
        )

    @property
    def is_live_key(self) -> bool:
        """Whether the secret key is a live-mode key."""
        return self.secret_key.startswith(("sk_live_", "rk_live_"))

    @property
    def has_webhook_secret(self) -> bool:
        return bool(self.webhook_secret and self.webhook_secret.strip())

    def validate(self) -> None:
        """
        Validate the options needed for API calls.

        The webhook secret is not checked here; see
        stripe_wrapper.webhooks.signature.

        Raises:
            StripeConfigurationError: If the secret key is missing
        """
        if not self.secret_key or not self.secret_key.strip():
            raise StripeConfigurationError("Stripe SecretKey is required.")

        if self.max_retries < 0:
            raise StripeConfigurationError(
                "STRIPE_MAX_RETRIES cannot be negative.",
                details={"max_retries": self.max_retries},
            )

        if self.test_mode and self.is_live_key:
            logger.warning(
                "STRIPE_TEST_MODE is enabled but a live secret key is configured"
            )
