"""
Stripe wrapper app configuration.

This app provides:
- Typed services over the Stripe API (customers, payments,
  subscriptions, invoices)
- Webhook signature verification and handler dispatch
"""

from django.apps import AppConfig


class StripeWrapperConfig(AppConfig):
    """Configuration for the Stripe wrapper application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "stripe_wrapper"
    verbose_name = "Stripe Wrapper"

    def ready(self) -> None:
        """Register the webhook handlers listed in STRIPE_WEBHOOK_HANDLERS."""
        from stripe_wrapper.conf import StripeOptions
        from stripe_wrapper.webhooks.registry import register_from_paths

        register_from_paths(StripeOptions.from_settings().webhook_handlers)
