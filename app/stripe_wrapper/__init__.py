"""
Typed wrapper around the Stripe API.

This app provides:
- Resource services for customers, payments, subscriptions and invoices
  that map Stripe objects to plain dataclasses and Stripe errors to a
  domain exception hierarchy
- Webhook signature verification and dispatch to registered handlers
- Thin REST controllers exposing the services

Usage:
    from stripe_wrapper.services import PaymentService
    from stripe_wrapper.types import PaymentRequest

    result = PaymentService.create_payment(
        PaymentRequest(amount=5000, currency="usd", idempotency_key="order_123:1")
    )
"""

__version__ = "1.0.0"
