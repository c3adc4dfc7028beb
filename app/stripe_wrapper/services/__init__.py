"""
Stripe resource services.

This module provides:
- CustomerService: Customers and their payment methods
- PaymentService: PaymentIntents and refunds
- SubscriptionService: Subscriptions
- InvoiceService: Invoices

Every method configures the SDK from settings, logs the operation with
its duration, maps Stripe objects to the DTOs in stripe_wrapper.types and
raises the exceptions in stripe_wrapper.exceptions.

Usage:
    from stripe_wrapper.services import CustomerService, PaymentService

    customer = CustomerService.get_customer("cus_123")
    refund_id = PaymentService.refund_payment("pi_123", amount=500)
"""

from stripe_wrapper.services.customer_service import CustomerService
from stripe_wrapper.services.invoice_service import InvoiceService
from stripe_wrapper.services.payment_service import PaymentService
from stripe_wrapper.services.subscription_service import SubscriptionService

__all__ = [
    "CustomerService",
    "InvoiceService",
    "PaymentService",
    "SubscriptionService",
]
