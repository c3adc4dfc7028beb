"""
Invoice service over Stripe Invoices.

Usage:
    from stripe_wrapper.services import InvoiceService
    from stripe_wrapper.types import CreateInvoiceRequest

    invoice = InvoiceService.create_invoice(
        CreateInvoiceRequest(
            customer_id="cus_123",
            collection_method="send_invoice",
            days_until_due=30,
        )
    )
    InvoiceService.finalize_invoice(invoice.id)
    InvoiceService.send_invoice(invoice.id)

Errors:
    PaymentFailedError: Paying the invoice was declined
    StripeApiError: Any other Stripe failure, including unknown invoice ids
    ValueError: Blank ids, missing request or out-of-range limit
"""

from __future__ import annotations

import stripe

from stripe_wrapper.services.base import StripeService
from stripe_wrapper.services.mappers import list_data, map_invoice
from stripe_wrapper.types import CreateInvoiceRequest, Invoice

MAX_LIST_LIMIT = 100


class InvoiceService(StripeService):
    """Create, finalize, pay, void, send and look up invoices."""

    resource = "invoice"

    @classmethod
    def create_invoice(cls, request: CreateInvoiceRequest) -> Invoice:
        if request is None:
            raise ValueError("request is required")

        with cls.stripe_call(
            "create_invoice",
            customer_id=request.customer_id,
            collection_method=request.collection_method,
        ) as log_context:
            invoice = stripe.Invoice.create(
                customer=request.customer_id,
                description=request.description,
                collection_method=request.collection_method,
                days_until_due=request.days_until_due,
                metadata=request.metadata or None,
                auto_advance=request.auto_advance,
            )
            log_context["invoice_id"] = invoice.id

        return map_invoice(invoice)

    @classmethod
    def finalize_invoice(cls, invoice_id: str) -> Invoice:
        """Move a draft invoice to open so it can be paid."""
        cls.require(invoice_id=invoice_id)

        with cls.stripe_call("finalize_invoice", resource_id=invoice_id, invoice_id=invoice_id):
            invoice = stripe.Invoice.finalize_invoice(invoice_id)

        return map_invoice(invoice)

    @classmethod
    def pay_invoice(cls, invoice_id: str, payment_method_id: str | None = None) -> Invoice:
        """Pay an open invoice now, optionally with a specific payment method."""
        cls.require(invoice_id=invoice_id)

        with cls.stripe_call("pay_invoice", resource_id=invoice_id, invoice_id=invoice_id):
            invoice = stripe.Invoice.pay(invoice_id, payment_method=payment_method_id)

        return map_invoice(invoice)

    @classmethod
    def void_invoice(cls, invoice_id: str) -> Invoice:
        cls.require(invoice_id=invoice_id)

        with cls.stripe_call("void_invoice", resource_id=invoice_id, invoice_id=invoice_id):
            invoice = stripe.Invoice.void_invoice(invoice_id)

        return map_invoice(invoice)

    @classmethod
    def get_invoice(cls, invoice_id: str) -> Invoice:
        cls.require(invoice_id=invoice_id)

        with cls.stripe_call("get_invoice", resource_id=invoice_id, invoice_id=invoice_id):
            invoice = stripe.Invoice.retrieve(invoice_id)

        return map_invoice(invoice)

    @classmethod
    def list_invoices(
        cls,
        customer_id: str,
        status: str | None = None,
        limit: int = 10,
    ) -> list[Invoice]:
        """List a customer's invoices, newest first (at most `limit`, 1-100)."""
        cls.require(customer_id=customer_id)
        if not 1 <= limit <= MAX_LIST_LIMIT:
            raise ValueError(f"limit must be between 1 and {MAX_LIST_LIMIT}")

        with cls.stripe_call(
            "list_invoices",
            customer_id=customer_id,
            invoice_status=status,
            limit=limit,
        ) as log_context:
            invoices = stripe.Invoice.list(customer=customer_id, status=status, limit=limit)
            items = list_data(invoices)
            log_context["count"] = len(items)

        return [map_invoice(invoice) for invoice in items]

    @classmethod
    def send_invoice(cls, invoice_id: str) -> Invoice:
        """Email an open send_invoice-collection invoice to the customer."""
        cls.require(invoice_id=invoice_id)

        with cls.stripe_call("send_invoice", resource_id=invoice_id, invoice_id=invoice_id):
            invoice = stripe.Invoice.send_invoice(invoice_id)

        return map_invoice(invoice)
