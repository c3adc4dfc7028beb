"""
Mapping from Stripe SDK objects to DTOs.

Functions here read fields with core.helpers.get_field, so they accept
SDK objects and plain dicts alike, and tolerate fields that older or
newer API versions omit. Expandable references (customer, price,
latest_charge, ...) may arrive as an id string or as an expanded object;
both yield the id.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.helpers import from_unix_timestamp, get_field, get_path, string_map
from stripe_wrapper.types import (
    Address,
    Customer,
    Invoice,
    InvoiceLineItem,
    InvoiceStatus,
    PaymentResult,
    PaymentStatus,
    Shipping,
    Subscription,
    SubscriptionItem,
    SubscriptionStatus,
)

if TYPE_CHECKING:
    from typing import Any


def expandable_id(value: Any) -> str | None:
    """Id of an expandable field, whether or not it was expanded."""
    if value is None or isinstance(value, str):
        return value
    return get_field(value, "id")


def list_data(list_object: Any) -> list[Any]:
    """Items of a Stripe list object (or of a {"data": [...]} dict)."""
    return list(get_field(list_object, "data") or [])


# =============================================================================
# Customers
# =============================================================================


def map_address(address: Any) -> Address | None:
    if address is None:
        return None
    return Address(
        line1=get_field(address, "line1"),
        line2=get_field(address, "line2"),
        city=get_field(address, "city"),
        state=get_field(address, "state"),
        postal_code=get_field(address, "postal_code"),
        country=get_field(address, "country"),
    )


def map_shipping(shipping: Any) -> Shipping | None:
    if shipping is None:
        return None
    return Shipping(
        name=get_field(shipping, "name"),
        phone=get_field(shipping, "phone"),
        address=map_address(get_field(shipping, "address")),
    )


def map_customer(customer: Any) -> Customer:
    return Customer(
        id=get_field(customer, "id"),
        email=get_field(customer, "email"),
        name=get_field(customer, "name"),
        phone=get_field(customer, "phone"),
        description=get_field(customer, "description"),
        address=map_address(get_field(customer, "address")),
        shipping=map_shipping(get_field(customer, "shipping")),
        metadata=string_map(get_field(customer, "metadata")),
        default_payment_method_id=expandable_id(
            get_path(customer, "invoice_settings", "default_payment_method")
        ),
        currency=get_field(customer, "currency"),
        created_at=from_unix_timestamp(get_field(customer, "created")),
    )


def customer_params(customer: Customer) -> dict[str, Any]:
    """Create/update parameters for a Customer DTO; unset fields are omitted."""
    params: dict[str, Any] = {
        "email": customer.email,
        "name": customer.name,
        "phone": customer.phone,
        "description": customer.description,
        "metadata": customer.metadata or None,
        "address": customer.address.to_params() if customer.address else None,
        "shipping": customer.shipping.to_params() if customer.shipping else None,
    }
    return {key: value for key, value in params.items() if value is not None}


# =============================================================================
# Payments
# =============================================================================


def map_payment_result(intent: Any) -> PaymentResult:
    status = get_field(intent, "status")
    last_error = get_field(intent, "last_payment_error")

    return PaymentResult(
        payment_intent_id=get_field(intent, "id"),
        client_secret=get_field(intent, "client_secret"),
        status=PaymentStatus.from_stripe(status),
        amount=get_field(intent, "amount") or 0,
        currency=get_field(intent, "currency") or "",
        requires_action=status == PaymentStatus.REQUIRES_ACTION.value,
        action_url=get_path(intent, "next_action", "redirect_to_url", "url"),
        charge_id=expandable_id(get_field(intent, "latest_charge")),
        error_message=get_field(last_error, "message"),
        error_code=get_field(last_error, "code"),
        created_at=from_unix_timestamp(get_field(intent, "created")),
    )


# =============================================================================
# Subscriptions
# =============================================================================


def map_subscription_item(item: Any) -> SubscriptionItem:
    return SubscriptionItem(
        id=get_field(item, "id"),
        price_id=expandable_id(get_field(item, "price")) or "",
        quantity=get_field(item, "quantity") or 1,
    )


def map_subscription(subscription: Any) -> Subscription:
    items = list_data(get_field(subscription, "items"))
    first_item = items[0] if items else None

    # Billing periods moved from the subscription to its items in newer
    # API versions; read whichever is present.
    period_start = get_field(subscription, "current_period_start") or get_field(
        first_item, "current_period_start"
    )
    period_end = get_field(subscription, "current_period_end") or get_field(
        first_item, "current_period_end"
    )

    return Subscription(
        id=get_field(subscription, "id"),
        customer_id=expandable_id(get_field(subscription, "customer")) or "",
        status=SubscriptionStatus.from_stripe(get_field(subscription, "status")),
        items=[map_subscription_item(item) for item in items],
        current_period_start=from_unix_timestamp(period_start),
        current_period_end=from_unix_timestamp(period_end),
        trial_end=from_unix_timestamp(get_field(subscription, "trial_end")),
        canceled_at=from_unix_timestamp(get_field(subscription, "canceled_at")),
        cancel_at_period_end=bool(get_field(subscription, "cancel_at_period_end", False)),
        default_payment_method_id=expandable_id(
            get_field(subscription, "default_payment_method")
        ),
        collection_method=get_field(subscription, "collection_method")
        or "charge_automatically",
        metadata=string_map(get_field(subscription, "metadata")),
        created_at=from_unix_timestamp(get_field(subscription, "created")),
    )


# =============================================================================
# Invoices
# =============================================================================


def map_invoice_line(line: Any) -> InvoiceLineItem:
    quantity = get_field(line, "quantity") or 1
    amount = get_field(line, "amount") or 0
    price_id = expandable_id(get_field(line, "price")) or get_path(
        line, "pricing", "price_details", "price"
    )

    return InvoiceLineItem(
        id=get_field(line, "id"),
        description=get_field(line, "description"),
        quantity=quantity,
        unit_amount=amount // max(quantity, 1),
        amount=amount,
        currency=get_field(line, "currency"),
        price_id=price_id,
    )


def _invoice_tax(invoice: Any) -> int:
    tax = get_field(invoice, "tax")
    if tax is not None:
        return tax
    total_taxes = get_field(invoice, "total_taxes") or []
    return sum(get_field(entry, "amount") or 0 for entry in total_taxes)


def map_invoice(invoice: Any) -> Invoice:
    subscription_id = expandable_id(get_field(invoice, "subscription")) or get_path(
        invoice, "parent", "subscription_details", "subscription"
    )

    return Invoice(
        id=get_field(invoice, "id"),
        number=get_field(invoice, "number"),
        customer_id=expandable_id(get_field(invoice, "customer")),
        subscription_id=expandable_id(subscription_id),
        status=InvoiceStatus.from_stripe(get_field(invoice, "status")),
        amount_due=get_field(invoice, "amount_due") or 0,
        amount_paid=get_field(invoice, "amount_paid") or 0,
        amount_remaining=get_field(invoice, "amount_remaining") or 0,
        subtotal=get_field(invoice, "subtotal") or 0,
        tax=_invoice_tax(invoice),
        total=get_field(invoice, "total") or 0,
        currency=get_field(invoice, "currency") or "usd",
        collection_method=get_field(invoice, "collection_method"),
        due_date=from_unix_timestamp(get_field(invoice, "due_date")),
        line_items=[map_invoice_line(line) for line in list_data(get_field(invoice, "lines"))],
        hosted_invoice_url=get_field(invoice, "hosted_invoice_url"),
        invoice_pdf_url=get_field(invoice, "invoice_pdf"),
        metadata=string_map(get_field(invoice, "metadata")),
        created_at=from_unix_timestamp(get_field(invoice, "created")),
        paid_at=from_unix_timestamp(get_path(invoice, "status_transitions", "paid_at")),
    )
