"""
Data transfer objects for Stripe resources.

Plain dataclasses mirroring the parts of Stripe's customers, payment
intents, subscriptions and invoices that callers of this app need.
Request types validate themselves on construction and raise ValueError.

All timestamps are timezone-aware UTC datetimes. Amounts are integers in
the currency's smallest unit (cents for USD).

Usage:
    from stripe_wrapper.types import PaymentRequest, PaymentStatus

    request = PaymentRequest(amount=5000, currency="usd", customer_id="cus_123")
    result = PaymentService.create_payment(request)
    if result.status == PaymentStatus.REQUIRES_ACTION:
        redirect(result.action_url)
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime


# =============================================================================
# Statuses
# =============================================================================


class PaymentStatus(str, enum.Enum):
    """PaymentIntent status. Values Stripe adds later map to FAILED."""

    REQUIRES_PAYMENT_METHOD = "requires_payment_method"
    REQUIRES_CONFIRMATION = "requires_confirmation"
    REQUIRES_ACTION = "requires_action"
    PROCESSING = "processing"
    REQUIRES_CAPTURE = "requires_capture"
    CANCELED = "canceled"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @classmethod
    def from_stripe(cls, value: str | None) -> PaymentStatus:
        try:
            return cls(value)
        except ValueError:
            return cls.FAILED


class SubscriptionStatus(str, enum.Enum):
    """Subscription status. Unrecognised values map to INCOMPLETE."""

    INCOMPLETE = "incomplete"
    INCOMPLETE_EXPIRED = "incomplete_expired"
    TRIALING = "trialing"
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELED = "canceled"
    UNPAID = "unpaid"
    PAUSED = "paused"

    @classmethod
    def from_stripe(cls, value: str | None) -> SubscriptionStatus:
        try:
            return cls(value)
        except ValueError:
            return cls.INCOMPLETE


class InvoiceStatus(str, enum.Enum):
    """Invoice status. Unrecognised values map to DRAFT."""

    DRAFT = "draft"
    OPEN = "open"
    PAID = "paid"
    UNCOLLECTIBLE = "uncollectible"
    VOID = "void"

    @classmethod
    def from_stripe(cls, value: str | None) -> InvoiceStatus:
        try:
            return cls(value)
        except ValueError:
            return cls.DRAFT


# =============================================================================
# Customers
# =============================================================================


@dataclass
class Address:
    line1: str | None = None
    line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None

    def to_params(self) -> dict[str, str]:
        """Stripe request parameters, omitting unset fields."""
        return {
            key: value
            for key, value in (
                ("line1", self.line1),
                ("line2", self.line2),
                ("city", self.city),
                ("state", self.state),
                ("postal_code", self.postal_code),
                ("country", self.country),
            )
            if value is not None
        }


@dataclass
class Shipping:
    name: str | None = None
    phone: str | None = None
    address: Address | None = None

    def to_params(self) -> dict[str, object]:
        params: dict[str, object] = {}
        if self.name is not None:
            params["name"] = self.name
        if self.phone is not None:
            params["phone"] = self.phone
        if self.address is not None:
            params["address"] = self.address.to_params()
        return params


@dataclass
class Customer:
    """
    A Stripe customer.

    Used both as the input to create/update (id and created_at unset) and
    as the result of every customer operation.

    Attributes:
        default_payment_method_id: invoice_settings.default_payment_method
        currency: Currency the customer is billed in, once known
    """

    id: str | None = None
    email: str | None = None
    name: str | None = None
    phone: str | None = None
    description: str | None = None
    address: Address | None = None
    shipping: Shipping | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    default_payment_method_id: str | None = None
    currency: str | None = None
    created_at: datetime | None = None


# =============================================================================
# Payments
# =============================================================================


@dataclass
class PaymentRequest:
    """
    Parameters for creating a PaymentIntent.

    Attributes:
        amount: Amount in smallest currency unit; must be positive
        currency: ISO 4217 code, three letters (lowercased on send)
        customer_id: Stripe customer to charge
        payment_method_id: When set, the intent is confirmed immediately
        description: Free text shown in the Dashboard
        receipt_email: Where Stripe sends the receipt
        metadata: Key-value pairs attached to the intent
        capture_immediately: False places a hold to capture later
        idempotency_key: Makes retries of this request safe
    """

    amount: int
    currency: str = "usd"
    customer_id: str | None = None
    payment_method_id: str | None = None
    description: str | None = None
    receipt_email: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    capture_immediately: bool = True
    idempotency_key: str | None = None

    def __post_init__(self) -> None:
        """Validate parameters after initialization."""
        if self.amount is None or self.amount <= 0:
            raise ValueError("Amount must be greater than 0")
        if not self.currency or len(self.currency) != 3 or not self.currency.isalpha():
            raise ValueError("currency must be a 3-letter ISO code")
        if self.description is not None and len(self.description) > 1000:
            raise ValueError("description cannot exceed 1000 characters")


@dataclass
class PaymentResult:
    """
    Outcome of a PaymentIntent operation.

    Attributes:
        client_secret: Secret for client-side confirmation
        requires_action: Customer action (e.g. 3D Secure) is needed
        action_url: Redirect URL for that action, when Stripe gives one
        charge_id: Latest charge created for the intent
        error_message: Message of the last payment error, if any
        error_code: Code of the last payment error, if any
    """

    payment_intent_id: str
    status: PaymentStatus
    amount: int
    currency: str
    client_secret: str | None = None
    requires_action: bool = False
    action_url: str | None = None
    charge_id: str | None = None
    error_message: str | None = None
    error_code: str | None = None
    created_at: datetime | None = None

    @property
    def is_successful(self) -> bool:
        return self.status == PaymentStatus.SUCCEEDED


# =============================================================================
# Subscriptions
# =============================================================================


@dataclass
class SubscriptionItem:
    id: str | None = None
    price_id: str = ""
    quantity: int = 1


@dataclass
class Subscription:
    id: str
    customer_id: str
    status: SubscriptionStatus
    items: list[SubscriptionItem] = field(default_factory=list)
    current_period_start: datetime | None = None
    current_period_end: datetime | None = None
    trial_end: datetime | None = None
    canceled_at: datetime | None = None
    cancel_at_period_end: bool = False
    default_payment_method_id: str | None = None
    collection_method: str = "charge_automatically"
    metadata: dict[str, str] = field(default_factory=dict)
    created_at: datetime | None = None


MAX_TRIAL_DAYS = 730


@dataclass
class CreateSubscriptionRequest:
    """
    Parameters for creating a single-price subscription.

    Attributes:
        quantity: Units of the price; at least 1
        trial_days: Trial length, 0-730; 0 or None means no trial
        payment_method_id: Default payment method for the subscription
    """

    customer_id: str
    price_id: str
    quantity: int = 1
    trial_days: int | None = None
    payment_method_id: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate parameters after initialization."""
        if not self.customer_id or not self.customer_id.strip():
            raise ValueError("customer_id is required")
        if not self.price_id or not self.price_id.strip():
            raise ValueError("price_id is required")
        if self.quantity < 1:
            raise ValueError("quantity must be at least 1")
        if self.trial_days is not None and not 0 <= self.trial_days <= MAX_TRIAL_DAYS:
            raise ValueError(f"trial_days must be between 0 and {MAX_TRIAL_DAYS}")


# =============================================================================
# Invoices
# =============================================================================


@dataclass
class InvoiceLineItem:
    id: str | None = None
    description: str | None = None
    quantity: int = 1
    unit_amount: int = 0
    amount: int = 0
    currency: str | None = None
    price_id: str | None = None


@dataclass
class Invoice:
    id: str
    customer_id: str | None
    status: InvoiceStatus
    number: str | None = None
    subscription_id: str | None = None
    amount_due: int = 0
    amount_paid: int = 0
    amount_remaining: int = 0
    subtotal: int = 0
    tax: int = 0
    total: int = 0
    currency: str = "usd"
    collection_method: str | None = None
    due_date: datetime | None = None
    line_items: list[InvoiceLineItem] = field(default_factory=list)
    hosted_invoice_url: str | None = None
    invoice_pdf_url: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    created_at: datetime | None = None
    paid_at: datetime | None = None


COLLECTION_METHODS = ("charge_automatically", "send_invoice")


@dataclass
class CreateInvoiceRequest:
    """
    Parameters for creating a draft invoice.

    Attributes:
        collection_method: "charge_automatically" or "send_invoice"
        days_until_due: 1-365; only meaningful with "send_invoice"
        auto_advance: Let Stripe finalize and collect automatically
    """

    customer_id: str
    description: str | None = None
    collection_method: str = "charge_automatically"
    days_until_due: int | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    auto_advance: bool = True

    def __post_init__(self) -> None:
        """Validate parameters after initialization."""
        if not self.customer_id or not self.customer_id.strip():
            raise ValueError("customer_id is required")
        if self.collection_method not in COLLECTION_METHODS:
            raise ValueError(
                f"collection_method must be one of {', '.join(COLLECTION_METHODS)}"
            )
        if self.days_until_due is not None and not 1 <= self.days_until_due <= 365:
            raise ValueError("days_until_due must be between 1 and 365")
        if self.description is not None and len(self.description) > 500:
            raise ValueError("description cannot exceed 500 characters")
