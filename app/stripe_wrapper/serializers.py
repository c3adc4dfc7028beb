"""
Serializers for the Stripe wrapper REST endpoints.

Input serializers validate request bodies and build the request DTOs in
stripe_wrapper.types. Output serializers render those DTOs; they read
attributes, so they work on dataclasses directly.
"""

from __future__ import annotations

from rest_framework import serializers

from stripe_wrapper.types import (
    COLLECTION_METHODS,
    MAX_TRIAL_DAYS,
    Address,
    CreateInvoiceRequest,
    CreateSubscriptionRequest,
    Customer,
    PaymentRequest,
    Shipping,
)

REFUND_REASONS = ("duplicate", "fraudulent", "requested_by_customer")
CANCELLATION_REASONS = ("duplicate", "fraudulent", "requested_by_customer", "abandoned")


def _metadata_field() -> serializers.DictField:
    return serializers.DictField(
        child=serializers.CharField(allow_blank=True),
        required=False,
        default=dict,
        help_text="Key-value pairs attached to the Stripe object",
    )


# =============================================================================
# Customers
# =============================================================================


class AddressSerializer(serializers.Serializer):
    line1 = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    line2 = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    city = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    state = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    postal_code = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    country = serializers.CharField(
        required=False,
        allow_null=True,
        min_length=2,
        max_length=2,
        help_text="Two-letter ISO country code",
    )


class ShippingSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_null=True)
    phone = serializers.CharField(required=False, allow_null=True)
    address = AddressSerializer(required=False, allow_null=True)


class CustomerInputSerializer(serializers.Serializer):
    """
    Request body for creating or updating a customer.

    On update, only fields present in the body are sent to Stripe.
    """

    email = serializers.EmailField(required=False, allow_null=True)
    name = serializers.CharField(required=False, allow_null=True, max_length=256)
    phone = serializers.CharField(required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_null=True, max_length=500)
    address = AddressSerializer(required=False, allow_null=True)
    shipping = ShippingSerializer(required=False, allow_null=True)
    metadata = serializers.DictField(
        child=serializers.CharField(allow_blank=True),
        required=False,
    )

    def to_customer(self) -> Customer:
        data = self.validated_data
        address = data.get("address")
        shipping = data.get("shipping")

        return Customer(
            email=data.get("email"),
            name=data.get("name"),
            phone=data.get("phone"),
            description=data.get("description"),
            address=Address(**address) if address else None,
            shipping=(
                Shipping(
                    name=shipping.get("name"),
                    phone=shipping.get("phone"),
                    address=Address(**shipping["address"]) if shipping.get("address") else None,
                )
                if shipping
                else None
            ),
            metadata=data.get("metadata") or {},
        )


class CustomerSerializer(serializers.Serializer):
    id = serializers.CharField()
    email = serializers.EmailField(allow_null=True)
    name = serializers.CharField(allow_null=True)
    phone = serializers.CharField(allow_null=True)
    description = serializers.CharField(allow_null=True)
    address = AddressSerializer(allow_null=True)
    shipping = ShippingSerializer(allow_null=True)
    metadata = serializers.DictField(child=serializers.CharField())
    default_payment_method_id = serializers.CharField(allow_null=True)
    currency = serializers.CharField(allow_null=True)
    created_at = serializers.DateTimeField(allow_null=True)


class AttachPaymentMethodSerializer(serializers.Serializer):
    payment_method_id = serializers.CharField()
    set_as_default = serializers.BooleanField(default=False)


class PaymentMethodListSerializer(serializers.Serializer):
    payment_method_ids = serializers.ListField(child=serializers.CharField())


class PaymentMethodIdSerializer(serializers.Serializer):
    payment_method_id = serializers.CharField()


# =============================================================================
# Payments
# =============================================================================


class PaymentRequestSerializer(serializers.Serializer):
    """Request body for creating a PaymentIntent."""

    amount = serializers.IntegerField(
        min_value=1,
        help_text="Amount in the smallest currency unit (e.g. cents)",
    )
    currency = serializers.RegexField(
        r"^[A-Za-z]{3}$",
        default="usd",
        help_text="Three-letter ISO currency code",
    )
    customer_id = serializers.CharField(required=False, allow_null=True)
    payment_method_id = serializers.CharField(
        required=False,
        allow_null=True,
        help_text="When set, the payment is confirmed immediately",
    )
    description = serializers.CharField(required=False, allow_null=True, max_length=1000)
    receipt_email = serializers.EmailField(required=False, allow_null=True)
    metadata = _metadata_field()
    capture_immediately = serializers.BooleanField(default=True)
    idempotency_key = serializers.CharField(required=False, allow_null=True)

    def to_request(self) -> PaymentRequest:
        return PaymentRequest(**self.validated_data)


class ConfirmPaymentSerializer(serializers.Serializer):
    payment_method_id = serializers.CharField(required=False, allow_null=True)


class CapturePaymentSerializer(serializers.Serializer):
    amount_to_capture = serializers.IntegerField(required=False, allow_null=True, min_value=1)


class RefundPaymentSerializer(serializers.Serializer):
    amount = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    reason = serializers.ChoiceField(choices=REFUND_REASONS, required=False, allow_null=True)


class CancelPaymentSerializer(serializers.Serializer):
    cancellation_reason = serializers.ChoiceField(
        choices=CANCELLATION_REASONS,
        required=False,
        allow_null=True,
    )


class PaymentResultSerializer(serializers.Serializer):
    payment_intent_id = serializers.CharField()
    client_secret = serializers.CharField(allow_null=True)
    status = serializers.CharField(source="status.value")
    amount = serializers.IntegerField()
    currency = serializers.CharField()
    requires_action = serializers.BooleanField()
    action_url = serializers.CharField(allow_null=True)
    charge_id = serializers.CharField(allow_null=True)
    error_message = serializers.CharField(allow_null=True)
    error_code = serializers.CharField(allow_null=True)
    created_at = serializers.DateTimeField(allow_null=True)
    is_successful = serializers.BooleanField()


class RefundResultSerializer(serializers.Serializer):
    refund_id = serializers.CharField()


# =============================================================================
# Subscriptions
# =============================================================================


class CreateSubscriptionSerializer(serializers.Serializer):
    customer_id = serializers.CharField()
    price_id = serializers.CharField()
    quantity = serializers.IntegerField(min_value=1, default=1)
    trial_days = serializers.IntegerField(
        required=False,
        allow_null=True,
        min_value=0,
        max_value=MAX_TRIAL_DAYS,
    )
    payment_method_id = serializers.CharField(required=False, allow_null=True)
    metadata = _metadata_field()

    def to_request(self) -> CreateSubscriptionRequest:
        return CreateSubscriptionRequest(**self.validated_data)


class UpdateSubscriptionSerializer(serializers.Serializer):
    price_id = serializers.CharField(required=False, allow_null=True)
    quantity = serializers.IntegerField(required=False, allow_null=True, min_value=1)


class CancelSubscriptionSerializer(serializers.Serializer):
    cancel_at_period_end = serializers.BooleanField(default=True)


class SubscriptionListQuerySerializer(serializers.Serializer):
    customer_id = serializers.CharField()
    status = serializers.CharField(required=False, allow_null=True)


class SubscriptionItemSerializer(serializers.Serializer):
    id = serializers.CharField(allow_null=True)
    price_id = serializers.CharField()
    quantity = serializers.IntegerField()


class SubscriptionSerializer(serializers.Serializer):
    id = serializers.CharField()
    customer_id = serializers.CharField()
    status = serializers.CharField(source="status.value")
    items = SubscriptionItemSerializer(many=True)
    current_period_start = serializers.DateTimeField(allow_null=True)
    current_period_end = serializers.DateTimeField(allow_null=True)
    trial_end = serializers.DateTimeField(allow_null=True)
    canceled_at = serializers.DateTimeField(allow_null=True)
    cancel_at_period_end = serializers.BooleanField()
    default_payment_method_id = serializers.CharField(allow_null=True)
    collection_method = serializers.CharField()
    metadata = serializers.DictField(child=serializers.CharField())
    created_at = serializers.DateTimeField(allow_null=True)


# =============================================================================
# Invoices
# =============================================================================


class CreateInvoiceSerializer(serializers.Serializer):
    customer_id = serializers.CharField()
    description = serializers.CharField(required=False, allow_null=True, max_length=500)
    collection_method = serializers.ChoiceField(
        choices=COLLECTION_METHODS,
        default="charge_automatically",
    )
    days_until_due = serializers.IntegerField(
        required=False,
        allow_null=True,
        min_value=1,
        max_value=365,
    )
    metadata = _metadata_field()
    auto_advance = serializers.BooleanField(default=True)

    def to_request(self) -> CreateInvoiceRequest:
        return CreateInvoiceRequest(**self.validated_data)


class PayInvoiceSerializer(serializers.Serializer):
    payment_method_id = serializers.CharField(required=False, allow_null=True)


class InvoiceListQuerySerializer(serializers.Serializer):
    customer_id = serializers.CharField()
    status = serializers.CharField(required=False, allow_null=True)
    limit = serializers.IntegerField(min_value=1, max_value=100, default=10)


class InvoiceLineItemSerializer(serializers.Serializer):
    id = serializers.CharField(allow_null=True)
    description = serializers.CharField(allow_null=True)
    quantity = serializers.IntegerField()
    unit_amount = serializers.IntegerField()
    amount = serializers.IntegerField()
    currency = serializers.CharField(allow_null=True)
    price_id = serializers.CharField(allow_null=True)


class InvoiceSerializer(serializers.Serializer):
    id = serializers.CharField()
    number = serializers.CharField(allow_null=True)
    customer_id = serializers.CharField(allow_null=True)
    subscription_id = serializers.CharField(allow_null=True)
    status = serializers.CharField(source="status.value")
    amount_due = serializers.IntegerField()
    amount_paid = serializers.IntegerField()
    amount_remaining = serializers.IntegerField()
    subtotal = serializers.IntegerField()
    tax = serializers.IntegerField()
    total = serializers.IntegerField()
    currency = serializers.CharField()
    collection_method = serializers.CharField(allow_null=True)
    due_date = serializers.DateTimeField(allow_null=True)
    line_items = InvoiceLineItemSerializer(many=True)
    hosted_invoice_url = serializers.CharField(allow_null=True)
    invoice_pdf_url = serializers.CharField(allow_null=True)
    metadata = serializers.DictField(child=serializers.CharField())
    created_at = serializers.DateTimeField(allow_null=True)
    paid_at = serializers.DateTimeField(allow_null=True)


# =============================================================================
# Errors
# =============================================================================


class ErrorSerializer(serializers.Serializer):
    error = serializers.CharField()
