"""
Payment service over Stripe PaymentIntents and Refunds.

Usage:
    from stripe_wrapper.services import PaymentService
    from stripe_wrapper.types import PaymentRequest

    result = PaymentService.create_payment(
        PaymentRequest(
            amount=5000,
            currency="usd",
            customer_id="cus_123",
            payment_method_id="pm_card_visa",
            idempotency_key="order_42:1",
        )
    )
    if result.requires_action:
        ...

Errors:
    PaymentFailedError: Card declined (decline_code, user_message, can_retry)
    StripeApiError: Any other Stripe failure
    ValueError: Blank ids or missing request
"""

from __future__ import annotations

import stripe

from stripe_wrapper.services.base import StripeService
from stripe_wrapper.services.mappers import map_payment_result
from stripe_wrapper.types import PaymentRequest, PaymentResult


class PaymentService(StripeService):
    """Create, confirm, capture, refund, cancel and look up payments."""

    resource = "payment"

    @classmethod
    def create_payment(cls, request: PaymentRequest) -> PaymentResult:
        """
        Create a PaymentIntent.

        The intent is confirmed in the same call when the request carries
        a payment method. capture_immediately=False places a hold that
        must be captured later with capture_payment().
        """
        if request is None:
            raise ValueError("request is required")

        idempotency_key = request.idempotency_key
        if idempotency_key is not None and not idempotency_key.strip():
            idempotency_key = None

        with cls.stripe_call(
            "create_payment",
            amount=request.amount,
            currency=request.currency.lower(),
            customer_id=request.customer_id,
            idempotency_key=idempotency_key,
        ) as log_context:
            intent = stripe.PaymentIntent.create(
                amount=request.amount,
                currency=request.currency.lower(),
                customer=request.customer_id,
                payment_method=request.payment_method_id,
                description=request.description,
                receipt_email=request.receipt_email,
                metadata=request.metadata or None,
                capture_method="automatic" if request.capture_immediately else "manual",
                confirm=request.payment_method_id is not None,
                idempotency_key=idempotency_key,
            )
            log_context["payment_intent_id"] = intent.id
            log_context["status"] = intent.status

        return map_payment_result(intent)

    @classmethod
    def confirm_payment(
        cls,
        payment_intent_id: str,
        payment_method_id: str | None = None,
    ) -> PaymentResult:
        cls.require(payment_intent_id=payment_intent_id)

        with cls.stripe_call(
            "confirm_payment",
            resource_id=payment_intent_id,
            payment_intent_id=payment_intent_id,
        ) as log_context:
            intent = stripe.PaymentIntent.confirm(
                payment_intent_id,
                payment_method=payment_method_id,
            )
            log_context["status"] = intent.status

        return map_payment_result(intent)

    @classmethod
    def capture_payment(
        cls,
        payment_intent_id: str,
        amount_to_capture: int | None = None,
    ) -> PaymentResult:
        """Capture a held payment, fully or up to `amount_to_capture`."""
        cls.require(payment_intent_id=payment_intent_id)

        with cls.stripe_call(
            "capture_payment",
            resource_id=payment_intent_id,
            payment_intent_id=payment_intent_id,
            amount_to_capture=amount_to_capture,
        ) as log_context:
            intent = stripe.PaymentIntent.capture(
                payment_intent_id,
                amount_to_capture=amount_to_capture,
            )
            log_context["status"] = intent.status

        return map_payment_result(intent)

    @classmethod
    def refund_payment(
        cls,
        payment_intent_id: str,
        amount: int | None = None,
        reason: str | None = None,
    ) -> str:
        """
        Refund a payment, fully or partially.

        Args:
            amount: Amount to refund; None refunds what remains
            reason: "duplicate", "fraudulent" or "requested_by_customer"

        Returns:
            The refund id (re_...)
        """
        cls.require(payment_intent_id=payment_intent_id)

        with cls.stripe_call(
            "refund_payment",
            resource_id=payment_intent_id,
            payment_intent_id=payment_intent_id,
            amount=amount,
            reason=reason,
        ) as log_context:
            refund = stripe.Refund.create(
                payment_intent=payment_intent_id,
                amount=amount,
                reason=reason,
            )
            log_context["refund_id"] = refund.id

        return refund.id

    @classmethod
    def cancel_payment(
        cls,
        payment_intent_id: str,
        cancellation_reason: str | None = None,
    ) -> PaymentResult:
        cls.require(payment_intent_id=payment_intent_id)

        with cls.stripe_call(
            "cancel_payment",
            resource_id=payment_intent_id,
            payment_intent_id=payment_intent_id,
            cancellation_reason=cancellation_reason,
        ) as log_context:
            intent = stripe.PaymentIntent.cancel(
                payment_intent_id,
                cancellation_reason=cancellation_reason,
            )
            log_context["status"] = intent.status

        return map_payment_result(intent)

    @classmethod
    def get_payment(cls, payment_intent_id: str) -> PaymentResult:
        cls.require(payment_intent_id=payment_intent_id)

        with cls.stripe_call(
            "get_payment",
            resource_id=payment_intent_id,
            payment_intent_id=payment_intent_id,
        ):
            intent = stripe.PaymentIntent.retrieve(payment_intent_id)

        return map_payment_result(intent)
