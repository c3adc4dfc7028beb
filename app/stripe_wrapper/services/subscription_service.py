"""
Subscription service over Stripe Subscriptions.

Usage:
    from stripe_wrapper.services import SubscriptionService
    from stripe_wrapper.types import CreateSubscriptionRequest

    subscription = SubscriptionService.create_subscription(
        CreateSubscriptionRequest(customer_id="cus_123", price_id="price_pro", trial_days=14)
    )
    SubscriptionService.cancel_subscription(subscription.id)  # at period end

Errors:
    SubscriptionError: reason plan_not_found (unknown subscription or
        price) or payment_failed (card declined)
    StripeApiError: Any other Stripe failure
    ValueError: Blank ids or missing request
"""

from __future__ import annotations

import stripe

from core.helpers import get_field
from stripe_wrapper.services.base import StripeService
from stripe_wrapper.services.mappers import expandable_id, list_data, map_subscription
from stripe_wrapper.types import CreateSubscriptionRequest, Subscription


class SubscriptionService(StripeService):
    """Create, change, cancel, resume and look up subscriptions."""

    resource = "subscription"

    @classmethod
    def create_subscription(cls, request: CreateSubscriptionRequest) -> Subscription:
        """Create a single-item subscription; a trial is added only when trial_days > 0."""
        if request is None:
            raise ValueError("request is required")

        params = {
            "customer": request.customer_id,
            "items": [{"price": request.price_id, "quantity": request.quantity}],
            "default_payment_method": request.payment_method_id,
            "metadata": request.metadata or None,
        }
        if request.trial_days and request.trial_days > 0:
            params["trial_period_days"] = request.trial_days

        with cls.stripe_call(
            "create_subscription",
            customer_id=request.customer_id,
            price_id=request.price_id,
            quantity=request.quantity,
            trial_days=request.trial_days,
        ) as log_context:
            subscription = stripe.Subscription.create(**params)
            log_context["subscription_id"] = subscription.id

        return map_subscription(subscription)

    @classmethod
    def update_subscription(
        cls,
        subscription_id: str,
        price_id: str | None = None,
        quantity: int | None = None,
    ) -> Subscription:
        """
        Change the price and/or quantity of the subscription's first item.

        Values not given are kept from the current item. With neither
        given, the subscription is saved unchanged.
        """
        cls.require(subscription_id=subscription_id)
        if quantity is not None and quantity < 1:
            raise ValueError("quantity must be at least 1")

        with cls.stripe_call(
            "update_subscription",
            resource_id=subscription_id,
            subscription_id=subscription_id,
            price_id=price_id,
            quantity=quantity,
        ):
            params = {}
            if price_id is not None or quantity is not None:
                current = stripe.Subscription.retrieve(subscription_id)
                items = list_data(get_field(current, "items"))
                if items:
                    first_item = items[0]
                    params["items"] = [
                        {
                            "id": get_field(first_item, "id"),
                            "price": price_id or expandable_id(get_field(first_item, "price")),
                            "quantity": (
                                quantity
                                if quantity is not None
                                else get_field(first_item, "quantity")
                            ),
                        }
                    ]

            subscription = stripe.Subscription.modify(subscription_id, **params)

        return map_subscription(subscription)

    @classmethod
    def cancel_subscription(
        cls,
        subscription_id: str,
        cancel_at_period_end: bool = True,
    ) -> Subscription:
        """
        Cancel a subscription.

        By default the subscription stays active until the end of the
        paid period; pass cancel_at_period_end=False to end it now.
        """
        cls.require(subscription_id=subscription_id)

        with cls.stripe_call(
            "cancel_subscription",
            resource_id=subscription_id,
            subscription_id=subscription_id,
            cancel_at_period_end=cancel_at_period_end,
        ):
            if cancel_at_period_end:
                subscription = stripe.Subscription.modify(
                    subscription_id,
                    cancel_at_period_end=True,
                )
            else:
                subscription = stripe.Subscription.cancel(subscription_id)

        return map_subscription(subscription)

    @classmethod
    def resume_subscription(cls, subscription_id: str) -> Subscription:
        """Undo a pending cancel-at-period-end."""
        cls.require(subscription_id=subscription_id)

        with cls.stripe_call(
            "resume_subscription",
            resource_id=subscription_id,
            subscription_id=subscription_id,
        ):
            subscription = stripe.Subscription.modify(
                subscription_id,
                cancel_at_period_end=False,
            )

        return map_subscription(subscription)

    @classmethod
    def get_subscription(cls, subscription_id: str) -> Subscription:
        cls.require(subscription_id=subscription_id)

        with cls.stripe_call(
            "get_subscription",
            resource_id=subscription_id,
            subscription_id=subscription_id,
        ):
            subscription = stripe.Subscription.retrieve(subscription_id)

        return map_subscription(subscription)

    @classmethod
    def list_subscriptions(
        cls,
        customer_id: str,
        status: str | None = None,
    ) -> list[Subscription]:
        cls.require(customer_id=customer_id)

        with cls.stripe_call(
            "list_subscriptions",
            customer_id=customer_id,
            subscription_status=status,
        ) as log_context:
            subscriptions = stripe.Subscription.list(customer=customer_id, status=status)
            items = list_data(subscriptions)
            log_context["count"] = len(items)

        return [map_subscription(subscription) for subscription in items]
