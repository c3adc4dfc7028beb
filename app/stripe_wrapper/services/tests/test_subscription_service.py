"""
Tests for SubscriptionService.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from stripe_wrapper.exceptions import SubscriptionError, SubscriptionErrorReason
from stripe_wrapper.services import SubscriptionService
from stripe_wrapper.tests.factories import (
    SubscriptionFactory,
    card_error,
    invalid_request_error,
    list_object,
)
from stripe_wrapper.types import CreateSubscriptionRequest, SubscriptionStatus


class TestCreateSubscription:
    def test_with_trial(self):
        request = CreateSubscriptionRequest(
            customer_id="cus_1",
            price_id="price_basic",
            quantity=2,
            trial_days=14,
            payment_method_id="pm_1",
        )

        with patch(
            "stripe.Subscription.create",
            return_value=SubscriptionFactory(id="sub_1", status="trialing"),
        ) as mock_create:
            subscription = SubscriptionService.create_subscription(request)

        mock_create.assert_called_once_with(
            customer="cus_1",
            items=[{"price": "price_basic", "quantity": 2}],
            default_payment_method="pm_1",
            metadata=None,
            trial_period_days=14,
        )
        assert subscription.status == SubscriptionStatus.TRIALING

    @pytest.mark.parametrize("trial_days", [None, 0])
    def test_no_trial(self, trial_days):
        request = CreateSubscriptionRequest(
            customer_id="cus_1", price_id="price_basic", trial_days=trial_days
        )

        with patch(
            "stripe.Subscription.create",
            return_value=SubscriptionFactory(),
        ) as mock_create:
            SubscriptionService.create_subscription(request)

        assert "trial_period_days" not in mock_create.call_args.kwargs

    def test_unknown_price(self):
        request = CreateSubscriptionRequest(customer_id="cus_1", price_id="price_gone")

        with patch("stripe.Subscription.create", side_effect=invalid_request_error()):
            with pytest.raises(SubscriptionError) as exc_info:
                SubscriptionService.create_subscription(request)

        assert exc_info.value.reason == SubscriptionErrorReason.PLAN_NOT_FOUND

    def test_declined_first_payment(self):
        request = CreateSubscriptionRequest(customer_id="cus_1", price_id="price_basic")

        with patch("stripe.Subscription.create", side_effect=card_error()):
            with pytest.raises(SubscriptionError) as exc_info:
                SubscriptionService.create_subscription(request)

        assert exc_info.value.reason == SubscriptionErrorReason.PAYMENT_FAILED


class TestUpdateSubscription:
    def test_changes_first_item(self):
        with patch(
            "stripe.Subscription.retrieve",
            return_value=SubscriptionFactory(id="sub_1"),
        ), patch(
            "stripe.Subscription.modify",
            return_value=SubscriptionFactory(id="sub_1"),
        ) as mock_modify:
            SubscriptionService.update_subscription("sub_1", quantity=5)

        mock_modify.assert_called_once_with(
            "sub_1",
            items=[{"id": "si_test_1", "price": "price_basic", "quantity": 5}],
        )

    def test_changes_price_keeps_quantity(self):
        with patch(
            "stripe.Subscription.retrieve",
            return_value=SubscriptionFactory(id="sub_1"),
        ), patch(
            "stripe.Subscription.modify",
            return_value=SubscriptionFactory(id="sub_1"),
        ) as mock_modify:
            SubscriptionService.update_subscription("sub_1", price_id="price_pro")

        assert mock_modify.call_args.kwargs["items"] == [
            {"id": "si_test_1", "price": "price_pro", "quantity": 1}
        ]

    def test_nothing_to_change_skips_retrieve(self):
        with patch("stripe.Subscription.retrieve") as mock_retrieve, patch(
            "stripe.Subscription.modify",
            return_value=SubscriptionFactory(id="sub_1"),
        ) as mock_modify:
            SubscriptionService.update_subscription("sub_1")

        mock_retrieve.assert_not_called()
        mock_modify.assert_called_once_with("sub_1")

    def test_rejects_zero_quantity(self):
        with pytest.raises(ValueError, match="quantity"):
            SubscriptionService.update_subscription("sub_1", quantity=0)


class TestCancelAndResume:
    def test_cancel_at_period_end(self):
        with patch(
            "stripe.Subscription.modify",
            return_value=SubscriptionFactory(cancel_at_period_end=True),
        ) as mock_modify, patch("stripe.Subscription.cancel") as mock_cancel:
            subscription = SubscriptionService.cancel_subscription("sub_1")

        mock_modify.assert_called_once_with("sub_1", cancel_at_period_end=True)
        mock_cancel.assert_not_called()
        assert subscription.cancel_at_period_end is True

    def test_cancel_immediately(self):
        with patch(
            "stripe.Subscription.cancel",
            return_value=SubscriptionFactory(status="canceled", canceled_at=1700000500),
        ) as mock_cancel:
            subscription = SubscriptionService.cancel_subscription(
                "sub_1", cancel_at_period_end=False
            )

        mock_cancel.assert_called_once_with("sub_1")
        assert subscription.status == SubscriptionStatus.CANCELED
        assert subscription.canceled_at is not None

    def test_resume(self):
        with patch(
            "stripe.Subscription.modify",
            return_value=SubscriptionFactory(),
        ) as mock_modify:
            SubscriptionService.resume_subscription("sub_1")

        mock_modify.assert_called_once_with("sub_1", cancel_at_period_end=False)

    def test_cancel_unknown_subscription(self):
        with patch("stripe.Subscription.modify", side_effect=invalid_request_error()):
            with pytest.raises(SubscriptionError) as exc_info:
                SubscriptionService.cancel_subscription("sub_404")

        assert exc_info.value.subscription_id == "sub_404"


class TestLookup:
    def test_get(self):
        with patch(
            "stripe.Subscription.retrieve",
            return_value=SubscriptionFactory(id="sub_1"),
        ):
            assert SubscriptionService.get_subscription("sub_1").id == "sub_1"

    def test_list(self):
        subscriptions = list_object([SubscriptionFactory(id="sub_1"), SubscriptionFactory(id="sub_2")])

        with patch("stripe.Subscription.list", return_value=subscriptions) as mock_list:
            result = SubscriptionService.list_subscriptions("cus_1", status="active")

        mock_list.assert_called_once_with(customer="cus_1", status="active")
        assert [subscription.id for subscription in result] == ["sub_1", "sub_2"]
