"""
Tests for the Stripe wrapper REST views.

Services are patched at the view module, so these tests cover request
validation, DTO rendering and the mapping of service exceptions to HTTP.
Service behaviour against the SDK is tested in services/tests.
"""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from stripe_wrapper.exceptions import (
    CustomerNotFoundError,
    PaymentFailedError,
    StripeApiError,
    StripeConfigurationError,
    SubscriptionError,
    SubscriptionErrorReason,
)
from stripe_wrapper.types import (
    Address,
    Customer,
    Invoice,
    InvoiceStatus,
    PaymentResult,
    PaymentStatus,
    Subscription,
    SubscriptionItem,
    SubscriptionStatus,
)

CREATED_AT = datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)


# =============================================================================
# Setup
# =============================================================================


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def customer():
    return Customer(
        id="cus_123",
        email="jenny@example.com",
        name="Jenny Rosen",
        address=Address(city="San Francisco", country="US"),
        metadata={"account": "42"},
        created_at=CREATED_AT,
    )


@pytest.fixture
def payment_result():
    return PaymentResult(
        payment_intent_id="pi_123",
        status=PaymentStatus.SUCCEEDED,
        amount=5000,
        currency="usd",
        client_secret="pi_123_secret",
        charge_id="ch_123",
        created_at=CREATED_AT,
    )


@pytest.fixture
def subscription():
    return Subscription(
        id="sub_123",
        customer_id="cus_123",
        status=SubscriptionStatus.ACTIVE,
        items=[SubscriptionItem(id="si_1", price_id="price_basic", quantity=2)],
        current_period_start=CREATED_AT,
        created_at=CREATED_AT,
    )


@pytest.fixture
def invoice():
    return Invoice(
        id="in_123",
        customer_id="cus_123",
        status=InvoiceStatus.OPEN,
        amount_due=2000,
        total=2000,
        created_at=CREATED_AT,
    )


# =============================================================================
# Customers
# =============================================================================


class TestCustomerViews:
    def test_create_customer(self, api_client, customer):
        with patch(
            "stripe_wrapper.views.CustomerService.create_customer",
            return_value=customer,
        ) as mock_create:
            response = api_client.post(
                reverse("stripe_wrapper:customer-create"),
                {
                    "email": "jenny@example.com",
                    "name": "Jenny Rosen",
                    "address": {"city": "San Francisco", "country": "US"},
                    "metadata": {"account": "42"},
                },
                format="json",
            )

        assert response.status_code == 201
        assert response.data["id"] == "cus_123"
        assert response.data["address"]["city"] == "San Francisco"

        sent = mock_create.call_args.args[0]
        assert sent.email == "jenny@example.com"
        assert sent.address == Address(city="San Francisco", country="US")
        assert sent.metadata == {"account": "42"}

    def test_create_customer_rejects_bad_email(self, api_client):
        response = api_client.post(
            reverse("stripe_wrapper:customer-create"),
            {"email": "not-an-email"},
            format="json",
        )

        assert response.status_code == 400
        assert "email" in response.data

    def test_get_customer(self, api_client, customer):
        with patch(
            "stripe_wrapper.views.CustomerService.get_customer",
            return_value=customer,
        ):
            response = api_client.get(
                reverse("stripe_wrapper:customer-detail", args=["cus_123"])
            )

        assert response.status_code == 200
        assert response.data["email"] == "jenny@example.com"
        assert response.data["metadata"] == {"account": "42"}

    def test_get_missing_customer_returns_404(self, api_client):
        with patch(
            "stripe_wrapper.views.CustomerService.get_customer",
            side_effect=CustomerNotFoundError("cus_404"),
        ):
            response = api_client.get(
                reverse("stripe_wrapper:customer-detail", args=["cus_404"])
            )

        assert response.status_code == 404
        assert response.data == {"error": "Customer with ID 'cus_404' was not found."}

    def test_update_customer(self, api_client, customer):
        with patch(
            "stripe_wrapper.views.CustomerService.update_customer",
            return_value=customer,
        ) as mock_update:
            response = api_client.put(
                reverse("stripe_wrapper:customer-detail", args=["cus_123"]),
                {"name": "Jenny R."},
                format="json",
            )

        assert response.status_code == 200
        customer_id, sent = mock_update.call_args.args
        assert customer_id == "cus_123"
        assert sent.name == "Jenny R."
        assert sent.email is None

    def test_delete_customer(self, api_client):
        with patch(
            "stripe_wrapper.views.CustomerService.delete_customer",
            return_value=True,
        ):
            response = api_client.delete(
                reverse("stripe_wrapper:customer-detail", args=["cus_123"])
            )

        assert response.status_code == 204

    def test_delete_not_confirmed_returns_404(self, api_client):
        with patch(
            "stripe_wrapper.views.CustomerService.delete_customer",
            return_value=False,
        ):
            response = api_client.delete(
                reverse("stripe_wrapper:customer-detail", args=["cus_123"])
            )

        assert response.status_code == 404

    def test_list_payment_methods(self, api_client):
        with patch(
            "stripe_wrapper.views.CustomerService.list_payment_methods",
            return_value=["pm_1", "pm_2"],
        ) as mock_list:
            response = api_client.get(
                reverse("stripe_wrapper:customer-payment-methods", args=["cus_123"]),
                {"type": "sepa_debit"},
            )

        assert response.status_code == 200
        assert response.data == {"payment_method_ids": ["pm_1", "pm_2"]}
        mock_list.assert_called_once_with("cus_123", type="sepa_debit")

    def test_attach_payment_method(self, api_client):
        with patch(
            "stripe_wrapper.views.CustomerService.attach_payment_method",
            return_value="pm_1",
        ) as mock_attach:
            response = api_client.post(
                reverse("stripe_wrapper:customer-payment-methods", args=["cus_123"]),
                {"payment_method_id": "pm_1", "set_as_default": True},
                format="json",
            )

        assert response.status_code == 200
        assert response.data == {"payment_method_id": "pm_1"}
        mock_attach.assert_called_once_with("cus_123", "pm_1", set_as_default=True)

    def test_detach_payment_method(self, api_client):
        with patch(
            "stripe_wrapper.views.CustomerService.detach_payment_method",
            return_value=True,
        ):
            response = api_client.post(
                reverse("stripe_wrapper:payment-method-detach", args=["pm_1"])
            )

        assert response.status_code == 204


# =============================================================================
# Payments
# =============================================================================


class TestPaymentViews:
    def test_create_payment(self, api_client, payment_result):
        with patch(
            "stripe_wrapper.views.PaymentService.create_payment",
            return_value=payment_result,
        ) as mock_create:
            response = api_client.post(
                reverse("stripe_wrapper:payment-create"),
                {
                    "amount": 5000,
                    "currency": "USD",
                    "customer_id": "cus_123",
                    "payment_method_id": "pm_card_visa",
                    "idempotency_key": "order_42:1",
                },
                format="json",
            )

        assert response.status_code == 201
        assert response.data["payment_intent_id"] == "pi_123"
        assert response.data["status"] == "succeeded"
        assert response.data["is_successful"] is True

        sent = mock_create.call_args.args[0]
        assert sent.amount == 5000
        assert sent.payment_method_id == "pm_card_visa"
        assert sent.idempotency_key == "order_42:1"

    @pytest.mark.parametrize(
        "body",
        [
            {"amount": 0},
            {"amount": 100, "currency": "dollars"},
            {"currency": "usd"},
        ],
    )
    def test_create_payment_validation(self, api_client, body):
        with patch("stripe_wrapper.views.PaymentService.create_payment") as mock_create:
            response = api_client.post(
                reverse("stripe_wrapper:payment-create"), body, format="json"
            )

        assert response.status_code == 400
        mock_create.assert_not_called()

    def test_declined_payment_returns_400(self, api_client):
        declined = PaymentFailedError("Card declined", decline_code="expired_card")

        with patch(
            "stripe_wrapper.views.PaymentService.create_payment",
            side_effect=declined,
        ):
            response = api_client.post(
                reverse("stripe_wrapper:payment-create"),
                {"amount": 5000, "payment_method_id": "pm_card_expired"},
                format="json",
            )

        assert response.status_code == 400
        assert response.data == {
            "error": "Your card has expired. Please use a different card.",
            "code": "expired_card",
            "can_retry": False,
        }

    def test_stripe_failure_returns_502(self, api_client):
        with patch(
            "stripe_wrapper.views.PaymentService.create_payment",
            side_effect=StripeApiError("Server error", error_type="api_error"),
        ):
            response = api_client.post(
                reverse("stripe_wrapper:payment-create"),
                {"amount": 5000},
                format="json",
            )

        assert response.status_code == 502
        assert response.data == {"error": "Payment service error"}

    def test_missing_configuration_returns_500(self, api_client):
        with patch(
            "stripe_wrapper.views.PaymentService.create_payment",
            side_effect=StripeConfigurationError("Stripe SecretKey is required."),
        ):
            response = api_client.post(
                reverse("stripe_wrapper:payment-create"),
                {"amount": 5000},
                format="json",
            )

        assert response.status_code == 500

    def test_get_payment(self, api_client, payment_result):
        with patch(
            "stripe_wrapper.views.PaymentService.get_payment",
            return_value=payment_result,
        ):
            response = api_client.get(
                reverse("stripe_wrapper:payment-detail", args=["pi_123"])
            )

        assert response.status_code == 200
        assert response.data["charge_id"] == "ch_123"

    def test_get_payment_stripe_error_returns_404(self, api_client):
        with patch(
            "stripe_wrapper.views.PaymentService.get_payment",
            side_effect=StripeApiError("No such payment_intent", error_code="resource_missing"),
        ):
            response = api_client.get(
                reverse("stripe_wrapper:payment-detail", args=["pi_missing"])
            )

        assert response.status_code == 404

    def test_capture_partial_amount(self, api_client, payment_result):
        with patch(
            "stripe_wrapper.views.PaymentService.capture_payment",
            return_value=payment_result,
        ) as mock_capture:
            response = api_client.post(
                reverse("stripe_wrapper:payment-capture", args=["pi_123"]),
                {"amount_to_capture": 2500},
                format="json",
            )

        assert response.status_code == 200
        mock_capture.assert_called_once_with("pi_123", 2500)

    def test_refund(self, api_client):
        with patch(
            "stripe_wrapper.views.PaymentService.refund_payment",
            return_value="re_123",
        ) as mock_refund:
            response = api_client.post(
                reverse("stripe_wrapper:payment-refund", args=["pi_123"]),
                {"amount": 1000, "reason": "requested_by_customer"},
                format="json",
            )

        assert response.status_code == 201
        assert response.data == {"refund_id": "re_123"}
        mock_refund.assert_called_once_with(
            "pi_123", amount=1000, reason="requested_by_customer"
        )

    def test_refund_rejects_unknown_reason(self, api_client):
        response = api_client.post(
            reverse("stripe_wrapper:payment-refund", args=["pi_123"]),
            {"reason": "changed_my_mind"},
            format="json",
        )

        assert response.status_code == 400

    def test_cancel(self, api_client, payment_result):
        with patch(
            "stripe_wrapper.views.PaymentService.cancel_payment",
            return_value=payment_result,
        ) as mock_cancel:
            response = api_client.post(
                reverse("stripe_wrapper:payment-cancel", args=["pi_123"]),
                {"cancellation_reason": "abandoned"},
                format="json",
            )

        assert response.status_code == 200
        mock_cancel.assert_called_once_with("pi_123", "abandoned")


# =============================================================================
# Subscriptions
# =============================================================================


class TestSubscriptionViews:
    def test_list_requires_customer_id(self, api_client):
        response = api_client.get(reverse("stripe_wrapper:subscription-list"))

        assert response.status_code == 400
        assert "customer_id" in response.data

    def test_list(self, api_client, subscription):
        with patch(
            "stripe_wrapper.views.SubscriptionService.list_subscriptions",
            return_value=[subscription],
        ) as mock_list:
            response = api_client.get(
                reverse("stripe_wrapper:subscription-list"),
                {"customer_id": "cus_123", "status": "active"},
            )

        assert response.status_code == 200
        assert len(response.data) == 1
        assert response.data[0]["status"] == "active"
        assert response.data[0]["items"][0]["quantity"] == 2
        mock_list.assert_called_once_with("cus_123", status="active")

    def test_create(self, api_client, subscription):
        with patch(
            "stripe_wrapper.views.SubscriptionService.create_subscription",
            return_value=subscription,
        ) as mock_create:
            response = api_client.post(
                reverse("stripe_wrapper:subscription-list"),
                {"customer_id": "cus_123", "price_id": "price_basic", "trial_days": 14},
                format="json",
            )

        assert response.status_code == 201
        sent = mock_create.call_args.args[0]
        assert sent.trial_days == 14
        assert sent.quantity == 1

    def test_create_rejects_long_trial(self, api_client):
        response = api_client.post(
            reverse("stripe_wrapper:subscription-list"),
            {"customer_id": "cus_123", "price_id": "price_basic", "trial_days": 731},
            format="json",
        )

        assert response.status_code == 400

    def test_subscription_error_returns_reason(self, api_client):
        error = SubscriptionError(
            "No such price",
            reason=SubscriptionErrorReason.PLAN_NOT_FOUND,
        )

        with patch(
            "stripe_wrapper.views.SubscriptionService.create_subscription",
            side_effect=error,
        ):
            response = api_client.post(
                reverse("stripe_wrapper:subscription-list"),
                {"customer_id": "cus_123", "price_id": "price_gone"},
                format="json",
            )

        assert response.status_code == 400
        assert response.data == {
            "error": "The selected subscription plan was not found.",
            "reason": "plan_not_found",
        }

    def test_update(self, api_client, subscription):
        with patch(
            "stripe_wrapper.views.SubscriptionService.update_subscription",
            return_value=subscription,
        ) as mock_update:
            response = api_client.put(
                reverse("stripe_wrapper:subscription-detail", args=["sub_123"]),
                {"quantity": 3},
                format="json",
            )

        assert response.status_code == 200
        mock_update.assert_called_once_with("sub_123", price_id=None, quantity=3)

    def test_cancel_defaults_to_period_end(self, api_client, subscription):
        with patch(
            "stripe_wrapper.views.SubscriptionService.cancel_subscription",
            return_value=subscription,
        ) as mock_cancel:
            response = api_client.post(
                reverse("stripe_wrapper:subscription-cancel", args=["sub_123"])
            )

        assert response.status_code == 200
        mock_cancel.assert_called_once_with("sub_123", cancel_at_period_end=True)

    def test_resume(self, api_client, subscription):
        with patch(
            "stripe_wrapper.views.SubscriptionService.resume_subscription",
            return_value=subscription,
        ):
            response = api_client.post(
                reverse("stripe_wrapper:subscription-resume", args=["sub_123"])
            )

        assert response.status_code == 200
        assert response.data["id"] == "sub_123"


# =============================================================================
# Invoices
# =============================================================================


class TestInvoiceViews:
    def test_list(self, api_client, invoice):
        with patch(
            "stripe_wrapper.views.InvoiceService.list_invoices",
            return_value=[invoice],
        ) as mock_list:
            response = api_client.get(
                reverse("stripe_wrapper:invoice-list"),
                {"customer_id": "cus_123", "limit": 5},
            )

        assert response.status_code == 200
        assert response.data[0]["status"] == "open"
        mock_list.assert_called_once_with("cus_123", status=None, limit=5)

    def test_list_limit_out_of_range(self, api_client):
        response = api_client.get(
            reverse("stripe_wrapper:invoice-list"),
            {"customer_id": "cus_123", "limit": 500},
        )

        assert response.status_code == 400

    def test_create(self, api_client, invoice):
        with patch(
            "stripe_wrapper.views.InvoiceService.create_invoice",
            return_value=invoice,
        ) as mock_create:
            response = api_client.post(
                reverse("stripe_wrapper:invoice-list"),
                {
                    "customer_id": "cus_123",
                    "collection_method": "send_invoice",
                    "days_until_due": 30,
                },
                format="json",
            )

        assert response.status_code == 201
        sent = mock_create.call_args.args[0]
        assert sent.collection_method == "send_invoice"
        assert sent.days_until_due == 30

    @pytest.mark.parametrize(
        ("url_name", "service_method"),
        [
            ("invoice-finalize", "finalize_invoice"),
            ("invoice-void", "void_invoice"),
            ("invoice-send", "send_invoice"),
        ],
    )
    def test_lifecycle_actions(self, api_client, invoice, url_name, service_method):
        with patch(
            f"stripe_wrapper.views.InvoiceService.{service_method}",
            return_value=invoice,
        ) as mock_action:
            response = api_client.post(
                reverse(f"stripe_wrapper:{url_name}", args=["in_123"])
            )

        assert response.status_code == 200
        assert response.data["id"] == "in_123"
        mock_action.assert_called_once_with("in_123")

    def test_pay_with_payment_method(self, api_client, invoice):
        with patch(
            "stripe_wrapper.views.InvoiceService.pay_invoice",
            return_value=invoice,
        ) as mock_pay:
            response = api_client.post(
                reverse("stripe_wrapper:invoice-pay", args=["in_123"]),
                {"payment_method_id": "pm_1"},
                format="json",
            )

        assert response.status_code == 200
        mock_pay.assert_called_once_with("in_123", "pm_1")

    def test_missing_invoice_returns_502(self, api_client):
        with patch(
            "stripe_wrapper.views.InvoiceService.get_invoice",
            side_effect=StripeApiError("Invoice 'in_x' was not found.", error_code="resource_missing"),
        ):
            response = api_client.get(
                reverse("stripe_wrapper:invoice-detail", args=["in_x"])
            )

        assert response.status_code == 502
        assert response.data == {"error": "Invoice service error"}
