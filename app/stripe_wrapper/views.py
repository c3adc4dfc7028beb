"""
API views for Stripe customers, payments, subscriptions and invoices.

Thin HTTP adapters over stripe_wrapper.services. Each view validates its
input with a serializer, calls one service operation and renders the
resulting DTO. Service exceptions map to HTTP as follows:

    CustomerNotFoundError      404 {"error": ...}
    PaymentFailedError         400 {"error", "code", "can_retry"}
    SubscriptionError          400 {"error", "reason"}
    ValueError / bad input     400
    StripeConfigurationError   500
    StripeApiError             502 {"error": "<Resource> service error"}

Provides:
- CustomerCreateView, CustomerDetailView, CustomerPaymentMethodsView,
  PaymentMethodDetachView
- PaymentCreateView, PaymentDetailView, PaymentConfirmView,
  PaymentCaptureView, PaymentRefundView, PaymentCancelView
- SubscriptionListCreateView, SubscriptionDetailView,
  SubscriptionCancelView, SubscriptionResumeView
- InvoiceListCreateView, InvoiceDetailView, InvoiceFinalizeView,
  InvoicePayView, InvoiceVoidView, InvoiceSendView
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from stripe_wrapper.exceptions import (
    CustomerNotFoundError,
    PaymentFailedError,
    StripeApiError,
    StripeConfigurationError,
    SubscriptionError,
)
from stripe_wrapper.serializers import (
    AttachPaymentMethodSerializer,
    CancelPaymentSerializer,
    CancelSubscriptionSerializer,
    CapturePaymentSerializer,
    ConfirmPaymentSerializer,
    CreateInvoiceSerializer,
    CreateSubscriptionSerializer,
    CustomerInputSerializer,
    CustomerSerializer,
    ErrorSerializer,
    InvoiceListQuerySerializer,
    InvoiceSerializer,
    PaymentMethodIdSerializer,
    PaymentMethodListSerializer,
    PaymentRequestSerializer,
    PaymentResultSerializer,
    PayInvoiceSerializer,
    RefundPaymentSerializer,
    RefundResultSerializer,
    SubscriptionListQuerySerializer,
    SubscriptionSerializer,
    UpdateSubscriptionSerializer,
)
from stripe_wrapper.services import (
    CustomerService,
    InvoiceService,
    PaymentService,
    SubscriptionService,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from typing import Any

    from rest_framework.serializers import Serializer

logger = logging.getLogger(__name__)


class StripeAPIView(APIView):
    """
    Base view translating service exceptions into HTTP responses.

    Subclasses set `resource_label`, used in the generic 502 message.
    """

    permission_classes = [AllowAny]
    resource_label = "Stripe"

    def error_response(self, error: Exception) -> Response:
        if isinstance(error, StripeConfigurationError):
            logger.error("Stripe is not configured", extra={"error": error.message})
            return Response(
                {"error": "Payment service is not configured"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        if isinstance(error, CustomerNotFoundError):
            return Response({"error": error.message}, status=status.HTTP_404_NOT_FOUND)

        if isinstance(error, PaymentFailedError):
            return Response(
                {
                    "error": error.user_message,
                    "code": error.decline_code,
                    "can_retry": error.can_retry,
                },
                status=status.HTTP_400_BAD_REQUEST,
            )

        if isinstance(error, SubscriptionError):
            return Response(
                {"error": error.user_message, "reason": error.reason.value},
                status=status.HTTP_400_BAD_REQUEST,
            )

        if isinstance(error, StripeApiError):
            logger.warning(
                f"{self.resource_label} request failed: {error.error_code}",
                extra={"error_type": error.error_type, "request_id": error.request_id},
            )
            return Response(
                {"error": f"{self.resource_label} service error"},
                status=status.HTTP_502_BAD_GATEWAY,
            )

        return Response({"error": str(error)}, status=status.HTTP_400_BAD_REQUEST)

    def run(
        self,
        call: Callable[[], Any],
        output_serializer: type[Serializer],
        success_status: int = status.HTTP_200_OK,
    ) -> Response:
        """
        Invoke a service call and render its result.

        Args:
            call: Zero-argument callable performing the service operation
            output_serializer: Serializer rendering the result
            success_status: Status for a successful result
        """
        try:
            result = call()
        except (StripeApiError, StripeConfigurationError, ValueError) as e:
            return self.error_response(e)

        return Response(output_serializer(result).data, status=success_status)


def _invalid(serializer: Serializer) -> Response:
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


_ERROR_RESPONSES = {
    400: OpenApiResponse(response=ErrorSerializer, description="Invalid request"),
    500: OpenApiResponse(response=ErrorSerializer, description="Stripe not configured"),
    502: OpenApiResponse(response=ErrorSerializer, description="Stripe API error"),
}


# =============================================================================
# Customers
# =============================================================================


class CustomerCreateView(StripeAPIView):
    """
    Create a Stripe customer.

    POST /api/v1/customers/

    Response:
        201 Created: Customer created
        400 Bad Request: Validation error
    """

    resource_label = "Customer"

    @extend_schema(
        operation_id="create_customer",
        summary="Create customer",
        request=CustomerInputSerializer,
        responses={201: CustomerSerializer, **_ERROR_RESPONSES},
        tags=["Stripe - Customers"],
    )
    def post(self, request):
        serializer = CustomerInputSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)

        customer = serializer.to_customer()
        return self.run(
            lambda: CustomerService.create_customer(customer),
            CustomerSerializer,
            status.HTTP_201_CREATED,
        )


class CustomerDetailView(StripeAPIView):
    """
    Retrieve, update or delete a customer.

    GET /api/v1/customers/{customer_id}/
    PUT /api/v1/customers/{customer_id}/
    DELETE /api/v1/customers/{customer_id}/

    Response:
        200 OK / 204 No Content
        404 Not Found: Customer missing or deleted
    """

    resource_label = "Customer"

    @extend_schema(
        operation_id="get_customer",
        summary="Get customer",
        responses={
            200: CustomerSerializer,
            404: OpenApiResponse(response=ErrorSerializer, description="Customer not found"),
            **_ERROR_RESPONSES,
        },
        tags=["Stripe - Customers"],
    )
    def get(self, request, customer_id):
        return self.run(lambda: CustomerService.get_customer(customer_id), CustomerSerializer)

    @extend_schema(
        operation_id="update_customer",
        summary="Update customer",
        request=CustomerInputSerializer,
        responses={200: CustomerSerializer, **_ERROR_RESPONSES},
        tags=["Stripe - Customers"],
    )
    def put(self, request, customer_id):
        serializer = CustomerInputSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)

        customer = serializer.to_customer()
        return self.run(
            lambda: CustomerService.update_customer(customer_id, customer),
            CustomerSerializer,
        )

    @extend_schema(
        operation_id="delete_customer",
        summary="Delete customer",
        responses={
            204: OpenApiResponse(description="Customer deleted"),
            404: OpenApiResponse(response=ErrorSerializer, description="Customer not found"),
        },
        tags=["Stripe - Customers"],
    )
    def delete(self, request, customer_id):
        try:
            deleted = CustomerService.delete_customer(customer_id)
        except (StripeApiError, StripeConfigurationError, ValueError) as e:
            return self.error_response(e)

        if not deleted:
            return Response(
                {"error": f"Customer with ID '{customer_id}' was not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(status=status.HTTP_204_NO_CONTENT)


class CustomerPaymentMethodsView(StripeAPIView):
    """
    List or attach a customer's payment methods.

    GET /api/v1/customers/{customer_id}/payment-methods/?type=card
    POST /api/v1/customers/{customer_id}/payment-methods/
    """

    resource_label = "Customer"

    @extend_schema(
        operation_id="list_payment_methods",
        summary="List payment methods",
        parameters=[
            OpenApiParameter(
                name="type",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                description="Payment method type (default: card)",
            ),
        ],
        responses={200: PaymentMethodListSerializer, **_ERROR_RESPONSES},
        tags=["Stripe - Customers"],
    )
    def get(self, request, customer_id):
        method_type = request.query_params.get("type") or "card"
        return self.run(
            lambda: {
                "payment_method_ids": CustomerService.list_payment_methods(
                    customer_id, type=method_type
                )
            },
            PaymentMethodListSerializer,
        )

    @extend_schema(
        operation_id="attach_payment_method",
        summary="Attach payment method",
        request=AttachPaymentMethodSerializer,
        responses={200: PaymentMethodIdSerializer, **_ERROR_RESPONSES},
        tags=["Stripe - Customers"],
    )
    def post(self, request, customer_id):
        serializer = AttachPaymentMethodSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)

        data = serializer.validated_data
        return self.run(
            lambda: {
                "payment_method_id": CustomerService.attach_payment_method(
                    customer_id,
                    data["payment_method_id"],
                    set_as_default=data["set_as_default"],
                )
            },
            PaymentMethodIdSerializer,
        )


class PaymentMethodDetachView(StripeAPIView):
    """
    Detach a payment method from its customer.

    POST /api/v1/payment-methods/{payment_method_id}/detach/
    """

    resource_label = "Customer"

    @extend_schema(
        operation_id="detach_payment_method",
        summary="Detach payment method",
        request=None,
        responses={204: OpenApiResponse(description="Detached"), **_ERROR_RESPONSES},
        tags=["Stripe - Customers"],
    )
    def post(self, request, payment_method_id):
        try:
            detached = CustomerService.detach_payment_method(payment_method_id)
        except (StripeApiError, StripeConfigurationError, ValueError) as e:
            return self.error_response(e)

        if not detached:
            return Response(
                {"error": "Payment method is still attached"},
                status=status.HTTP_502_BAD_GATEWAY,
            )
        return Response(status=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Payments
# =============================================================================


class PaymentCreateView(StripeAPIView):
    """
    Create a PaymentIntent.

    POST /api/v1/payments/

    Response:
        201 Created: Intent created (check `status` and `requires_action`)
        400 Bad Request: Validation error or card declined
    """

    resource_label = "Payment"

    @extend_schema(
        operation_id="create_payment",
        summary="Create payment",
        description=(
            "Create a PaymentIntent. When payment_method_id is given the intent "
            "is confirmed immediately; a declined card returns 400 with a "
            "customer-safe message."
        ),
        request=PaymentRequestSerializer,
        responses={201: PaymentResultSerializer, **_ERROR_RESPONSES},
        tags=["Stripe - Payments"],
    )
    def post(self, request):
        serializer = PaymentRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)

        try:
            payment_request = serializer.to_request()
        except ValueError as e:
            return self.error_response(e)

        return self.run(
            lambda: PaymentService.create_payment(payment_request),
            PaymentResultSerializer,
            status.HTTP_201_CREATED,
        )


class PaymentDetailView(StripeAPIView):
    """
    Retrieve a PaymentIntent.

    GET /api/v1/payments/{payment_intent_id}/

    Any Stripe error on lookup is reported as 404.
    """

    resource_label = "Payment"

    @extend_schema(
        operation_id="get_payment",
        summary="Get payment",
        responses={
            200: PaymentResultSerializer,
            404: OpenApiResponse(response=ErrorSerializer, description="Payment not found"),
        },
        tags=["Stripe - Payments"],
    )
    def get(self, request, payment_intent_id):
        try:
            result = PaymentService.get_payment(payment_intent_id)
        except StripeApiError:
            return Response(
                {"error": f"Payment '{payment_intent_id}' was not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        except (StripeConfigurationError, ValueError) as e:
            return self.error_response(e)

        return Response(PaymentResultSerializer(result).data)


class PaymentConfirmView(StripeAPIView):
    """POST /api/v1/payments/{payment_intent_id}/confirm/"""

    resource_label = "Payment"

    @extend_schema(
        operation_id="confirm_payment",
        summary="Confirm payment",
        request=ConfirmPaymentSerializer,
        responses={200: PaymentResultSerializer, **_ERROR_RESPONSES},
        tags=["Stripe - Payments"],
    )
    def post(self, request, payment_intent_id):
        serializer = ConfirmPaymentSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)

        payment_method_id = serializer.validated_data.get("payment_method_id")
        return self.run(
            lambda: PaymentService.confirm_payment(payment_intent_id, payment_method_id),
            PaymentResultSerializer,
        )


class PaymentCaptureView(StripeAPIView):
    """POST /api/v1/payments/{payment_intent_id}/capture/"""

    resource_label = "Payment"

    @extend_schema(
        operation_id="capture_payment",
        summary="Capture payment",
        description="Capture a held payment, optionally for less than the authorized amount.",
        request=CapturePaymentSerializer,
        responses={200: PaymentResultSerializer, **_ERROR_RESPONSES},
        tags=["Stripe - Payments"],
    )
    def post(self, request, payment_intent_id):
        serializer = CapturePaymentSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)

        amount = serializer.validated_data.get("amount_to_capture")
        return self.run(
            lambda: PaymentService.capture_payment(payment_intent_id, amount),
            PaymentResultSerializer,
        )


class PaymentRefundView(StripeAPIView):
    """POST /api/v1/payments/{payment_intent_id}/refund/"""

    resource_label = "Payment"

    @extend_schema(
        operation_id="refund_payment",
        summary="Refund payment",
        description="Refund a payment in full, or partially when amount is given.",
        request=RefundPaymentSerializer,
        responses={201: RefundResultSerializer, **_ERROR_RESPONSES},
        tags=["Stripe - Payments"],
    )
    def post(self, request, payment_intent_id):
        serializer = RefundPaymentSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)

        data = serializer.validated_data
        return self.run(
            lambda: {
                "refund_id": PaymentService.refund_payment(
                    payment_intent_id,
                    amount=data.get("amount"),
                    reason=data.get("reason"),
                )
            },
            RefundResultSerializer,
            status.HTTP_201_CREATED,
        )


class PaymentCancelView(StripeAPIView):
    """POST /api/v1/payments/{payment_intent_id}/cancel/"""

    resource_label = "Payment"

    @extend_schema(
        operation_id="cancel_payment",
        summary="Cancel payment",
        request=CancelPaymentSerializer,
        responses={200: PaymentResultSerializer, **_ERROR_RESPONSES},
        tags=["Stripe - Payments"],
    )
    def post(self, request, payment_intent_id):
        serializer = CancelPaymentSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)

        reason = serializer.validated_data.get("cancellation_reason")
        return self.run(
            lambda: PaymentService.cancel_payment(payment_intent_id, reason),
            PaymentResultSerializer,
        )


# =============================================================================
# Subscriptions
# =============================================================================


class SubscriptionListCreateView(StripeAPIView):
    """
    List a customer's subscriptions or create one.

    GET /api/v1/subscriptions/?customer_id=cus_...&status=active
    POST /api/v1/subscriptions/
    """

    resource_label = "Subscription"

    @extend_schema(
        operation_id="list_subscriptions",
        summary="List subscriptions",
        parameters=[SubscriptionListQuerySerializer],
        responses={200: SubscriptionSerializer(many=True), **_ERROR_RESPONSES},
        tags=["Stripe - Subscriptions"],
    )
    def get(self, request):
        query = SubscriptionListQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return _invalid(query)

        data = query.validated_data
        try:
            subscriptions = SubscriptionService.list_subscriptions(
                data["customer_id"], status=data.get("status")
            )
        except (StripeApiError, StripeConfigurationError, ValueError) as e:
            return self.error_response(e)

        return Response(SubscriptionSerializer(subscriptions, many=True).data)

    @extend_schema(
        operation_id="create_subscription",
        summary="Create subscription",
        request=CreateSubscriptionSerializer,
        responses={201: SubscriptionSerializer, **_ERROR_RESPONSES},
        tags=["Stripe - Subscriptions"],
    )
    def post(self, request):
        serializer = CreateSubscriptionSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)

        try:
            subscription_request = serializer.to_request()
        except ValueError as e:
            return self.error_response(e)

        return self.run(
            lambda: SubscriptionService.create_subscription(subscription_request),
            SubscriptionSerializer,
            status.HTTP_201_CREATED,
        )


class SubscriptionDetailView(StripeAPIView):
    """
    Retrieve or update a subscription.

    GET /api/v1/subscriptions/{subscription_id}/
    PUT /api/v1/subscriptions/{subscription_id}/
        Change the price and/or quantity of the first item.
    """

    resource_label = "Subscription"

    @extend_schema(
        operation_id="get_subscription",
        summary="Get subscription",
        responses={200: SubscriptionSerializer, **_ERROR_RESPONSES},
        tags=["Stripe - Subscriptions"],
    )
    def get(self, request, subscription_id):
        return self.run(
            lambda: SubscriptionService.get_subscription(subscription_id),
            SubscriptionSerializer,
        )

    @extend_schema(
        operation_id="update_subscription",
        summary="Update subscription",
        request=UpdateSubscriptionSerializer,
        responses={200: SubscriptionSerializer, **_ERROR_RESPONSES},
        tags=["Stripe - Subscriptions"],
    )
    def put(self, request, subscription_id):
        serializer = UpdateSubscriptionSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)

        data = serializer.validated_data
        return self.run(
            lambda: SubscriptionService.update_subscription(
                subscription_id,
                price_id=data.get("price_id"),
                quantity=data.get("quantity"),
            ),
            SubscriptionSerializer,
        )


class SubscriptionCancelView(StripeAPIView):
    """
    POST /api/v1/subscriptions/{subscription_id}/cancel/

    Cancels at period end unless cancel_at_period_end is false.
    """

    resource_label = "Subscription"

    @extend_schema(
        operation_id="cancel_subscription",
        summary="Cancel subscription",
        request=CancelSubscriptionSerializer,
        responses={200: SubscriptionSerializer, **_ERROR_RESPONSES},
        tags=["Stripe - Subscriptions"],
    )
    def post(self, request, subscription_id):
        serializer = CancelSubscriptionSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)

        at_period_end = serializer.validated_data["cancel_at_period_end"]
        return self.run(
            lambda: SubscriptionService.cancel_subscription(
                subscription_id, cancel_at_period_end=at_period_end
            ),
            SubscriptionSerializer,
        )


class SubscriptionResumeView(StripeAPIView):
    """POST /api/v1/subscriptions/{subscription_id}/resume/"""

    resource_label = "Subscription"

    @extend_schema(
        operation_id="resume_subscription",
        summary="Resume subscription",
        request=None,
        responses={200: SubscriptionSerializer, **_ERROR_RESPONSES},
        tags=["Stripe - Subscriptions"],
    )
    def post(self, request, subscription_id):
        return self.run(
            lambda: SubscriptionService.resume_subscription(subscription_id),
            SubscriptionSerializer,
        )


# =============================================================================
# Invoices
# =============================================================================


class InvoiceListCreateView(StripeAPIView):
    """
    List a customer's invoices or create a draft invoice.

    GET /api/v1/invoices/?customer_id=cus_...&status=open&limit=10
    POST /api/v1/invoices/
    """

    resource_label = "Invoice"

    @extend_schema(
        operation_id="list_invoices",
        summary="List invoices",
        parameters=[InvoiceListQuerySerializer],
        responses={200: InvoiceSerializer(many=True), **_ERROR_RESPONSES},
        tags=["Stripe - Invoices"],
    )
    def get(self, request):
        query = InvoiceListQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return _invalid(query)

        data = query.validated_data
        try:
            invoices = InvoiceService.list_invoices(
                data["customer_id"],
                status=data.get("status"),
                limit=data["limit"],
            )
        except (StripeApiError, StripeConfigurationError, ValueError) as e:
            return self.error_response(e)

        return Response(InvoiceSerializer(invoices, many=True).data)

    @extend_schema(
        operation_id="create_invoice",
        summary="Create invoice",
        request=CreateInvoiceSerializer,
        responses={201: InvoiceSerializer, **_ERROR_RESPONSES},
        tags=["Stripe - Invoices"],
    )
    def post(self, request):
        serializer = CreateInvoiceSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)

        try:
            invoice_request = serializer.to_request()
        except ValueError as e:
            return self.error_response(e)

        return self.run(
            lambda: InvoiceService.create_invoice(invoice_request),
            InvoiceSerializer,
            status.HTTP_201_CREATED,
        )


class InvoiceDetailView(StripeAPIView):
    """GET /api/v1/invoices/{invoice_id}/"""

    resource_label = "Invoice"

    @extend_schema(
        operation_id="get_invoice",
        summary="Get invoice",
        responses={200: InvoiceSerializer, **_ERROR_RESPONSES},
        tags=["Stripe - Invoices"],
    )
    def get(self, request, invoice_id):
        return self.run(lambda: InvoiceService.get_invoice(invoice_id), InvoiceSerializer)


class InvoiceFinalizeView(StripeAPIView):
    """POST /api/v1/invoices/{invoice_id}/finalize/"""

    resource_label = "Invoice"

    @extend_schema(
        operation_id="finalize_invoice",
        summary="Finalize invoice",
        request=None,
        responses={200: InvoiceSerializer, **_ERROR_RESPONSES},
        tags=["Stripe - Invoices"],
    )
    def post(self, request, invoice_id):
        return self.run(lambda: InvoiceService.finalize_invoice(invoice_id), InvoiceSerializer)


class InvoicePayView(StripeAPIView):
    """POST /api/v1/invoices/{invoice_id}/pay/"""

    resource_label = "Invoice"

    @extend_schema(
        operation_id="pay_invoice",
        summary="Pay invoice",
        request=PayInvoiceSerializer,
        responses={200: InvoiceSerializer, **_ERROR_RESPONSES},
        tags=["Stripe - Invoices"],
    )
    def post(self, request, invoice_id):
        serializer = PayInvoiceSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)

        payment_method_id = serializer.validated_data.get("payment_method_id")
        return self.run(
            lambda: InvoiceService.pay_invoice(invoice_id, payment_method_id),
            InvoiceSerializer,
        )


class InvoiceVoidView(StripeAPIView):
    """POST /api/v1/invoices/{invoice_id}/void/"""

    resource_label = "Invoice"

    @extend_schema(
        operation_id="void_invoice",
        summary="Void invoice",
        request=None,
        responses={200: InvoiceSerializer, **_ERROR_RESPONSES},
        tags=["Stripe - Invoices"],
    )
    def post(self, request, invoice_id):
        return self.run(lambda: InvoiceService.void_invoice(invoice_id), InvoiceSerializer)


class InvoiceSendView(StripeAPIView):
    """POST /api/v1/invoices/{invoice_id}/send/"""

    resource_label = "Invoice"

    @extend_schema(
        operation_id="send_invoice",
        summary="Send invoice",
        request=None,
        responses={200: InvoiceSerializer, **_ERROR_RESPONSES},
        tags=["Stripe - Invoices"],
    )
    def post(self, request, invoice_id):
        return self.run(lambda: InvoiceService.send_invoice(invoice_id), InvoiceSerializer)
