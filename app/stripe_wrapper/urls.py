"""
URL configuration for the Stripe wrapper REST API.

API Documentation Groups (following [App Name] - [Group Name] pattern):

Stripe - Customers:
    POST /customers/                                  - Create customer
    GET|PUT|DELETE /customers/{id}/                   - Get/update/delete customer
    GET|POST /customers/{id}/payment-methods/         - List/attach payment methods
    POST /payment-methods/{id}/detach/                - Detach payment method

Stripe - Payments:
    POST /payments/                                   - Create PaymentIntent
    GET /payments/{id}/                               - Get PaymentIntent
    POST /payments/{id}/confirm/                      - Confirm
    POST /payments/{id}/capture/                      - Capture held funds
    POST /payments/{id}/refund/                       - Refund
    POST /payments/{id}/cancel/                       - Cancel

Stripe - Subscriptions:
    GET|POST /subscriptions/                          - List/create subscriptions
    GET|PUT /subscriptions/{id}/                      - Get/update subscription
    POST /subscriptions/{id}/cancel/                  - Cancel
    POST /subscriptions/{id}/resume/                  - Undo scheduled cancellation

Stripe - Invoices:
    GET|POST /invoices/                               - List/create invoices
    GET /invoices/{id}/                               - Get invoice
    POST /invoices/{id}/finalize|pay|void|send/       - Invoice lifecycle
"""

from django.urls import path

from stripe_wrapper import views

app_name = "stripe_wrapper"

urlpatterns = [
    # Customers
    path("customers/", views.CustomerCreateView.as_view(), name="customer-create"),
    path(
        "customers/<str:customer_id>/",
        views.CustomerDetailView.as_view(),
        name="customer-detail",
    ),
    path(
        "customers/<str:customer_id>/payment-methods/",
        views.CustomerPaymentMethodsView.as_view(),
        name="customer-payment-methods",
    ),
    path(
        "payment-methods/<str:payment_method_id>/detach/",
        views.PaymentMethodDetachView.as_view(),
        name="payment-method-detach",
    ),
    # Payments
    path("payments/", views.PaymentCreateView.as_view(), name="payment-create"),
    path(
        "payments/<str:payment_intent_id>/",
        views.PaymentDetailView.as_view(),
        name="payment-detail",
    ),
    path(
        "payments/<str:payment_intent_id>/confirm/",
        views.PaymentConfirmView.as_view(),
        name="payment-confirm",
    ),
    path(
        "payments/<str:payment_intent_id>/capture/",
        views.PaymentCaptureView.as_view(),
        name="payment-capture",
    ),
    path(
        "payments/<str:payment_intent_id>/refund/",
        views.PaymentRefundView.as_view(),
        name="payment-refund",
    ),
    path(
        "payments/<str:payment_intent_id>/cancel/",
        views.PaymentCancelView.as_view(),
        name="payment-cancel",
    ),
    # Subscriptions
    path(
        "subscriptions/",
        views.SubscriptionListCreateView.as_view(),
        name="subscription-list",
    ),
    path(
        "subscriptions/<str:subscription_id>/",
        views.SubscriptionDetailView.as_view(),
        name="subscription-detail",
    ),
    path(
        "subscriptions/<str:subscription_id>/cancel/",
        views.SubscriptionCancelView.as_view(),
        name="subscription-cancel",
    ),
    path(
        "subscriptions/<str:subscription_id>/resume/",
        views.SubscriptionResumeView.as_view(),
        name="subscription-resume",
    ),
    # Invoices
    path("invoices/", views.InvoiceListCreateView.as_view(), name="invoice-list"),
    path(
        "invoices/<str:invoice_id>/",
        views.InvoiceDetailView.as_view(),
        name="invoice-detail",
    ),
    path(
        "invoices/<str:invoice_id>/finalize/",
        views.InvoiceFinalizeView.as_view(),
        name="invoice-finalize",
    ),
    path(
        "invoices/<str:invoice_id>/pay/",
        views.InvoicePayView.as_view(),
        name="invoice-pay",
    ),
    path(
        "invoices/<str:invoice_id>/void/",
        views.InvoiceVoidView.as_view(),
        name="invoice-void",
    ),
    path(
        "invoices/<str:invoice_id>/send/",
        views.InvoiceSendView.as_view(),
        name="invoice-send",
    ),
]
