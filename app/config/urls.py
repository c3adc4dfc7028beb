"""
URL configuration for the Django application.

The `urlpatterns` list routes URLs to views. This is the root URL configuration
that includes all app-specific routes.

URL Structure:
    /                              - ReDoc API documentation
    /health/                       - Health check endpoint (for load balancers, Docker)
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/customers/             - Customer create
        {id}/                      - Customer get/update/delete
        {id}/payment-methods/      - List/attach payment methods
    /api/v1/payment-methods/{id}/detach/ - Detach a payment method
    /api/v1/payments/              - PaymentIntent create
        {id}/                      - PaymentIntent get
        {id}/confirm|capture|refund|cancel/
    /api/v1/subscriptions/         - Subscription create/list
        {id}/                      - Subscription get/update
        {id}/cancel|resume/
    /api/v1/invoices/              - Invoice create/list
        {id}/                      - Invoice get
        {id}/finalize|pay|void|send/
    /api/v1/webhooks/stripe/       - Stripe webhook endpoint (POST)

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
# All routes here are prefixed with /api/v1/ automatically
api_v1_patterns = [
    # Customers, payments, subscriptions, invoices
    path("", include("stripe_wrapper.urls")),
    # Webhooks
    path("webhooks/", include("stripe_wrapper.webhooks.urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]
