"""
URL configuration for Stripe webhooks.

Mounted under /api/v1/webhooks/ by config.urls.
"""

from django.urls import path

from stripe_wrapper.webhooks.views import stripe_webhook

app_name = "webhooks"

urlpatterns = [
    path("stripe/", stripe_webhook, name="stripe"),
]
