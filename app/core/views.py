"""
Core views providing infrastructure endpoints.

This module contains views that are not part of the business domain but are
essential for application infrastructure, such as health checks.
"""

from django.http import JsonResponse
from django.views.decorators.http import require_GET

import stripe_wrapper
from stripe_wrapper.conf import StripeOptions


@require_GET
def health_check(request):
    """
    Health check endpoint for monitoring and orchestration.

    This endpoint is used by:
    - Docker health checks
    - Kubernetes liveness/readiness probes
    - Load balancers (AWS ALB, nginx)

    The service owns no database or cache, so liveness is the only
    signal. `stripe_configured` reports whether an API key is present;
    it does not call Stripe.

    Example Response:
        {
            "status": "healthy",
            "version": "1.0.0",
            "stripe_configured": true
        }
    """
    options = StripeOptions.from_settings()

    return JsonResponse(
        {
            "status": "healthy",
            "version": stripe_wrapper.__version__,
            "stripe_configured": bool(options.secret_key.strip()),
        }
    )
