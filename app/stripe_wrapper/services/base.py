"""
Shared plumbing for the Stripe resource services.

StripeService.stripe_call() wraps every SDK call:
1. Configures the SDK from the current settings
2. Logs start, completion and duration (BaseService.operation)
3. Translates stripe.StripeError into the domain hierarchy, chained
   with `from` so the SDK error stays available as __cause__
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

import stripe

from core.services import BaseService
from stripe_wrapper.client import configure_stripe
from stripe_wrapper.exceptions import map_stripe_error

if TYPE_CHECKING:
    from collections.abc import Generator
    from typing import Any


class StripeService(BaseService):
    """
    Base class for services calling one Stripe resource.

    Attributes:
        resource: Resource name passed to map_stripe_error
            ("customer", "payment", "subscription", "invoice")
    """

    resource: str | None = None

    @classmethod
    @contextmanager
    def stripe_call(
        cls,
        name: str,
        resource_id: str | None = None,
        **context: Any,
    ) -> Generator[dict[str, Any], None, None]:
        """
        Run a block of SDK calls as one logged operation.

        Args:
            name: Operation name for logs
            resource_id: Id of the targeted resource, used to build
                not-found errors
            **context: Extra log fields

        Raises:
            StripeConfigurationError: No secret key configured
            StripeApiError (or subclass): The SDK raised
        """
        configure_stripe()

        with cls.operation(name, **context) as log_context:
            try:
                yield log_context
            except stripe.StripeError as e:
                raise map_stripe_error(e, resource=cls.resource, resource_id=resource_id) from e
