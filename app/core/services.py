"""
Base service layer patterns for remote API wrappers.

This module provides the foundation shared by the Stripe resource services:
- BaseService: per-service logger, argument guards and timed operations

Service Layer Philosophy:
    Services encapsulate remote API calls separate from views.
    Views handle HTTP concerns, services handle translation between the
    SDK's objects and our DTOs, and between SDK errors and domain errors.

Usage:
    from core.services import BaseService

    class CustomerService(BaseService):
        @classmethod
        def get_customer(cls, customer_id: str) -> Customer:
            cls.require(customer_id=customer_id)

            with cls.operation("get_customer", customer_id=customer_id):
                return map_customer(stripe.Customer.retrieve(customer_id))

Related:
    - core.exceptions: Base exception hierarchy
    - stripe_wrapper.services: Concrete Stripe services
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator
    from typing import Any


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Required-argument validation
    - Timed operation logging with structured context

    Design Notes:
        - Use @classmethod (no instance state)
        - Services should be stateless
        - Raise exceptions for failures; callers map them to HTTP
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    def require(cls, **kwargs: Any) -> None:
        """
        Validate that required arguments are provided.

        Raises ValueError naming the first argument that is None, or a
        string that is empty or whitespace only.

        Example:
            cls.require(customer_id=customer_id, payment_method_id=pm_id)
        """
        for name, value in kwargs.items():
            if value is None:
                raise ValueError(f"{name} is required")
            if isinstance(value, str) and not value.strip():
                raise ValueError(f"{name} cannot be empty or whitespace")

    @classmethod
    @contextmanager
    def operation(cls, name: str, **context: Any) -> Generator[dict[str, Any], None, None]:
        """
        Log the start and outcome of a remote operation with its duration.

        The yielded dict is the log context; add response details to it
        inside the block and they are included in the completion log.
        Exceptions are logged at WARNING with the duration and re-raised
        unchanged.

        Example:
            with cls.operation("create_payment", amount=500) as log_context:
                intent = stripe.PaymentIntent.create(...)
                log_context["payment_intent_id"] = intent.id
        """
        logger = cls.get_logger()
        log_context: dict[str, Any] = {"operation": name, **context}

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            yield log_context
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.warning(
                f"Stripe operation failed: {type(e).__name__}",
                extra={**log_context, "duration_ms": duration_ms},
            )
            raise

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            "Stripe operation completed",
            extra={**log_context, "duration_ms": duration_ms},
        )
