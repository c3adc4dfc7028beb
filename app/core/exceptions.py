"""
Base exception classes for application-wide error handling.

This module provides the root of the exception hierarchy used by the
Stripe wrapper services and the webhook subsystem:
- Consistent error responses across the API
- Machine-readable error codes for client handling
- Detailed error information for debugging

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ConfigurationError - Missing or invalid deployment configuration
    ├── NotFoundError - Remote resource not found
    └── ExternalServiceError - Third-party service failures (Stripe)

Usage:
    from core.exceptions import ExternalServiceError

    raise ExternalServiceError(
        "Payment service unavailable",
        error_code="api_connection_error",
        details={"service": "stripe"},
    )

    # Convert to dict for API response
    try:
        ...
    except BaseApplicationError as e:
        return Response(e.to_dict(), status=502)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (ids, codes, metadata)

    Example:
        try:
            CustomerService.get_customer(customer_id)
        except BaseApplicationError as e:
            logger.warning(f"Customer lookup failed: {e.error_code}")
            return Response(e.to_dict(), status=502)
    """

    default_error_code: str = "APPLICATION_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            error_code: Machine-readable error code (defaults to class default)
            details: Additional error context
        """
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Returns:
            Dict with error, error_code, and details keys

        Example:
            {
                "error": "Customer with ID 'cus_123' was not found.",
                "error_code": "resource_missing",
                "details": {"customer_id": "cus_123"}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ConfigurationError(BaseApplicationError):
    """
    Raised when required configuration is missing or invalid.

    A server-side fault, raised where the setting is first needed.

    HTTP 500 is the appropriate status.
    """

    default_error_code: str = "CONFIGURATION_ERROR"


class NotFoundError(BaseApplicationError):
    """
    Raised when a requested remote resource is not found.

    HTTP 404 is the appropriate status.
    """

    default_error_code: str = "NOT_FOUND"


class ExternalServiceError(BaseApplicationError):
    """
    Raised when an external service call fails.

    Use for:
    - Third-party API failures (Stripe)
    - Network timeouts
    - Unexpected external service responses

    Note:
        Log the original error for debugging but don't expose
        internal details to clients in production.
        HTTP 502 Bad Gateway is the appropriate status.
    """

    default_error_code: str = "EXTERNAL_SERVICE_ERROR"
