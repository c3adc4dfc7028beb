"""
Core Application - Infrastructure & Base Classes

This app contains infrastructure code shared by the Stripe wrapper:

- Generic, reusable base classes (no Stripe-specific logic)
- Clear extension points for domain apps
- Infrastructure concerns separated from business logic

Services (import from core.services):
    - BaseService: Base class for remote API service classes

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - ConfigurationError: Missing or invalid deployment configuration
    - NotFoundError: Resource not found
    - ExternalServiceError: Third-party service failures

Views (import from core.views):
    - health_check: Liveness endpoint for load balancers

Usage:
    from core.services import BaseService
    from core.exceptions import ExternalServiceError

Note:
    - Business logic should NOT go here. Extend core classes in your domain apps.
    - Views are NOT imported here because they depend on Django settings
      being configured. Import them directly from their module.
"""

# Services (no Django dependencies)
from .services import BaseService

# Exceptions (no Django dependencies)
from .exceptions import (
    BaseApplicationError,
    ConfigurationError,
    ExternalServiceError,
    NotFoundError,
)

__all__ = [
    # Services
    "BaseService",
    # Exceptions
    "BaseApplicationError",
    "ConfigurationError",
    "NotFoundError",
    "ExternalServiceError",
]
