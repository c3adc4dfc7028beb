"""
Tests for the base exception hierarchy.
"""

from __future__ import annotations

from core.exceptions import (
    BaseApplicationError,
    ConfigurationError,
    ExternalServiceError,
    NotFoundError,
)


class TestBaseApplicationError:
    """Tests for BaseApplicationError."""

    def test_uses_default_error_code(self):
        """Error code falls back to the class default."""
        error = BaseApplicationError("Something broke")

        assert error.message == "Something broke"
        assert error.error_code == "APPLICATION_ERROR"
        assert error.details == {}

    def test_explicit_error_code_and_details(self):
        """Explicit code and details are kept."""
        error = BaseApplicationError(
            "Lookup failed",
            error_code="lookup_failed",
            details={"id": "cus_123"},
        )

        assert error.error_code == "lookup_failed"
        assert error.details == {"id": "cus_123"}

    def test_to_dict_omits_empty_details(self):
        """to_dict() only includes details when there are some."""
        assert BaseApplicationError("Oops").to_dict() == {
            "error": "Oops",
            "error_code": "APPLICATION_ERROR",
        }

    def test_to_dict_includes_details(self):
        error = BaseApplicationError("Oops", details={"field": "amount"})

        assert error.to_dict()["details"] == {"field": "amount"}

    def test_str_includes_code(self):
        assert str(BaseApplicationError("Oops", error_code="x")) == "[x] Oops"

    def test_repr_names_class(self):
        assert repr(NotFoundError("Gone")).startswith("NotFoundError(")


class TestSubclassDefaults:
    """Each subclass carries its own default code."""

    def test_configuration_error(self):
        error = ConfigurationError("Missing key")

        assert isinstance(error, BaseApplicationError)
        assert error.error_code == "CONFIGURATION_ERROR"

    def test_not_found_error(self):
        assert NotFoundError("Gone").error_code == "NOT_FOUND"

    def test_external_service_error(self):
        assert ExternalServiceError("Down").error_code == "EXTERNAL_SERVICE_ERROR"
