"""
Tests for environment-driven settings.
"""

from __future__ import annotations

import environ

from config import settings as project_settings


class TestEnvironment:
    def test_uses_django_environ(self):
        assert isinstance(project_settings.env, environ.Env)

    def test_stripe_defaults(self, monkeypatch):
        for name in (
            "STRIPE_TEST_MODE",
            "STRIPE_WEBHOOK_TOLERANCE_SECONDS",
            "STRIPE_WEBHOOK_HANDLERS",
            "STRIPE_API_TIMEOUT_SECONDS",
            "STRIPE_MAX_RETRIES",
        ):
            monkeypatch.delenv(name, raising=False)

        env = project_settings.env

        assert env("STRIPE_TEST_MODE") is False
        assert env("STRIPE_WEBHOOK_TOLERANCE_SECONDS") == 300
        assert env("STRIPE_WEBHOOK_HANDLERS") == []
        assert env("STRIPE_API_TIMEOUT_SECONDS") == 10
        assert env("STRIPE_MAX_RETRIES") == 2

    def test_casts_values(self, monkeypatch):
        monkeypatch.setenv("STRIPE_TEST_MODE", "true")
        monkeypatch.setenv("STRIPE_WEBHOOK_TOLERANCE_SECONDS", "60")
        monkeypatch.setenv(
            "STRIPE_WEBHOOK_HANDLERS",
            "billing.handlers.InvoicePaidHandler,billing.handlers.on_refund",
        )

        env = project_settings.env

        assert env("STRIPE_TEST_MODE") is True
        assert env("STRIPE_WEBHOOK_TOLERANCE_SECONDS") == 60
        assert env("STRIPE_WEBHOOK_HANDLERS") == [
            "billing.handlers.InvoicePaidHandler",
            "billing.handlers.on_refund",
        ]
