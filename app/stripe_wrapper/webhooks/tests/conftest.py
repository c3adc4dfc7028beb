"""
Shared fixtures for webhook tests.

Every test gets its own HandlerRegistry; nothing here touches the
process-wide webhook_registry except the `isolated_webhook_registry`
fixture, which empties it for the duration of a test.
"""

from __future__ import annotations

import pytest

from stripe_wrapper.tests.factories import CREATED, PaymentIntentFactory
from stripe_wrapper.webhooks.events import WebhookEvent
from stripe_wrapper.webhooks.registry import HandlerRegistry, webhook_registry


@pytest.fixture
def registry():
    return HandlerRegistry()


@pytest.fixture
def isolated_webhook_registry():
    """Empty the process-wide registry, restoring its entries afterwards."""
    saved = tuple(webhook_registry)
    webhook_registry.clear()
    yield webhook_registry
    webhook_registry.clear()
    for event_type, handler in saved:
        webhook_registry.register(event_type, handler)


@pytest.fixture
def make_event():
    """Build a WebhookEvent directly, skipping signature verification."""

    def _make_event(event_type="payment_intent.succeeded", payload=None, event_id="evt_test_1"):
        if payload is None:
            payload = PaymentIntentFactory(id="pi_webhook")
        return WebhookEvent(
            id=event_id,
            type=event_type,
            payload=payload,
            created_at=None,
        )

    return _make_event


@pytest.fixture
def now():
    return CREATED
