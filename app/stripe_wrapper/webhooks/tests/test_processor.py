"""
Tests for WebhookProcessor.

Each delivery outcome is checked for its WebhookResult kind, HTTP status
and body, since those are what Stripe's retry behaviour depends on.
"""

from __future__ import annotations

import json

import pytest
from asgiref.sync import async_to_sync

from stripe_wrapper.exceptions import (
    SignatureFailureReason,
    WebhookConfigurationError,
    WebhookPayloadError,
    WebhookSignatureError,
)
from stripe_wrapper.tests.factories import WEBHOOK_SECRET, InvoiceFactory, signed_delivery
from stripe_wrapper.webhooks.dispatcher import DispatchStatus
from stripe_wrapper.webhooks.processor import WebhookProcessor, WebhookResultKind
from stripe_wrapper.webhooks.signature import generate_signature_header


@pytest.fixture
def processor(registry):
    return WebhookProcessor(webhook_secret=WEBHOOK_SECRET, registry=registry)


def process(processor, body, header):
    return async_to_sync(processor.process_webhook)(body, header)


class TestDefaults:
    def test_reads_settings(self, stripe_settings, registry):
        stripe_settings.STRIPE_WEBHOOK_TOLERANCE_SECONDS = 60

        processor = WebhookProcessor(registry=registry)

        assert processor.webhook_secret == "whsec_test_secret"
        assert processor.tolerance == 60

    def test_explicit_values_win(self, stripe_settings, registry):
        processor = WebhookProcessor(webhook_secret="", tolerance=0, registry=registry)

        assert processor.webhook_secret == ""
        assert processor.tolerance == 0


class TestValidateAndParse:
    def test_returns_event(self, processor):
        body, header = signed_delivery("invoice.paid", InvoiceFactory(id="in_1"))

        event = processor.validate_and_parse(body, header)

        assert event.type == "invoice.paid"
        assert event.object_id == "in_1"

    def test_signature_error_propagates(self, processor, caplog):
        body, _ = signed_delivery()

        with caplog.at_level("WARNING", logger="stripe_wrapper.webhooks.processor"):
            with pytest.raises(WebhookSignatureError):
                processor.validate_and_parse(body, "t=1,v1=bad")

        assert caplog.records[0].reason == SignatureFailureReason.SIGNATURE_MISMATCH.value

    def test_missing_secret(self, registry):
        body, header = signed_delivery()

        with pytest.raises(WebhookConfigurationError):
            WebhookProcessor(webhook_secret="", registry=registry).validate_and_parse(body, header)

    def test_payload_error(self, processor):
        body = b'{"object": "event"}'
        header = generate_signature_header(body, WEBHOOK_SECRET)

        with pytest.raises(WebhookPayloadError):
            processor.validate_and_parse(body, header)


class TestProcessWebhook:
    def test_handled(self, processor, registry):
        seen = []
        registry.register("payment_intent.succeeded", lambda event: seen.append(event.object_id))
        body, header = signed_delivery()

        result = process(processor, body, header)

        assert result.kind == WebhookResultKind.HANDLED
        assert result.status_code == 200
        assert result.body() == {"received": True, "handled": True}
        assert result.event.id == "evt_test_1"
        assert seen == ["pi_webhook"]

    def test_unhandled_is_still_acknowledged(self, processor):
        body, header = signed_delivery("customer.created")

        result = process(processor, body, header)

        assert result.kind == WebhookResultKind.UNHANDLED
        assert result.status_code == 200
        assert result.is_success
        assert result.body() == {"received": True, "handled": False}

    def test_bad_signature_skips_handlers(self, processor, registry):
        seen = []
        registry.register("*", lambda event: seen.append(event.id))
        body, header = signed_delivery(secret="whsec_attacker")

        result = process(processor, body, header)

        assert result.kind == WebhookResultKind.VERIFICATION_FAILED
        assert result.status_code == 400
        assert result.event is None
        assert result.error_code == "invalid_signature"
        assert result.body() == {
            "error": "No signatures found matching the expected signature for payload"
        }
        assert seen == []

    def test_stale_delivery(self, processor):
        body, header = signed_delivery(timestamp=1000)

        result = process(processor, body, header)

        assert result.kind == WebhookResultKind.VERIFICATION_FAILED
        assert result.error.reason == SignatureFailureReason.TIMESTAMP_OUTSIDE_TOLERANCE

    def test_signed_non_event_body(self, processor):
        body = json.dumps({"hello": "world"}).encode("utf-8")
        header = generate_signature_header(body, WEBHOOK_SECRET)

        result = process(processor, body, header)

        assert result.kind == WebhookResultKind.VERIFICATION_FAILED
        assert result.status_code == 400
        assert result.error_code == "invalid_payload"

    @pytest.mark.parametrize(
        "data",
        [
            {"created": "abc", "data": {"object": {}}},
            {"created": 1700000000, "data": {"object": {}, "previous_attributes": [1, 2]}},
        ],
    )
    def test_signed_event_with_malformed_fields(self, processor, registry, data):
        seen = []
        registry.register("*", lambda event: seen.append(event.id))
        body = json.dumps({"id": "evt_1", "type": "invoice.paid", **data}).encode("utf-8")
        header = generate_signature_header(body, WEBHOOK_SECRET)

        result = process(processor, body, header)

        assert result.kind == WebhookResultKind.VERIFICATION_FAILED
        assert result.status_code == 400
        assert result.error_code == "invalid_payload"
        assert seen == []

    def test_missing_secret(self, registry):
        body, header = signed_delivery()

        result = process(WebhookProcessor(webhook_secret="", registry=registry), body, header)

        assert result.kind == WebhookResultKind.CONFIGURATION_ERROR
        assert result.status_code == 500
        assert result.body() == {"error": "Webhook endpoint is not configured"}

    def test_handler_failure(self, processor, registry):
        def explode(event):
            raise RuntimeError("database unavailable")

        registry.register("payment_intent.succeeded", explode)
        body, header = signed_delivery()

        result = process(processor, body, header)

        assert result.kind == WebhookResultKind.HANDLER_FAILED
        assert result.status_code == 500
        assert result.body() == {"error": "Webhook handler failed"}
        assert result.handler_name.endswith("explode")
        assert isinstance(result.error, RuntimeError)
        assert result.event is not None

    def test_tolerance_zero_accepts_old_delivery(self, registry):
        processor = WebhookProcessor(webhook_secret=WEBHOOK_SECRET, tolerance=0, registry=registry)
        body, header = signed_delivery(timestamp=1000)

        result = process(processor, body, header)

        assert result.kind == WebhookResultKind.UNHANDLED


class TestProcessEvent:
    def test_dispatches_verified_event(self, processor, registry, make_event):
        registry.register("invoice.paid", lambda event: None)

        outcome = async_to_sync(processor.process_event)(make_event("invoice.paid"))

        assert outcome.status == DispatchStatus.HANDLED
