"""Tests for Sentry SDK initialization, event scrubbing and the structlog bridge."""

from __future__ import annotations

from unittest.mock import patch

from partners.observability.sentry import get_sentry_processor, init_sentry, scrub_event


def test_init_sentry_noop_with_empty_dsn() -> None:
    with patch("partners.observability.sentry.sentry_sdk.init") as mock_init:
        init_sentry("")
        mock_init.assert_not_called()


def test_init_sentry_calls_sdk_with_dsn() -> None:
    test_dsn = "https://examplePublicKey@o0.ingest.sentry.io/0"
    with patch("partners.observability.sentry.sentry_sdk.init") as mock_init:
        init_sentry(test_dsn, environment="production")
        mock_init.assert_called_once()
        kwargs = mock_init.call_args.kwargs
        assert kwargs["dsn"] == test_dsn
        assert kwargs["environment"] == "production"
        assert kwargs["send_default_pii"] is False
        assert kwargs["before_send"] is scrub_event


def test_scrub_event_filters_payment_identifiers() -> None:
    event = {
        "extra": {"upi_id": "asha@okbank", "payment_id": "p-1"},
        "contexts": {"payout": [{"transaction_ref": "UPI123", "amount": "3000.00"}]},
        "message": "payment failed",
    }
    scrubbed = scrub_event(event, {})
    assert scrubbed["extra"] == {"upi_id": "[Filtered]", "payment_id": "p-1"}
    assert scrubbed["contexts"]["payout"][0]["transaction_ref"] == "[Filtered]"
    assert scrubbed["contexts"]["payout"][0]["amount"] == "3000.00"
    assert scrubbed["message"] == "payment failed"


def test_get_sentry_processor_returns_callable() -> None:
    assert callable(get_sentry_processor())
