"""Tests for the CLI query interface for the audit trail and payments ledger."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from pathlib import Path

import pytest

from partners.audit import AuditLogger
from partners.audit.cli import (
    build_parser,
    format_payments_table,
    format_table,
    main,
    parse_last_duration,
    run_query,
)
from partners.domain.models import Actor, Influencer, Payment
from partners.domain.types import PaymentType, Role
from partners.store import PartnersStore, open_store

ADMIN = Actor(actor_id="admin-1", role=Role.ADMIN)


def _seed(store: PartnersStore) -> None:
    store.add(
        Influencer(
            id="inf-1",
            user_id="user-1",
            full_name="Asha Rao",
            email="asha@example.com",
            phone_number="9876543210",
            upi_id="asha@okbank",
            id_proof_type="aadhaar",
            id_proof_url="s3://proofs/1.png",
            created_at="2025-01-01T00:00:00Z",
        )
    )
    payment = Payment(
        id="p-1",
        influencer_id="inf-1",
        amount=Decimal("3000.00"),
        payment_type=PaymentType.FIXED,
        created_at="2025-01-02T00:00:00Z",
    )
    store.add(payment)
    AuditLogger(store).log_payment_created(payment, ADMIN)


class TestBuildParser:
    def test_accepts_all_arguments(self) -> None:
        args = build_parser().parse_args([
            "--influencer", "inf-1",
            "--entity-type", "payment",
            "--actor", "admin-1",
            "--event-type", "payment_created",
            "--last", "7d",
            "--format", "json",
            "--limit", "100",
            "--db", "/tmp/test.db",
        ])
        assert args.influencer == "inf-1"
        assert args.entity_type == "payment"
        assert args.event_type == "payment_created"
        assert args.output_format == "json"
        assert args.limit == 100
        assert args.db == "/tmp/test.db"

    def test_default_values(self) -> None:
        args = build_parser().parse_args([])
        assert args.payments is False
        assert args.output_format == "table"
        assert args.limit == 50
        assert args.db == "data/partners.db"

    def test_rejects_unknown_event_type(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--event-type", "email_sent"])


class TestParseLastDuration:
    def test_converts_7d(self) -> None:
        result = datetime.strptime(parse_last_duration("7d"), "%Y-%m-%dT%H:%M:%SZ")
        expected = datetime.now(tz=UTC) - timedelta(days=7)
        assert abs((result.replace(tzinfo=UTC) - expected).total_seconds()) < 2

    @pytest.mark.parametrize("value", ["", "d", "7w", "xd"])
    def test_rejects_bad_format(self, value: str) -> None:
        with pytest.raises(ValueError, match="Unrecognized duration"):
            parse_last_duration(value)


class TestFormatting:
    def test_empty_results(self) -> None:
        assert format_table([]) == "No results found."
        assert format_payments_table([]) == "No results found."

    def test_table_shows_transition_and_truncates(self) -> None:
        output = format_table([
            {
                "timestamp": "2025-01-01T00:00:00Z",
                "event_type": "state_transition",
                "entity_type": "video_submission",
                "entity_id": "a-very-long-submission-identifier",
                "influencer_id": "inf-1",
                "from_state": "pending",
                "to_state": "approved",
                "amount": None,
                "actor_id": "admin-1",
            }
        ])
        lines = output.splitlines()
        assert lines[0].startswith("Timestamp")
        assert "pending -> approved" in lines[2]
        assert "..." in lines[2]


class TestRunQuery:
    def test_audit_trail_json(self, store: PartnersStore) -> None:
        _seed(store)
        args = build_parser().parse_args(["--entity-type", "payment", "--format", "json"])
        [row] = json.loads(run_query(store, args))
        assert row["event_type"] == "payment_created"
        assert row["amount"] == "3000.00"

    def test_payments_ledger_filters_by_status(self, store: PartnersStore) -> None:
        _seed(store)
        pending = run_query(store, build_parser().parse_args(["--payments", "--status", "pending"]))
        paid = run_query(store, build_parser().parse_args(["--payments", "--status", "paid"]))
        assert "p-1" in pending
        assert "3000.00" in pending
        assert paid == "No results found."


def test_main_prints_results(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    db = tmp_path / "partners.db"
    store = open_store(db)
    _seed(store)
    store.close()

    main(["--db", str(db), "--payments", "--format", "json"])

    [payment] = json.loads(capsys.readouterr().out)
    assert payment["id"] == "p-1"
    assert payment["payment_status"] == "pending"
