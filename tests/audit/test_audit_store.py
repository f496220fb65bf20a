"""Tests for audit_log insertion and filtered queries."""

from __future__ import annotations

from partners.audit import AuditEntry, EventType, insert_audit_entry, query_audit_trail
from partners.store import PartnersStore


def _entry(**overrides) -> AuditEntry:
    data = {
        "event_type": EventType.STATE_TRANSITION,
        "entity_type": "video_submission",
        "entity_id": "v-1",
        "actor_id": "admin-1",
        "actor_role": "admin",
        "influencer_id": "inf-1",
        "from_state": "pending",
        "to_state": "approved",
    }
    data.update(overrides)
    return AuditEntry(**data)


def test_insert_returns_row_id_and_round_trips_metadata(store: PartnersStore) -> None:
    row_id = insert_audit_entry(store, _entry(metadata={"event": "approve"}))

    assert row_id > 0
    [row] = query_audit_trail(store)
    assert row["event_type"] == "state_transition"
    assert row["metadata"] == {"event": "approve"}
    assert row["timestamp"].endswith("Z")


def test_filters_combine(store: PartnersStore) -> None:
    insert_audit_entry(store, _entry())
    insert_audit_entry(store, _entry(entity_id="v-2", influencer_id="inf-2"))
    insert_audit_entry(
        store,
        _entry(event_type=EventType.PAYMENT_CREATED, entity_type="payment", entity_id="p-1"),
    )

    assert len(query_audit_trail(store, influencer_id="inf-1")) == 2
    assert len(query_audit_trail(store, entity_type="payment")) == 1
    assert len(query_audit_trail(store, event_type="state_transition", entity_id="v-2")) == 1
    assert query_audit_trail(store, actor_id="someone-else") == []


def test_newest_first_with_limit(store: PartnersStore) -> None:
    for n in range(5):
        insert_audit_entry(store, _entry(entity_id=f"v-{n}"))

    results = query_audit_trail(store, limit=2)

    assert [r["entity_id"] for r in results] == ["v-4", "v-3"]


def test_date_range(store: PartnersStore) -> None:
    insert_audit_entry(store, _entry())
    assert query_audit_trail(store, from_date="2000-01-01", to_date="2999-01-01")
    assert query_audit_trail(store, to_date="2000-01-01") == []
