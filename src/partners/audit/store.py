"""Audit trail persistence on top of the partners store.

Entries are written through :meth:`PartnersStore.execute` so they join the
caller's open transaction: an audit row exists if and only if the change it
describes was committed.  Uses parameterized queries exclusively.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from partners.audit.models import AuditEntry
from partners.store import PartnersStore


def insert_audit_entry(store: PartnersStore, entry: AuditEntry) -> int:
    """Insert an audit entry.

    Serializes metadata dict to JSON string if present.  Does not commit; the
    enclosing transaction (or autocommit) owns durability.

    Args:
        store: The partners store.
        entry: The audit entry to insert.

    Returns:
        The row ID of the inserted entry.
    """
    metadata_json: str | None = None
    if entry.metadata is not None:
        metadata_json = json.dumps(entry.metadata)

    timestamp = datetime.now(tz=UTC).strftime("%Y-%m-%dT%H:%M:%SZ")

    cursor = store.execute(
        """
        INSERT INTO audit_log (
            timestamp, event_type, entity_type, entity_id, actor_id, actor_role,
            influencer_id, from_state, to_state, amount, metadata
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            timestamp,
            entry.event_type.value,
            entry.entity_type,
            entry.entity_id,
            entry.actor_id,
            entry.actor_role,
            entry.influencer_id,
            entry.from_state,
            entry.to_state,
            entry.amount,
            metadata_json,
        ),
    )
    return cursor.lastrowid or 0


def query_audit_trail(
    store: PartnersStore,
    *,
    entity_type: str | None = None,
    entity_id: str | None = None,
    influencer_id: str | None = None,
    actor_id: str | None = None,
    from_date: str | None = None,
    to_date: str | None = None,
    event_type: str | None = None,
    limit: int = 50,
) -> list[dict[str, Any]]:
    """Query the audit trail with flexible filtering.

    All filters are optional. Results are ordered newest first.

    Args:
        store: The partners store.
        entity_type: Filter by entity type (exact match).
        entity_id: Filter by entity ID (exact match).
        influencer_id: Filter by the influencer the entry concerns.
        actor_id: Filter by the actor who made the change.
        from_date: Filter entries on or after this ISO 8601 date.
        to_date: Filter entries on or before this ISO 8601 date.
        event_type: Filter by event type (exact match).
        limit: Maximum number of results to return (default 50).

    Returns:
        A list of dicts, one per matching audit entry, newest first.
    """
    conditions: list[str] = []
    params: list[str | int] = []

    for column, value in (
        ("entity_type", entity_type),
        ("entity_id", entity_id),
        ("influencer_id", influencer_id),
        ("actor_id", actor_id),
        ("event_type", event_type),
    ):
        if value is not None:
            conditions.append(f"{column} = ?")
            params.append(value)

    if from_date is not None:
        conditions.append("timestamp >= ?")
        params.append(from_date)

    if to_date is not None:
        conditions.append("timestamp <= ?")
        params.append(to_date)

    where_clause = ""
    if conditions:
        where_clause = "WHERE " + " AND ".join(conditions)

    query = f"SELECT * FROM audit_log {where_clause} ORDER BY timestamp DESC, id DESC LIMIT ?"
    params.append(limit)

    rows = store.fetch_all(query, params)

    results: list[dict[str, Any]] = []
    for row in rows:
        row_dict = dict(row)
        if row_dict.get("metadata") is not None:
            row_dict["metadata"] = json.loads(row_dict["metadata"])
        results.append(row_dict)

    return results
