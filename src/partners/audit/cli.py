"""CLI query interface for the partners audit trail and payments ledger.

Provides an argparse-based command-line tool with two views: the audit trail
(filters by entity, influencer, actor, date range, event type and a shorthand
``--last`` duration) and the payments ledger (filters by influencer and
status).  Output formats: table (default) or JSON.

Usage::

    partners-audit --influencer inf_123 --last 7d
    partners-audit --entity-type payment --format json
    partners-audit --payments --status pending
"""

from __future__ import annotations

import argparse
import json
from datetime import UTC, datetime, timedelta
from typing import Any

from partners.audit.models import EventType
from partners.audit.store import query_audit_trail
from partners.domain.models import Payment
from partners.domain.types import PaymentStatus
from partners.store import PartnersStore, open_store


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for audit trail queries.

    Returns:
        A configured :class:`argparse.ArgumentParser`.
    """
    parser = argparse.ArgumentParser(description="Query partners audit trail")

    parser.add_argument(
        "--influencer",
        type=str,
        help="Filter by influencer ID",
    )
    parser.add_argument(
        "--entity-type",
        type=str,
        help="Filter by entity type (e.g. payment, video_submission)",
    )
    parser.add_argument(
        "--entity-id",
        type=str,
        help="Filter by entity ID",
    )
    parser.add_argument(
        "--actor",
        type=str,
        help="Filter by actor ID",
    )
    parser.add_argument(
        "--from-date",
        type=str,
        help="Start date (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--to-date",
        type=str,
        help="End date (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--event-type",
        type=str,
        choices=[event.value for event in EventType],
        help="Filter by event type",
    )
    parser.add_argument(
        "--last",
        type=str,
        help='Shorthand duration (e.g., "7d", "24h", "30d")',
    )
    parser.add_argument(
        "--payments",
        action="store_true",
        help="Show the payments ledger instead of the audit trail",
    )
    parser.add_argument(
        "--status",
        type=str,
        choices=[status.value for status in PaymentStatus],
        help="Filter payments by status (with --payments)",
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=["table", "json"],
        default="table",
        dest="output_format",
        help="Output format (default: table)",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=50,
        help="Maximum results (default: 50)",
    )
    parser.add_argument(
        "--db",
        type=str,
        default="data/partners.db",
        help="Path to partners database (default: data/partners.db)",
    )

    return parser


def parse_last_duration(last: str) -> str:
    """Convert a shorthand duration to an ISO 8601 date string.

    Supported formats:
        - ``Nd`` -- N days ago (e.g., ``7d``)
        - ``Nh`` -- N hours ago (e.g., ``24h``)

    Args:
        last: Duration string like ``"7d"`` or ``"24h"``.

    Returns:
        ISO 8601 date-time string for the computed past time.

    Raises:
        ValueError: If the format is not recognized.
    """
    if not last or len(last) < 2:
        msg = f"Unrecognized duration format: {last!r}"
        raise ValueError(msg)

    unit = last[-1]
    try:
        value = int(last[:-1])
    except ValueError:
        msg = f"Unrecognized duration format: {last!r}"
        raise ValueError(msg) from None

    now = datetime.now(tz=UTC)

    if unit == "d":
        result = now - timedelta(days=value)
    elif unit == "h":
        result = now - timedelta(hours=value)
    else:
        msg = f"Unrecognized duration format: {last!r}. Use 'd' for days or 'h' for hours."
        raise ValueError(msg)

    return result.strftime("%Y-%m-%dT%H:%M:%SZ")


def _truncate(value: Any, width: int) -> str:
    s = str(value if value is not None else "")
    if len(s) > width:
        return s[: width - 3] + "..."
    return s


def _render(headers: list[str], widths: list[int], rows: list[list[Any]]) -> str:
    lines: list[str] = []
    header_line = "  ".join(h.ljust(w) for h, w in zip(headers, widths, strict=True))
    lines.append(header_line)
    lines.append("-" * len(header_line))
    for row in rows:
        cells = [_truncate(value, width) for value, width in zip(row, widths, strict=True)]
        lines.append("  ".join(c.ljust(w) for c, w in zip(cells, widths, strict=True)))
    return "\n".join(lines)


def format_table(results: list[dict[str, Any]]) -> str:
    """Format audit results as a human-readable table.

    Columns: Timestamp, Event, Entity, Influencer, Transition, Amount, Actor.
    Long fields are truncated to fit reasonable terminal width.

    Args:
        results: List of audit entry dicts from ``query_audit_trail``.

    Returns:
        Formatted table string with header row.
    """
    if not results:
        return "No results found."

    headers = ["Timestamp", "Event", "Entity", "Influencer", "Transition", "Amount", "Actor"]
    widths = [20, 18, 24, 14, 22, 10, 14]

    rows: list[list[Any]] = []
    for row in results:
        transition = ""
        if row.get("from_state") or row.get("to_state"):
            transition = f"{row.get('from_state') or ''} -> {row.get('to_state') or ''}"
        rows.append([
            row.get("timestamp"),
            row.get("event_type"),
            f"{row.get('entity_type') or ''}:{row.get('entity_id') or ''}",
            row.get("influencer_id"),
            transition,
            row.get("amount"),
            row.get("actor_id"),
        ])
    return _render(headers, widths, rows)


def format_payments_table(payments: list[Payment]) -> str:
    """Format payments as a ledger table.

    Args:
        payments: Payments, typically newest first.

    Returns:
        Formatted table string with header row.
    """
    if not payments:
        return "No results found."

    headers = ["Created", "Payment", "Influencer", "Type", "Amount", "Status", "UPI Ref"]
    widths = [20, 14, 14, 14, 12, 8, 16]
    rows = [
        [
            p.created_at,
            p.id,
            p.influencer_id,
            p.payment_type.value,
            p.amount,
            p.payment_status.value,
            p.upi_transaction_id,
        ]
        for p in payments
    ]
    return _render(headers, widths, rows)


def format_json(results: list[dict[str, Any]]) -> str:
    """Format results as a JSON string.

    Args:
        results: List of JSON-safe dicts.

    Returns:
        Pretty-printed JSON string.
    """
    return json.dumps(results, indent=2)


def run_query(store: PartnersStore, args: argparse.Namespace) -> str:
    """Execute the query described by parsed *args* and return the output text."""
    if args.payments:
        filters: dict[str, Any] = {}
        if args.influencer:
            filters["influencer_id"] = args.influencer
        if args.status:
            filters["payment_status"] = args.status
        payments = store.find(Payment, limit=args.limit, **filters)
        if args.output_format == "json":
            return format_json([p.model_dump(mode="json") for p in payments])
        return format_payments_table(payments)

    from_date = args.from_date
    if args.last:
        from_date = parse_last_duration(args.last)

    results = query_audit_trail(
        store,
        entity_type=args.entity_type,
        entity_id=args.entity_id,
        influencer_id=args.influencer,
        actor_id=args.actor,
        from_date=from_date,
        to_date=args.to_date,
        event_type=args.event_type,
        limit=args.limit,
    )
    return format_json(results) if args.output_format == "json" else format_table(results)


def main(argv: list[str] | None = None) -> None:
    """Parse arguments, query the store, and print results."""
    parser = build_parser()
    args = parser.parse_args(argv)

    store = open_store(args.db)
    try:
        print(run_query(store, args))
    finally:
        store.close()


if __name__ == "__main__":
    main()
