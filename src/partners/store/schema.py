"""SQLite schema for the partners store.

One table per entity plus ``audit_log`` and ``notifications``.  Uniqueness
constraints are the final guard for the invariants the services also
pre-check: one application per (influencer, campaign), one fixed payment per
submission, one revenue share per (influencer, month, year).
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

# Column whitelist per table.  Table and column names are interpolated into
# SQL, so the store only accepts identifiers listed here.
TABLE_COLUMNS: dict[str, tuple[str, ...]] = {
    "influencers": (
        "id", "user_id", "full_name", "email", "phone_number", "upi_id",
        "id_proof_type", "id_proof_url", "district", "state",
        "social_media_handles", "follower_count", "approval_status",
        "video_rate", "approved_at", "approved_by", "rejection_reason",
        "created_at",
    ),
    "brands": (
        "id", "user_id", "company_name", "website", "industry",
        "contact_person", "phone_number", "logo_url", "created_at",
    ),
    "campaigns": (
        "id", "brand_id", "title", "description", "requirements", "budget",
        "deadline", "status", "created_at",
    ),
    "campaign_applications": (
        "id", "influencer_id", "campaign_id", "bid_amount", "message", "status",
        "decision_reason", "decided_by", "decided_at", "created_at",
    ),
    "tasks": (
        "id", "title", "description", "guidelines", "reward", "created_by",
        "created_at",
    ),
    "task_assignments": (
        "id", "influencer_id", "task_id", "pitch", "requested_rate", "status",
        "assigned_month", "assigned_year", "assigned_at", "decision_reason",
        "decided_by", "decided_at", "created_at",
    ),
    "video_submissions": (
        "id", "influencer_id", "title", "description", "video_url", "link_kind",
        "task_assignment_id", "campaign_id", "approval_status",
        "rejection_reason", "reviewed_at", "reviewer", "submitted_at",
    ),
    "payments": (
        "id", "influencer_id", "amount", "payment_type", "payment_status",
        "video_submission_id", "task_assignment_id", "revenue_share_id",
        "upi_transaction_id", "notes", "idempotency_key", "paid_at", "paid_by",
        "created_at",
    ),
    "revenue_shares": (
        "id", "influencer_id", "month", "year", "revenue_from_leads",
        "performance_share_amount", "total_earning", "payment_status",
        "created_at",
    ),
}


def connect(db_path: Path | str, timeout: float = 30.0) -> sqlite3.Connection:
    """Open a connection configured for the partners store.

    The connection runs in autocommit mode (``isolation_level=None``); the
    store opens explicit ``BEGIN IMMEDIATE`` transactions around multi-write
    operations.  ``timeout`` doubles as the SQLite busy timeout.

    Args:
        db_path: Path to the SQLite database file, or ``":memory:"``.
        timeout: Seconds to wait for a competing writer before failing.

    Returns:
        An open sqlite3.Connection with WAL mode and foreign keys enabled.
    """
    conn = sqlite3.connect(
        str(db_path),
        timeout=timeout,
        isolation_level=None,
        check_same_thread=False,
    )
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


def init_schema(conn: sqlite3.Connection) -> None:
    """Create all entity tables and indexes if they do not already exist.

    Args:
        conn: An open sqlite3.Connection.
    """
    conn.executescript("""
        CREATE TABLE IF NOT EXISTS influencers (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL UNIQUE,
            full_name TEXT NOT NULL,
            email TEXT NOT NULL,
            phone_number TEXT NOT NULL,
            upi_id TEXT NOT NULL,
            id_proof_type TEXT NOT NULL,
            id_proof_url TEXT NOT NULL,
            district TEXT,
            state TEXT,
            social_media_handles TEXT NOT NULL DEFAULT '{}',
            follower_count INTEGER NOT NULL DEFAULT 0,
            approval_status TEXT NOT NULL DEFAULT 'pending',
            video_rate TEXT,
            approved_at TEXT,
            approved_by TEXT,
            rejection_reason TEXT,
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS brands (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL UNIQUE,
            company_name TEXT NOT NULL,
            website TEXT,
            industry TEXT,
            contact_person TEXT,
            phone_number TEXT,
            logo_url TEXT,
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS campaigns (
            id TEXT PRIMARY KEY,
            brand_id TEXT NOT NULL REFERENCES brands (id),
            title TEXT NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            requirements TEXT NOT NULL DEFAULT '',
            budget TEXT NOT NULL,
            deadline TEXT,
            status TEXT NOT NULL DEFAULT 'active',
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS campaign_applications (
            id TEXT PRIMARY KEY,
            influencer_id TEXT NOT NULL REFERENCES influencers (id),
            campaign_id TEXT NOT NULL REFERENCES campaigns (id),
            bid_amount TEXT NOT NULL DEFAULT '0',
            message TEXT NOT NULL DEFAULT '',
            status TEXT NOT NULL DEFAULT 'pending',
            decision_reason TEXT,
            decided_by TEXT,
            decided_at TEXT,
            created_at TEXT NOT NULL,
            UNIQUE (influencer_id, campaign_id)
        );

        CREATE TABLE IF NOT EXISTS tasks (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            guidelines TEXT NOT NULL DEFAULT '',
            reward TEXT NOT NULL DEFAULT '0',
            created_by TEXT,
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS task_assignments (
            id TEXT PRIMARY KEY,
            influencer_id TEXT NOT NULL REFERENCES influencers (id),
            task_id TEXT NOT NULL REFERENCES tasks (id),
            pitch TEXT NOT NULL DEFAULT '',
            requested_rate TEXT NOT NULL DEFAULT '0',
            status TEXT NOT NULL DEFAULT 'pending_approval',
            assigned_month TEXT,
            assigned_year INTEGER,
            assigned_at TEXT,
            decision_reason TEXT,
            decided_by TEXT,
            decided_at TEXT,
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS video_submissions (
            id TEXT PRIMARY KEY,
            influencer_id TEXT NOT NULL REFERENCES influencers (id),
            title TEXT NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            video_url TEXT NOT NULL,
            link_kind TEXT NOT NULL DEFAULT 'none',
            task_assignment_id TEXT REFERENCES task_assignments (id),
            campaign_id TEXT REFERENCES campaigns (id),
            approval_status TEXT NOT NULL DEFAULT 'pending',
            rejection_reason TEXT,
            reviewed_at TEXT,
            reviewer TEXT,
            submitted_at TEXT NOT NULL,
            CHECK (
                (link_kind = 'none' AND task_assignment_id IS NULL AND campaign_id IS NULL)
                OR (link_kind = 'task' AND task_assignment_id IS NOT NULL AND campaign_id IS NULL)
                OR (link_kind = 'campaign' AND campaign_id IS NOT NULL
                    AND task_assignment_id IS NULL)
            )
        );

        CREATE TABLE IF NOT EXISTS revenue_shares (
            id TEXT PRIMARY KEY,
            influencer_id TEXT NOT NULL REFERENCES influencers (id),
            month TEXT NOT NULL,
            year INTEGER NOT NULL,
            revenue_from_leads TEXT NOT NULL,
            performance_share_amount TEXT NOT NULL,
            total_earning TEXT NOT NULL,
            payment_status TEXT NOT NULL DEFAULT 'pending',
            created_at TEXT NOT NULL,
            UNIQUE (influencer_id, month, year)
        );

        CREATE TABLE IF NOT EXISTS payments (
            id TEXT PRIMARY KEY,
            influencer_id TEXT NOT NULL REFERENCES influencers (id),
            amount TEXT NOT NULL,
            payment_type TEXT NOT NULL,
            payment_status TEXT NOT NULL DEFAULT 'pending',
            video_submission_id TEXT UNIQUE REFERENCES video_submissions (id),
            task_assignment_id TEXT REFERENCES task_assignments (id),
            revenue_share_id TEXT UNIQUE REFERENCES revenue_shares (id),
            upi_transaction_id TEXT,
            notes TEXT,
            idempotency_key TEXT UNIQUE,
            paid_at TEXT,
            paid_by TEXT,
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS audit_log (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            timestamp TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now')),
            event_type TEXT NOT NULL,
            entity_type TEXT,
            entity_id TEXT,
            actor_id TEXT,
            actor_role TEXT,
            influencer_id TEXT,
            from_state TEXT,
            to_state TEXT,
            amount TEXT,
            metadata TEXT
        );

        CREATE TABLE IF NOT EXISTS notifications (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL,
            event_kind TEXT NOT NULL,
            payload TEXT NOT NULL DEFAULT '{}',
            created_at TEXT NOT NULL,
            read_at TEXT
        );

        CREATE INDEX IF NOT EXISTS idx_influencers_status ON influencers (approval_status);
        CREATE INDEX IF NOT EXISTS idx_campaigns_brand ON campaigns (brand_id);
        CREATE INDEX IF NOT EXISTS idx_campaign_apps_campaign
            ON campaign_applications (campaign_id, status);
        CREATE INDEX IF NOT EXISTS idx_task_assignments_influencer
            ON task_assignments (influencer_id, task_id);
        CREATE INDEX IF NOT EXISTS idx_submissions_status ON video_submissions (approval_status);
        CREATE INDEX IF NOT EXISTS idx_payments_influencer ON payments (influencer_id);
        CREATE INDEX IF NOT EXISTS idx_payments_status ON payments (payment_status);
        CREATE INDEX IF NOT EXISTS idx_audit_entity ON audit_log (entity_type, entity_id);
        CREATE INDEX IF NOT EXISTS idx_audit_timestamp ON audit_log (timestamp);
        CREATE INDEX IF NOT EXISTS idx_notifications_user ON notifications (user_id);
    """)
