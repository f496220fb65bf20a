"""Audit trail: models, storage, logger and CLI for state-change tracking."""

from partners.audit.cli import build_parser
from partners.audit.logger import AuditLogger
from partners.audit.models import AuditEntry, EventType
from partners.audit.store import insert_audit_entry, query_audit_trail

__all__ = [
    "AuditEntry",
    "AuditLogger",
    "EventType",
    "build_parser",
    "insert_audit_entry",
    "query_audit_trail",
]
