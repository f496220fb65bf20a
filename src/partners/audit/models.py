"""Audit trail models for tracking every money-relevant state change.

Each entry records who did what to which entity: lifecycle transitions, rate
assignments and overrides, payment creation, disbursement and revenue
settlement.
"""

from enum import StrEnum

from pydantic import BaseModel


class EventType(StrEnum):
    """Types of events tracked in the audit trail."""

    ENTITY_CREATED = "entity_created"
    STATE_TRANSITION = "state_transition"
    RATE_ASSIGNED = "rate_assigned"
    RATE_OVERRIDDEN = "rate_overridden"
    PAYMENT_CREATED = "payment_created"
    PAYMENT_PAID = "payment_paid"
    REVENUE_SETTLED = "revenue_settled"


class AuditEntry(BaseModel):
    """A single audit trail entry.

    All fields except event_type are optional to accommodate different
    event types (e.g., a rate assignment has no from/to state).
    """

    event_type: EventType
    entity_type: str | None = None
    entity_id: str | None = None
    actor_id: str | None = None
    actor_role: str | None = None
    influencer_id: str | None = None
    from_state: str | None = None
    to_state: str | None = None
    amount: str | None = None
    metadata: dict[str, str] | None = None
