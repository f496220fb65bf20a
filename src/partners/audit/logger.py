"""Convenience class for inserting audit trail entries.

Each method creates a properly structured :class:`AuditEntry` for one kind of
change and inserts it via :func:`insert_audit_entry`.  Services call these
inside the same store transaction as the change itself.
"""

from __future__ import annotations

from decimal import Decimal

from partners.audit.models import AuditEntry, EventType
from partners.audit.store import insert_audit_entry
from partners.domain.models import Actor, Payment, RevenueShare
from partners.store import PartnersStore


class AuditLogger:
    """Typed convenience API for inserting audit entries.

    Args:
        store: The partners store the entries are written to.
    """

    def __init__(self, store: PartnersStore) -> None:
        self._store = store

    def log_entity_created(
        self,
        entity_type: str,
        entity_id: str,
        actor: Actor,
        influencer_id: str | None = None,
        initial_state: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> int:
        """Log the creation of a registry, catalog or ledger entity.

        Returns:
            The row ID of the inserted audit entry.
        """
        entry = AuditEntry(
            event_type=EventType.ENTITY_CREATED,
            entity_type=entity_type,
            entity_id=entity_id,
            actor_id=actor.actor_id,
            actor_role=actor.role.value,
            influencer_id=influencer_id,
            to_state=initial_state,
            metadata=metadata,
        )
        return insert_audit_entry(self._store, entry)

    def log_state_transition(
        self,
        entity_type: str,
        entity_id: str,
        from_state: str,
        to_state: str,
        event: str,
        actor: Actor,
        influencer_id: str | None = None,
        reason: str | None = None,
    ) -> int:
        """Log a lifecycle transition.

        Args:
            entity_type: Entity whose lifecycle moved (e.g. ``"payment"``).
            entity_id: Identifier of that entity.
            from_state: State before the transition.
            to_state: State after the transition.
            event: Event that triggered the transition.
            actor: Who triggered it.
            influencer_id: The influencer the entity belongs to, if any.
            reason: Decision reason, recorded for rejections.

        Returns:
            The row ID of the inserted audit entry.
        """
        metadata = {"event": event}
        if reason:
            metadata["reason"] = reason
        entry = AuditEntry(
            event_type=EventType.STATE_TRANSITION,
            entity_type=entity_type,
            entity_id=entity_id,
            actor_id=actor.actor_id,
            actor_role=actor.role.value,
            influencer_id=influencer_id,
            from_state=from_state,
            to_state=to_state,
            metadata=metadata,
        )
        return insert_audit_entry(self._store, entry)

    def log_rate_change(
        self,
        influencer_id: str,
        rate: Decimal,
        actor: Actor,
        previous_rate: Decimal | None,
        source: str,
    ) -> int:
        """Log a video rate assignment or override.

        A change from no rate (or zero) is an assignment; anything else is an
        explicit override.

        Args:
            influencer_id: The influencer whose rate changed.
            rate: The new rate.
            actor: The admin who set it.
            previous_rate: The rate before the change, if any.
            source: Which operation set it (``"approval"`` or ``"set_rate"``).

        Returns:
            The row ID of the inserted audit entry.
        """
        assigned = previous_rate is None or previous_rate == 0
        entry = AuditEntry(
            event_type=EventType.RATE_ASSIGNED if assigned else EventType.RATE_OVERRIDDEN,
            entity_type="influencer",
            entity_id=influencer_id,
            actor_id=actor.actor_id,
            actor_role=actor.role.value,
            influencer_id=influencer_id,
            amount=str(rate),
            metadata={
                "previous_rate": "" if previous_rate is None else str(previous_rate),
                "source": source,
            },
        )
        return insert_audit_entry(self._store, entry)

    def log_payment_created(self, payment: Payment, actor: Actor) -> int:
        """Log a new pending payment."""
        metadata = {"payment_type": payment.payment_type.value}
        if payment.video_submission_id:
            metadata["video_submission_id"] = payment.video_submission_id
        if payment.revenue_share_id:
            metadata["revenue_share_id"] = payment.revenue_share_id
        entry = AuditEntry(
            event_type=EventType.PAYMENT_CREATED,
            entity_type="payment",
            entity_id=payment.id,
            actor_id=actor.actor_id,
            actor_role=actor.role.value,
            influencer_id=payment.influencer_id,
            to_state=payment.payment_status.value,
            amount=str(payment.amount),
            metadata=metadata,
        )
        return insert_audit_entry(self._store, entry)

    def log_payment_paid(self, payment: Payment, actor: Actor, transaction_ref: str) -> int:
        """Log a payment disbursement with its UPI transaction reference."""
        entry = AuditEntry(
            event_type=EventType.PAYMENT_PAID,
            entity_type="payment",
            entity_id=payment.id,
            actor_id=actor.actor_id,
            actor_role=actor.role.value,
            influencer_id=payment.influencer_id,
            from_state="pending",
            to_state="paid",
            amount=str(payment.amount),
            metadata={"transaction_ref": transaction_ref},
        )
        return insert_audit_entry(self._store, entry)

    def log_revenue_settled(self, revenue_share: RevenueShare, actor: Actor) -> int:
        """Log a monthly revenue settlement."""
        entry = AuditEntry(
            event_type=EventType.REVENUE_SETTLED,
            entity_type="revenue_share",
            entity_id=revenue_share.id,
            actor_id=actor.actor_id,
            actor_role=actor.role.value,
            influencer_id=revenue_share.influencer_id,
            amount=str(revenue_share.performance_share_amount),
            metadata={
                "month": revenue_share.month.value,
                "year": str(revenue_share.year),
                "revenue_from_leads": str(revenue_share.revenue_from_leads),
            },
        )
        return insert_audit_entry(self._store, entry)
