"""Influencer registry: registration, approval decisions and video rates.

Approval is the gate for every downstream workflow action; other services call
:meth:`InfluencerRegistry.require_approved` inside their own transactions.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

import structlog

from partners.audit import AuditLogger
from partners.domain.errors import (
    ConflictError,
    InvalidRateError,
    InvalidTransitionError,
    NotApprovedError,
    UnauthorizedError,
    ValidationError,
)
from partners.domain.models import Actor, Influencer, InfluencerProfile
from partners.domain.rules import (
    new_id,
    now_iso,
    parse_enum,
    parse_model,
    require_admin,
    require_text,
    to_money,
)
from partners.domain.types import ApprovalStatus, NotificationKind, Role
from partners.notifications import Notifier
from partners.resilience import resilient_store_call
from partners.state_machine import INFLUENCER_LIFECYCLE, InfluencerEvent, LifecycleStateMachine
from partners.store import PartnersStore

logger = structlog.get_logger()


class InfluencerRegistry:
    """Holds each creator's profile, approval status and assigned video rate."""

    def __init__(self, store: PartnersStore, audit: AuditLogger, notifier: Notifier) -> None:
        self._store = store
        self._audit = audit
        self._notifier = notifier

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    @resilient_store_call("registry.register")
    def register(
        self,
        profile: InfluencerProfile | Mapping[str, Any],
        id_proof_ref: str,
        actor: Actor,
    ) -> Influencer:
        """Register a new influencer in ``pending`` status.

        Args:
            profile: Registration fields (model or mapping).
            id_proof_ref: Opaque object-storage URL of the ID document.
            actor: The registering user (must match ``profile.user_id``) or an admin.

        Returns:
            The stored influencer.

        Raises:
            ValidationError: If a required identity or payment field is missing.
            UnauthorizedError: If the actor registers on behalf of someone else.
            ConflictError: If the user is already registered.
        """
        profile = parse_model(InfluencerProfile, profile)
        id_proof_url = require_text(id_proof_ref, "id_proof_ref")
        if not actor.is_admin and (
            actor.role != Role.INFLUENCER or actor.actor_id != profile.user_id
        ):
            raise UnauthorizedError(
                f"Actor {actor.actor_id} may not register user {profile.user_id}"
            )

        influencer = Influencer(
            **profile.model_dump(),
            id=new_id(),
            id_proof_url=id_proof_url,
            created_at=now_iso(),
        )
        with self._store.transaction():
            if self._store.count(Influencer, user_id=profile.user_id):
                raise ConflictError(f"User '{profile.user_id}' is already registered")
            self._store.add(influencer)
            self._audit.log_entity_created(
                "influencer",
                influencer.id,
                actor,
                influencer_id=influencer.id,
                initial_state=influencer.approval_status.value,
            )

        logger.info("influencer_registered", influencer_id=influencer.id, user_id=profile.user_id)
        return influencer

    @resilient_store_call("registry.decide")
    def decide(
        self,
        influencer_id: str,
        outcome: ApprovalStatus | str,
        actor: Actor,
        reason: str | None = None,
    ) -> Influencer:
        """Approve or reject a pending registration.

        Args:
            influencer_id: The influencer to decide.
            outcome: ``approved`` or ``rejected``.
            actor: Must be an admin.
            reason: Optional rejection reason shown to the influencer.

        Returns:
            The influencer after the decision.

        Raises:
            UnauthorizedError: If the actor is not an admin.
            ValidationError: If *outcome* is not approved/rejected.
            InvalidTransitionError: If the influencer was already decided.
        """
        require_admin(actor, "decide influencer registrations")
        event = _influencer_event(outcome)

        with self._store.transaction():
            influencer = self._store.require(Influencer, influencer_id)
            machine = LifecycleStateMachine(INFLUENCER_LIFECYCLE, influencer.approval_status)
            new_status = machine.trigger(event)

            changes: dict[str, Any] = {"approval_status": new_status}
            if new_status == ApprovalStatus.APPROVED:
                changes["approved_at"] = now_iso()
                changes["approved_by"] = actor.actor_id
            else:
                changes["rejection_reason"] = reason.strip() if reason else None

            if not self._store.update(
                Influencer,
                influencer_id,
                changes,
                expected={"approval_status": influencer.approval_status},
            ):
                raise InvalidTransitionError(
                    INFLUENCER_LIFECYCLE.entity, str(influencer.approval_status), str(event)
                )
            self._audit.log_state_transition(
                "influencer",
                influencer_id,
                str(influencer.approval_status),
                str(new_status),
                str(event),
                actor,
                influencer_id=influencer_id,
                reason=changes.get("rejection_reason"),
            )

        decided = influencer.model_copy(update=changes)
        logger.info("influencer_decided", influencer_id=influencer_id, outcome=str(new_status))
        self._notifier.notify(
            decided.user_id,
            NotificationKind.INFLUENCER_APPROVED
            if new_status == ApprovalStatus.APPROVED
            else NotificationKind.INFLUENCER_REJECTED,
            {"influencer_id": influencer_id, "reason": decided.rejection_reason},
        )
        return decided

    @resilient_store_call("registry.set_rate")
    def set_rate(self, influencer_id: str, rate: Decimal | str | int, actor: Actor) -> Influencer:
        """Set or correct an influencer's per-video rate.

        This is the explicit override path; it is always audited.

        Raises:
            UnauthorizedError: If the actor is not an admin.
            InvalidRateError: If *rate* is negative or not an amount.
        """
        require_admin(actor, "set video rates")
        new_rate = to_money(rate, "rate", InvalidRateError)
        if new_rate < 0:
            raise InvalidRateError(f"rate must not be negative, got {new_rate}")

        with self._store.transaction():
            influencer = self._store.require(Influencer, influencer_id)
            self._store.update(Influencer, influencer_id, {"video_rate": new_rate})
            self._audit.log_rate_change(
                influencer_id, new_rate, actor, influencer.video_rate, source="set_rate"
            )

        logger.info(
            "video_rate_set",
            influencer_id=influencer_id,
            previous_rate=str(influencer.video_rate),
            rate=str(new_rate),
        )
        return influencer.model_copy(update={"video_rate": new_rate})

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    def get(self, influencer_id: str) -> Influencer:
        """Return the influencer or raise ``NotFoundError``."""
        return self._store.require(Influencer, influencer_id)

    def get_by_user(self, user_id: str) -> Influencer | None:
        return self._store.find_one(Influencer, user_id=user_id)

    def list(self, status: ApprovalStatus | str | None = None) -> list[Influencer]:
        """Return influencers newest first, optionally filtered by approval status."""
        if status is None:
            return self._store.find(Influencer)
        status = parse_enum(ApprovalStatus, status, "status")
        return self._store.find(Influencer, approval_status=status)

    def search(
        self,
        name: str | None = None,
        state: str | None = None,
        min_followers: int | None = None,
    ) -> list[Influencer]:
        """Find approved influencers for brand discovery.

        Args:
            name: Case-insensitive substring of the full name.
            state: Exact state of residence.
            min_followers: Minimum follower count (inclusive).

        Raises:
            ValidationError: If *min_followers* is negative.
        """
        if min_followers is not None and min_followers < 0:
            raise ValidationError(f"min_followers must not be negative, got {min_followers}")
        return self._store.search_influencers(
            name=name.strip() if name else None,
            state=state.strip() if state else None,
            min_followers=min_followers,
            approval_status=ApprovalStatus.APPROVED,
        )

    def count(self, status: ApprovalStatus | str | None = None) -> int:
        if status is None:
            return self._store.count(Influencer)
        status = parse_enum(ApprovalStatus, status, "status")
        return self._store.count(Influencer, approval_status=status)

    def require_approved(self, influencer_id: str) -> Influencer:
        """Return the influencer if approved.

        Raises:
            NotFoundError: If the influencer does not exist.
            NotApprovedError: If the influencer is pending or rejected.
        """
        influencer = self._store.require(Influencer, influencer_id)
        if influencer.approval_status != ApprovalStatus.APPROVED:
            raise NotApprovedError(influencer_id, str(influencer.approval_status))
        return influencer


def _influencer_event(outcome: ApprovalStatus | str) -> InfluencerEvent:
    if outcome == ApprovalStatus.APPROVED:
        return InfluencerEvent.APPROVE
    if outcome == ApprovalStatus.REJECTED:
        return InfluencerEvent.REJECT
    raise ValidationError(f"outcome must be 'approved' or 'rejected', got {outcome!r}")
