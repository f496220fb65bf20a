"""Application ledger: influencer applications to campaigns and tasks.

Both flows check their preconditions inside the write transaction: the actor
must act for the influencer, the influencer must be approved, and the target
must accept applications.  Duplicate campaign applications are pre-checked for
a clear error; the store's unique (influencer, campaign) constraint is the
final guard and surfaces as the same ``DuplicateApplicationError``.
"""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

import structlog

from partners.audit import AuditLogger
from partners.catalog import require_campaign_owner
from partners.domain.errors import (
    ConflictError,
    DuplicateApplicationError,
    InvalidTransitionError,
    ValidationError,
)
from partners.domain.models import Actor, Campaign, CampaignApplication, Task, TaskApplication
from partners.domain.rules import (
    deadline_passed,
    new_id,
    now_iso,
    parse_enum,
    require_admin,
    require_influencer_actor,
    require_text,
    to_money,
)
from partners.domain.types import (
    ApplicationStatus,
    AssignmentStatus,
    CampaignStatus,
    NotificationKind,
    month_for_index,
)
from partners.notifications import Notifier
from partners.registry import InfluencerRegistry
from partners.resilience import resilient_store_call
from partners.state_machine import (
    CAMPAIGN_APPLICATION_LIFECYCLE,
    TASK_ASSIGNMENT_LIFECYCLE,
    ApplicationEvent,
    AssignmentEvent,
    LifecycleStateMachine,
)
from partners.store import PartnersStore

logger = structlog.get_logger()


class ApplicationLedger:
    """Records and decides influencer applications to campaigns and tasks."""

    def __init__(
        self,
        store: PartnersStore,
        audit: AuditLogger,
        notifier: Notifier,
        registry: InfluencerRegistry,
    ) -> None:
        self._store = store
        self._audit = audit
        self._notifier = notifier
        self._registry = registry

    # ------------------------------------------------------------------
    # Campaign flow
    # ------------------------------------------------------------------

    @resilient_store_call("ledger.apply_to_campaign")
    def apply_to_campaign(
        self,
        influencer_id: str,
        campaign_id: str,
        bid_amount: Decimal | str | int,
        message: str,
        actor: Actor,
    ) -> CampaignApplication:
        """Apply to an active campaign.

        Raises:
            UnauthorizedError: If the actor does not act for the influencer.
            NotApprovedError: If the influencer is not approved.
            ValidationError: If the campaign is not active or its deadline passed.
            DuplicateApplicationError: If the influencer already applied.
        """
        bid = to_money(bid_amount, "bid_amount")
        if bid < 0:
            raise ValidationError("bid_amount must not be negative")

        with self._store.transaction():
            influencer = self._registry.get(influencer_id)
            require_influencer_actor(actor, influencer)
            self._registry.require_approved(influencer_id)

            campaign = self._store.require(Campaign, campaign_id)
            if campaign.status != CampaignStatus.ACTIVE:
                raise ValidationError(f"Campaign '{campaign_id}' is {campaign.status}, not active")
            if deadline_passed(campaign.deadline):
                raise ValidationError(
                    f"Campaign '{campaign_id}' deadline {campaign.deadline} has passed"
                )

            if self._store.count(
                CampaignApplication, influencer_id=influencer_id, campaign_id=campaign_id
            ):
                raise DuplicateApplicationError(
                    f"Influencer '{influencer_id}' already applied to campaign '{campaign_id}'"
                )

            application = CampaignApplication(
                id=new_id(),
                influencer_id=influencer_id,
                campaign_id=campaign_id,
                bid_amount=bid,
                message=message or "",
                created_at=now_iso(),
            )
            try:
                self._store.add(application)
            except ConflictError as exc:
                raise DuplicateApplicationError(
                    f"Influencer '{influencer_id}' already applied to campaign '{campaign_id}'"
                ) from exc
            self._audit.log_entity_created(
                "campaign_application",
                application.id,
                actor,
                influencer_id=influencer_id,
                initial_state=application.status.value,
                metadata={"campaign_id": campaign_id},
            )

        logger.info(
            "campaign_application_created",
            application_id=application.id,
            influencer_id=influencer_id,
            campaign_id=campaign_id,
        )
        return application

    @resilient_store_call("ledger.decide_campaign_application")
    def decide_campaign_application(
        self,
        application_id: str,
        outcome: ApplicationStatus | str,
        actor: Actor,
        reason: str | None = None,
    ) -> CampaignApplication:
        """Approve or reject a pending campaign application.

        Raises:
            UnauthorizedError: If the actor neither owns the campaign's brand nor is an admin.
            ValidationError: If rejecting without a reason.
            InvalidTransitionError: If the application was already decided.
        """
        event = _application_event(outcome)
        if event == ApplicationEvent.REJECT:
            reason = require_text(reason, "reason")

        with self._store.transaction():
            application = self._store.require(CampaignApplication, application_id)
            campaign = self._store.require(Campaign, application.campaign_id)
            require_campaign_owner(self._store, actor, campaign)

            machine = LifecycleStateMachine(CAMPAIGN_APPLICATION_LIFECYCLE, application.status)
            new_status = machine.trigger(event)
            changes: dict[str, Any] = {
                "status": new_status,
                "decision_reason": reason,
                "decided_by": actor.actor_id,
                "decided_at": now_iso(),
            }
            if not self._store.update(
                CampaignApplication,
                application_id,
                changes,
                expected={"status": application.status},
            ):
                raise InvalidTransitionError(
                    CAMPAIGN_APPLICATION_LIFECYCLE.entity, str(application.status), str(event)
                )
            self._audit.log_state_transition(
                "campaign_application",
                application_id,
                str(application.status),
                str(new_status),
                str(event),
                actor,
                influencer_id=application.influencer_id,
                reason=reason,
            )
            influencer = self._registry.get(application.influencer_id)

        decided = application.model_copy(update=changes)
        logger.info(
            "campaign_application_decided",
            application_id=application_id,
            outcome=str(new_status),
        )
        self._notifier.notify(
            influencer.user_id,
            NotificationKind.APPLICATION_APPROVED
            if new_status == ApplicationStatus.APPROVED
            else NotificationKind.APPLICATION_REJECTED,
            {"application_id": application_id, "campaign_id": campaign.id, "reason": reason},
        )
        return decided

    def get_campaign_application(self, application_id: str) -> CampaignApplication:
        return self._store.require(CampaignApplication, application_id)

    def list_campaign_applications(
        self,
        campaign_id: str | None = None,
        influencer_id: str | None = None,
        status: ApplicationStatus | str | None = None,
    ) -> list[CampaignApplication]:
        filters: dict[str, Any] = {}
        if campaign_id is not None:
            filters["campaign_id"] = campaign_id
        if influencer_id is not None:
            filters["influencer_id"] = influencer_id
        if status is not None:
            filters["status"] = parse_enum(ApplicationStatus, status, "status")
        return self._store.find(CampaignApplication, **filters)

    # ------------------------------------------------------------------
    # Task flow
    # ------------------------------------------------------------------

    @resilient_store_call("ledger.apply_to_task")
    def apply_to_task(
        self,
        influencer_id: str,
        task_id: str,
        pitch: str,
        requested_rate: Decimal | str | int,
        actor: Actor,
    ) -> TaskApplication:
        """Apply to a task; the assignment starts in ``pending_approval``.

        Raises:
            UnauthorizedError: If the actor does not act for the influencer.
            NotApprovedError: If the influencer is not approved.
            DuplicateApplicationError: If a non-rejected application for the
                same task already exists.
        """
        rate = to_money(requested_rate, "requested_rate")
        if rate < 0:
            raise ValidationError("requested_rate must not be negative")

        with self._store.transaction():
            influencer = self._registry.get(influencer_id)
            require_influencer_actor(actor, influencer)
            self._registry.require_approved(influencer_id)
            self._store.require(Task, task_id)
            self._reject_open_duplicate(influencer_id, task_id)

            assignment = TaskApplication(
                id=new_id(),
                influencer_id=influencer_id,
                task_id=task_id,
                pitch=pitch or "",
                requested_rate=rate,
                created_at=now_iso(),
            )
            self._store.add(assignment)
            self._audit.log_entity_created(
                "task_assignment",
                assignment.id,
                actor,
                influencer_id=influencer_id,
                initial_state=assignment.status.value,
                metadata={"task_id": task_id},
            )

        logger.info(
            "task_application_created",
            assignment_id=assignment.id,
            influencer_id=influencer_id,
            task_id=task_id,
        )
        return assignment

    @resilient_store_call("ledger.decide_task_application")
    def decide_task_application(
        self,
        assignment_id: str,
        outcome: AssignmentStatus | str,
        actor: Actor,
        reason: str | None = None,
    ) -> TaskApplication:
        """Assign or reject a pending task application.  Admin only.

        Raises:
            UnauthorizedError: If the actor is not an admin.
            ValidationError: If *outcome* is not assigned/rejected, or rejecting
                without a reason.
            InvalidTransitionError: If the application is not pending approval.
        """
        require_admin(actor, "decide task applications")
        if outcome == AssignmentStatus.ASSIGNED:
            event = AssignmentEvent.ASSIGN
        elif outcome == AssignmentStatus.REJECTED:
            event = AssignmentEvent.REJECT
            reason = require_text(reason, "reason")
        else:
            raise ValidationError(f"outcome must be 'assigned' or 'rejected', got {outcome!r}")

        with self._store.transaction():
            assignment = self._store.require(TaskApplication, assignment_id)
            machine = LifecycleStateMachine(TASK_ASSIGNMENT_LIFECYCLE, assignment.status)
            new_status = machine.trigger(event)

            changes: dict[str, Any] = {
                "status": new_status,
                "decision_reason": reason,
                "decided_by": actor.actor_id,
                "decided_at": now_iso(),
            }
            if new_status == AssignmentStatus.ASSIGNED:
                changes.update(_assignment_stamp())

            if not self._store.update(
                TaskApplication,
                assignment_id,
                changes,
                expected={"status": assignment.status},
            ):
                raise InvalidTransitionError(
                    TASK_ASSIGNMENT_LIFECYCLE.entity, str(assignment.status), str(event)
                )
            self._audit.log_state_transition(
                "task_assignment",
                assignment_id,
                str(assignment.status),
                str(new_status),
                str(event),
                actor,
                influencer_id=assignment.influencer_id,
                reason=reason,
            )
            influencer = self._registry.get(assignment.influencer_id)

        decided = assignment.model_copy(update=changes)
        logger.info(
            "task_application_decided", assignment_id=assignment_id, outcome=str(new_status)
        )
        self._notifier.notify(
            influencer.user_id,
            NotificationKind.ASSIGNMENT_ASSIGNED
            if new_status == AssignmentStatus.ASSIGNED
            else NotificationKind.ASSIGNMENT_REJECTED,
            {"assignment_id": assignment_id, "task_id": assignment.task_id, "reason": reason},
        )
        return decided

    @resilient_store_call("ledger.assign_task")
    def assign_task(self, influencer_id: str, task_id: str, actor: Actor) -> TaskApplication:
        """Assign a task to an influencer directly, skipping the application step.

        Raises:
            UnauthorizedError: If the actor is not an admin.
            NotApprovedError: If the influencer is not approved.
            DuplicateApplicationError: If an open assignment already exists.
        """
        require_admin(actor, "assign tasks")

        with self._store.transaction():
            influencer = self._registry.require_approved(influencer_id)
            self._store.require(Task, task_id)
            self._reject_open_duplicate(influencer_id, task_id)

            now = now_iso()
            assignment = TaskApplication(
                id=new_id(),
                influencer_id=influencer_id,
                task_id=task_id,
                status=AssignmentStatus.ASSIGNED,
                decided_by=actor.actor_id,
                decided_at=now,
                created_at=now,
                **_assignment_stamp(),
            )
            self._store.add(assignment)
            self._audit.log_entity_created(
                "task_assignment",
                assignment.id,
                actor,
                influencer_id=influencer_id,
                initial_state=assignment.status.value,
                metadata={"task_id": task_id, "direct": "true"},
            )

        logger.info("task_assigned", assignment_id=assignment.id, influencer_id=influencer_id)
        self._notifier.notify(
            influencer.user_id,
            NotificationKind.ASSIGNMENT_ASSIGNED,
            {"assignment_id": assignment.id, "task_id": task_id},
        )
        return assignment

    def apply_review_outcome(
        self,
        assignment_id: str,
        event: AssignmentEvent,
        actor: Actor,
    ) -> TaskApplication:
        """Move a task assignment after its linked submission was reviewed.

        Must run inside the reviewer's transaction.  Idempotent: re-applying
        an outcome the assignment already reflects is a no-op, and a
        completed assignment ignores later reviews.

        Args:
            assignment_id: The assignment linked to the reviewed submission.
            event: ``submission_approved`` or ``submission_rejected``.
            actor: The reviewer.

        Returns:
            The assignment in its resulting status.
        """
        assignment = self._store.require(TaskApplication, assignment_id)
        target = (
            AssignmentStatus.COMPLETED
            if event == AssignmentEvent.SUBMISSION_APPROVED
            else AssignmentStatus.REJECTED
        )
        if assignment.status in (target, AssignmentStatus.COMPLETED):
            return assignment
        if assignment.status == AssignmentStatus.REJECTED and assignment.assigned_at is None:
            raise InvalidTransitionError(
                TASK_ASSIGNMENT_LIFECYCLE.entity, str(assignment.status), str(event)
            )

        machine = LifecycleStateMachine(TASK_ASSIGNMENT_LIFECYCLE, assignment.status)
        new_status = machine.trigger(event)
        if not self._store.update(
            TaskApplication,
            assignment_id,
            {"status": new_status},
            expected={"status": assignment.status},
        ):
            raise InvalidTransitionError(
                TASK_ASSIGNMENT_LIFECYCLE.entity, str(assignment.status), str(event)
            )
        self._audit.log_state_transition(
            "task_assignment",
            assignment_id,
            str(assignment.status),
            str(new_status),
            str(event),
            actor,
            influencer_id=assignment.influencer_id,
        )
        return assignment.model_copy(update={"status": new_status})

    def get_task_application(self, assignment_id: str) -> TaskApplication:
        return self._store.require(TaskApplication, assignment_id)

    def list_task_applications(
        self,
        influencer_id: str | None = None,
        task_id: str | None = None,
        status: AssignmentStatus | str | None = None,
    ) -> list[TaskApplication]:
        filters: dict[str, Any] = {}
        if influencer_id is not None:
            filters["influencer_id"] = influencer_id
        if task_id is not None:
            filters["task_id"] = task_id
        if status is not None:
            filters["status"] = parse_enum(AssignmentStatus, status, "status")
        return self._store.find(TaskApplication, **filters)

    def _reject_open_duplicate(self, influencer_id: str, task_id: str) -> None:
        existing = self._store.find(TaskApplication, influencer_id=influencer_id, task_id=task_id)
        if any(a.status != AssignmentStatus.REJECTED for a in existing):
            raise DuplicateApplicationError(
                f"Influencer '{influencer_id}' already has an open application for task '{task_id}'"
            )


def _application_event(outcome: ApplicationStatus | str) -> ApplicationEvent:
    if outcome == ApplicationStatus.APPROVED:
        return ApplicationEvent.APPROVE
    if outcome == ApplicationStatus.REJECTED:
        return ApplicationEvent.REJECT
    raise ValidationError(f"outcome must be 'approved' or 'rejected', got {outcome!r}")


def _assignment_stamp() -> dict[str, Any]:
    now = datetime.now(tz=UTC)
    return {
        "assigned_at": now.strftime("%Y-%m-%dT%H:%M:%SZ"),
        "assigned_month": month_for_index(now.month),
        "assigned_year": now.year,
    }
