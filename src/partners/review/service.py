"""Submission reviewer: video submissions, review decisions and fixed payments.

``approve`` runs every write in one transaction in this order:

1. resolve the influencer's rate (assigning it on a first approval, or
   applying an admin override),
2. mark the submission approved,
3. complete the linked task assignment,
4. create the fixed payment when the resolved rate is positive.

Payout uses the influencer's rate at approval time, not at submission time.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import structlog

from partners.audit import AuditLogger
from partners.catalog import require_campaign_owner
from partners.domain.errors import (
    AlreadyReviewedError,
    ConflictError,
    InvalidRateError,
    UnauthorizedError,
    ValidationError,
)
from partners.domain.models import (
    Actor,
    ApprovalResult,
    Campaign,
    CampaignApplication,
    CampaignLink,
    Influencer,
    LinkTarget,
    NoLink,
    Payment,
    TaskApplication,
    TaskLink,
    VideoSubmission,
)
from partners.domain.rules import (
    new_id,
    now_iso,
    parse_enum,
    require_influencer_actor,
    require_text,
    to_money,
)
from partners.domain.types import (
    ApplicationStatus,
    AssignmentStatus,
    NotificationKind,
    PaymentType,
    SubmissionStatus,
)
from partners.ledger import ApplicationLedger
from partners.notifications import Notifier
from partners.observability.metrics import (
    PAYMENTS_CREATED,
    PENDING_SUBMISSIONS,
    SUBMISSIONS_REVIEWED,
)
from partners.registry import InfluencerRegistry
from partners.resilience import resilient_store_call
from partners.state_machine import (
    SUBMISSION_LIFECYCLE,
    AssignmentEvent,
    LifecycleStateMachine,
    SubmissionEvent,
)
from partners.store import PartnersStore

logger = structlog.get_logger()

ZERO_RATE = "zero_rate"


class SubmissionReviewer:
    """Records submitted content and applies review outcomes."""

    def __init__(
        self,
        store: PartnersStore,
        audit: AuditLogger,
        notifier: Notifier,
        registry: InfluencerRegistry,
        ledger: ApplicationLedger,
    ) -> None:
        self._store = store
        self._audit = audit
        self._notifier = notifier
        self._registry = registry
        self._ledger = ledger

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    @resilient_store_call("review.submit")
    def submit(
        self,
        influencer_id: str,
        title: str,
        description: str,
        video_url: str,
        link: LinkTarget | None,
        actor: Actor,
    ) -> VideoSubmission:
        """Submit a video for review, optionally linked to a task or campaign.

        Repeated submissions for the same link are allowed (resubmission
        after a rejection).

        Raises:
            UnauthorizedError: If the actor does not act for the influencer,
                or the task assignment belongs to someone else.
            NotApprovedError: If the influencer is not approved.
            ValidationError: If the link target does not accept submissions.
        """
        link = link or NoLink()
        with self._store.transaction():
            influencer = self._registry.get(influencer_id)
            require_influencer_actor(actor, influencer)
            self._registry.require_approved(influencer_id)

            if isinstance(link, TaskLink):
                self._check_task_link(influencer_id, link)
            elif isinstance(link, CampaignLink):
                self._check_campaign_link(influencer_id, link)

            submission = VideoSubmission(
                id=new_id(),
                influencer_id=influencer_id,
                title=require_text(title, "title"),
                description=description or "",
                video_url=require_text(video_url, "video_url"),
                link=link,
                submitted_at=now_iso(),
            )
            self._store.add(submission)
            self._audit.log_entity_created(
                "video_submission",
                submission.id,
                actor,
                influencer_id=influencer_id,
                initial_state=submission.approval_status.value,
                metadata={"link": link.kind},
            )

        PENDING_SUBMISSIONS.set(self.count_pending())
        logger.info(
            "video_submitted",
            submission_id=submission.id,
            influencer_id=influencer_id,
            link=link.kind,
        )
        return submission

    def _check_task_link(self, influencer_id: str, link: TaskLink) -> None:
        assignment = self._store.require(TaskApplication, link.task_assignment_id)
        if assignment.influencer_id != influencer_id:
            raise UnauthorizedError(
                f"Task assignment '{assignment.id}' does not belong to influencer '{influencer_id}'"
            )
        if assignment.status == AssignmentStatus.COMPLETED:
            raise ValidationError(f"Task assignment '{assignment.id}' is already completed")
        if assignment.assigned_at is None:
            raise ValidationError(
                f"Task assignment '{assignment.id}' has not been assigned ({assignment.status})"
            )

    def _check_campaign_link(self, influencer_id: str, link: CampaignLink) -> None:
        self._store.require(Campaign, link.campaign_id)
        if not self._store.count(
            CampaignApplication,
            influencer_id=influencer_id,
            campaign_id=link.campaign_id,
            status=ApplicationStatus.APPROVED,
        ):
            raise ValidationError(
                f"Influencer '{influencer_id}' has no approved application "
                f"for campaign '{link.campaign_id}'"
            )

    # ------------------------------------------------------------------
    # Review
    # ------------------------------------------------------------------

    @resilient_store_call("review.reject")
    def reject(self, submission_id: str, reason: str, actor: Actor) -> VideoSubmission:
        """Reject a pending submission with a mandatory reason.

        The submission status is written first, then the linked task
        assignment moves to ``rejected`` (idempotently), in one transaction.

        Raises:
            ValidationError: If *reason* is blank.
            UnauthorizedError: If the actor may not review this submission.
            AlreadyReviewedError: If the submission is not pending.
        """
        reason = require_text(reason, "reason")

        with self._store.transaction():
            submission = self._store.require(VideoSubmission, submission_id)
            self._authorize_review(submission, actor)
            self._require_pending(submission, SubmissionEvent.REJECT)

            changes: dict[str, Any] = {
                "approval_status": SubmissionStatus.REJECTED,
                "rejection_reason": reason,
                "reviewed_at": now_iso(),
                "reviewer": actor.actor_id,
            }
            self._write_review(submission, changes)
            self._audit.log_state_transition(
                "video_submission",
                submission_id,
                str(submission.approval_status),
                str(SubmissionStatus.REJECTED),
                str(SubmissionEvent.REJECT),
                actor,
                influencer_id=submission.influencer_id,
                reason=reason,
            )
            if isinstance(submission.link, TaskLink):
                self._ledger.apply_review_outcome(
                    submission.link.task_assignment_id,
                    AssignmentEvent.SUBMISSION_REJECTED,
                    actor,
                )
            influencer = self._registry.get(submission.influencer_id)

        rejected = submission.model_copy(update=changes)
        SUBMISSIONS_REVIEWED.labels(outcome="rejected").inc()
        PENDING_SUBMISSIONS.set(self.count_pending())
        logger.info("submission_rejected", submission_id=submission_id, reviewer=actor.actor_id)
        self._notifier.notify(
            influencer.user_id,
            NotificationKind.SUBMISSION_REJECTED,
            {"submission_id": submission_id, "title": submission.title, "reason": reason},
        )
        return rejected

    @resilient_store_call("review.approve")
    def approve(
        self,
        submission_id: str,
        actor: Actor,
        override_rate: Decimal | str | int | None = None,
    ) -> ApprovalResult:
        """Approve a pending submission and create its fixed payment.

        Args:
            submission_id: The submission to approve.
            actor: An admin, or the campaign's brand owner for campaign-linked
                submissions.
            override_rate: Rate to assign (mandatory and positive when the
                influencer has no rate yet) or to replace the existing rate
                for this and all future approvals.  Admins only.

        Returns:
            The approved submission, the payment (None when the resolved rate
            is zero) and how the rate was resolved.

        Raises:
            UnauthorizedError: If the actor may not review this submission or
                may not override rates.
            InvalidRateError: If a rate is required and missing or not positive,
                or the override is negative.
            AlreadyReviewedError: If the submission is not pending.
        """
        override: Decimal | None = None
        if override_rate is not None:
            if not actor.is_admin:
                raise UnauthorizedError("Only admins may override video rates")
            override = to_money(override_rate, "override_rate", InvalidRateError)
            if override < 0:
                raise InvalidRateError(f"override_rate must not be negative, got {override}")

        with self._store.transaction():
            submission = self._store.require(VideoSubmission, submission_id)
            self._authorize_review(submission, actor)
            self._require_pending(submission, SubmissionEvent.APPROVE)

            influencer = self._store.require(Influencer, submission.influencer_id)
            rate, rate_assigned, rate_overridden = self._resolve_rate(influencer, override, actor)

            changes: dict[str, Any] = {
                "approval_status": SubmissionStatus.APPROVED,
                "reviewed_at": now_iso(),
                "reviewer": actor.actor_id,
            }
            self._write_review(submission, changes)
            self._audit.log_state_transition(
                "video_submission",
                submission_id,
                str(submission.approval_status),
                str(SubmissionStatus.APPROVED),
                str(SubmissionEvent.APPROVE),
                actor,
                influencer_id=influencer.id,
            )

            task_assignment_id: str | None = None
            if isinstance(submission.link, TaskLink):
                task_assignment_id = submission.link.task_assignment_id
                self._ledger.apply_review_outcome(
                    task_assignment_id, AssignmentEvent.SUBMISSION_APPROVED, actor
                )

            payment: Payment | None = None
            skipped_reason: str | None = None
            if rate > 0:
                payment = Payment(
                    id=new_id(),
                    influencer_id=influencer.id,
                    amount=rate,
                    payment_type=PaymentType.FIXED,
                    video_submission_id=submission_id,
                    task_assignment_id=task_assignment_id,
                    notes=f"Fixed payment for video: {submission.title}",
                    created_at=now_iso(),
                )
                try:
                    self._store.add(payment)
                except ConflictError as exc:
                    raise AlreadyReviewedError(submission_id, "approved") from exc
                self._audit.log_payment_created(payment, actor)
            else:
                skipped_reason = ZERO_RATE

        approved = submission.model_copy(update=changes)
        SUBMISSIONS_REVIEWED.labels(outcome="approved").inc()
        PENDING_SUBMISSIONS.set(self.count_pending())
        if payment is not None:
            PAYMENTS_CREATED.labels(payment_type=PaymentType.FIXED.value).inc()
        logger.info(
            "submission_approved",
            submission_id=submission_id,
            reviewer=actor.actor_id,
            resolved_rate=str(rate),
            rate_assigned=rate_assigned,
            rate_overridden=rate_overridden,
            payment_id=payment.id if payment else None,
            payment_skipped_reason=skipped_reason,
        )

        self._notifier.notify(
            influencer.user_id,
            NotificationKind.SUBMISSION_APPROVED,
            {"submission_id": submission_id, "title": submission.title},
        )
        if payment is not None:
            self._notifier.notify(
                influencer.user_id,
                NotificationKind.PAYMENT_CREATED,
                {"payment_id": payment.id, "amount": payment.amount},
            )

        return ApprovalResult(
            submission=approved,
            payment=payment,
            resolved_rate=rate,
            rate_assigned=rate_assigned,
            rate_overridden=rate_overridden,
            payment_skipped_reason=skipped_reason,
        )

    def _resolve_rate(
        self, influencer: Influencer, override: Decimal | None, actor: Actor
    ) -> tuple[Decimal, bool, bool]:
        """Return ``(rate, rate_assigned, rate_overridden)`` and persist any change."""
        if not influencer.has_rate:
            if override is None or override <= 0:
                raise InvalidRateError(
                    f"Influencer '{influencer.id}' has no video rate yet; "
                    "a positive override_rate is required"
                )
            if not self._store.set_rate_if_unset(influencer.id, override):
                raise ConflictError(
                    f"Video rate for influencer '{influencer.id}' was assigned concurrently"
                )
            self._audit.log_rate_change(
                influencer.id, override, actor, influencer.video_rate, source="approval"
            )
            logger.info("video_rate_assigned", influencer_id=influencer.id, rate=str(override))
            return override, True, False

        current = influencer.video_rate or Decimal("0")
        if override is None or override == current:
            return current, False, False

        self._store.update(Influencer, influencer.id, {"video_rate": override})
        self._audit.log_rate_change(influencer.id, override, actor, current, source="approval")
        logger.info(
            "video_rate_overridden",
            influencer_id=influencer.id,
            previous_rate=str(current),
            rate=str(override),
        )
        return override, False, True

    def _authorize_review(self, submission: VideoSubmission, actor: Actor) -> None:
        if isinstance(submission.link, CampaignLink):
            campaign = self._store.require(Campaign, submission.link.campaign_id)
            require_campaign_owner(self._store, actor, campaign)
        elif not actor.is_admin:
            raise UnauthorizedError(
                f"Only admins may review submission '{submission.id}' (actor {actor.actor_id})"
            )

    @staticmethod
    def _require_pending(submission: VideoSubmission, event: SubmissionEvent) -> None:
        machine = LifecycleStateMachine(SUBMISSION_LIFECYCLE, submission.approval_status)
        if not machine.can_trigger(event):
            raise AlreadyReviewedError(submission.id, str(submission.approval_status))

    def _write_review(self, submission: VideoSubmission, changes: dict[str, Any]) -> None:
        if not self._store.update(
            VideoSubmission,
            submission.id,
            changes,
            expected={"approval_status": SubmissionStatus.PENDING},
        ):
            current = self._store.require(VideoSubmission, submission.id)
            raise AlreadyReviewedError(submission.id, str(current.approval_status))

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    def get(self, submission_id: str) -> VideoSubmission:
        return self._store.require(VideoSubmission, submission_id)

    def list(
        self,
        status: SubmissionStatus | str | None = None,
        influencer_id: str | None = None,
        campaign_id: str | None = None,
        task_assignment_id: str | None = None,
    ) -> list[VideoSubmission]:
        """Return submissions newest first, filtered by any combination of fields."""
        filters: dict[str, Any] = {}
        if status is not None:
            filters["approval_status"] = parse_enum(SubmissionStatus, status, "status")
        if influencer_id is not None:
            filters["influencer_id"] = influencer_id
        if campaign_id is not None:
            filters["campaign_id"] = campaign_id
        if task_assignment_id is not None:
            filters["task_assignment_id"] = task_assignment_id
        return self._store.find(VideoSubmission, **filters)

    def count_pending(self) -> int:
        return self._store.count(VideoSubmission, approval_status=SubmissionStatus.PENDING)
