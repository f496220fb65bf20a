"""Transition maps defining every valid (state, event) -> state mapping per entity."""

from dataclasses import dataclass
from enum import StrEnum

from partners.domain.types import (
    ApplicationStatus,
    ApprovalStatus,
    AssignmentStatus,
    CampaignStatus,
    PaymentStatus,
    SubmissionStatus,
)


class InfluencerEvent(StrEnum):
    """Admin decisions on an influencer registration."""

    APPROVE = "approve"
    REJECT = "reject"


class ApplicationEvent(StrEnum):
    """Brand decisions on a campaign application."""

    APPROVE = "approve"
    REJECT = "reject"


class AssignmentEvent(StrEnum):
    """Admin decisions and review outcomes that move a task assignment."""

    ASSIGN = "assign"
    REJECT = "reject"
    SUBMISSION_APPROVED = "submission_approved"
    SUBMISSION_REJECTED = "submission_rejected"


class SubmissionEvent(StrEnum):
    """Review outcomes for a video submission."""

    APPROVE = "approve"
    REJECT = "reject"


class PaymentEvent(StrEnum):
    """Disbursement events for a payment."""

    MARK_PAID = "mark_paid"


class CampaignEvent(StrEnum):
    """Owner-initiated campaign status changes."""

    COMPLETE = "complete"
    CLOSE = "close"


@dataclass(frozen=True)
class Lifecycle:
    """Transition table and terminal states for one entity type.

    Attributes:
        entity: Entity name used in error messages and the audit trail.
        transitions: All valid ``(state, event) -> next_state`` mappings.
            Any pair not in this dict is an invalid transition.
        terminal_states: States that reject every event.
    """

    entity: str
    transitions: dict[tuple[StrEnum, str], StrEnum]
    terminal_states: frozenset[StrEnum]


INFLUENCER_LIFECYCLE = Lifecycle(
    entity="influencer",
    transitions={
        (ApprovalStatus.PENDING, InfluencerEvent.APPROVE): ApprovalStatus.APPROVED,
        (ApprovalStatus.PENDING, InfluencerEvent.REJECT): ApprovalStatus.REJECTED,
    },
    terminal_states=frozenset({ApprovalStatus.APPROVED, ApprovalStatus.REJECTED}),
)

CAMPAIGN_APPLICATION_LIFECYCLE = Lifecycle(
    entity="campaign_application",
    transitions={
        (ApplicationStatus.PENDING, ApplicationEvent.APPROVE): ApplicationStatus.APPROVED,
        (ApplicationStatus.PENDING, ApplicationEvent.REJECT): ApplicationStatus.REJECTED,
    },
    terminal_states=frozenset({ApplicationStatus.APPROVED, ApplicationStatus.REJECTED}),
)

# REJECTED is not terminal: a review rejection can be followed by an approved
# resubmission.  Rejections at the pending_approval stage are guarded by the
# caller (the assignment never got an ``assigned_at``).
TASK_ASSIGNMENT_LIFECYCLE = Lifecycle(
    entity="task_assignment",
    transitions={
        (AssignmentStatus.PENDING_APPROVAL, AssignmentEvent.ASSIGN): AssignmentStatus.ASSIGNED,
        (AssignmentStatus.PENDING_APPROVAL, AssignmentEvent.REJECT): AssignmentStatus.REJECTED,
        (AssignmentStatus.ASSIGNED, AssignmentEvent.SUBMISSION_APPROVED): (
            AssignmentStatus.COMPLETED
        ),
        (AssignmentStatus.ASSIGNED, AssignmentEvent.SUBMISSION_REJECTED): (
            AssignmentStatus.REJECTED
        ),
        (AssignmentStatus.REJECTED, AssignmentEvent.SUBMISSION_APPROVED): (
            AssignmentStatus.COMPLETED
        ),
    },
    terminal_states=frozenset({AssignmentStatus.COMPLETED}),
)

SUBMISSION_LIFECYCLE = Lifecycle(
    entity="video_submission",
    transitions={
        (SubmissionStatus.PENDING, SubmissionEvent.APPROVE): SubmissionStatus.APPROVED,
        (SubmissionStatus.PENDING, SubmissionEvent.REJECT): SubmissionStatus.REJECTED,
    },
    terminal_states=frozenset({SubmissionStatus.APPROVED, SubmissionStatus.REJECTED}),
)

PAYMENT_LIFECYCLE = Lifecycle(
    entity="payment",
    transitions={
        (PaymentStatus.PENDING, PaymentEvent.MARK_PAID): PaymentStatus.PAID,
    },
    terminal_states=frozenset({PaymentStatus.PAID}),
)

CAMPAIGN_LIFECYCLE = Lifecycle(
    entity="campaign",
    transitions={
        (CampaignStatus.ACTIVE, CampaignEvent.COMPLETE): CampaignStatus.COMPLETED,
        (CampaignStatus.ACTIVE, CampaignEvent.CLOSE): CampaignStatus.CLOSED,
    },
    terminal_states=frozenset({CampaignStatus.COMPLETED, CampaignStatus.CLOSED}),
)
