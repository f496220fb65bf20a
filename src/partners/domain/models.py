"""Pydantic v2 models for the entities of the engagement and settlement pipeline.

Monetary fields use Decimal for exact arithmetic -- float inputs are rejected.
Entities loaded from the store are frozen; services produce updated copies
with ``model_copy(update=...)`` after a successful write.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from partners.domain.types import (
    ApplicationStatus,
    ApprovalStatus,
    AssignmentStatus,
    CampaignStatus,
    Month,
    PaymentStatus,
    PaymentType,
    Role,
    SubmissionStatus,
)


def _reject_float(v: object) -> object:
    if isinstance(v, float):
        raise ValueError("Use Decimal or string, not float, for monetary values")
    return v


def _require_text(v: str) -> str:
    if not v.strip():
        raise ValueError("field must not be empty")
    return v


class Actor(BaseModel):
    """The caller of an operation, as supplied by the identity resolver."""

    model_config = ConfigDict(frozen=True)

    actor_id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


# ---------------------------------------------------------------------------
# Influencer registry
# ---------------------------------------------------------------------------


class SocialHandles(BaseModel):
    """Social media handles collected at registration."""

    model_config = ConfigDict(frozen=True)

    instagram: str | None = None
    youtube: str | None = None
    facebook: str | None = None


class InfluencerProfile(BaseModel):
    """Registration input for a new influencer.

    Identity and payment fields are required; everything else is optional
    profile data shown to admins during approval.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str
    full_name: str
    email: str
    phone_number: str
    upi_id: str
    id_proof_type: str
    district: str | None = None
    state: str | None = None
    social_media_handles: SocialHandles = Field(default_factory=SocialHandles)
    follower_count: int = 0

    @field_validator("user_id", "full_name", "email", "phone_number", "upi_id", "id_proof_type")
    @classmethod
    def required_fields_must_not_be_empty(cls, v: str) -> str:
        """Ensure identity and payment fields are not blank."""
        return _require_text(v)

    @field_validator("follower_count")
    @classmethod
    def follower_count_must_not_be_negative(cls, v: int) -> int:
        """Ensure follower_count is zero or more."""
        if v < 0:
            raise ValueError("follower_count must not be negative")
        return v


class Influencer(InfluencerProfile):
    """A registered creator with approval status and assigned video rate."""

    id: str
    id_proof_url: str
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    video_rate: Decimal | None = None
    approved_at: str | None = None
    approved_by: str | None = None
    rejection_reason: str | None = None
    created_at: str

    @field_validator("video_rate", mode="before")
    @classmethod
    def reject_float_rate(cls, v: object) -> object:
        """Reject float inputs for the video rate."""
        return _reject_float(v)

    @property
    def has_rate(self) -> bool:
        """Return True once a positive video rate has been assigned."""
        return self.video_rate is not None and self.video_rate > 0


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class Brand(BaseModel):
    """A brand profile owned by a marketing user."""

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    company_name: str
    website: str | None = None
    industry: str | None = None
    contact_person: str | None = None
    phone_number: str | None = None
    logo_url: str | None = None
    created_at: str

    @field_validator("company_name")
    @classmethod
    def company_name_must_not_be_empty(cls, v: str) -> str:
        return _require_text(v)


class Campaign(BaseModel):
    """A brand-specific unit of promotional work with its own budget."""

    model_config = ConfigDict(frozen=True)

    id: str
    brand_id: str
    title: str
    description: str = ""
    requirements: str = ""
    budget: Decimal
    deadline: str | None = None
    status: CampaignStatus = CampaignStatus.ACTIVE
    created_at: str

    @field_validator("budget", mode="before")
    @classmethod
    def reject_float_budget(cls, v: object) -> object:
        """Reject float inputs for budget to prevent precision errors."""
        return _reject_float(v)

    @field_validator("budget")
    @classmethod
    def budget_must_be_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("budget must be positive")
        return v

    @field_validator("title")
    @classmethod
    def title_must_not_be_empty(cls, v: str) -> str:
        return _require_text(v)


class Task(BaseModel):
    """An operator-curated unit of work with a nominal reward."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str = ""
    guidelines: str = ""
    reward: Decimal = Decimal("0")
    created_by: str | None = None
    created_at: str

    @field_validator("reward", mode="before")
    @classmethod
    def reject_float_reward(cls, v: object) -> object:
        return _reject_float(v)

    @field_validator("reward")
    @classmethod
    def reward_must_not_be_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("reward must not be negative")
        return v

    @field_validator("title")
    @classmethod
    def title_must_not_be_empty(cls, v: str) -> str:
        return _require_text(v)


# ---------------------------------------------------------------------------
# Application ledger
# ---------------------------------------------------------------------------


class CampaignApplication(BaseModel):
    """An influencer's application to a campaign, decided by the brand."""

    model_config = ConfigDict(frozen=True)

    id: str
    influencer_id: str
    campaign_id: str
    bid_amount: Decimal = Decimal("0")
    message: str = ""
    status: ApplicationStatus = ApplicationStatus.PENDING
    decision_reason: str | None = None
    decided_by: str | None = None
    decided_at: str | None = None
    created_at: str

    @field_validator("bid_amount", mode="before")
    @classmethod
    def reject_float_bid(cls, v: object) -> object:
        return _reject_float(v)

    @field_validator("bid_amount")
    @classmethod
    def bid_must_not_be_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("bid_amount must not be negative")
        return v


class TaskApplication(BaseModel):
    """An influencer's assignment to a task.

    ``requested_rate`` is the influencer's ask and is distinct from the task's
    nominal ``reward``.  ``assigned_at`` is set the first time the assignment
    reaches ``assigned`` and is what lets a review-rejected assignment be
    completed by a later resubmission.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    influencer_id: str
    task_id: str
    pitch: str = ""
    requested_rate: Decimal = Decimal("0")
    status: AssignmentStatus = AssignmentStatus.PENDING_APPROVAL
    assigned_month: Month | None = None
    assigned_year: int | None = None
    assigned_at: str | None = None
    decision_reason: str | None = None
    decided_by: str | None = None
    decided_at: str | None = None
    created_at: str

    @field_validator("requested_rate", mode="before")
    @classmethod
    def reject_float_rate(cls, v: object) -> object:
        return _reject_float(v)

    @field_validator("requested_rate")
    @classmethod
    def requested_rate_must_not_be_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("requested_rate must not be negative")
        return v


# ---------------------------------------------------------------------------
# Submissions
# ---------------------------------------------------------------------------


class NoLink(BaseModel):
    """A submission that is not tied to any task or campaign."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["none"] = "none"


class TaskLink(BaseModel):
    """A submission delivered against a task assignment."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["task"] = "task"
    task_assignment_id: str


class CampaignLink(BaseModel):
    """A submission delivered against a campaign."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["campaign"] = "campaign"
    campaign_id: str


LinkTarget = Annotated[NoLink | TaskLink | CampaignLink, Field(discriminator="kind")]


class VideoSubmission(BaseModel):
    """Video content submitted by an influencer for review."""

    model_config = ConfigDict(frozen=True)

    id: str
    influencer_id: str
    title: str
    description: str = ""
    video_url: str
    link: LinkTarget = Field(default_factory=NoLink)
    approval_status: SubmissionStatus = SubmissionStatus.PENDING
    rejection_reason: str | None = None
    reviewed_at: str | None = None
    reviewer: str | None = None
    submitted_at: str

    @field_validator("title", "video_url")
    @classmethod
    def required_fields_must_not_be_empty(cls, v: str) -> str:
        return _require_text(v)


# ---------------------------------------------------------------------------
# Settlement
# ---------------------------------------------------------------------------


class Payment(BaseModel):
    """One disbursement obligation owed to an influencer."""

    model_config = ConfigDict(frozen=True)

    id: str
    influencer_id: str
    amount: Decimal
    payment_type: PaymentType
    payment_status: PaymentStatus = PaymentStatus.PENDING
    video_submission_id: str | None = None
    task_assignment_id: str | None = None
    revenue_share_id: str | None = None
    upi_transaction_id: str | None = None
    notes: str | None = None
    idempotency_key: str | None = None
    paid_at: str | None = None
    paid_by: str | None = None
    created_at: str

    @field_validator("amount", mode="before")
    @classmethod
    def reject_float_amount(cls, v: object) -> object:
        return _reject_float(v)

    @field_validator("amount")
    @classmethod
    def amount_must_be_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("amount must be positive")
        return v


class RevenueShare(BaseModel):
    """Monthly revenue-share record, always paired with a Payment."""

    model_config = ConfigDict(frozen=True)

    id: str
    influencer_id: str
    month: Month
    year: int
    revenue_from_leads: Decimal
    performance_share_amount: Decimal
    total_earning: Decimal
    payment_status: PaymentStatus = PaymentStatus.PENDING
    created_at: str

    @field_validator(
        "revenue_from_leads", "performance_share_amount", "total_earning", mode="before"
    )
    @classmethod
    def reject_float_amounts(cls, v: object) -> object:
        return _reject_float(v)


class ApprovalResult(BaseModel):
    """Outcome of approving a submission.

    ``payment`` is None only when the resolved rate was zero, in which case
    ``payment_skipped_reason`` says so explicitly.
    """

    model_config = ConfigDict(frozen=True)

    submission: VideoSubmission
    payment: Payment | None = None
    resolved_rate: Decimal
    rate_assigned: bool = False
    rate_overridden: bool = False
    payment_skipped_reason: str | None = None


class SettlementResult(BaseModel):
    """The paired rows written by a revenue settlement."""

    model_config = ConfigDict(frozen=True)

    revenue_share: RevenueShare
    payment: Payment


class PaymentSummary(BaseModel):
    """Totals over a set of payments."""

    model_config = ConfigDict(frozen=True)

    total_paid: Decimal = Decimal("0.00")
    total_pending: Decimal = Decimal("0.00")
    transaction_count: int = 0
