"""Request bodies for the HTTP surface.

Responses reuse the domain models directly; monetary fields serialize as
decimal strings.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field

from partners.domain.models import InfluencerProfile, LinkTarget


class RegisterInfluencerRequest(InfluencerProfile):
    id_proof_ref: str


class DecisionRequest(BaseModel):
    """Approve/reject decision; ``outcome`` is the target status."""

    outcome: str
    reason: str | None = None


class RateRequest(BaseModel):
    rate: Decimal


class RegisterBrandRequest(BaseModel):
    user_id: str
    company_name: str
    website: str | None = None
    industry: str | None = None
    contact_person: str | None = None
    phone_number: str | None = None
    logo_url: str | None = None


class UpdateBrandRequest(BaseModel):
    """Partial brand update; only fields present in the body are changed."""

    company_name: str | None = None
    website: str | None = None
    industry: str | None = None
    contact_person: str | None = None
    phone_number: str | None = None
    logo_url: str | None = None


class CreateCampaignRequest(BaseModel):
    brand_id: str
    title: str
    budget: Decimal
    description: str = ""
    requirements: str = ""
    deadline: str | None = None


class CampaignStatusRequest(BaseModel):
    event: str


class CreateTaskRequest(BaseModel):
    title: str
    description: str = ""
    guidelines: str = ""
    reward: Decimal = Decimal("0")


class CampaignApplicationRequest(BaseModel):
    influencer_id: str
    bid_amount: Decimal = Decimal("0")
    message: str = ""


class TaskApplicationRequest(BaseModel):
    influencer_id: str
    pitch: str = ""
    requested_rate: Decimal = Decimal("0")


class AssignTaskRequest(BaseModel):
    influencer_id: str


class SubmitVideoRequest(BaseModel):
    influencer_id: str
    title: str
    video_url: str
    description: str = ""
    link: LinkTarget | None = None


class ApproveSubmissionRequest(BaseModel):
    override_rate: Decimal | None = None


class RejectSubmissionRequest(BaseModel):
    reason: str


class ManualPaymentRequest(BaseModel):
    influencer_id: str
    amount: Decimal
    payment_type: str = "fixed"
    notes: str | None = None
    transaction_ref: str | None = None
    idempotency_key: str | None = Field(default=None, max_length=128)


class MarkPaidRequest(BaseModel):
    transaction_ref: str


class SettleRevenueRequest(BaseModel):
    influencer_id: str
    month: str | int
    year: int
    total_revenue: Decimal
