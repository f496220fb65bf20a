"""Domain types, models, and errors for the partners service."""

from partners.domain.errors import (
    AlreadyPaidError,
    AlreadyReviewedError,
    ConflictError,
    DuplicateApplicationError,
    InvalidRateError,
    InvalidTransitionError,
    NotApprovedError,
    NotFoundError,
    PartnersError,
    TransientError,
    UnauthorizedError,
    ValidationError,
)
from partners.domain.models import (
    Actor,
    ApprovalResult,
    Brand,
    Campaign,
    CampaignApplication,
    CampaignLink,
    Influencer,
    InfluencerProfile,
    LinkTarget,
    NoLink,
    Payment,
    PaymentSummary,
    RevenueShare,
    SettlementResult,
    SocialHandles,
    Task,
    TaskApplication,
    TaskLink,
    VideoSubmission,
)
from partners.domain.types import (
    ApplicationStatus,
    ApprovalStatus,
    AssignmentStatus,
    CampaignStatus,
    Month,
    NotificationKind,
    PaymentStatus,
    PaymentType,
    Role,
    SubmissionStatus,
    month_for_index,
)

__all__ = [
    "Actor",
    "AlreadyPaidError",
    "AlreadyReviewedError",
    "ApplicationStatus",
    "ApprovalResult",
    "ApprovalStatus",
    "AssignmentStatus",
    "Brand",
    "Campaign",
    "CampaignApplication",
    "CampaignLink",
    "CampaignStatus",
    "ConflictError",
    "DuplicateApplicationError",
    "Influencer",
    "InfluencerProfile",
    "InvalidRateError",
    "InvalidTransitionError",
    "LinkTarget",
    "Month",
    "NoLink",
    "NotApprovedError",
    "NotFoundError",
    "NotificationKind",
    "PartnersError",
    "Payment",
    "PaymentStatus",
    "PaymentSummary",
    "PaymentType",
    "RevenueShare",
    "Role",
    "SettlementResult",
    "SocialHandles",
    "SubmissionStatus",
    "Task",
    "TaskApplication",
    "TaskLink",
    "TransientError",
    "UnauthorizedError",
    "ValidationError",
    "VideoSubmission",
    "month_for_index",
]
