"""Domain enumerations for the partners engagement and settlement service."""

from enum import StrEnum


class Role(StrEnum):
    """Roles supplied by the identity resolver for every operation."""

    ADMIN = "admin"
    MARKETING = "marketing"
    INFLUENCER = "influencer"


class ApprovalStatus(StrEnum):
    """Influencer onboarding status."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class CampaignStatus(StrEnum):
    """Lifecycle of a brand campaign."""

    ACTIVE = "active"
    COMPLETED = "completed"
    CLOSED = "closed"


class ApplicationStatus(StrEnum):
    """Status of an influencer's application to a campaign."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AssignmentStatus(StrEnum):
    """Status of a task application (assignment)."""

    PENDING_APPROVAL = "pending_approval"
    ASSIGNED = "assigned"
    REJECTED = "rejected"
    COMPLETED = "completed"


class SubmissionStatus(StrEnum):
    """Review status of a video submission."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PaymentType(StrEnum):
    """Kind of disbursement obligation."""

    FIXED = "fixed"
    REVENUE_SHARE = "revenue_share"


class PaymentStatus(StrEnum):
    """Disbursement status shared by payments and revenue shares."""

    PENDING = "pending"
    PAID = "paid"


class Month(StrEnum):
    """Settlement months, stored by their English names."""

    JANUARY = "January"
    FEBRUARY = "February"
    MARCH = "March"
    APRIL = "April"
    MAY = "May"
    JUNE = "June"
    JULY = "July"
    AUGUST = "August"
    SEPTEMBER = "September"
    OCTOBER = "October"
    NOVEMBER = "November"
    DECEMBER = "December"


class NotificationKind(StrEnum):
    """Events pushed to the messaging subsystem after terminal transitions."""

    INFLUENCER_APPROVED = "influencer_approved"
    INFLUENCER_REJECTED = "influencer_rejected"
    APPLICATION_APPROVED = "application_approved"
    APPLICATION_REJECTED = "application_rejected"
    ASSIGNMENT_ASSIGNED = "assignment_assigned"
    ASSIGNMENT_REJECTED = "assignment_rejected"
    SUBMISSION_APPROVED = "submission_approved"
    SUBMISSION_REJECTED = "submission_rejected"
    PAYMENT_CREATED = "payment_created"
    PAYMENT_PAID = "payment_paid"


def month_for_index(index: int) -> Month:
    """Return the :class:`Month` for a 1-based month number.

    Args:
        index: Month number, 1 (January) through 12 (December).

    Returns:
        The matching month.

    Raises:
        ValueError: If *index* is outside 1-12.
    """
    if not 1 <= index <= 12:
        raise ValueError(f"Month index must be between 1 and 12, got {index}")
    return list(Month)[index - 1]
