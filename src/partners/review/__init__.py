"""Video submission review and fixed-payment creation."""

from partners.review.service import ZERO_RATE, SubmissionReviewer

__all__ = ["ZERO_RATE", "SubmissionReviewer"]
