"""Domain-specific exception classes for the partners service.

The taxonomy maps one-to-one onto caller decisions: ``ValidationError`` and
``ConflictError`` are terminal for a request, ``TransientError`` is the only
class a caller may retry with the same input.
"""

from __future__ import annotations


class PartnersError(Exception):
    """Base class for all domain errors in the partners service."""


class ValidationError(PartnersError):
    """Raised when input is malformed or a required value is missing."""


class InvalidRateError(ValidationError):
    """Raised when a video rate is required but missing, or is out of range."""


class UnauthorizedError(PartnersError):
    """Raised when the actor's role or ownership does not permit the operation."""


class NotApprovedError(UnauthorizedError):
    """Raised when an influencer who is not approved attempts a workflow action.

    Attributes:
        influencer_id: The influencer that failed the approval gate.
        approval_status: The influencer's current approval status.
    """

    def __init__(self, influencer_id: str, approval_status: str) -> None:
        self.influencer_id = influencer_id
        self.approval_status = approval_status
        super().__init__(
            f"Influencer '{influencer_id}' is {approval_status}, not approved"
        )


class NotFoundError(PartnersError):
    """Raised when a referenced entity does not exist.

    Attributes:
        entity: The entity type that was looked up (e.g. ``"payment"``).
        entity_id: The identifier that was not found.
    """

    def __init__(self, entity: str, entity_id: str) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} '{entity_id}' not found")


class ConflictError(PartnersError):
    """Raised when a write conflicts with existing state."""


class DuplicateApplicationError(ConflictError):
    """Raised when an influencer applies twice to the same campaign or task."""


class AlreadyReviewedError(ConflictError):
    """Raised when a submission that is no longer pending is reviewed again.

    Attributes:
        submission_id: The submission that was already reviewed.
        approval_status: Its current (terminal) status.
    """

    def __init__(self, submission_id: str, approval_status: str) -> None:
        self.submission_id = submission_id
        self.approval_status = approval_status
        super().__init__(
            f"Submission '{submission_id}' was already reviewed ({approval_status})"
        )


class AlreadyPaidError(ConflictError):
    """Raised when a payment that is not pending is marked paid again."""

    def __init__(self, payment_id: str) -> None:
        self.payment_id = payment_id
        super().__init__(f"Payment '{payment_id}' is already paid")


class InvalidTransitionError(ConflictError):
    """Raised when an invalid lifecycle transition is attempted.

    Attributes:
        entity: The entity type whose lifecycle rejected the event.
        current_state: The state the entity was in.
        event: The event that was rejected.
    """

    def __init__(self, entity: str, current_state: str, event: str) -> None:
        self.entity = entity
        self.current_state = current_state
        self.event = event
        super().__init__(
            f"Cannot apply event '{event}' to {entity} in state '{current_state}'"
        )


class TransientError(PartnersError):
    """Raised when the underlying store is unreachable or timed out.

    Safe to retry: every write in this service is idempotent under retry.
    """
