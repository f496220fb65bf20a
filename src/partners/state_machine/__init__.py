"""Entity lifecycle state machines with transition validation."""

from partners.state_machine.machine import LifecycleStateMachine
from partners.state_machine.transitions import (
    CAMPAIGN_APPLICATION_LIFECYCLE,
    CAMPAIGN_LIFECYCLE,
    INFLUENCER_LIFECYCLE,
    PAYMENT_LIFECYCLE,
    SUBMISSION_LIFECYCLE,
    TASK_ASSIGNMENT_LIFECYCLE,
    ApplicationEvent,
    AssignmentEvent,
    CampaignEvent,
    InfluencerEvent,
    Lifecycle,
    PaymentEvent,
    SubmissionEvent,
)

__all__ = [
    "CAMPAIGN_APPLICATION_LIFECYCLE",
    "CAMPAIGN_LIFECYCLE",
    "INFLUENCER_LIFECYCLE",
    "PAYMENT_LIFECYCLE",
    "SUBMISSION_LIFECYCLE",
    "TASK_ASSIGNMENT_LIFECYCLE",
    "ApplicationEvent",
    "AssignmentEvent",
    "CampaignEvent",
    "InfluencerEvent",
    "Lifecycle",
    "LifecycleStateMachine",
    "PaymentEvent",
    "SubmissionEvent",
]
