"""Video submission and review."""

from __future__ import annotations

from fastapi import APIRouter

from partners.api.dependencies import CurrentActor, ReviewerDep
from partners.api.schemas import (
    ApproveSubmissionRequest,
    RejectSubmissionRequest,
    SubmitVideoRequest,
)
from partners.domain.models import ApprovalResult, VideoSubmission

router = APIRouter(prefix="/submissions", tags=["submissions"])


@router.post("", status_code=201)
def submit_video(
    body: SubmitVideoRequest, actor: CurrentActor, reviewer: ReviewerDep
) -> VideoSubmission:
    return reviewer.submit(
        body.influencer_id, body.title, body.description, body.video_url, body.link, actor
    )


@router.get("")
def list_submissions(
    reviewer: ReviewerDep,
    status: str | None = None,
    influencer_id: str | None = None,
    campaign_id: str | None = None,
    task_assignment_id: str | None = None,
) -> list[VideoSubmission]:
    return reviewer.list(
        status=status,
        influencer_id=influencer_id,
        campaign_id=campaign_id,
        task_assignment_id=task_assignment_id,
    )


@router.get("/{submission_id}")
def get_submission(submission_id: str, reviewer: ReviewerDep) -> VideoSubmission:
    return reviewer.get(submission_id)


@router.post("/{submission_id}/approve")
def approve_submission(
    submission_id: str,
    actor: CurrentActor,
    reviewer: ReviewerDep,
    body: ApproveSubmissionRequest | None = None,
) -> ApprovalResult:
    override_rate = body.override_rate if body is not None else None
    return reviewer.approve(submission_id, actor, override_rate)


@router.post("/{submission_id}/reject")
def reject_submission(
    submission_id: str, body: RejectSubmissionRequest, actor: CurrentActor, reviewer: ReviewerDep
) -> VideoSubmission:
    return reviewer.reject(submission_id, body.reason, actor)
