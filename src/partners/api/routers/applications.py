"""Campaign applications and task assignments."""

from __future__ import annotations

from fastapi import APIRouter

from partners.api.dependencies import CurrentActor, LedgerDep
from partners.api.schemas import (
    AssignTaskRequest,
    CampaignApplicationRequest,
    DecisionRequest,
    TaskApplicationRequest,
)
from partners.domain.models import CampaignApplication, TaskApplication

router = APIRouter(tags=["applications"])


@router.post("/campaigns/{campaign_id}/applications", status_code=201)
def apply_to_campaign(
    campaign_id: str, body: CampaignApplicationRequest, actor: CurrentActor, ledger: LedgerDep
) -> CampaignApplication:
    return ledger.apply_to_campaign(
        body.influencer_id, campaign_id, body.bid_amount, body.message, actor
    )


@router.get("/campaign-applications")
def list_campaign_applications(
    ledger: LedgerDep,
    campaign_id: str | None = None,
    influencer_id: str | None = None,
    status: str | None = None,
) -> list[CampaignApplication]:
    return ledger.list_campaign_applications(
        campaign_id=campaign_id, influencer_id=influencer_id, status=status
    )


@router.get("/campaign-applications/{application_id}")
def get_campaign_application(application_id: str, ledger: LedgerDep) -> CampaignApplication:
    return ledger.get_campaign_application(application_id)


@router.post("/campaign-applications/{application_id}/decision")
def decide_campaign_application(
    application_id: str, body: DecisionRequest, actor: CurrentActor, ledger: LedgerDep
) -> CampaignApplication:
    return ledger.decide_campaign_application(application_id, body.outcome, actor, body.reason)


@router.post("/tasks/{task_id}/applications", status_code=201)
def apply_to_task(
    task_id: str, body: TaskApplicationRequest, actor: CurrentActor, ledger: LedgerDep
) -> TaskApplication:
    return ledger.apply_to_task(
        body.influencer_id, task_id, body.pitch, body.requested_rate, actor
    )


@router.post("/tasks/{task_id}/assignments", status_code=201)
def assign_task(
    task_id: str, body: AssignTaskRequest, actor: CurrentActor, ledger: LedgerDep
) -> TaskApplication:
    return ledger.assign_task(body.influencer_id, task_id, actor)


@router.get("/task-applications")
def list_task_applications(
    ledger: LedgerDep,
    influencer_id: str | None = None,
    task_id: str | None = None,
    status: str | None = None,
) -> list[TaskApplication]:
    return ledger.list_task_applications(
        influencer_id=influencer_id, task_id=task_id, status=status
    )


@router.get("/task-applications/{assignment_id}")
def get_task_application(assignment_id: str, ledger: LedgerDep) -> TaskApplication:
    return ledger.get_task_application(assignment_id)


@router.post("/task-applications/{assignment_id}/decision")
def decide_task_application(
    assignment_id: str, body: DecisionRequest, actor: CurrentActor, ledger: LedgerDep
) -> TaskApplication:
    return ledger.decide_task_application(assignment_id, body.outcome, actor, body.reason)
