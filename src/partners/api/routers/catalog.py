"""Brands, campaigns and tasks."""

from __future__ import annotations

from fastapi import APIRouter

from partners.api.dependencies import CatalogDep, CurrentActor
from partners.api.schemas import (
    CampaignStatusRequest,
    CreateCampaignRequest,
    CreateTaskRequest,
    RegisterBrandRequest,
    UpdateBrandRequest,
)
from partners.domain.models import Brand, Campaign, Task

router = APIRouter(tags=["catalog"])


@router.post("/brands", status_code=201)
def register_brand(body: RegisterBrandRequest, actor: CurrentActor, catalog: CatalogDep) -> Brand:
    fields = body.model_dump(exclude={"user_id", "company_name"})
    return catalog.register_brand(body.user_id, body.company_name, actor, **fields)


@router.get("/brands")
def list_brands(catalog: CatalogDep) -> list[Brand]:
    return catalog.list_brands()


@router.get("/brands/{brand_id}")
def get_brand(brand_id: str, catalog: CatalogDep) -> Brand:
    return catalog.get_brand(brand_id)


@router.patch("/brands/{brand_id}")
def update_brand(
    brand_id: str, body: UpdateBrandRequest, actor: CurrentActor, catalog: CatalogDep
) -> Brand:
    return catalog.update_brand(brand_id, body.model_dump(exclude_unset=True), actor)


@router.post("/campaigns", status_code=201)
def create_campaign(
    body: CreateCampaignRequest, actor: CurrentActor, catalog: CatalogDep
) -> Campaign:
    return catalog.create_campaign(
        body.brand_id,
        body.title,
        body.budget,
        actor,
        description=body.description,
        requirements=body.requirements,
        deadline=body.deadline,
    )


@router.get("/campaigns")
def list_campaigns(
    catalog: CatalogDep, brand_id: str | None = None, status: str | None = None
) -> list[Campaign]:
    return catalog.list_campaigns(brand_id=brand_id, status=status)


@router.get("/campaigns/{campaign_id}")
def get_campaign(campaign_id: str, catalog: CatalogDep) -> Campaign:
    return catalog.get_campaign(campaign_id)


@router.post("/campaigns/{campaign_id}/status")
def set_campaign_status(
    campaign_id: str, body: CampaignStatusRequest, actor: CurrentActor, catalog: CatalogDep
) -> Campaign:
    return catalog.set_campaign_status(campaign_id, body.event, actor)


@router.post("/tasks", status_code=201)
def create_task(body: CreateTaskRequest, actor: CurrentActor, catalog: CatalogDep) -> Task:
    return catalog.create_task(
        body.title,
        actor,
        description=body.description,
        guidelines=body.guidelines,
        reward=body.reward,
    )


@router.get("/tasks")
def list_tasks(catalog: CatalogDep) -> list[Task]:
    return catalog.list_tasks()


@router.get("/tasks/{task_id}")
def get_task(task_id: str, catalog: CatalogDep) -> Task:
    return catalog.get_task(task_id)
