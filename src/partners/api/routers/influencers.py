"""Influencer registration, approval and rate management."""

from __future__ import annotations

from fastapi import APIRouter

from partners.api.dependencies import CurrentActor, RegistryDep
from partners.api.schemas import DecisionRequest, RateRequest, RegisterInfluencerRequest
from partners.domain.models import Influencer

router = APIRouter(prefix="/influencers", tags=["influencers"])


@router.post("", status_code=201)
def register_influencer(
    body: RegisterInfluencerRequest, actor: CurrentActor, registry: RegistryDep
) -> Influencer:
    profile = body.model_dump(exclude={"id_proof_ref"})
    return registry.register(profile, body.id_proof_ref, actor)


@router.get("")
def list_influencers(registry: RegistryDep, status: str | None = None) -> list[Influencer]:
    return registry.list(status)


@router.get("/search")
def search_influencers(
    registry: RegistryDep,
    name: str | None = None,
    state: str | None = None,
    min_followers: int | None = None,
) -> list[Influencer]:
    return registry.search(name, state, min_followers)


@router.get("/{influencer_id}")
def get_influencer(influencer_id: str, registry: RegistryDep) -> Influencer:
    return registry.get(influencer_id)


@router.post("/{influencer_id}/decision")
def decide_influencer(
    influencer_id: str, body: DecisionRequest, actor: CurrentActor, registry: RegistryDep
) -> Influencer:
    return registry.decide(influencer_id, body.outcome, actor, body.reason)


@router.put("/{influencer_id}/rate")
def set_influencer_rate(
    influencer_id: str, body: RateRequest, actor: CurrentActor, registry: RegistryDep
) -> Influencer:
    return registry.set_rate(influencer_id, body.rate, actor)
