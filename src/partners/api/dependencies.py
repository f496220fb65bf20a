"""FastAPI dependencies: the calling actor and the shared services."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends, Header, HTTPException, Request

from partners.catalog import Catalog
from partners.domain.models import Actor
from partners.domain.types import Role
from partners.ledger import ApplicationLedger
from partners.notifications import StoreNotificationChannel
from partners.registry import InfluencerRegistry
from partners.review import SubmissionReviewer
from partners.settlement import SettlementEngine
from partners.store import PartnersStore


def get_actor(
    x_actor_id: Annotated[str | None, Header()] = None,
    x_actor_role: Annotated[str | None, Header()] = None,
) -> Actor:
    """Resolve the caller from the identity headers set by the gateway.

    Raises:
        HTTPException: 401 when either header is missing or the role is unknown.
    """
    if not x_actor_id or not x_actor_role:
        raise HTTPException(status_code=401, detail="X-Actor-Id and X-Actor-Role are required")
    try:
        role = Role(x_actor_role.strip().lower())
    except ValueError:
        raise HTTPException(
            status_code=401, detail=f"Unknown actor role: {x_actor_role}"
        ) from None
    return Actor(actor_id=x_actor_id, role=role)


def get_services(request: Request) -> dict[str, Any]:
    return request.app.state.services


Services = Annotated[dict[str, Any], Depends(get_services)]
CurrentActor = Annotated[Actor, Depends(get_actor)]


def get_store(services: Services) -> PartnersStore:
    return services["store"]


def get_registry(services: Services) -> InfluencerRegistry:
    return services["registry"]


def get_catalog(services: Services) -> Catalog:
    return services["catalog"]


def get_ledger(services: Services) -> ApplicationLedger:
    return services["ledger"]


def get_reviewer(services: Services) -> SubmissionReviewer:
    return services["reviewer"]


def get_settlement(services: Services) -> SettlementEngine:
    return services["settlement"]


def get_inbox(services: Services) -> StoreNotificationChannel:
    return services["inbox"]


StoreDep = Annotated[PartnersStore, Depends(get_store)]
RegistryDep = Annotated[InfluencerRegistry, Depends(get_registry)]
CatalogDep = Annotated[Catalog, Depends(get_catalog)]
LedgerDep = Annotated[ApplicationLedger, Depends(get_ledger)]
ReviewerDep = Annotated[SubmissionReviewer, Depends(get_reviewer)]
SettlementDep = Annotated[SettlementEngine, Depends(get_settlement)]
InboxDep = Annotated[StoreNotificationChannel, Depends(get_inbox)]
