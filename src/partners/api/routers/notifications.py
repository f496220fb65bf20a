"""The calling user's notification inbox and the admin audit trail."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from partners.api.dependencies import CurrentActor, InboxDep, StoreDep
from partners.audit import query_audit_trail
from partners.domain.errors import NotFoundError
from partners.domain.rules import require_admin

router = APIRouter(tags=["notifications"])


@router.get("/notifications")
def list_notifications(
    actor: CurrentActor, inbox: InboxDep, unread_only: bool = False
) -> list[dict[str, Any]]:
    return inbox.list_for_user(actor.actor_id, unread_only=unread_only)


@router.post("/notifications/{notification_id}/read")
def mark_notification_read(
    notification_id: int, actor: CurrentActor, inbox: InboxDep
) -> dict[str, str]:
    if not inbox.mark_read(actor.actor_id, notification_id):
        raise NotFoundError("unread notification", str(notification_id))
    return {"status": "read"}


@router.get("/audit")
def audit_trail(
    actor: CurrentActor,
    store: StoreDep,
    entity_type: str | None = None,
    entity_id: str | None = None,
    influencer_id: str | None = None,
    event_type: str | None = None,
    limit: int = 50,
) -> list[dict[str, Any]]:
    require_admin(actor, "read the audit trail")
    return query_audit_trail(
        store,
        entity_type=entity_type,
        entity_id=entity_id,
        influencer_id=influencer_id,
        event_type=event_type,
        limit=limit,
    )
