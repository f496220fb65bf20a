"""Brand, campaign and task catalog.

Brands are owned by a marketing user; campaigns belong to a brand and keep
their core fields fixed after creation (only the status moves); tasks are
curated by admins and belong to no brand.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import structlog

from partners.audit import AuditLogger
from partners.domain.errors import (
    ConflictError,
    InvalidTransitionError,
    UnauthorizedError,
    ValidationError,
)
from partners.domain.models import Actor, Brand, Campaign, Task
from partners.domain.rules import (
    deadline_passed,
    new_id,
    now_iso,
    parse_enum,
    parse_model,
    require_admin,
    require_text,
    to_money,
)
from partners.domain.types import CampaignStatus, Role
from partners.resilience import resilient_store_call
from partners.state_machine import CAMPAIGN_LIFECYCLE, CampaignEvent, LifecycleStateMachine
from partners.store import PartnersStore

logger = structlog.get_logger()

BRAND_EDITABLE_FIELDS = frozenset(
    {"company_name", "website", "industry", "contact_person", "phone_number", "logo_url"}
)


class Catalog:
    """Brand profiles, the campaigns they publish, and admin-curated tasks."""

    def __init__(self, store: PartnersStore, audit: AuditLogger) -> None:
        self._store = store
        self._audit = audit

    # ------------------------------------------------------------------
    # Brands
    # ------------------------------------------------------------------

    @resilient_store_call("catalog.register_brand")
    def register_brand(
        self,
        user_id: str,
        company_name: str,
        actor: Actor,
        *,
        website: str | None = None,
        industry: str | None = None,
        contact_person: str | None = None,
        phone_number: str | None = None,
        logo_url: str | None = None,
    ) -> Brand:
        """Create the brand profile for a marketing user.

        Raises:
            UnauthorizedError: If the actor is neither that marketing user nor an admin.
            ConflictError: If the user already owns a brand.
        """
        if not actor.is_admin and (actor.role != Role.MARKETING or actor.actor_id != user_id):
            raise UnauthorizedError(
                f"Actor {actor.actor_id} may not register a brand for {user_id}"
            )

        brand = parse_model(
            Brand,
            {
                "id": new_id(),
                "user_id": require_text(user_id, "user_id"),
                "company_name": company_name,
                "website": website,
                "industry": industry,
                "contact_person": contact_person,
                "phone_number": phone_number,
                "logo_url": logo_url,
                "created_at": now_iso(),
            },
        )
        with self._store.transaction():
            if self._store.count(Brand, user_id=user_id):
                raise ConflictError(f"User '{user_id}' already has a brand profile")
            self._store.add(brand)
            self._audit.log_entity_created("brand", brand.id, actor)

        logger.info("brand_registered", brand_id=brand.id, user_id=user_id)
        return brand

    @resilient_store_call("catalog.update_brand")
    def update_brand(self, brand_id: str, changes: dict[str, Any], actor: Actor) -> Brand:
        """Update profile fields of a brand.  Only the owning user may do this.

        Raises:
            UnauthorizedError: If the actor does not own the brand.
            ValidationError: If *changes* names a non-editable field or an
                invalid value.
        """
        unknown = set(changes) - BRAND_EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields not editable: {', '.join(sorted(unknown))}")

        with self._store.transaction():
            brand = self._store.require(Brand, brand_id)
            if actor.actor_id != brand.user_id:
                raise UnauthorizedError(f"Only the owning user may update brand {brand_id}")
            updated = parse_model(Brand, {**brand.model_dump(), **changes})
            if changes:
                self._store.update(Brand, brand_id, dict(changes))

        logger.info("brand_updated", brand_id=brand_id, fields=sorted(changes))
        return updated

    def get_brand(self, brand_id: str) -> Brand:
        return self._store.require(Brand, brand_id)

    def get_brand_by_user(self, user_id: str) -> Brand | None:
        return self._store.find_one(Brand, user_id=user_id)

    def list_brands(self) -> list[Brand]:
        return self._store.find(Brand)

    # ------------------------------------------------------------------
    # Campaigns
    # ------------------------------------------------------------------

    @resilient_store_call("catalog.create_campaign")
    def create_campaign(
        self,
        brand_id: str,
        title: str,
        budget: Decimal | str | int,
        actor: Actor,
        *,
        description: str = "",
        requirements: str = "",
        deadline: str | None = None,
    ) -> Campaign:
        """Publish a new ``active`` campaign for a brand.

        Args:
            brand_id: The publishing brand.
            title: Campaign title.
            budget: Positive budget amount.
            actor: The brand's owning user or an admin.
            description: Free-text description.
            requirements: Free-text content requirements.
            deadline: Optional ISO 8601 date; must not be in the past.

        Raises:
            UnauthorizedError: If the actor does not own the brand.
            ValidationError: If the budget is not positive or the deadline has passed.
        """
        amount = to_money(budget, "budget")
        if deadline and deadline_passed(deadline):
            raise ValidationError(f"deadline {deadline} is in the past")

        with self._store.transaction():
            brand = self._store.require(Brand, brand_id)
            _require_brand_owner(actor, brand)
            campaign = parse_model(
                Campaign,
                {
                    "id": new_id(),
                    "brand_id": brand_id,
                    "title": title,
                    "description": description,
                    "requirements": requirements,
                    "budget": amount,
                    "deadline": deadline,
                    "created_at": now_iso(),
                },
            )
            self._store.add(campaign)
            self._audit.log_entity_created(
                "campaign", campaign.id, actor, initial_state=campaign.status.value
            )

        logger.info("campaign_created", campaign_id=campaign.id, brand_id=brand_id)
        return campaign

    @resilient_store_call("catalog.set_campaign_status")
    def set_campaign_status(
        self, campaign_id: str, event: CampaignEvent | str, actor: Actor
    ) -> Campaign:
        """Complete or close an active campaign.

        Raises:
            UnauthorizedError: If the actor does not own the campaign's brand.
            InvalidTransitionError: If the campaign is already completed or closed.
        """
        event = parse_enum(CampaignEvent, event, "event")

        with self._store.transaction():
            campaign = self._store.require(Campaign, campaign_id)
            _require_brand_owner(actor, self._store.require(Brand, campaign.brand_id))
            machine = LifecycleStateMachine(CAMPAIGN_LIFECYCLE, campaign.status)
            new_status = machine.trigger(event)
            if not self._store.update(
                Campaign, campaign_id, {"status": new_status}, expected={"status": campaign.status}
            ):
                raise InvalidTransitionError("campaign", str(campaign.status), str(event))
            self._audit.log_state_transition(
                "campaign", campaign_id, str(campaign.status), str(new_status), str(event), actor
            )

        logger.info("campaign_status_changed", campaign_id=campaign_id, status=str(new_status))
        return campaign.model_copy(update={"status": new_status})

    def get_campaign(self, campaign_id: str) -> Campaign:
        return self._store.require(Campaign, campaign_id)

    def list_campaigns(
        self,
        brand_id: str | None = None,
        status: CampaignStatus | str | None = None,
    ) -> list[Campaign]:
        """Return campaigns newest first, optionally filtered by brand and status."""
        filters: dict[str, Any] = {}
        if brand_id is not None:
            filters["brand_id"] = brand_id
        if status is not None:
            filters["status"] = parse_enum(CampaignStatus, status, "status")
        return self._store.find(Campaign, **filters)

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    @resilient_store_call("catalog.create_task")
    def create_task(
        self,
        title: str,
        actor: Actor,
        *,
        description: str = "",
        guidelines: str = "",
        reward: Decimal | str | int = 0,
    ) -> Task:
        """Create an admin-curated task."""
        require_admin(actor, "create tasks")
        task = parse_model(
            Task,
            {
                "id": new_id(),
                "title": title,
                "description": description,
                "guidelines": guidelines,
                "reward": to_money(reward, "reward"),
                "created_by": actor.actor_id,
                "created_at": now_iso(),
            },
        )
        with self._store.transaction():
            self._store.add(task)
            self._audit.log_entity_created("task", task.id, actor)

        logger.info("task_created", task_id=task.id)
        return task

    def get_task(self, task_id: str) -> Task:
        return self._store.require(Task, task_id)

    def list_tasks(self) -> list[Task]:
        return self._store.find(Task)


def _require_brand_owner(actor: Actor, brand: Brand) -> None:
    if actor.is_admin or actor.actor_id == brand.user_id:
        return
    raise UnauthorizedError(f"Actor {actor.actor_id} does not own brand {brand.id}")


def require_campaign_owner(store: PartnersStore, actor: Actor, campaign: Campaign) -> None:
    """Raise ``UnauthorizedError`` unless *actor* owns *campaign*'s brand or is an admin."""
    if actor.is_admin:
        return
    _require_brand_owner(actor, store.require(Brand, campaign.brand_id))
