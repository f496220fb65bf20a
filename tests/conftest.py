"""Shared pytest fixtures for the partners test suite."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest

from partners.audit import AuditLogger
from partners.catalog import Catalog
from partners.domain.models import Actor, Brand, Campaign, Influencer, Task
from partners.domain.types import ApprovalStatus, Role
from partners.ledger import ApplicationLedger
from partners.notifications import InMemoryNotificationChannel, Notifier
from partners.registry import InfluencerRegistry
from partners.review import SubmissionReviewer
from partners.settlement import SettlementEngine
from partners.store import PartnersStore, open_store


@pytest.fixture
def store(tmp_path: Path) -> Iterator[PartnersStore]:
    """A fresh partners database in a temporary directory."""
    partners_store = open_store(tmp_path / "partners.db")
    yield partners_store
    partners_store.close()


@pytest.fixture
def audit(store: PartnersStore) -> AuditLogger:
    return AuditLogger(store)


@pytest.fixture
def channel() -> InMemoryNotificationChannel:
    return InMemoryNotificationChannel()


@pytest.fixture
def notifier(channel: InMemoryNotificationChannel) -> Notifier:
    return Notifier([channel])


@pytest.fixture
def registry(store: PartnersStore, audit: AuditLogger, notifier: Notifier) -> InfluencerRegistry:
    return InfluencerRegistry(store, audit, notifier)


@pytest.fixture
def catalog(store: PartnersStore, audit: AuditLogger) -> Catalog:
    return Catalog(store, audit)


@pytest.fixture
def ledger(
    store: PartnersStore,
    audit: AuditLogger,
    notifier: Notifier,
    registry: InfluencerRegistry,
) -> ApplicationLedger:
    return ApplicationLedger(store, audit, notifier, registry)


@pytest.fixture
def reviewer(
    store: PartnersStore,
    audit: AuditLogger,
    notifier: Notifier,
    registry: InfluencerRegistry,
    ledger: ApplicationLedger,
) -> SubmissionReviewer:
    return SubmissionReviewer(store, audit, notifier, registry, ledger)


@pytest.fixture
def settlement(
    store: PartnersStore,
    audit: AuditLogger,
    notifier: Notifier,
    registry: InfluencerRegistry,
) -> SettlementEngine:
    return SettlementEngine(store, audit, notifier, registry)


# ---------------------------------------------------------------------------
# Actors
# ---------------------------------------------------------------------------


@pytest.fixture
def admin() -> Actor:
    return Actor(actor_id="admin-1", role=Role.ADMIN)


@pytest.fixture
def brand_user() -> Actor:
    return Actor(actor_id="brand-user-1", role=Role.MARKETING)


def influencer_actor(user_id: str) -> Actor:
    return Actor(actor_id=user_id, role=Role.INFLUENCER)


def profile_data(user_id: str = "user-1", **overrides: Any) -> dict[str, Any]:
    """Registration fields for a valid influencer profile."""
    data: dict[str, Any] = {
        "user_id": user_id,
        "full_name": "Asha Rao",
        "email": f"{user_id}@example.com",
        "phone_number": "+91 98765 43210",
        "upi_id": f"{user_id}@okbank",
        "id_proof_type": "aadhaar",
        "district": "Pune",
        "state": "Maharashtra",
        "social_media_handles": {"instagram": "@asha"},
        "follower_count": 12000,
    }
    data.update(overrides)
    return data


# ---------------------------------------------------------------------------
# Entity factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_influencer(
    registry: InfluencerRegistry, admin: Actor
) -> Callable[..., Influencer]:
    """Register an influencer and (by default) approve it, optionally with a rate."""
    counter = {"n": 0}

    def _make(
        user_id: str | None = None,
        approve: bool = True,
        rate: Decimal | str | None = None,
    ) -> Influencer:
        counter["n"] += 1
        user_id = user_id or f"user-{counter['n']}"
        influencer = registry.register(
            profile_data(user_id), "s3://proofs/id.png", influencer_actor(user_id)
        )
        if approve:
            influencer = registry.decide(influencer.id, ApprovalStatus.APPROVED, admin)
        if rate is not None:
            influencer = registry.set_rate(influencer.id, rate, admin)
        return influencer

    return _make


@pytest.fixture
def brand(catalog: Catalog, brand_user: Actor) -> Brand:
    return catalog.register_brand(brand_user.actor_id, "Acme Foods", brand_user)


@pytest.fixture
def campaign(catalog: Catalog, brand: Brand, brand_user: Actor) -> Campaign:
    return catalog.create_campaign(
        brand.id, "Monsoon launch", Decimal("50000"), brand_user, description="Reels"
    )


@pytest.fixture
def task(catalog: Catalog, admin: Actor) -> Task:
    return catalog.create_task("Unboxing video", admin, reward=Decimal("500"))


@pytest.fixture
def as_influencer() -> Callable[[Influencer], Actor]:
    """Return the actor acting as a given influencer."""

    def _actor(influencer: Influencer) -> Actor:
        return influencer_actor(influencer.user_id)

    return _actor


@pytest.fixture
def profile() -> Callable[..., dict[str, Any]]:
    return profile_data
