"""Tests for influencer registration, approval decisions and video rates."""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal
from typing import Any

import pytest

from partners.audit import query_audit_trail
from partners.domain.errors import (
    ConflictError,
    InvalidRateError,
    InvalidTransitionError,
    NotApprovedError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from partners.domain.models import Actor, Influencer
from partners.domain.types import ApprovalStatus, NotificationKind, Role
from partners.notifications import InMemoryNotificationChannel
from partners.registry import InfluencerRegistry
from partners.store import PartnersStore

INFLUENCER = Actor(actor_id="user-1", role=Role.INFLUENCER)


class TestRegister:
    def test_registers_pending_influencer(
        self,
        registry: InfluencerRegistry,
        store: PartnersStore,
        profile: Callable[..., dict[str, Any]],
    ) -> None:
        influencer = registry.register(profile("user-1"), "s3://proofs/1.png", INFLUENCER)

        assert influencer.approval_status == ApprovalStatus.PENDING
        assert influencer.video_rate is None
        assert influencer.id_proof_url == "s3://proofs/1.png"
        assert registry.get(influencer.id) == influencer
        [entry] = query_audit_trail(store, entity_id=influencer.id)
        assert entry["event_type"] == "entity_created"
        assert entry["to_state"] == "pending"

    def test_duplicate_user_conflicts(
        self, registry: InfluencerRegistry, profile: Callable[..., dict[str, Any]]
    ) -> None:
        registry.register(profile("user-1"), "s3://proofs/1.png", INFLUENCER)
        with pytest.raises(ConflictError, match="already registered"):
            registry.register(profile("user-1"), "s3://proofs/2.png", INFLUENCER)

    @pytest.mark.parametrize("field", ["full_name", "email", "phone_number", "upi_id"])
    def test_missing_required_field(
        self,
        registry: InfluencerRegistry,
        profile: Callable[..., dict[str, Any]],
        field: str,
    ) -> None:
        with pytest.raises(ValidationError):
            registry.register(profile("user-1", **{field: "  "}), "s3://p.png", INFLUENCER)
        assert registry.count() == 0

    def test_missing_id_proof(
        self, registry: InfluencerRegistry, profile: Callable[..., dict[str, Any]]
    ) -> None:
        with pytest.raises(ValidationError, match="id_proof_ref"):
            registry.register(profile("user-1"), "", INFLUENCER)

    def test_cannot_register_someone_else(
        self, registry: InfluencerRegistry, profile: Callable[..., dict[str, Any]]
    ) -> None:
        with pytest.raises(UnauthorizedError):
            registry.register(profile("user-2"), "s3://p.png", INFLUENCER)

    def test_admin_may_register_on_behalf(
        self,
        registry: InfluencerRegistry,
        profile: Callable[..., dict[str, Any]],
        admin: Actor,
    ) -> None:
        influencer = registry.register(profile("user-2"), "s3://p.png", admin)
        assert registry.get_by_user("user-2") == influencer


class TestDecide:
    def test_approve_stamps_and_notifies(
        self,
        make_influencer: Callable[..., Influencer],
        registry: InfluencerRegistry,
        admin: Actor,
        channel: InMemoryNotificationChannel,
    ) -> None:
        pending = make_influencer("user-1", approve=False)

        approved = registry.decide(pending.id, "approved", admin)

        assert approved.approval_status == ApprovalStatus.APPROVED
        assert approved.approved_by == "admin-1"
        assert approved.approved_at is not None
        assert registry.get(pending.id) == approved
        assert channel.kinds_for("user-1") == [NotificationKind.INFLUENCER_APPROVED]

    def test_reject_records_reason(
        self,
        make_influencer: Callable[..., Influencer],
        registry: InfluencerRegistry,
        admin: Actor,
        store: PartnersStore,
    ) -> None:
        pending = make_influencer("user-1", approve=False)

        rejected = registry.decide(pending.id, ApprovalStatus.REJECTED, admin, reason=" Blurry ID ")

        assert rejected.rejection_reason == "Blurry ID"
        [transition] = query_audit_trail(store, entity_id=pending.id, event_type="state_transition")
        assert transition["from_state"] == "pending"
        assert transition["to_state"] == "rejected"
        assert transition["metadata"]["reason"] == "Blurry ID"

    def test_second_decision_is_invalid(
        self,
        make_influencer: Callable[..., Influencer],
        registry: InfluencerRegistry,
        admin: Actor,
    ) -> None:
        influencer = make_influencer("user-1")
        with pytest.raises(InvalidTransitionError):
            registry.decide(influencer.id, "rejected", admin)

    def test_unknown_outcome(
        self,
        make_influencer: Callable[..., Influencer],
        registry: InfluencerRegistry,
        admin: Actor,
    ) -> None:
        pending = make_influencer("user-1", approve=False)
        with pytest.raises(ValidationError, match="outcome"):
            registry.decide(pending.id, "pending", admin)

    def test_only_admins_decide(
        self,
        make_influencer: Callable[..., Influencer],
        registry: InfluencerRegistry,
        brand_user: Actor,
    ) -> None:
        pending = make_influencer("user-1", approve=False)
        with pytest.raises(UnauthorizedError):
            registry.decide(pending.id, "approved", brand_user)
        assert registry.get(pending.id).approval_status == ApprovalStatus.PENDING

    def test_unknown_influencer(self, registry: InfluencerRegistry, admin: Actor) -> None:
        with pytest.raises(NotFoundError):
            registry.decide("missing", "approved", admin)


class TestSetRate:
    def test_first_rate_is_an_assignment(
        self,
        make_influencer: Callable[..., Influencer],
        registry: InfluencerRegistry,
        admin: Actor,
        store: PartnersStore,
    ) -> None:
        influencer = make_influencer("user-1")

        updated = registry.set_rate(influencer.id, "2500", admin)

        assert updated.video_rate == Decimal("2500.00")
        assert updated.has_rate
        [entry] = query_audit_trail(store, entity_id=influencer.id, event_type="rate_assigned")
        assert entry["amount"] == "2500.00"
        assert entry["metadata"]["source"] == "set_rate"

    def test_changing_a_rate_is_an_override(
        self,
        make_influencer: Callable[..., Influencer],
        registry: InfluencerRegistry,
        admin: Actor,
        store: PartnersStore,
    ) -> None:
        influencer = make_influencer("user-1", rate="2500")

        registry.set_rate(influencer.id, 3000, admin)

        [entry] = query_audit_trail(store, entity_id=influencer.id, event_type="rate_overridden")
        assert entry["metadata"]["previous_rate"] == "2500.00"

    @pytest.mark.parametrize("rate", ["-1", "abc", 12.5])
    def test_invalid_rate(
        self,
        make_influencer: Callable[..., Influencer],
        registry: InfluencerRegistry,
        admin: Actor,
        rate: Any,
    ) -> None:
        influencer = make_influencer("user-1")
        with pytest.raises(InvalidRateError):
            registry.set_rate(influencer.id, rate, admin)

    def test_only_admins_set_rates(
        self,
        make_influencer: Callable[..., Influencer],
        registry: InfluencerRegistry,
    ) -> None:
        influencer = make_influencer("user-1")
        with pytest.raises(UnauthorizedError):
            registry.set_rate(influencer.id, "100", INFLUENCER)


class TestQueries:
    def test_list_and_count_by_status(
        self,
        make_influencer: Callable[..., Influencer],
        registry: InfluencerRegistry,
    ) -> None:
        make_influencer("user-1")
        make_influencer("user-2", approve=False)

        assert registry.count() == 2
        assert registry.count("approved") == 1
        assert [i.user_id for i in registry.list(ApprovalStatus.PENDING)] == ["user-2"]
        with pytest.raises(ValidationError):
            registry.list("archived")

    def test_require_approved(
        self,
        make_influencer: Callable[..., Influencer],
        registry: InfluencerRegistry,
    ) -> None:
        pending = make_influencer("user-1", approve=False)
        with pytest.raises(NotApprovedError) as exc_info:
            registry.require_approved(pending.id)
        assert exc_info.value.approval_status == "pending"


class TestSearch:
    @pytest.fixture
    def roster(
        self,
        registry: InfluencerRegistry,
        admin: Actor,
        profile: Callable[..., dict[str, Any]],
    ) -> dict[str, Influencer]:
        people = {
            "asha": profile("user-1", full_name="Asha Rao", follower_count=12000),
            "ravi": profile(
                "user-2", full_name="Ravi Kumar", state="Karnataka", follower_count=50000
            ),
            "meera": profile("user-3", full_name="Meera Rao", follower_count=800),
            "pending": profile("user-4", full_name="Arjun Rao", follower_count=90000),
        }
        roster: dict[str, Influencer] = {}
        for key, data in people.items():
            influencer = registry.register(data, "s3://proofs/id.png", admin)
            if key != "pending":
                influencer = registry.decide(influencer.id, ApprovalStatus.APPROVED, admin)
            roster[key] = influencer
        return roster

    def test_only_approved_largest_audience_first(
        self, registry: InfluencerRegistry, roster: dict[str, Influencer]
    ) -> None:
        found = registry.search()
        assert [i.full_name for i in found] == ["Ravi Kumar", "Asha Rao", "Meera Rao"]

    def test_name_substring_is_case_insensitive(
        self, registry: InfluencerRegistry, roster: dict[str, Influencer]
    ) -> None:
        assert [i.full_name for i in registry.search(name="rao")] == ["Asha Rao", "Meera Rao"]
        assert registry.search(name="%") == []

    def test_state_and_follower_floor(
        self, registry: InfluencerRegistry, roster: dict[str, Influencer]
    ) -> None:
        assert [i.id for i in registry.search(state="Karnataka")] == [roster["ravi"].id]
        found = registry.search(state="Maharashtra", min_followers=12000)
        assert [i.id for i in found] == [roster["asha"].id]

    def test_negative_follower_floor_rejected(self, registry: InfluencerRegistry) -> None:
        with pytest.raises(ValidationError, match="min_followers"):
            registry.search(min_followers=-1)
