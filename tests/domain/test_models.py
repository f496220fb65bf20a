"""Tests for domain models: validation of money, required fields and links."""

from decimal import Decimal

import pytest
from pydantic import TypeAdapter, ValidationError

from partners.domain.models import (
    Actor,
    Campaign,
    CampaignLink,
    Influencer,
    InfluencerProfile,
    LinkTarget,
    NoLink,
    Payment,
    TaskLink,
)
from partners.domain.types import PaymentType, Role


def _influencer(**overrides) -> Influencer:
    data = {
        "id": "inf-1",
        "user_id": "user-1",
        "full_name": "Asha Rao",
        "email": "asha@example.com",
        "phone_number": "9876543210",
        "upi_id": "asha@okbank",
        "id_proof_type": "aadhaar",
        "id_proof_url": "s3://proofs/1.png",
        "created_at": "2025-01-01T00:00:00Z",
    }
    data.update(overrides)
    return Influencer(**data)


class TestInfluencer:
    def test_defaults_to_pending_without_rate(self) -> None:
        influencer = _influencer()
        assert influencer.approval_status == "pending"
        assert influencer.video_rate is None
        assert influencer.has_rate is False

    def test_zero_rate_counts_as_unset(self) -> None:
        assert _influencer(video_rate=Decimal("0")).has_rate is False
        assert _influencer(video_rate=Decimal("2500")).has_rate is True

    def test_float_rate_rejected(self) -> None:
        with pytest.raises(ValidationError, match="not float"):
            _influencer(video_rate=2500.0)

    @pytest.mark.parametrize("field", ["full_name", "upi_id", "email", "phone_number"])
    def test_blank_identity_fields_rejected(self, field: str) -> None:
        with pytest.raises(ValidationError):
            InfluencerProfile(
                **{
                    "user_id": "u",
                    "full_name": "A",
                    "email": "a@b.c",
                    "phone_number": "1",
                    "upi_id": "a@ok",
                    "id_proof_type": "pan",
                    field: "  ",
                }
            )

    def test_negative_follower_count_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _influencer(follower_count=-1)

    def test_models_are_frozen(self) -> None:
        influencer = _influencer()
        with pytest.raises(ValidationError):
            influencer.video_rate = Decimal("1")  # type: ignore[misc]


class TestMoneyFields:
    def test_campaign_budget_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            Campaign(
                id="c", brand_id="b", title="T", budget=Decimal("0"), created_at="2025-01-01"
            )

    def test_payment_amount_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            Payment(
                id="p",
                influencer_id="i",
                amount=Decimal("0"),
                payment_type=PaymentType.FIXED,
                created_at="2025-01-01",
            )

    def test_payment_rejects_float(self) -> None:
        with pytest.raises(ValidationError):
            Payment(
                id="p",
                influencer_id="i",
                amount=10.5,
                payment_type=PaymentType.FIXED,
                created_at="2025-01-01",
            )


class TestLinkTarget:
    """A submission links to nothing, a task assignment, or a campaign; never both."""

    adapter = TypeAdapter(LinkTarget)

    def test_discriminates_on_kind(self) -> None:
        assert isinstance(self.adapter.validate_python({"kind": "none"}), NoLink)
        task = self.adapter.validate_python({"kind": "task", "task_assignment_id": "a-1"})
        assert isinstance(task, TaskLink)
        campaign = self.adapter.validate_python({"kind": "campaign", "campaign_id": "c-1"})
        assert isinstance(campaign, CampaignLink)

    def test_task_link_requires_assignment_id(self) -> None:
        with pytest.raises(ValidationError):
            self.adapter.validate_python({"kind": "task", "campaign_id": "c-1"})

    def test_unknown_kind_rejected(self) -> None:
        with pytest.raises(ValidationError):
            self.adapter.validate_python({"kind": "both"})


def test_actor_is_admin() -> None:
    assert Actor(actor_id="a", role=Role.ADMIN).is_admin
    assert not Actor(actor_id="m", role=Role.MARKETING).is_admin
