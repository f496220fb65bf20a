"""HTTP tests: identity headers, error mapping and an end-to-end payout flow."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from partners.api.errors import status_for
from partners.app import create_app, initialize_services
from partners.config import Settings
from partners.domain.errors import (
    AlreadyPaidError,
    DuplicateApplicationError,
    InvalidRateError,
    NotApprovedError,
    NotFoundError,
    TransientError,
)

ADMIN = {"X-Actor-Id": "admin-1", "X-Actor-Role": "admin"}
MARKETER = {"X-Actor-Id": "brand-user-1", "X-Actor-Role": "marketing"}


def _as(user_id: str) -> dict[str, str]:
    return {"X-Actor-Id": user_id, "X-Actor-Role": "influencer"}


@pytest.fixture
def client(tmp_path: Path) -> Iterator[TestClient]:
    settings = Settings(
        _env_file=None, database_path=tmp_path / "partners.db"  # type: ignore[call-arg]
    )
    with TestClient(create_app(initialize_services(settings))) as test_client:
        yield test_client


@pytest.fixture
def approved_influencer(
    client: TestClient, profile: Callable[..., dict[str, Any]]
) -> dict[str, Any]:
    body = {**profile("user-1"), "id_proof_ref": "s3://proofs/1.png"}
    created = client.post("/influencers", json=body, headers=_as("user-1"))
    assert created.status_code == 201
    decided = client.post(
        f"/influencers/{created.json()['id']}/decision",
        json={"outcome": "approved"},
        headers=ADMIN,
    )
    assert decided.status_code == 200
    return decided.json()


@pytest.mark.parametrize(
    ("exc", "status_code"),
    [
        (InvalidRateError("bad"), 422),
        (NotApprovedError("inf-1", "pending"), 403),
        (NotFoundError("payment", "p-1"), 404),
        (DuplicateApplicationError("twice"), 409),
        (AlreadyPaidError("p-1"), 409),
        (TransientError("locked"), 503),
    ],
)
def test_status_for_domain_errors(exc: Exception, status_code: int) -> None:
    assert status_for(exc) == status_code


class TestIdentity:
    def test_missing_headers_is_401(self, client: TestClient) -> None:
        response = client.post("/tasks", json={"title": "Reel"})
        assert response.status_code == 401

    def test_unknown_role_is_401(self, client: TestClient) -> None:
        response = client.post(
            "/tasks", json={"title": "Reel"}, headers={"X-Actor-Id": "x", "X-Actor-Role": "root"}
        )
        assert response.status_code == 401

    def test_reads_need_no_identity(self, client: TestClient) -> None:
        assert client.get("/payments").json() == []


class TestErrorMapping:
    def test_not_found(self, client: TestClient) -> None:
        response = client.get("/influencers/missing")
        assert response.status_code == 404
        assert response.json() == {
            "error": "NotFoundError",
            "detail": "influencer 'missing' not found",
        }

    def test_unauthorized_role(self, client: TestClient) -> None:
        response = client.post("/tasks", json={"title": "Reel"}, headers=MARKETER)
        assert response.status_code == 403
        assert response.json()["error"] == "UnauthorizedError"

    def test_domain_validation(
        self, client: TestClient, profile: Callable[..., dict[str, Any]]
    ) -> None:
        body = {**profile("user-1"), "id_proof_ref": "  "}
        response = client.post("/influencers", json=body, headers=_as("user-1"))
        assert response.status_code == 422
        assert response.json()["error"] == "ValidationError"

    def test_conflict(
        self, client: TestClient, approved_influencer: dict[str, Any]
    ) -> None:
        response = client.post(
            f"/influencers/{approved_influencer['id']}/decision",
            json={"outcome": "rejected"},
            headers=ADMIN,
        )
        assert response.status_code == 409
        assert response.json()["error"] == "InvalidTransitionError"

    def test_amount_too_large_is_422(
        self, client: TestClient, approved_influencer: dict[str, Any]
    ) -> None:
        response = client.post(
            "/revenue-shares",
            json={
                "influencer_id": approved_influencer["id"],
                "month": "March",
                "year": 2025,
                "total_revenue": "1e30",
            },
            headers=ADMIN,
        )
        assert response.status_code == 422
        assert response.json()["error"] == "ValidationError"


def test_submission_to_payout_flow(
    client: TestClient, approved_influencer: dict[str, Any]
) -> None:
    influencer_id = approved_influencer["id"]
    submitted = client.post(
        "/submissions",
        json={
            "influencer_id": influencer_id,
            "title": "Morning routine",
            "video_url": "https://cdn.example/v.mp4",
        },
        headers=_as("user-1"),
    )
    assert submitted.status_code == 201
    submission_id = submitted.json()["id"]

    no_rate = client.post(f"/submissions/{submission_id}/approve", headers=ADMIN)
    assert no_rate.status_code == 422
    assert no_rate.json()["error"] == "InvalidRateError"

    approved = client.post(
        f"/submissions/{submission_id}/approve",
        json={"override_rate": "3000"},
        headers=ADMIN,
    )
    assert approved.status_code == 200
    result = approved.json()
    assert result["rate_assigned"] is True
    assert result["payment"]["amount"] == "3000.00"
    payment_id = result["payment"]["id"]

    paid = client.post(
        f"/payments/{payment_id}/mark-paid", json={"transaction_ref": "UPI-1"}, headers=ADMIN
    )
    assert paid.status_code == 200
    assert paid.json()["payment_status"] == "paid"
    again = client.post(
        f"/payments/{payment_id}/mark-paid", json={"transaction_ref": "UPI-2"}, headers=ADMIN
    )
    assert again.status_code == 409
    assert again.json()["error"] == "AlreadyPaidError"

    settled = client.post(
        "/revenue-shares",
        json={
            "influencer_id": influencer_id,
            "month": "March",
            "year": 2025,
            "total_revenue": "100000",
        },
        headers=ADMIN,
    )
    assert settled.status_code == 201
    assert settled.json()["payment"]["amount"] == "5000.00"

    summary = client.get("/payments/summary", params={"influencer_id": influencer_id}).json()
    assert summary == {
        "total_paid": "3000.00",
        "total_pending": "5000.00",
        "transaction_count": 2,
    }

    inbox = client.get("/notifications", headers=_as("user-1")).json()
    kinds = [n["event_kind"] for n in inbox]
    assert kinds[0] == "payment_created"
    assert "payment_paid" in kinds
    assert "influencer_approved" in kinds

    marked = client.post(f"/notifications/{inbox[0]['id']}/read", headers=_as("user-1"))
    assert marked.status_code == 200
    unread = client.get("/notifications", params={"unread_only": True}, headers=_as("user-1"))
    assert len(unread.json()) == len(inbox) - 1

    trail = client.get("/audit", params={"influencer_id": influencer_id}, headers=ADMIN)
    assert trail.status_code == 200
    assert {"rate_assigned", "payment_paid", "revenue_settled"} <= {
        entry["event_type"] for entry in trail.json()
    }
    forbidden = client.get("/audit", headers=_as("user-1"))
    assert forbidden.status_code == 403


def test_campaign_flow(client: TestClient, approved_influencer: dict[str, Any]) -> None:
    brand = client.post(
        "/brands", json={"user_id": "brand-user-1", "company_name": "Acme"}, headers=MARKETER
    ).json()
    campaign = client.post(
        "/campaigns",
        json={"brand_id": brand["id"], "title": "Launch", "budget": "10000"},
        headers=MARKETER,
    ).json()
    assert campaign["status"] == "active"

    application = client.post(
        f"/campaigns/{campaign['id']}/applications",
        json={"influencer_id": approved_influencer["id"], "bid_amount": "800"},
        headers=_as("user-1"),
    )
    assert application.status_code == 201
    duplicate = client.post(
        f"/campaigns/{campaign['id']}/applications",
        json={"influencer_id": approved_influencer["id"], "bid_amount": "900"},
        headers=_as("user-1"),
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "DuplicateApplicationError"

    decided = client.post(
        f"/campaign-applications/{application.json()['id']}/decision",
        json={"outcome": "approved"},
        headers=MARKETER,
    )
    assert decided.json()["status"] == "approved"

    submitted = client.post(
        "/submissions",
        json={
            "influencer_id": approved_influencer["id"],
            "title": "Launch reel",
            "video_url": "https://cdn.example/launch.mp4",
            "link": {"kind": "campaign", "campaign_id": campaign["id"]},
        },
        headers=_as("user-1"),
    )
    assert submitted.status_code == 201
    rejected = client.post(
        f"/submissions/{submitted.json()['id']}/reject",
        json={"reason": "Logo missing"},
        headers=MARKETER,
    )
    assert rejected.json()["approval_status"] == "rejected"
    listed = client.get("/submissions", params={"campaign_id": campaign["id"]}).json()
    assert [s["rejection_reason"] for s in listed] == ["Logo missing"]


def test_influencer_search(
    client: TestClient,
    approved_influencer: dict[str, Any],
    profile: Callable[..., dict[str, Any]],
) -> None:
    body = {**profile("user-2", full_name="Ravi Kumar"), "id_proof_ref": "s3://proofs/2.png"}
    assert client.post("/influencers", json=body, headers=_as("user-2")).status_code == 201

    found = client.get("/influencers/search", params={"name": "asha", "min_followers": 1000})
    assert found.status_code == 200
    assert [i["id"] for i in found.json()] == [approved_influencer["id"]]
    assert client.get("/influencers/search", params={"name": "ravi"}).json() == []
    assert client.get("/influencers/search", params={"min_followers": -5}).status_code == 422
