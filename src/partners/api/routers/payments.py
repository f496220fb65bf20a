"""Payments, disbursement and revenue settlement."""

from __future__ import annotations

from fastapi import APIRouter

from partners.api.dependencies import CurrentActor, SettlementDep
from partners.api.schemas import ManualPaymentRequest, MarkPaidRequest, SettleRevenueRequest
from partners.domain.models import Payment, PaymentSummary, RevenueShare, SettlementResult

router = APIRouter(tags=["payments"])


@router.post("/payments", status_code=201)
def create_manual_payment(
    body: ManualPaymentRequest, actor: CurrentActor, settlement: SettlementDep
) -> Payment:
    return settlement.create_manual_payment(
        body.influencer_id,
        body.amount,
        body.payment_type,
        body.notes,
        actor,
        transaction_ref=body.transaction_ref,
        idempotency_key=body.idempotency_key,
    )


@router.get("/payments")
def list_payments(
    settlement: SettlementDep,
    influencer_id: str | None = None,
    status: str | None = None,
    payment_type: str | None = None,
) -> list[Payment]:
    return settlement.list_payments(
        influencer_id=influencer_id, status=status, payment_type=payment_type
    )


@router.get("/payments/summary")
def summarize_payments(
    settlement: SettlementDep, influencer_id: str | None = None
) -> PaymentSummary:
    return settlement.summarize_payments(influencer_id)


@router.get("/payments/{payment_id}")
def get_payment(payment_id: str, settlement: SettlementDep) -> Payment:
    return settlement.get_payment(payment_id)


@router.post("/payments/{payment_id}/mark-paid")
def mark_payment_paid(
    payment_id: str, body: MarkPaidRequest, actor: CurrentActor, settlement: SettlementDep
) -> Payment:
    return settlement.mark_paid(payment_id, body.transaction_ref, actor)


@router.post("/revenue-shares", status_code=201)
def settle_revenue(
    body: SettleRevenueRequest, actor: CurrentActor, settlement: SettlementDep
) -> SettlementResult:
    return settlement.settle_revenue(
        body.influencer_id, body.month, body.year, body.total_revenue, actor
    )


@router.get("/revenue-shares")
def list_revenue_shares(
    settlement: SettlementDep, influencer_id: str | None = None
) -> list[RevenueShare]:
    return settlement.list_revenue_shares(influencer_id)
