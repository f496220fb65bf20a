"""Settlement engine: manual payments, disbursement and monthly revenue share.

Payments are only ever created pending and move to paid exactly once.  A
revenue settlement writes the RevenueShare and its paired Payment in one
transaction; the unique (influencer, month, year) constraint makes a second
settlement for the same month a conflict rather than a duplicate payout.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import structlog

from partners.audit import AuditLogger
from partners.domain.errors import AlreadyPaidError, ConflictError, ValidationError
from partners.domain.models import (
    Actor,
    Payment,
    PaymentSummary,
    RevenueShare,
    SettlementResult,
)
from partners.domain.rules import (
    new_id,
    now_iso,
    parse_enum,
    require_admin,
    require_text,
    to_money,
)
from partners.domain.types import (
    Month,
    NotificationKind,
    PaymentStatus,
    PaymentType,
    month_for_index,
)
from partners.notifications import Notifier
from partners.observability.metrics import PAYMENTS_CREATED, PAYMENTS_PAID
from partners.registry import InfluencerRegistry
from partners.resilience import resilient_store_call
from partners.settlement.calculations import (
    REVENUE_SHARE_RATE,
    calculate_revenue_share,
    revenue_share_note,
    summarize_payments,
)
from partners.state_machine import PAYMENT_LIFECYCLE, LifecycleStateMachine, PaymentEvent
from partners.store import PartnersStore

logger = structlog.get_logger()


class SettlementEngine:
    """Tracks money owed to influencers through to disbursement."""

    def __init__(
        self,
        store: PartnersStore,
        audit: AuditLogger,
        notifier: Notifier,
        registry: InfluencerRegistry,
        revenue_share_rate: Decimal = REVENUE_SHARE_RATE,
    ) -> None:
        self._store = store
        self._audit = audit
        self._notifier = notifier
        self._registry = registry
        self._rate = revenue_share_rate

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    @resilient_store_call("settlement.create_manual_payment")
    def create_manual_payment(
        self,
        influencer_id: str,
        amount: Decimal | str | int,
        payment_type: PaymentType | str,
        notes: str | None,
        actor: Actor,
        transaction_ref: str | None = None,
        idempotency_key: str | None = None,
    ) -> Payment:
        """Record an out-of-band payment not tied to a submission.

        Args:
            influencer_id: The payee.
            amount: Positive amount.
            payment_type: ``fixed`` or ``revenue_share``.
            notes: Free-text description.
            actor: Must be an admin.
            transaction_ref: UPI reference when the money was already sent;
                the payment is then recorded as paid immediately.
            idempotency_key: Caller-chosen key; retrying with the same key
                returns the payment created by the first call.

        Raises:
            UnauthorizedError: If the actor is not an admin.
            ValidationError: If the amount is not positive.
            NotApprovedError: If the influencer is not approved.
            ConflictError: If *idempotency_key* was used for a different payment.
        """
        require_admin(actor, "create manual payments")
        value = to_money(amount, "amount")
        if value <= 0:
            raise ValidationError(f"amount must be positive, got {value}")
        kind = parse_enum(PaymentType, payment_type, "payment_type")
        ref = transaction_ref.strip() if transaction_ref and transaction_ref.strip() else None

        with self._store.transaction():
            influencer = self._registry.require_approved(influencer_id)

            if idempotency_key:
                existing = self._store.find_one(Payment, idempotency_key=idempotency_key)
                if existing is not None:
                    if (
                        existing.influencer_id != influencer_id
                        or existing.amount != value
                        or existing.payment_type != kind
                    ):
                        raise ConflictError(
                            f"Idempotency key '{idempotency_key}' was used for a different payment"
                        )
                    logger.info(
                        "manual_payment_replayed",
                        payment_id=existing.id,
                        idempotency_key=idempotency_key,
                    )
                    return existing

            now = now_iso()
            payment = Payment(
                id=new_id(),
                influencer_id=influencer_id,
                amount=value,
                payment_type=kind,
                notes=notes,
                idempotency_key=idempotency_key or None,
                created_at=now,
            )
            self._store.add(payment)
            self._audit.log_payment_created(payment, actor)

            if ref is not None:
                paid: dict[str, Any] = {
                    "payment_status": PaymentStatus.PAID,
                    "upi_transaction_id": ref,
                    "paid_at": now,
                    "paid_by": actor.actor_id,
                }
                self._store.update(Payment, payment.id, paid)
                self._audit.log_payment_paid(payment, actor, ref)
                payment = payment.model_copy(update=paid)

        PAYMENTS_CREATED.labels(payment_type=kind.value).inc()
        if ref is not None:
            PAYMENTS_PAID.labels(payment_type=kind.value).inc()
        logger.info(
            "manual_payment_created",
            payment_id=payment.id,
            influencer_id=influencer_id,
            amount=str(value),
            paid=ref is not None,
        )
        self._notifier.notify(
            influencer.user_id,
            NotificationKind.PAYMENT_PAID if ref is not None else NotificationKind.PAYMENT_CREATED,
            {"payment_id": payment.id, "amount": payment.amount},
        )
        return payment

    @resilient_store_call("settlement.mark_paid")
    def mark_paid(self, payment_id: str, transaction_ref: str, actor: Actor) -> Payment:
        """Record that a pending payment was disbursed.

        A paid revenue-share payment also marks its RevenueShare paid.

        Raises:
            UnauthorizedError: If the actor is not an admin.
            ValidationError: If *transaction_ref* is blank.
            AlreadyPaidError: If the payment is not pending; ``paid_at`` is
                left as it was.
        """
        require_admin(actor, "mark payments paid")
        ref = require_text(transaction_ref, "transaction_ref")

        with self._store.transaction():
            payment = self._store.require(Payment, payment_id)
            machine = LifecycleStateMachine(PAYMENT_LIFECYCLE, payment.payment_status)
            if not machine.can_trigger(PaymentEvent.MARK_PAID):
                raise AlreadyPaidError(payment_id)
            new_status = machine.trigger(PaymentEvent.MARK_PAID)

            changes: dict[str, Any] = {
                "payment_status": new_status,
                "upi_transaction_id": ref,
                "paid_at": now_iso(),
                "paid_by": actor.actor_id,
            }
            if not self._store.update(
                Payment,
                payment_id,
                changes,
                expected={"payment_status": PaymentStatus.PENDING},
            ):
                raise AlreadyPaidError(payment_id)
            if payment.revenue_share_id:
                self._store.update(
                    RevenueShare,
                    payment.revenue_share_id,
                    {"payment_status": PaymentStatus.PAID},
                )
            self._audit.log_payment_paid(payment, actor, ref)
            influencer = self._registry.get(payment.influencer_id)

        paid = payment.model_copy(update=changes)
        PAYMENTS_PAID.labels(payment_type=payment.payment_type.value).inc()
        logger.info("payment_marked_paid", payment_id=payment_id, amount=str(payment.amount))
        self._notifier.notify(
            influencer.user_id,
            NotificationKind.PAYMENT_PAID,
            {"payment_id": payment_id, "amount": payment.amount, "paid_at": paid.paid_at},
        )
        return paid

    @resilient_store_call("settlement.settle_revenue")
    def settle_revenue(
        self,
        influencer_id: str,
        month: Month | str | int,
        year: int | str,
        total_revenue: Decimal | str | int,
        actor: Actor,
    ) -> SettlementResult:
        """Settle one month of lead revenue for an influencer.

        Args:
            influencer_id: The influencer the leads are attributed to.
            month: Month name (``"March"``) or number (3).
            year: Calendar year.
            total_revenue: Positive lead revenue for the month.
            actor: Must be an admin.

        Returns:
            The RevenueShare and its paired pending Payment.

        Raises:
            UnauthorizedError: If the actor is not an admin.
            ValidationError: If the revenue is not positive or too small to
                produce a share, or the month/year is invalid.
            NotApprovedError: If the influencer is not approved.
            ConflictError: If the month was already settled for this influencer.
        """
        require_admin(actor, "settle revenue")
        settlement_month = _parse_month(month)
        year = _parse_year(year)
        revenue = to_money(total_revenue, "total_revenue")
        if revenue <= 0:
            raise ValidationError(f"total_revenue must be positive, got {revenue}")
        share = calculate_revenue_share(revenue, self._rate)
        if share <= 0:
            raise ValidationError(f"total_revenue {revenue} is too small to produce a share")

        with self._store.transaction():
            influencer = self._registry.require_approved(influencer_id)
            if self._store.count(
                RevenueShare, influencer_id=influencer_id, month=settlement_month, year=year
            ):
                raise ConflictError(
                    f"Revenue for {settlement_month} {year} is already settled "
                    f"for influencer '{influencer_id}'"
                )

            now = now_iso()
            revenue_share = RevenueShare(
                id=new_id(),
                influencer_id=influencer_id,
                month=settlement_month,
                year=year,
                revenue_from_leads=revenue,
                performance_share_amount=share,
                total_earning=share,
                created_at=now,
            )
            payment = Payment(
                id=new_id(),
                influencer_id=influencer_id,
                amount=share,
                payment_type=PaymentType.REVENUE_SHARE,
                revenue_share_id=revenue_share.id,
                notes=revenue_share_note(settlement_month.value, year, revenue, self._rate),
                created_at=now,
            )
            self._store.add(revenue_share)
            self._store.add(payment)
            self._audit.log_revenue_settled(revenue_share, actor)
            self._audit.log_payment_created(payment, actor)

        PAYMENTS_CREATED.labels(payment_type=PaymentType.REVENUE_SHARE.value).inc()
        logger.info(
            "revenue_settled",
            influencer_id=influencer_id,
            month=settlement_month.value,
            year=year,
            revenue=str(revenue),
            share=str(share),
        )
        self._notifier.notify(
            influencer.user_id,
            NotificationKind.PAYMENT_CREATED,
            {"payment_id": payment.id, "amount": share, "month": settlement_month, "year": year},
        )
        return SettlementResult(revenue_share=revenue_share, payment=payment)

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    def get_payment(self, payment_id: str) -> Payment:
        return self._store.require(Payment, payment_id)

    def list_payments(
        self,
        influencer_id: str | None = None,
        status: PaymentStatus | str | None = None,
        payment_type: PaymentType | str | None = None,
    ) -> list[Payment]:
        """Return payments newest first, optionally filtered."""
        filters: dict[str, Any] = {}
        if influencer_id is not None:
            filters["influencer_id"] = influencer_id
        if status is not None:
            filters["payment_status"] = parse_enum(PaymentStatus, status, "status")
        if payment_type is not None:
            filters["payment_type"] = parse_enum(PaymentType, payment_type, "payment_type")
        return self._store.find(Payment, **filters)

    def summarize_payments(self, influencer_id: str | None = None) -> PaymentSummary:
        """Return paid/pending totals, for one influencer or across everyone."""
        return summarize_payments(self.list_payments(influencer_id=influencer_id))

    def list_revenue_shares(self, influencer_id: str | None = None) -> list[RevenueShare]:
        if influencer_id is None:
            return self._store.find(RevenueShare)
        return self._store.find(RevenueShare, influencer_id=influencer_id)


def _parse_month(month: Month | str | int) -> Month:
    if isinstance(month, int):
        try:
            return month_for_index(month)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
    if isinstance(month, str) and month.isdigit():
        return _parse_month(int(month))
    if isinstance(month, str):
        month = month.strip().capitalize()
    return parse_enum(Month, month, "month")


def _parse_year(year: int | str) -> int:
    if isinstance(year, bool):
        raise ValidationError(f"year is not a number: {year!r}")
    try:
        value = int(str(year).strip()) if isinstance(year, str) else int(year)
    except (TypeError, ValueError):
        raise ValidationError(f"year is not a number: {year!r}") from None
    if not 2000 <= value <= 9999:
        raise ValidationError(f"year is out of range: {year}")
    return value
