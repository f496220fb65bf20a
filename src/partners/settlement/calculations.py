"""Pure settlement arithmetic."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from partners.domain.models import Payment, PaymentSummary
from partners.domain.rules import CENTS
from partners.domain.types import PaymentStatus

REVENUE_SHARE_RATE = Decimal("0.05")


def calculate_revenue_share(total_revenue: Decimal, rate: Decimal = REVENUE_SHARE_RATE) -> Decimal:
    """Return *rate* of *total_revenue*, rounded half-up to 2 decimal places.

    >>> calculate_revenue_share(Decimal("100000"))
    Decimal('5000.00')
    """
    return (total_revenue * rate).quantize(CENTS, rounding=ROUND_HALF_UP)


def summarize_payments(payments: Iterable[Payment]) -> PaymentSummary:
    """Total *payments* by status."""
    total_paid = Decimal("0.00")
    total_pending = Decimal("0.00")
    count = 0
    for payment in payments:
        count += 1
        if payment.payment_status == PaymentStatus.PAID:
            total_paid += payment.amount
        else:
            total_pending += payment.amount
    return PaymentSummary(
        total_paid=total_paid.quantize(CENTS),
        total_pending=total_pending.quantize(CENTS),
        transaction_count=count,
    )


def revenue_share_note(month: str, year: int, total_revenue: Decimal, rate: Decimal) -> str:
    """Payment note for a revenue settlement, e.g. ``5% Revenue Share for March 2025 ...``."""
    percent = (rate * 100).normalize()
    return f"{percent:f}% Revenue Share for {month} {year} (Revenue: ₹{total_revenue})"
