"""Payments, disbursement and monthly revenue-share settlement."""

from partners.settlement.calculations import (
    REVENUE_SHARE_RATE,
    calculate_revenue_share,
    summarize_payments,
)
from partners.settlement.service import SettlementEngine

__all__ = [
    "REVENUE_SHARE_RATE",
    "SettlementEngine",
    "calculate_revenue_share",
    "summarize_payments",
]
