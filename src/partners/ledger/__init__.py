"""Application ledger for campaign applications and task assignments."""

from partners.ledger.service import ApplicationLedger

__all__ = ["ApplicationLedger"]
