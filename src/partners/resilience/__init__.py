"""Resilience infrastructure for store calls with retry on transient failure."""

from partners.resilience.retry import resilient_store_call

__all__ = [
    "resilient_store_call",
]
