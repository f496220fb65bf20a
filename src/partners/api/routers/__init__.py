"""HTTP routers, one per service."""

from partners.api.routers import (
    applications,
    catalog,
    influencers,
    notifications,
    payments,
    submissions,
)

ROUTERS = [
    influencers.router,
    catalog.router,
    applications.router,
    submissions.router,
    payments.router,
    notifications.router,
]

__all__ = ["ROUTERS"]
