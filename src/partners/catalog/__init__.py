"""Brand profiles, campaigns and tasks."""

from partners.catalog.service import Catalog, require_campaign_owner

__all__ = ["Catalog", "require_campaign_owner"]
