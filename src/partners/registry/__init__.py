"""Influencer registry: onboarding, approval gate and video rates."""

from partners.registry.service import InfluencerRegistry

__all__ = ["InfluencerRegistry"]
