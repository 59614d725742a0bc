"""
Win-back campaign classifier.

Maps days of inactivity onto an escalating campaign tier and decides whether a
member should receive a new message:

    none -> we_miss_you -> come_back -> special_return

A tier is only emitted when it is more severe than the member's current tier.
"""
from typing import Optional

from ..models.campaign import CampaignTier

# Lower bound (inclusive) of each tier, most severe first
TIER_THRESHOLDS = [
    (90, CampaignTier.SPECIAL_RETURN),
    (30, CampaignTier.COME_BACK),
    (14, CampaignTier.WE_MISS_YOU),
]


def classify_inactivity(days_inactive: int) -> Optional[CampaignTier]:
    """Tier warranted by the inactivity alone, or None below 14 days."""
    for threshold, tier in TIER_THRESHOLDS:
        if days_inactive >= threshold:
            return tier
    return None


def classify(days_inactive: int, current_tier: Optional[CampaignTier] = None) -> Optional[CampaignTier]:
    """
    Decide which tier (if any) to send.

    Args:
        days_inactive: Whole days since the member's last activity
        current_tier: Most recent unconverted tier already sent, if any

    Returns:
        The tier to send, or None when nothing new is warranted. Never
        returns a tier at or below current_tier.
    """
    tier = classify_inactivity(days_inactive)
    if tier is None:
        return None
    if current_tier is not None and tier.severity <= current_tier.severity:
        return None
    return tier
