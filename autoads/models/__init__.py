"""
Database models for AutoAds.
"""

from autoads.models.ad import (
    AdCampaign,
    AdUnit,
    Advertisement,
    Listing,
    SponsoredListing,
    User,
)
from autoads.models.base import (
    AdUnitType,
    Base,
    CampaignStatus,
    EventType,
    ListingStatus,
    Priority,
    TimestampMixin,
    UserRole,
)
from autoads.models.event import AdAnalyticsEvent

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Enums
    "CampaignStatus",
    "Priority",
    "AdUnitType",
    "EventType",
    "UserRole",
    "ListingStatus",
    # Models
    "User",
    "Listing",
    "AdCampaign",
    "AdUnit",
    "Advertisement",
    "SponsoredListing",
    "AdAnalyticsEvent",
]
