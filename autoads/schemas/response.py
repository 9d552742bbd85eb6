"""
Response schemas.
"""

import datetime as dt
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from autoads.models.base import AdUnitType, CampaignStatus, ListingStatus, UserRole
from autoads.schemas.targeting import Targeting

T = TypeVar("T")

# Money stays Decimal in Python and is a JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class ResponseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class DataResponse(ResponseModel, Generic[T]):
    """Envelope used by every JSON endpoint."""

    data: T


class PageMeta(ResponseModel):
    page: int
    page_size: int
    total: int
    total_pages: int


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------
class CampaignRef(ResponseModel):
    id: int
    priority: int


class AdUnitRef(ResponseModel):
    placement_id: str
    width: int
    height: int
    type: AdUnitType


class AdCreative(ResponseModel):
    """The winning ad for a placement."""

    id: int
    title: str
    image_url: str | None = None
    image_url_mobile: str | None = None
    link_url: str | None = None
    ad_sense_snippet: str | None = None
    campaign: CampaignRef
    ad_unit: AdUnitRef


# ---------------------------------------------------------------------------
# Sponsored listings
# ---------------------------------------------------------------------------
class ListingSummary(ResponseModel):
    id: int
    make: str
    model: str
    year: int
    price: Money
    mileage: int | None = None
    fuel_type: str | None = None
    body_type: str | None = None
    status: ListingStatus


class SponsoredListingView(ResponseModel):
    id: int
    listing_id: int
    campaign_id: int
    boost_multiplier: float
    active: bool
    listing: ListingSummary


# ---------------------------------------------------------------------------
# Administration
# ---------------------------------------------------------------------------
class AdvertiserSummary(ResponseModel):
    id: int
    name: str | None = None
    email: str
    role: UserRole


class CampaignResponse(ResponseModel):
    id: int
    advertiser_id: int
    name: str
    budget: Money
    daily_budget: Money
    spent: Money
    start_date: datetime
    end_date: datetime
    status: CampaignStatus
    priority: int
    targeting: Targeting
    created_at: datetime
    updated_at: datetime


class CampaignListItem(CampaignResponse):
    advertiser: AdvertiserSummary
    advertisement_count: int = 0
    sponsored_listing_count: int = 0


class CampaignPage(ResponseModel):
    data: list[CampaignListItem]
    meta: PageMeta


class AdUnitSummary(ResponseModel):
    placement_id: str
    name: str
    type: AdUnitType
    width: int
    height: int


class AdvertisementResponse(ResponseModel):
    id: int
    campaign_id: int
    ad_unit_id: int
    title: str
    image_url: str | None = None
    image_url_mobile: str | None = None
    link_url: str | None = None
    ad_sense_snippet: str | None = None
    active: bool
    created_at: datetime
    updated_at: datetime
    ad_unit: AdUnitSummary


class AdvertisementDetail(AdvertisementResponse):
    event_count: int = 0


class CampaignDetail(CampaignResponse):
    advertiser: AdvertiserSummary
    advertisements: list[AdvertisementDetail] = Field(default_factory=list)
    sponsored_listings: list[SponsoredListingView] = Field(default_factory=list)


class AdUnitResponse(ResponseModel):
    id: int
    name: str
    placement_id: str
    type: AdUnitType
    width: int
    height: int
    active: bool
    active_ads_count: int = 0


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------
class TimeSeriesPoint(ResponseModel):
    date: dt.date
    impressions: int
    clicks: int


class AnalyticsTotals(ResponseModel):
    impressions: int = 0
    clicks: int = 0
    ctr: float = 0.0


class CampaignAnalytics(ResponseModel):
    time_series: list[TimeSeriesPoint] = Field(default_factory=list)
    totals: AnalyticsTotals = Field(default_factory=AnalyticsTotals)


class AnalyticsOverview(ResponseModel):
    total_impressions: int = 0
    total_clicks: int = 0
    ctr: float = 0.0
    active_campaigns: int = 0
    total_budget: Money = Decimal("0")
    total_spent: Money = Decimal("0")
