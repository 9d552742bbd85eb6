"""
Administrative endpoints.

Campaign lifecycle, inventory and analytics. Every route requires an
ADMIN or SUPPORT principal.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status

from autoads.ad_server.deps import (
    get_analytics_service,
    get_campaign_service,
    require_admin,
)
from autoads.ad_server.services.analytics_service import AnalyticsService
from autoads.ad_server.services.campaign_service import CampaignService
from autoads.common.utils import ensure_utc
from autoads.models import CampaignStatus
from autoads.schemas.request import (
    AdvertisementCreate,
    AdvertisementUpdate,
    CampaignCreate,
    CampaignUpdate,
    SponsoredListingCreate,
)
from autoads.schemas.response import (
    AdUnitResponse,
    AdvertisementResponse,
    AnalyticsOverview,
    CampaignAnalytics,
    CampaignDetail,
    CampaignPage,
    CampaignResponse,
    DataResponse,
    SponsoredListingView,
)

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/campaigns", response_model=CampaignPage)
async def list_campaigns(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100, alias="pageSize"),
    campaign_status: CampaignStatus | None = Query(default=None, alias="status"),
    campaign_service: CampaignService = Depends(get_campaign_service),
) -> CampaignPage:
    return await campaign_service.list_campaigns(page, page_size, campaign_status)


@router.post(
    "/campaigns",
    response_model=DataResponse[CampaignResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_campaign(
    body: CampaignCreate,
    campaign_service: CampaignService = Depends(get_campaign_service),
) -> DataResponse[CampaignResponse]:
    campaign = await campaign_service.create_campaign(body)
    return DataResponse[CampaignResponse](data=campaign)


@router.get("/campaigns/{campaign_id}", response_model=DataResponse[CampaignDetail])
async def get_campaign(
    campaign_id: int,
    campaign_service: CampaignService = Depends(get_campaign_service),
) -> DataResponse[CampaignDetail]:
    campaign = await campaign_service.get_campaign(campaign_id)
    return DataResponse[CampaignDetail](data=campaign)


@router.patch("/campaigns/{campaign_id}", response_model=DataResponse[CampaignResponse])
async def update_campaign(
    campaign_id: int,
    body: CampaignUpdate,
    campaign_service: CampaignService = Depends(get_campaign_service),
) -> DataResponse[CampaignResponse]:
    campaign = await campaign_service.update_campaign(campaign_id, body)
    return DataResponse[CampaignResponse](data=campaign)


@router.delete("/campaigns/{campaign_id}", response_model=DataResponse[CampaignResponse])
async def archive_campaign(
    campaign_id: int,
    campaign_service: CampaignService = Depends(get_campaign_service),
) -> DataResponse[CampaignResponse]:
    """Archive the campaign and deactivate its ads and sponsored listings."""
    campaign = await campaign_service.archive_campaign(campaign_id)
    return DataResponse[CampaignResponse](data=campaign)


@router.get(
    "/campaigns/{campaign_id}/analytics",
    response_model=DataResponse[CampaignAnalytics],
)
async def get_campaign_analytics(
    campaign_id: int,
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
    analytics_service: AnalyticsService = Depends(get_analytics_service),
) -> DataResponse[CampaignAnalytics]:
    analytics = await analytics_service.campaign_analytics(
        campaign_id,
        start_date=ensure_utc(start_date) if start_date else None,
        end_date=ensure_utc(end_date) if end_date else None,
    )
    return DataResponse[CampaignAnalytics](data=analytics)


@router.post(
    "/advertisements",
    response_model=DataResponse[AdvertisementResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_advertisement(
    body: AdvertisementCreate,
    campaign_service: CampaignService = Depends(get_campaign_service),
) -> DataResponse[AdvertisementResponse]:
    ad = await campaign_service.create_advertisement(body)
    return DataResponse[AdvertisementResponse](data=ad)


@router.patch("/advertisements/{ad_id}", response_model=DataResponse[AdvertisementResponse])
async def update_advertisement(
    ad_id: int,
    body: AdvertisementUpdate,
    campaign_service: CampaignService = Depends(get_campaign_service),
) -> DataResponse[AdvertisementResponse]:
    ad = await campaign_service.update_advertisement(ad_id, body)
    return DataResponse[AdvertisementResponse](data=ad)


@router.post(
    "/sponsored-listings",
    response_model=DataResponse[SponsoredListingView],
    status_code=status.HTTP_201_CREATED,
)
async def create_sponsored_listing(
    body: SponsoredListingCreate,
    campaign_service: CampaignService = Depends(get_campaign_service),
) -> DataResponse[SponsoredListingView]:
    sponsored = await campaign_service.create_sponsored_listing(body)
    return DataResponse[SponsoredListingView](data=sponsored)


@router.get("/ad-units", response_model=DataResponse[list[AdUnitResponse]])
async def list_ad_units(
    campaign_service: CampaignService = Depends(get_campaign_service),
) -> DataResponse[list[AdUnitResponse]]:
    units = await campaign_service.list_ad_units()
    return DataResponse[list[AdUnitResponse]](data=units)


@router.get("/ad-analytics/overview", response_model=DataResponse[AnalyticsOverview])
async def get_analytics_overview(
    analytics_service: AnalyticsService = Depends(get_analytics_service),
) -> DataResponse[AnalyticsOverview]:
    overview = await analytics_service.overview()
    return DataResponse[AnalyticsOverview](data=overview)
