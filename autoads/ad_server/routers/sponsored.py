"""
Sponsored listing endpoints.
"""

from fastapi import APIRouter, Depends, Query

from autoads.ad_server.deps import get_sponsored_service
from autoads.ad_server.services.sponsored_service import SponsoredService
from autoads.schemas.response import DataResponse, SponsoredListingView
from autoads.schemas.targeting import TargetingContext

router = APIRouter()


@router.get("/listings", response_model=DataResponse[list[SponsoredListingView]])
async def get_sponsored_listings(
    fuel_type: str | None = Query(default=None, alias="fuelType"),
    body_type: str | None = Query(default=None, alias="bodyType"),
    sponsored_service: SponsoredService = Depends(get_sponsored_service),
) -> DataResponse[list[SponsoredListingView]]:
    context = TargetingContext(fuel_type=fuel_type, body_type=body_type)
    listings = await sponsored_service.sponsored_for_search(context)
    return DataResponse[list[SponsoredListingView]](data=listings)
