"""
Ad serving endpoints.
"""

from fastapi import APIRouter, Depends, Query

from autoads.ad_server.deps import get_ad_service
from autoads.ad_server.services.ad_service import AdService
from autoads.common.logger import get_logger, log_context
from autoads.schemas.response import AdCreative, DataResponse
from autoads.schemas.targeting import TargetingContext

logger = get_logger(__name__)
router = APIRouter()


@router.get("/placements/{placement_id}", response_model=DataResponse[AdCreative | None])
async def get_ad_for_placement(
    placement_id: str,
    fuel_type: str | None = Query(default=None, alias="fuelType"),
    body_type: str | None = Query(default=None, alias="bodyType"),
    make: str | None = Query(default=None),
    location: str | None = Query(default=None),
    ad_service: AdService = Depends(get_ad_service),
) -> DataResponse[AdCreative | None]:
    """
    Fetch the ad to render in a placement.

    Priority 1 (takeover) beats priority 2 (house) beats priority 3
    (programmatic); ties rotate at random. ``data`` is null when nothing
    is eligible.
    """
    log_context(placement_id=placement_id)

    context = TargetingContext(
        fuel_type=fuel_type,
        body_type=body_type,
        make=make,
        location=location,
    )
    ad = await ad_service.resolve_placement(placement_id, context)

    logger.info("Placement served", ad_id=ad.id if ad else None)
    return DataResponse[AdCreative | None](data=ad)
