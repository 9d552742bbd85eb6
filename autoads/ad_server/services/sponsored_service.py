"""
Sponsored listing service.

Selects boosted listings for search and defines how they are merged into
organic results.
"""

from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import contains_eager

from autoads.common.database import Database
from autoads.common.logger import get_logger
from autoads.common.utils import utcnow
from autoads.models import AdCampaign, CampaignStatus, Listing, ListingStatus, SponsoredListing
from autoads.rec_engine.retrieval.targeting import TargetingMatcher
from autoads.schemas.response import SponsoredListingView
from autoads.schemas.targeting import SPONSORED_DIMENSIONS, TargetingContext

logger = get_logger(__name__)


def merge_sponsored(
    organic: Sequence[Mapping[str, Any]],
    sponsored: Sequence[SponsoredListingView],
    *,
    page: int,
    privileged: bool,
) -> list[dict[str, Any]]:
    """
    Put sponsored listings ahead of organic results.

    Only the first page seen by regular viewers is touched. Organic rows
    whose listing is also sponsored are dropped so each listing shows once.
    """
    if page != 1 or privileged or not sponsored:
        return [dict(item) for item in organic]

    boosted = [
        {**view.listing.model_dump(by_alias=True, mode="json"), "isSponsored": True}
        for view in sponsored
    ]
    sponsored_ids = {item["id"] for item in boosted}
    return boosted + [dict(item) for item in organic if item.get("id") not in sponsored_ids]


class SponsoredService:
    def __init__(
        self,
        database: Database,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.database = database
        self.targeting = TargetingMatcher(SPONSORED_DIMENSIONS)
        self._clock = clock

    async def sponsored_for_search(
        self,
        context: TargetingContext | None = None,
    ) -> list[SponsoredListingView]:
        """Running, targeted sponsored listings, strongest boost first."""
        now = self._clock()
        stmt = (
            select(SponsoredListing)
            .join(SponsoredListing.campaign)
            .join(SponsoredListing.listing)
            .where(
                SponsoredListing.active.is_(True),
                AdCampaign.status == CampaignStatus.ACTIVE,
                AdCampaign.start_date <= now,
                AdCampaign.end_date >= now,
                Listing.status == ListingStatus.ACTIVE,
                Listing.deleted_at.is_(None),
            )
            .options(
                contains_eager(SponsoredListing.campaign),
                contains_eager(SponsoredListing.listing),
            )
            .order_by(SponsoredListing.boost_multiplier.desc(), SponsoredListing.id)
        )

        async with self.database.session() as session:
            rows = list((await session.scalars(stmt)).all())

        matched = self.targeting.filter(rows, context, key=lambda sl: sl.campaign.targeting)
        return [SponsoredListingView.model_validate(sl) for sl in matched]

    async def inject_into_results(
        self,
        organic: Sequence[Mapping[str, Any]],
        *,
        page: int,
        privileged: bool,
        context: TargetingContext | None = None,
    ) -> list[dict[str, Any]]:
        """
        Search-side entry point.

        Sponsored placement is an enhancement: if it fails, the organic
        results are returned as they are.
        """
        if page != 1 or privileged:
            return [dict(item) for item in organic]

        try:
            sponsored = await self.sponsored_for_search(context)
        except Exception:
            logger.exception("Failed to fetch sponsored listings", page=page)
            return [dict(item) for item in organic]

        return merge_sponsored(organic, sponsored, page=page, privileged=privileged)
