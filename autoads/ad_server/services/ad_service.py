"""
Ad serving service.

Resolves a placement to a single winning advertisement.
"""

from collections.abc import Callable
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import contains_eager

from autoads.common.database import Database
from autoads.common.logger import get_logger
from autoads.common.utils import utcnow
from autoads.models import AdCampaign, AdUnit, Advertisement, CampaignStatus
from autoads.rec_engine.filter.budget import BudgetFilter
from autoads.rec_engine.ranking.tier import RandomProvider, TierSelector
from autoads.rec_engine.retrieval.targeting import TargetingMatcher
from autoads.schemas.response import AdCreative, AdUnitRef, CampaignRef
from autoads.schemas.targeting import TargetingContext

logger = get_logger(__name__)


class AdService:
    """
    Placement resolution.

    Every call re-reads campaign state, so edits to budgets, targeting or
    status are honoured on the next request.
    """

    def __init__(
        self,
        database: Database,
        random_provider: RandomProvider | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.database = database
        self.budget_filter = BudgetFilter()
        self.targeting = TargetingMatcher()
        self.selector = TierSelector(random_provider)
        self._clock = clock

    async def resolve_placement(
        self,
        placement_id: str,
        context: TargetingContext | None = None,
    ) -> AdCreative | None:
        """
        Pick the ad to show in a placement.

        Flow:
        1. Find the active ad unit for the placement
        2. Load active ads whose campaign is ACTIVE and running now
        3. Drop campaigns that exhausted their budget
        4. Drop campaigns whose targeting excludes the context
        5. Keep the best priority tier and draw one ad from it
        """
        now = self._clock()

        async with self.database.session() as session:
            ad_unit = await session.scalar(
                select(AdUnit).where(
                    AdUnit.placement_id == placement_id,
                    AdUnit.active.is_(True),
                )
            )
            if ad_unit is None:
                logger.debug("No active ad unit", placement_id=placement_id)
                return None

            stmt = (
                select(Advertisement)
                .join(Advertisement.campaign)
                .where(
                    Advertisement.ad_unit_id == ad_unit.id,
                    Advertisement.active.is_(True),
                    AdCampaign.status == CampaignStatus.ACTIVE,
                    AdCampaign.start_date <= now,
                    AdCampaign.end_date >= now,
                )
                .options(contains_eager(Advertisement.campaign))
                .order_by(AdCampaign.priority, Advertisement.id)
            )
            advertisements = list((await session.scalars(stmt)).all())

        candidates = self.budget_filter.filter(advertisements, key=lambda ad: ad.campaign)
        candidates = self.targeting.filter(
            candidates, context, key=lambda ad: ad.campaign.targeting
        )

        selected = self.selector.select(candidates, priority=lambda ad: ad.campaign.priority)
        if selected is None:
            logger.debug(
                "No eligible ads",
                placement_id=placement_id,
                fetched=len(advertisements),
            )
            return None

        logger.debug(
            "Placement resolved",
            placement_id=placement_id,
            ad_id=selected.id,
            campaign_id=selected.campaign_id,
            priority=selected.campaign.priority,
            eligible=len(candidates),
        )

        return AdCreative(
            id=selected.id,
            title=selected.title,
            image_url=selected.image_url,
            image_url_mobile=selected.image_url_mobile,
            link_url=selected.link_url,
            ad_sense_snippet=selected.ad_sense_snippet,
            campaign=CampaignRef(id=selected.campaign.id, priority=selected.campaign.priority),
            ad_unit=AdUnitRef.model_validate(ad_unit),
        )
