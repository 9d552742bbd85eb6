"""
Campaign lifecycle service.

Creates and edits campaigns together with their advertisements and
sponsored listings. ARCHIVED campaigns are frozen; archiving deactivates
every dependent row in the same transaction.
"""

import math

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from autoads.common.database import Database
from autoads.common.exceptions import BadRequestError, ErrorCode, NotFoundError
from autoads.common.logger import get_logger
from autoads.common.utils import ensure_utc
from autoads.models import (
    AdAnalyticsEvent,
    AdCampaign,
    AdUnit,
    Advertisement,
    CampaignStatus,
    Listing,
    SponsoredListing,
    User,
)
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
    CampaignDetail,
    CampaignListItem,
    CampaignPage,
    CampaignResponse,
    PageMeta,
    SponsoredListingView,
)

logger = get_logger(__name__)


def _campaign_not_found() -> NotFoundError:
    return NotFoundError("Campaign not found", ErrorCode.CAMPAIGN_NOT_FOUND)


def _archived(action: str) -> BadRequestError:
    return BadRequestError(f"Cannot {action} an archived campaign", ErrorCode.CAMPAIGN_ARCHIVED)


class CampaignService:
    """Administrative operations on campaigns and their inventory."""

    def __init__(self, database: Database):
        self.database = database

    # ------------------------------------------------------------------
    # Campaigns
    # ------------------------------------------------------------------
    async def list_campaigns(
        self,
        page: int = 1,
        page_size: int = 20,
        status: CampaignStatus | None = None,
    ) -> CampaignPage:
        """Newest campaigns first, with dependent row counts."""
        ad_count = (
            select(func.count(Advertisement.id))
            .where(Advertisement.campaign_id == AdCampaign.id)
            .correlate(AdCampaign)
            .scalar_subquery()
        )
        sponsored_count = (
            select(func.count(SponsoredListing.id))
            .where(SponsoredListing.campaign_id == AdCampaign.id)
            .correlate(AdCampaign)
            .scalar_subquery()
        )

        stmt = select(AdCampaign, ad_count, sponsored_count).options(
            selectinload(AdCampaign.advertiser)
        )
        count_stmt = select(func.count(AdCampaign.id))
        if status is not None:
            stmt = stmt.where(AdCampaign.status == status)
            count_stmt = count_stmt.where(AdCampaign.status == status)

        stmt = (
            stmt.order_by(AdCampaign.created_at.desc(), AdCampaign.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )

        async with self.database.session() as session:
            rows = (await session.execute(stmt)).all()
            total = await session.scalar(count_stmt) or 0

        items = [
            CampaignListItem.model_validate(campaign).model_copy(
                update={
                    "advertisement_count": ads or 0,
                    "sponsored_listing_count": sponsored or 0,
                }
            )
            for campaign, ads, sponsored in rows
        ]
        return CampaignPage(
            data=items,
            meta=PageMeta(
                page=page,
                page_size=page_size,
                total=total,
                total_pages=math.ceil(total / page_size),
            ),
        )

    async def get_campaign(self, campaign_id: int) -> CampaignDetail:
        stmt = (
            select(AdCampaign)
            .where(AdCampaign.id == campaign_id)
            .options(
                selectinload(AdCampaign.advertiser),
                selectinload(AdCampaign.advertisements).selectinload(Advertisement.ad_unit),
                selectinload(AdCampaign.sponsored_listings).selectinload(
                    SponsoredListing.listing
                ),
            )
        )

        async with self.database.session() as session:
            campaign = await session.scalar(stmt)
            if campaign is None:
                raise _campaign_not_found()

            ad_ids = [ad.id for ad in campaign.advertisements]
            event_counts: dict[int, int] = {}
            if ad_ids:
                count_rows = await session.execute(
                    select(AdAnalyticsEvent.advertisement_id, func.count(AdAnalyticsEvent.id))
                    .where(AdAnalyticsEvent.advertisement_id.in_(ad_ids))
                    .group_by(AdAnalyticsEvent.advertisement_id)
                )
                event_counts = {ad_id: count for ad_id, count in count_rows.all()}

        detail = CampaignDetail.model_validate(campaign)
        detail.advertisements.sort(key=lambda ad: ad.id, reverse=True)
        for ad in detail.advertisements:
            ad.event_count = event_counts.get(ad.id, 0)
        return detail

    async def create_campaign(self, data: CampaignCreate) -> CampaignResponse:
        if ensure_utc(data.end_date) <= ensure_utc(data.start_date):
            raise BadRequestError("End date must be after start date", ErrorCode.INVALID_DATE_RANGE)

        async with self.database.session() as session:
            advertiser = await session.get(User, data.advertiser_id)
            if advertiser is None:
                raise NotFoundError("Advertiser not found", ErrorCode.USER_NOT_FOUND)

            campaign = AdCampaign(
                advertiser_id=advertiser.id,
                name=data.name,
                budget=data.budget,
                daily_budget=data.daily_budget,
                start_date=data.start_date,
                end_date=data.end_date,
                status=data.status,
                priority=data.priority,
                targeting=data.targeting,
            )
            session.add(campaign)
            await session.commit()

        logger.info(
            "Campaign created",
            campaign_id=campaign.id,
            advertiser_id=campaign.advertiser_id,
            status=campaign.status.value,
            priority=campaign.priority,
        )
        return CampaignResponse.model_validate(campaign)

    async def update_campaign(self, campaign_id: int, data: CampaignUpdate) -> CampaignResponse:
        changes = data.changes()

        async with self.database.session() as session:
            campaign = await self._get_campaign_for_write(session, campaign_id)
            if campaign.is_archived:
                raise _archived("update")

            start = ensure_utc(changes.get("start_date", campaign.start_date))
            end = ensure_utc(changes.get("end_date", campaign.end_date))
            if end <= start:
                raise BadRequestError(
                    "End date must be after start date", ErrorCode.INVALID_DATE_RANGE
                )

            for field, value in changes.items():
                setattr(campaign, field, value)
            await session.commit()

        logger.info("Campaign updated", campaign_id=campaign_id, fields=sorted(changes))
        return CampaignResponse.model_validate(campaign)

    async def archive_campaign(self, campaign_id: int) -> CampaignResponse:
        """
        Archive a campaign and deactivate everything it runs.

        Status change, advertisement deactivation and sponsored listing
        deactivation commit together or not at all.
        """
        async with self.database.session() as session:
            async with session.begin():
                campaign = await self._get_campaign_for_write(session, campaign_id)
                campaign.status = CampaignStatus.ARCHIVED
                await session.flush()
                ads = await self._deactivate_advertisements(session, campaign_id)
                listings = await self._deactivate_sponsored_listings(session, campaign_id)

        logger.info(
            "Campaign archived",
            campaign_id=campaign_id,
            advertisements_deactivated=ads,
            sponsored_listings_deactivated=listings,
        )
        return CampaignResponse.model_validate(campaign)

    @staticmethod
    async def _get_campaign_for_write(session: AsyncSession, campaign_id: int) -> AdCampaign:
        campaign = await session.scalar(
            select(AdCampaign).where(AdCampaign.id == campaign_id).with_for_update()
        )
        if campaign is None:
            raise _campaign_not_found()
        return campaign

    @staticmethod
    async def _deactivate_advertisements(session: AsyncSession, campaign_id: int) -> int:
        result = await session.execute(
            update(Advertisement)
            .where(Advertisement.campaign_id == campaign_id)
            .values(active=False)
        )
        return result.rowcount

    @staticmethod
    async def _deactivate_sponsored_listings(session: AsyncSession, campaign_id: int) -> int:
        result = await session.execute(
            update(SponsoredListing)
            .where(SponsoredListing.campaign_id == campaign_id)
            .values(active=False)
        )
        return result.rowcount

    # ------------------------------------------------------------------
    # Advertisements
    # ------------------------------------------------------------------
    async def create_advertisement(self, data: AdvertisementCreate) -> AdvertisementResponse:
        async with self.database.session() as session:
            campaign = await session.get(AdCampaign, data.campaign_id)
            if campaign is None:
                raise _campaign_not_found()
            ad_unit = await session.get(AdUnit, data.ad_unit_id)
            if ad_unit is None:
                raise NotFoundError("Ad unit not found", ErrorCode.AD_UNIT_NOT_FOUND)
            if campaign.is_archived:
                raise _archived("add advertisements to")

            ad = Advertisement(
                campaign_id=campaign.id,
                ad_unit=ad_unit,
                title=data.title,
                image_url=data.image_url or None,
                image_url_mobile=data.image_url_mobile or None,
                link_url=data.link_url or None,
                ad_sense_snippet=data.ad_sense_snippet or None,
                active=data.active,
            )
            session.add(ad)
            await session.commit()

        logger.info(
            "Advertisement created",
            ad_id=ad.id,
            campaign_id=ad.campaign_id,
            placement_id=ad_unit.placement_id,
        )
        return AdvertisementResponse.model_validate(ad)

    async def update_advertisement(
        self, ad_id: int, data: AdvertisementUpdate
    ) -> AdvertisementResponse:
        changes = data.changes()

        async with self.database.session() as session:
            ad = await session.scalar(
                select(Advertisement)
                .where(Advertisement.id == ad_id)
                .options(
                    selectinload(Advertisement.ad_unit),
                    selectinload(Advertisement.campaign),
                )
            )
            if ad is None:
                raise NotFoundError("Advertisement not found", ErrorCode.AD_NOT_FOUND)
            if changes.get("active") and ad.campaign.is_archived:
                raise _archived("reactivate advertisements of")

            for field, value in changes.items():
                setattr(ad, field, value)
            await session.commit()

        logger.info("Advertisement updated", ad_id=ad_id, fields=sorted(changes))
        return AdvertisementResponse.model_validate(ad)

    # ------------------------------------------------------------------
    # Sponsored listings
    # ------------------------------------------------------------------
    async def create_sponsored_listing(self, data: SponsoredListingCreate) -> SponsoredListingView:
        async with self.database.session() as session:
            campaign = await session.get(AdCampaign, data.campaign_id)
            if campaign is None:
                raise _campaign_not_found()
            listing = await session.get(Listing, data.listing_id)
            if listing is None:
                raise NotFoundError("Listing not found", ErrorCode.LISTING_NOT_FOUND)
            if campaign.is_archived:
                raise _archived("sponsor listings with")

            sponsored = SponsoredListing(
                campaign_id=campaign.id,
                listing=listing,
                boost_multiplier=data.boost_multiplier,
                active=data.active,
            )
            session.add(sponsored)
            try:
                await session.commit()
            except IntegrityError as e:
                raise BadRequestError(
                    "Listing is already sponsored by this campaign"
                ) from e

        logger.info(
            "Sponsored listing created",
            sponsored_listing_id=sponsored.id,
            campaign_id=sponsored.campaign_id,
            listing_id=sponsored.listing_id,
        )
        return SponsoredListingView.model_validate(sponsored)

    # ------------------------------------------------------------------
    # Ad units
    # ------------------------------------------------------------------
    async def list_ad_units(self) -> list[AdUnitResponse]:
        active_ads = (
            select(func.count(Advertisement.id))
            .where(Advertisement.ad_unit_id == AdUnit.id, Advertisement.active.is_(True))
            .correlate(AdUnit)
            .scalar_subquery()
        )
        async with self.database.session() as session:
            rows = (
                await session.execute(select(AdUnit, active_ads).order_by(AdUnit.placement_id))
            ).all()

        return [
            AdUnitResponse.model_validate(unit).model_copy(
                update={"active_ads_count": count or 0}
            )
            for unit, count in rows
        ]
