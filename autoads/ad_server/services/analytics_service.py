"""
Analytics service.

Rolls recorded ad events up into per-campaign and platform-wide numbers.
"""

from datetime import date, datetime

from sqlalchemy import case, func, select

from autoads.common.database import Database
from autoads.common.exceptions import ErrorCode, NotFoundError
from autoads.common.logger import get_logger
from autoads.common.utils import click_through_rate, ensure_utc, to_decimal
from autoads.models import AdAnalyticsEvent, AdCampaign, Advertisement, CampaignStatus, EventType
from autoads.schemas.response import (
    AnalyticsOverview,
    AnalyticsTotals,
    CampaignAnalytics,
    TimeSeriesPoint,
)

logger = get_logger(__name__)

# Campaign statuses counted in monetary totals
BILLABLE_STATUSES = (CampaignStatus.ACTIVE, CampaignStatus.COMPLETED)


def _count_of(event_type: EventType):
    return func.coalesce(
        func.sum(case((AdAnalyticsEvent.event_type == event_type, 1), else_=0)), 0
    )


def _utc_day(dialect: str):
    # Days are UTC days; PostgreSQL would otherwise use the session time zone
    if dialect == "postgresql":
        return func.date(func.timezone("UTC", AdAnalyticsEvent.created_at))
    return func.date(AdAnalyticsEvent.created_at)


def _as_date(value: date | datetime | str) -> date:
    # DATE() comes back as a string on SQLite and as a date on PostgreSQL
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


class AnalyticsService:
    def __init__(self, database: Database):
        self.database = database

    async def campaign_analytics(
        self,
        campaign_id: int,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> CampaignAnalytics:
        """
        Daily impressions and clicks for one campaign.

        The optional window is inclusive on both ends. A campaign without
        advertisements yields zeroed totals and an empty series.
        """
        async with self.database.session() as session:
            exists = await session.scalar(
                select(AdCampaign.id).where(AdCampaign.id == campaign_id)
            )
            if exists is None:
                raise NotFoundError("Campaign not found", ErrorCode.CAMPAIGN_NOT_FOUND)

            ad_ids = list(
                (
                    await session.scalars(
                        select(Advertisement.id).where(Advertisement.campaign_id == campaign_id)
                    )
                ).all()
            )
            if not ad_ids:
                return CampaignAnalytics()

            conditions = [AdAnalyticsEvent.advertisement_id.in_(ad_ids)]
            if start_date is not None:
                conditions.append(AdAnalyticsEvent.created_at >= ensure_utc(start_date))
            if end_date is not None:
                conditions.append(AdAnalyticsEvent.created_at <= ensure_utc(end_date))

            day = _utc_day(session.get_bind().dialect.name).label("day")
            stmt = (
                select(
                    day,
                    _count_of(EventType.IMPRESSION).label("impressions"),
                    _count_of(EventType.CLICK).label("clicks"),
                )
                .where(*conditions)
                .group_by(day)
                .order_by(day)
            )
            rows = (await session.execute(stmt)).all()

        time_series = [
            TimeSeriesPoint(
                date=_as_date(row.day),
                impressions=int(row.impressions),
                clicks=int(row.clicks),
            )
            for row in rows
        ]
        impressions = sum(point.impressions for point in time_series)
        clicks = sum(point.clicks for point in time_series)

        return CampaignAnalytics(
            time_series=time_series,
            totals=AnalyticsTotals(
                impressions=impressions,
                clicks=clicks,
                ctr=click_through_rate(impressions, clicks),
            ),
        )

    async def overview(self) -> AnalyticsOverview:
        """Platform-wide engagement and spend."""
        async with self.database.session() as session:
            events = (
                await session.execute(
                    select(
                        _count_of(EventType.IMPRESSION),
                        _count_of(EventType.CLICK),
                    )
                )
            ).one()
            active_campaigns = await session.scalar(
                select(func.count(AdCampaign.id)).where(
                    AdCampaign.status == CampaignStatus.ACTIVE
                )
            )
            money = (
                await session.execute(
                    select(
                        func.sum(AdCampaign.budget),
                        func.sum(AdCampaign.spent),
                    ).where(AdCampaign.status.in_(BILLABLE_STATUSES))
                )
            ).one()

        total_impressions = int(events[0] or 0)
        total_clicks = int(events[1] or 0)

        return AnalyticsOverview(
            total_impressions=total_impressions,
            total_clicks=total_clicks,
            ctr=click_through_rate(total_impressions, total_clicks),
            active_campaigns=active_campaigns or 0,
            total_budget=to_decimal(money[0]),
            total_spent=to_decimal(money[1]),
        )
