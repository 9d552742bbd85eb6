from datetime import datetime, timedelta, timezone
from decimal import Decimal
from itertools import count

import pytest_asyncio

from autoads.common.config import DatabaseSettings
from autoads.common.database import Database
from autoads.models import (
    AdCampaign,
    AdUnit,
    AdUnitType,
    Advertisement,
    CampaignStatus,
    Listing,
    ListingStatus,
    SponsoredListing,
    User,
    UserRole,
)
from autoads.schemas.targeting import Targeting

NOW = datetime.now(timezone.utc)

_seq = count(1)


class FirstChoice:
    """Deterministic tie-break: always the first candidate."""

    def choice(self, seq):
        return seq[0]


class LastChoice:
    def choice(self, seq):
        return seq[-1]


@pytest_asyncio.fixture
async def database():
    db = Database.from_settings(DatabaseSettings(url="sqlite+aiosqlite:///:memory:"))
    await db.create_all()
    try:
        yield db
    finally:
        await db.dispose()


async def _save(database: Database, obj):
    async with database.session() as session:
        session.add(obj)
        await session.commit()
    return obj


async def make_user(database: Database, **overrides) -> User:
    n = next(_seq)
    values = {"email": f"dealer{n}@example.com", "name": f"Dealer {n}", "role": UserRole.DEALERSHIP}
    values.update(overrides)
    return await _save(database, User(**values))


async def make_ad_unit(database: Database, placement_id: str, **overrides) -> AdUnit:
    values = {
        "name": placement_id.replace("_", " ").title(),
        "placement_id": placement_id,
        "type": AdUnitType.BANNER,
        "width": 970,
        "height": 250,
        "active": True,
    }
    values.update(overrides)
    return await _save(database, AdUnit(**values))


async def make_campaign(database: Database, advertiser: User, **overrides) -> AdCampaign:
    values = {
        "advertiser_id": advertiser.id,
        "name": f"Campaign {next(_seq)}",
        "budget": Decimal("0"),
        "daily_budget": Decimal("0"),
        "spent": Decimal("0"),
        "start_date": NOW - timedelta(days=10),
        "end_date": NOW + timedelta(days=10),
        "status": CampaignStatus.ACTIVE,
        "priority": 3,
        "targeting": Targeting(),
    }
    values.update(overrides)
    return await _save(database, AdCampaign(**values))


async def make_ad(
    database: Database, campaign: AdCampaign, ad_unit: AdUnit, **overrides
) -> Advertisement:
    values = {
        "campaign_id": campaign.id,
        "ad_unit_id": ad_unit.id,
        "title": f"Ad {next(_seq)}",
        "image_url": "https://cdn.example.com/banner.jpg",
        "link_url": "https://example.com/offer",
        "active": True,
    }
    values.update(overrides)
    return await _save(database, Advertisement(**values))


async def make_listing(database: Database, owner: User, **overrides) -> Listing:
    values = {
        "user_id": owner.id,
        "make": "BMW",
        "model": "320d",
        "year": 2021,
        "price": Decimal("28500.00"),
        "mileage": 42000,
        "fuel_type": "DIESEL",
        "body_type": "SEDAN",
        "status": ListingStatus.ACTIVE,
    }
    values.update(overrides)
    return await _save(database, Listing(**values))


async def make_sponsored(
    database: Database, campaign: AdCampaign, listing: Listing, **overrides
) -> SponsoredListing:
    values = {
        "campaign_id": campaign.id,
        "listing_id": listing.id,
        "boost_multiplier": 1.0,
        "active": True,
    }
    values.update(overrides)
    return await _save(database, SponsoredListing(**values))
