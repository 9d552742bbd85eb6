import pytest
import pytest_asyncio
from sqlalchemy import select

from autoads.ad_server.services.event_service import EventService
from autoads.common.exceptions import BadRequestError, ErrorCode, NotFoundError
from autoads.common.utils import hash_ip
from autoads.models import AdAnalyticsEvent, EventType

from conftest import make_ad, make_ad_unit, make_campaign, make_user


async def _events(database):
    async with database.session() as session:
        rows = await session.scalars(select(AdAnalyticsEvent).order_by(AdAnalyticsEvent.id))
        return list(rows.all())


@pytest_asyncio.fixture
async def ad(database):
    advertiser = await make_user(database)
    unit = await make_ad_unit(database, "HOME_BILLBOARD")
    campaign = await make_campaign(database, advertiser)
    return await make_ad(database, campaign, unit)


@pytest.mark.asyncio
async def test_track_impression_stores_fingerprint_only(database, ad):
    service = EventService(database)

    await service.track_event(
        ad.id,
        EventType.IMPRESSION,
        user_id=42,
        device="mobile",
        locale="en",
        ip="198.51.100.23",
    )

    [event] = await _events(database)
    assert event.advertisement_id == ad.id
    assert event.event_type == EventType.IMPRESSION
    assert event.user_id == 42
    assert event.device == "mobile"
    assert event.locale == "en"
    assert event.ip_hash == hash_ip("198.51.100.23")
    assert len(event.ip_hash) == 16
    assert event.event_metadata == {}


@pytest.mark.asyncio
async def test_same_ip_same_fingerprint(database, ad):
    service = EventService(database)

    await service.track_event(ad.id, EventType.IMPRESSION, ip="198.51.100.23")
    await service.track_event(ad.id, EventType.CLICK, ip="198.51.100.23")

    first, second = await _events(database)
    assert first.ip_hash == second.ip_hash


@pytest.mark.asyncio
async def test_missing_ip_stores_null(database, ad):
    await EventService(database).track_event(ad.id, "click", metadata={"source": "email"})

    [event] = await _events(database)
    assert event.event_type == EventType.CLICK
    assert event.ip_hash is None
    assert event.user_id is None
    assert event.event_metadata == {"source": "email"}


@pytest.mark.asyncio
@pytest.mark.parametrize("raw, expected", [("imp", EventType.IMPRESSION), ("CLK", EventType.CLICK)])
async def test_short_event_codes(database, ad, raw, expected):
    await EventService(database).track_event(ad.id, raw)

    [event] = await _events(database)
    assert event.event_type == expected


@pytest.mark.asyncio
async def test_unknown_ad_raises_not_found(database):
    with pytest.raises(NotFoundError) as exc_info:
        await EventService(database).track_event(999, EventType.CLICK)

    assert exc_info.value.code == ErrorCode.AD_NOT_FOUND
    assert await _events(database) == []


@pytest.mark.asyncio
async def test_unknown_event_type_rejected(database, ad):
    with pytest.raises(BadRequestError):
        await EventService(database).track_event(ad.id, "conversion")
