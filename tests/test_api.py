from datetime import timedelta
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

from autoads.ad_server.deps import Principal, get_principal
from autoads.ad_server.main import create_app
from autoads.common.config import Settings
from autoads.common.utils import hash_ip
from autoads.models import AdAnalyticsEvent, CampaignStatus
from autoads.schemas.targeting import Targeting

from conftest import (
    NOW,
    FirstChoice,
    make_ad,
    make_ad_unit,
    make_campaign,
    make_listing,
    make_sponsored,
    make_user,
)


@pytest.fixture
def app(database):
    application = create_app(
        settings=Settings(env="test"),
        database=database,
        random_provider=FirstChoice(),
    )
    application.dependency_overrides[get_principal] = lambda: Principal(id=1, role="ADMIN")
    return application


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


def as_role(app, role):
    if role is None:
        app.dependency_overrides[get_principal] = lambda: None
    else:
        app.dependency_overrides[get_principal] = lambda: Principal(id=7, role=role)


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "X-Request-ID" in response.headers


@pytest.mark.asyncio
async def test_placement_returns_creative(client, database):
    advertiser = await make_user(database)
    unit = await make_ad_unit(database, "DETAIL_FINANCE", width=300, height=250)
    campaign = await make_campaign(
        database, advertiser, priority=1, targeting=Targeting(make=["BMW", "Audi"])
    )
    ad = await make_ad(database, campaign, unit, title="BMW finance")

    response = await client.get("/api/v1/ads/placements/DETAIL_FINANCE", params={"make": "BMW"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["id"] == ad.id
    assert data["title"] == "BMW finance"
    assert data["campaign"] == {"id": campaign.id, "priority": 1}
    assert data["adUnit"] == {
        "placementId": "DETAIL_FINANCE",
        "width": 300,
        "height": 250,
        "type": "BANNER",
    }

    miss = await client.get("/api/v1/ads/placements/DETAIL_FINANCE", params={"make": "Toyota"})
    assert miss.status_code == 200
    assert miss.json() == {"data": None}


@pytest.mark.asyncio
async def test_engage_records_event(client, database):
    advertiser = await make_user(database)
    unit = await make_ad_unit(database, "HOME_BILLBOARD")
    campaign = await make_campaign(database, advertiser)
    ad = await make_ad(database, campaign, unit)

    response = await client.post(
        f"/api/v1/ads/{ad.id}/engage",
        json={"eventType": "CLICK", "device": "desktop", "metadata": {"slot": 2}},
    )

    assert response.status_code == 204
    assert response.content == b""
    async with database.session() as session:
        [event] = (await session.scalars(select(AdAnalyticsEvent))).all()
    assert event.event_type.value == "CLICK"
    assert event.user_id == 1
    assert event.device == "desktop"
    assert event.event_metadata == {"slot": 2}
    assert event.ip_hash == hash_ip("127.0.0.1")


@pytest.mark.asyncio
async def test_engage_unknown_ad(client):
    response = await client.post("/api/v1/ads/999/engage", json={"eventType": "IMPRESSION"})

    assert response.status_code == 404
    assert response.json() == {
        "error": "Advertisement not found",
        "message": "Advertisement not found",
        "code": "AD_NOT_FOUND",
    }


@pytest.mark.asyncio
async def test_engage_rejects_bad_event_type(client):
    response = await client.post("/api/v1/ads/1/engage", json={"eventType": "CONVERSION"})

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_sponsored_listings(client, database):
    dealer = await make_user(database)
    campaign = await make_campaign(database, dealer, targeting=Targeting(body_type=["SUV"]))
    listing = await make_listing(database, dealer, body_type="SUV", price=Decimal("31999.99"))
    await make_sponsored(database, campaign, listing, boost_multiplier=2.0)

    response = await client.get("/api/v1/sponsored/listings", params={"bodyType": "SUV"})

    assert response.status_code == 200
    [item] = response.json()["data"]
    assert item["boostMultiplier"] == 2.0
    assert item["listing"]["id"] == listing.id
    assert item["listing"]["price"] == 31999.99

    other = await client.get("/api/v1/sponsored/listings", params={"bodyType": "VAN"})
    assert other.json() == {"data": []}


@pytest.mark.asyncio
async def test_admin_requires_principal(app, client):
    as_role(app, None)
    response = await client.get("/api/v1/admin/campaigns")
    assert response.status_code == 401
    assert response.json()["code"] == "UNAUTHORIZED"

    as_role(app, "DEALERSHIP")
    response = await client.get("/api/v1/admin/campaigns")
    assert response.status_code == 403
    assert response.json()["code"] == "FORBIDDEN"

    as_role(app, "SUPPORT")
    response = await client.get("/api/v1/admin/campaigns")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_campaign_lifecycle(client, database):
    advertiser = await make_user(database)
    unit = await make_ad_unit(database, "HOME_BILLBOARD")

    created = await client.post(
        "/api/v1/admin/campaigns",
        json={
            "name": "Spring takeover",
            "advertiserId": advertiser.id,
            "budget": 1200.5,
            "startDate": (NOW - timedelta(days=1)).isoformat(),
            "endDate": (NOW + timedelta(days=14)).isoformat(),
            "status": "ACTIVE",
            "priority": 1,
            "targeting": {"fuelType": ["ELECTRIC"]},
        },
    )
    assert created.status_code == 201
    campaign = created.json()["data"]
    assert campaign["budget"] == 1200.5
    assert campaign["spent"] == 0.0
    assert campaign["targeting"] == {
        "fuelType": ["ELECTRIC"],
        "bodyType": None,
        "make": None,
        "location": None,
    }
    campaign_id = campaign["id"]

    ad = await client.post(
        "/api/v1/admin/advertisements",
        json={"campaignId": campaign_id, "adUnitId": unit.id, "title": "Go electric"},
    )
    assert ad.status_code == 201
    ad_id = ad.json()["data"]["id"]

    patched = await client.patch(
        f"/api/v1/admin/campaigns/{campaign_id}", json={"status": "PAUSED"}
    )
    assert patched.status_code == 200
    assert patched.json()["data"]["status"] == "PAUSED"

    detail = await client.get(f"/api/v1/admin/campaigns/{campaign_id}")
    assert detail.status_code == 200
    assert [a["id"] for a in detail.json()["data"]["advertisements"]] == [ad_id]

    archived = await client.delete(f"/api/v1/admin/campaigns/{campaign_id}")
    assert archived.status_code == 200
    assert archived.json()["data"]["status"] == "ARCHIVED"

    refused = await client.patch(f"/api/v1/admin/campaigns/{campaign_id}", json={"name": "Again"})
    assert refused.status_code == 400
    assert refused.json()["code"] == "CAMPAIGN_ARCHIVED"

    detail = await client.get(f"/api/v1/admin/campaigns/{campaign_id}")
    assert detail.json()["data"]["advertisements"][0]["active"] is False


@pytest.mark.asyncio
async def test_create_campaign_validation_error(client):
    response = await client.post(
        "/api/v1/admin/campaigns",
        json={"name": "No dates", "advertiserId": 1},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_update_cannot_archive(client, database):
    advertiser = await make_user(database)
    campaign = await make_campaign(database, advertiser)

    response = await client.patch(
        f"/api/v1/admin/campaigns/{campaign.id}", json={"status": "ARCHIVED"}
    )

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_list_campaigns_endpoint(client, database):
    advertiser = await make_user(database)
    await make_campaign(database, advertiser, status=CampaignStatus.ACTIVE)
    paused = await make_campaign(database, advertiser, status=CampaignStatus.PAUSED)

    response = await client.get(
        "/api/v1/admin/campaigns", params={"status": "PAUSED", "pageSize": 5}
    )

    assert response.status_code == 200
    body = response.json()
    assert [c["id"] for c in body["data"]] == [paused.id]
    assert body["meta"] == {"page": 1, "pageSize": 5, "total": 1, "totalPages": 1}
    assert body["data"][0]["advertisementCount"] == 0


@pytest.mark.asyncio
async def test_analytics_endpoints(client, database):
    advertiser = await make_user(database)
    unit = await make_ad_unit(database, "HOME_BILLBOARD")
    campaign = await make_campaign(database, advertiser)
    ad = await make_ad(database, campaign, unit)
    for event_type in ("IMPRESSION", "IMPRESSION", "CLICK"):
        await client.post(f"/api/v1/ads/{ad.id}/engage", json={"eventType": event_type})

    response = await client.get(f"/api/v1/admin/campaigns/{campaign.id}/analytics")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["totals"] == {"impressions": 2, "clicks": 1, "ctr": 50.0}
    assert len(data["timeSeries"]) == 1

    overview = await client.get("/api/v1/admin/ad-analytics/overview")
    assert overview.status_code == 200
    assert overview.json()["data"]["activeCampaigns"] == 1
    assert overview.json()["data"]["totalClicks"] == 1

    missing = await client.get("/api/v1/admin/campaigns/404/analytics")
    assert missing.status_code == 404
    assert missing.json()["code"] == "CAMPAIGN_NOT_FOUND"


@pytest.mark.asyncio
async def test_sponsored_listing_and_ad_units_endpoints(client, database):
    dealer = await make_user(database)
    await make_ad_unit(database, "HOME_BILLBOARD")
    campaign = await make_campaign(database, dealer)
    listing = await make_listing(database, dealer)

    created = await client.post(
        "/api/v1/admin/sponsored-listings",
        json={"campaignId": campaign.id, "listingId": listing.id, "boostMultiplier": 1.5},
    )
    assert created.status_code == 201
    assert created.json()["data"]["listingId"] == listing.id

    duplicate = await client.post(
        "/api/v1/admin/sponsored-listings",
        json={"campaignId": campaign.id, "listingId": listing.id},
    )
    assert duplicate.status_code == 400

    units = await client.get("/api/v1/admin/ad-units")
    assert units.status_code == 200
    assert [u["placementId"] for u in units.json()["data"]] == ["HOME_BILLBOARD"]


@pytest.mark.asyncio
async def test_create_campaign_rejects_malformed_targeting(client, database):
    advertiser = await make_user(database)

    response = await client.post(
        "/api/v1/admin/campaigns",
        json={
            "name": "Bad targeting",
            "advertiserId": advertiser.id,
            "startDate": NOW.isoformat(),
            "endDate": (NOW + timedelta(days=7)).isoformat(),
            "targeting": {"make": 5},
        },
    )

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"
