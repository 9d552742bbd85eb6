"""
Request schemas.

Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from autoads.common.utils import ensure_utc
from autoads.models.base import CampaignStatus, EventType, Priority
from autoads.schemas.targeting import Targeting


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


CREATABLE_STATUSES = frozenset(
    {CampaignStatus.DRAFT, CampaignStatus.ACTIVE, CampaignStatus.PAUSED}
)
# ARCHIVED is reachable only through the archive operation
UPDATABLE_STATUSES = CREATABLE_STATUSES | {CampaignStatus.COMPLETED}


class CampaignCreate(CamelModel):
    """Create campaign request."""

    name: str = Field(..., min_length=1, max_length=200)
    advertiser_id: int
    budget: Decimal = Field(default=Decimal("0"), ge=0, description="0 = unlimited")
    daily_budget: Decimal = Field(default=Decimal("0"), ge=0)
    start_date: datetime
    end_date: datetime
    status: CampaignStatus = CampaignStatus.DRAFT
    priority: int = Field(
        default=Priority.PROGRAMMATIC.value,
        ge=Priority.TAKEOVER.value,
        le=Priority.PROGRAMMATIC.value,
    )
    targeting: Targeting = Field(default_factory=Targeting)

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @field_validator("status")
    @classmethod
    def check_status(cls, v: CampaignStatus) -> CampaignStatus:
        if v not in CREATABLE_STATUSES:
            raise ValueError(f"Campaigns cannot be created as {v.value}")
        return v

    @model_validator(mode="after")
    def check_date_range(self) -> "CampaignCreate":
        if self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        return self


class CampaignUpdate(CamelModel):
    """Partial campaign update; only fields present in the payload are applied."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    budget: Decimal | None = Field(default=None, ge=0)
    daily_budget: Decimal | None = Field(default=None, ge=0)
    start_date: datetime | None = None
    end_date: datetime | None = None
    status: CampaignStatus | None = None
    priority: int | None = Field(
        default=None, ge=Priority.TAKEOVER.value, le=Priority.PROGRAMMATIC.value
    )
    targeting: Targeting | None = None

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v) if v is not None else None

    @field_validator("status")
    @classmethod
    def check_status(cls, v: CampaignStatus | None) -> CampaignStatus | None:
        if v is not None and v not in UPDATABLE_STATUSES:
            raise ValueError(f"Status cannot be set to {v.value} by an update")
        return v

    def changes(self) -> dict[str, Any]:
        """Explicitly supplied, non-null fields."""
        return {
            key: getattr(self, key)
            for key in self.model_fields_set
            if getattr(self, key) is not None
        }


class AdvertisementCreate(CamelModel):
    """Create advertisement request."""

    campaign_id: int
    ad_unit_id: int
    title: str = Field(..., min_length=1, max_length=200)
    image_url: str | None = Field(default=None, max_length=1000)
    image_url_mobile: str | None = Field(default=None, max_length=1000)
    link_url: str | None = Field(default=None, max_length=1000)
    ad_sense_snippet: str | None = None
    active: bool = True


class AdvertisementUpdate(CamelModel):
    """Partial advertisement update; creative fields may be cleared with null."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    image_url: str | None = Field(default=None, max_length=1000)
    image_url_mobile: str | None = Field(default=None, max_length=1000)
    link_url: str | None = Field(default=None, max_length=1000)
    ad_sense_snippet: str | None = None
    active: bool | None = None

    def changes(self) -> dict[str, Any]:
        data = {key: getattr(self, key) for key in self.model_fields_set}
        # Title and active are required columns
        for key in ("title", "active"):
            if key in data and data[key] is None:
                del data[key]
        return data


class SponsoredListingCreate(CamelModel):
    listing_id: int
    campaign_id: int
    boost_multiplier: float = Field(default=1.0, gt=0)
    active: bool = True


class EngageRequest(CamelModel):
    """Impression or click reported by a client."""

    event_type: EventType
    device: str | None = Field(default=None, max_length=50)
    locale: str | None = Field(default=None, max_length=10)
    metadata: dict[str, Any] | None = None
