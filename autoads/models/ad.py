"""Campaign, creative and inventory models."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SQLEnum,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from autoads.models.base import (
    AdUnitType,
    Base,
    CampaignStatus,
    ListingStatus,
    Priority,
    TargetingType,
    TimestampMixin,
    UserRole,
)
from autoads.schemas.targeting import Targeting


class User(Base, TimestampMixin):
    """Marketplace account; advertisers are users."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(String(200))
    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole, native_enum=False, length=20), default=UserRole.USER, nullable=False
    )

    campaigns: Mapped[list["AdCampaign"]] = relationship(back_populates="advertiser")


class Listing(Base, TimestampMixin):
    """Vehicle listing, reduced to what sponsored placement needs."""

    __tablename__ = "listings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    make: Mapped[str] = mapped_column(String(100), nullable=False)
    model: Mapped[str] = mapped_column(String(100), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    mileage: Mapped[int | None] = mapped_column(Integer)
    fuel_type: Mapped[str | None] = mapped_column(String(50))
    body_type: Mapped[str | None] = mapped_column(String(50))
    status: Mapped[ListingStatus] = mapped_column(
        SQLEnum(ListingStatus, native_enum=False, length=20),
        default=ListingStatus.PENDING,
        nullable=False,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    user: Mapped[User] = relationship()


class AdCampaign(Base, TimestampMixin):
    """Advertising campaign owning advertisements and sponsored listings."""

    __tablename__ = "ad_campaigns"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    advertiser_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    # Budget (0 = unlimited)
    budget: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    daily_budget: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0"), nullable=False
    )
    # Maintained outside this service
    spent: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)

    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[CampaignStatus] = mapped_column(
        SQLEnum(CampaignStatus, native_enum=False, length=20),
        default=CampaignStatus.DRAFT,
        nullable=False,
    )
    priority: Mapped[int] = mapped_column(
        Integer, default=Priority.PROGRAMMATIC.value, nullable=False
    )
    targeting: Mapped[Targeting] = mapped_column(
        TargetingType, default=Targeting.empty, nullable=False
    )

    advertiser: Mapped[User] = relationship(back_populates="campaigns")
    advertisements: Mapped[list["Advertisement"]] = relationship(back_populates="campaign")
    sponsored_listings: Mapped[list["SponsoredListing"]] = relationship(
        back_populates="campaign"
    )

    __table_args__ = (
        Index("ix_ad_campaigns_status_dates", "status", "start_date", "end_date"),
        Index("ix_ad_campaigns_advertiser", "advertiser_id"),
    )

    @property
    def is_archived(self) -> bool:
        return self.status == CampaignStatus.ARCHIVED


class AdUnit(Base, TimestampMixin):
    """A fixed-size slot in the UI."""

    __tablename__ = "ad_units"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    placement_id: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    type: Mapped[AdUnitType] = mapped_column(
        SQLEnum(AdUnitType, native_enum=False, length=20),
        default=AdUnitType.BANNER,
        nullable=False,
    )
    width: Mapped[int] = mapped_column(Integer, nullable=False)
    height: Mapped[int] = mapped_column(Integer, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    advertisements: Mapped[list["Advertisement"]] = relationship(back_populates="ad_unit")


class Advertisement(Base, TimestampMixin):
    """A creative running in one ad unit for one campaign."""

    __tablename__ = "advertisements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    campaign_id: Mapped[int] = mapped_column(ForeignKey("ad_campaigns.id"), nullable=False)
    ad_unit_id: Mapped[int] = mapped_column(ForeignKey("ad_units.id"), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    image_url: Mapped[str | None] = mapped_column(String(1000))
    image_url_mobile: Mapped[str | None] = mapped_column(String(1000))
    link_url: Mapped[str | None] = mapped_column(String(1000))
    ad_sense_snippet: Mapped[str | None] = mapped_column(Text)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    campaign: Mapped[AdCampaign] = relationship(back_populates="advertisements")
    ad_unit: Mapped[AdUnit] = relationship(back_populates="advertisements")

    __table_args__ = (
        Index("ix_advertisements_unit_active", "ad_unit_id", "active"),
        Index("ix_advertisements_campaign", "campaign_id"),
    )


class SponsoredListing(Base, TimestampMixin):
    """A listing boosted into search results by a campaign."""

    __tablename__ = "sponsored_listings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    listing_id: Mapped[int] = mapped_column(ForeignKey("listings.id"), nullable=False)
    campaign_id: Mapped[int] = mapped_column(ForeignKey("ad_campaigns.id"), nullable=False)
    boost_multiplier: Mapped[float] = mapped_column(Float, default=1.0, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    listing: Mapped[Listing] = relationship()
    campaign: Mapped[AdCampaign] = relationship(back_populates="sponsored_listings")

    __table_args__ = (
        UniqueConstraint("listing_id", "campaign_id", name="uq_sponsored_listing_campaign"),
    )
