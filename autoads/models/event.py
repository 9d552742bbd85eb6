"""Event models for AutoAds."""
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Enum as SQLEnum, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from autoads.models.ad import Advertisement
from autoads.models.base import Base, EventType, _utcnow


class AdAnalyticsEvent(Base):
    """Model for tracking ad events."""
    __tablename__ = "ad_analytics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    advertisement_id: Mapped[int] = mapped_column(
        ForeignKey("advertisements.id"), nullable=False
    )
    event_type: Mapped[EventType] = mapped_column(
        SQLEnum(EventType, native_enum=False, length=20), nullable=False
    )
    user_id: Mapped[int | None] = mapped_column(Integer)
    device: Mapped[str | None] = mapped_column(String(50))
    locale: Mapped[str | None] = mapped_column(String(10))
    # Truncated SHA-256 of the client IP; the address itself is never stored
    ip_hash: Mapped[str | None] = mapped_column(String(16))
    event_metadata: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSON, default=dict, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    advertisement: Mapped[Advertisement] = relationship()

    __table_args__ = (
        Index("ix_ad_analytics_ad_type_created", "advertisement_id", "event_type", "created_at"),
    )
