"""
Base model and shared column types.
"""

import enum
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from autoads.schemas.targeting import Targeting


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base for all models."""


class TimestampMixin:
    """Adds created/updated timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )


class CampaignStatus(str, enum.Enum):
    """Campaign lifecycle states. ARCHIVED is terminal."""

    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"


class Priority(int, enum.Enum):
    """Placement tiers; the lowest value wins."""

    TAKEOVER = 1
    HOUSE = 2
    PROGRAMMATIC = 3


class AdUnitType(str, enum.Enum):
    BANNER = "BANNER"
    NATIVE = "NATIVE"
    ADSENSE = "ADSENSE"


class EventType(str, enum.Enum):
    """Types of ad events."""

    IMPRESSION = "IMPRESSION"
    CLICK = "CLICK"


class UserRole(str, enum.Enum):
    USER = "USER"
    DEALERSHIP = "DEALERSHIP"
    ADMIN = "ADMIN"
    SUPPORT = "SUPPORT"


class ListingStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    SOLD = "SOLD"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"


class TargetingType(TypeDecorator):
    """Stores Targeting as a JSON object and always loads it back as one."""

    impl = JSON
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Dialect) -> dict[str, list[str]]:
        if value is None:
            return {}
        if not isinstance(value, Targeting):
            value = Targeting.model_validate(value)
        return value.to_json()

    def process_result_value(self, value: Any, dialect: Dialect) -> Targeting:
        return Targeting.model_validate(value or {})
