"""
Common utility functions.
"""

import hashlib
import uuid
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

IP_HASH_LENGTH = 16

_TWO_PLACES = Decimal("0.01")


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def hash_ip(ip: str) -> str:
    """
    One-way fingerprint of a client IP address.

    Truncated SHA-256 hex digest; deterministic, so repeat visitors can be
    counted without ever storing the address itself.
    """
    return hashlib.sha256(ip.encode("utf-8")).hexdigest()[:IP_HASH_LENGTH]


def to_decimal(value: Decimal | int | float | str | None) -> Decimal:
    """Convert a money value to Decimal without binary float artifacts."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def click_through_rate(impressions: int, clicks: int) -> float:
    """Clicks per hundred impressions, rounded half-up to two decimals."""
    if impressions <= 0:
        return 0.0
    ratio = Decimal(clicks) * 100 / Decimal(impressions)
    return float(ratio.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite returns them naive)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
