"""
Event tracking service.

Handles recording ad events (impressions, clicks).
"""

from typing import Any

from autoads.common.database import Database
from autoads.common.exceptions import BadRequestError, ErrorCode, NotFoundError
from autoads.common.logger import get_logger
from autoads.common.utils import hash_ip
from autoads.models import AdAnalyticsEvent, Advertisement, EventType

logger = get_logger(__name__)


class EventService:
    """Event tracking service."""

    def __init__(self, database: Database):
        self.database = database

    async def track_event(
        self,
        ad_id: int,
        event_type: EventType | str,
        *,
        user_id: int | None = None,
        device: str | None = None,
        locale: str | None = None,
        ip: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """
        Record an impression or click for an advertisement.

        The client IP is reduced to a one-way fingerprint before it is
        stored. Campaign spend is not touched here.
        """
        event_type_enum = self._get_event_type(event_type)
        if event_type_enum is None:
            raise BadRequestError(f"Unknown event type: {event_type}")

        async with self.database.session() as session:
            ad = await session.get(Advertisement, ad_id)
            if ad is None:
                raise NotFoundError("Advertisement not found", ErrorCode.AD_NOT_FOUND)

            event = AdAnalyticsEvent(
                advertisement_id=ad.id,
                event_type=event_type_enum,
                user_id=user_id,
                device=device or None,
                locale=locale or None,
                ip_hash=hash_ip(ip) if ip else None,
                event_metadata=dict(metadata or {}),
            )
            session.add(event)
            await session.commit()

        logger.info(
            "Event tracked",
            event_id=event.id,
            ad_id=ad_id,
            campaign_id=ad.campaign_id,
            event_type=event_type_enum.value,
        )

    @staticmethod
    def _get_event_type(event_type: EventType | str) -> EventType | None:
        """Convert event type string to enum."""
        if isinstance(event_type, EventType):
            return event_type
        mapping = {
            # Full names
            "impression": EventType.IMPRESSION,
            "click": EventType.CLICK,
            # Short codes
            "imp": EventType.IMPRESSION,
            "clk": EventType.CLICK,
        }
        return mapping.get(event_type.lower())
