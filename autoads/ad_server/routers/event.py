"""
Event tracking endpoints.
"""

from fastapi import APIRouter, Depends, Request, Response, status

from autoads.ad_server.deps import Principal, get_event_service, get_principal
from autoads.ad_server.services.event_service import EventService
from autoads.common.logger import get_logger, log_context
from autoads.schemas.request import EngageRequest

logger = get_logger(__name__)
router = APIRouter()


@router.post("/{ad_id}/engage", status_code=status.HTTP_204_NO_CONTENT)
async def track_ad_event(
    ad_id: int,
    event: EngageRequest,
    request: Request,
    principal: Principal | None = Depends(get_principal),
    event_service: EventService = Depends(get_event_service),
) -> Response:
    """
    Track an ad impression or click.

    The caller's IP is taken from the connection and only its fingerprint
    is stored.
    """
    log_context(ad_id=ad_id, event_type=event.event_type.value)

    await event_service.track_event(
        ad_id,
        event.event_type,
        user_id=principal.id if principal else None,
        device=event.device,
        locale=event.locale,
        ip=request.client.host if request.client else None,
        metadata=event.metadata,
    )

    return Response(status_code=status.HTTP_204_NO_CONTENT)
