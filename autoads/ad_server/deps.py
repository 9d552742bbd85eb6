"""
FastAPI dependencies.

Services are built once in create_app() and stored on app.state; handlers
reach them through these functions. Authentication happens upstream: an
auth middleware places a Principal on request.state.principal.
"""

from dataclasses import dataclass

from fastapi import Depends, Request

from autoads.ad_server.services.ad_service import AdService
from autoads.ad_server.services.analytics_service import AnalyticsService
from autoads.ad_server.services.campaign_service import CampaignService
from autoads.ad_server.services.event_service import EventService
from autoads.ad_server.services.sponsored_service import SponsoredService
from autoads.common.config import Settings
from autoads.common.exceptions import ForbiddenError, UnauthorizedError


@dataclass(frozen=True)
class Principal:
    """Authenticated caller."""

    id: int
    role: str


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_principal(request: Request) -> Principal | None:
    return getattr(request.state, "principal", None)


def require_admin(
    principal: Principal | None = Depends(get_principal),
    settings: Settings = Depends(get_settings_dep),
) -> Principal:
    if principal is None:
        raise UnauthorizedError("Authentication required")
    if principal.role not in settings.ad_serving.admin_roles:
        raise ForbiddenError("Insufficient permissions")
    return principal


def get_ad_service(request: Request) -> AdService:
    """Dependency to get ad service."""
    return request.app.state.ad_service


def get_event_service(request: Request) -> EventService:
    """Dependency to get event service."""
    return request.app.state.event_service


def get_campaign_service(request: Request) -> CampaignService:
    return request.app.state.campaign_service


def get_analytics_service(request: Request) -> AnalyticsService:
    return request.app.state.analytics_service


def get_sponsored_service(request: Request) -> SponsoredService:
    return request.app.state.sponsored_service
