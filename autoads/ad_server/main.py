"""
FastAPI application entrypoint.
"""

import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from autoads.ad_server.routers import ad, admin, event, sponsored
from autoads.ad_server.services.ad_service import AdService
from autoads.ad_server.services.analytics_service import AnalyticsService
from autoads.ad_server.services.campaign_service import CampaignService
from autoads.ad_server.services.event_service import EventService
from autoads.ad_server.services.sponsored_service import SponsoredService
from autoads.common.config import Settings, get_settings
from autoads.common.database import Database
from autoads.common.exceptions import AppError, ErrorCode
from autoads.common.logger import clear_log_context, get_logger, log_context, setup_logging
from autoads.common.utils import generate_request_id
from autoads.rec_engine.ranking.tier import RandomProvider

logger = get_logger(__name__)


def _error_body(message: str, code: ErrorCode) -> dict[str, str]:
    return {"error": message, "message": message, "code": code.value}


def create_app(
    settings: Settings | None = None,
    database: Database | None = None,
    random_provider: RandomProvider | None = None,
) -> FastAPI:
    """
    Build the application.

    Tests pass their own database and random provider; in production both
    come from settings.
    """
    settings = settings or get_settings()
    database = database or Database.from_settings(settings.database)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.logging.level, settings.logging.format)
        logger.info("Starting AutoAds", version=settings.app_version, env=settings.env)
        await database.create_all()
        try:
            yield
        finally:
            await database.dispose()
            logger.info("AutoAds stopped")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = database
    app.state.ad_service = AdService(database, random_provider=random_provider)
    app.state.event_service = EventService(database)
    app.state.campaign_service = CampaignService(database)
    app.state.analytics_service = AnalyticsService(database)
    app.state.sponsored_service = SponsoredService(database)

    @app.middleware("http")
    async def request_logging(request: Request, call_next):
        clear_log_context()
        request_id = request.headers.get("x-request-id") or generate_request_id()
        log_context(request_id=request_id)

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        response.headers["X-Request-ID"] = request_id
        if settings.logging.access_log:
            logger.info(
                "Request handled",
                method=request.method,
                path=request.url.path,
                status=response.status_code,
                duration_ms=round(duration_ms, 2),
            )
        return response

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("Request failed", code=exc.code.value, error=exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        message = errors[0]["msg"] if errors else "Invalid request"
        return JSONResponse(
            status_code=400,
            content=_error_body(message, ErrorCode.VALIDATION_ERROR),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error", path=request.url.path)
        return JSONResponse(
            status_code=500,
            content=_error_body("Internal server error", ErrorCode.INTERNAL_ERROR),
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": settings.app_version}

    api_prefix = settings.server.api_prefix
    app.include_router(ad.router, prefix=f"{api_prefix}/ads", tags=["ads"])
    app.include_router(event.router, prefix=f"{api_prefix}/ads", tags=["events"])
    app.include_router(sponsored.router, prefix=f"{api_prefix}/sponsored", tags=["sponsored"])
    app.include_router(admin.router, prefix=f"{api_prefix}/admin", tags=["admin"])

    return app


def main() -> None:
    """Run the server with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "autoads.ad_server.main:create_app",
        factory=True,
        host=settings.server.host,
        port=settings.server.port,
        workers=settings.server.workers,
        reload=settings.server.reload,
    )


if __name__ == "__main__":
    main()
