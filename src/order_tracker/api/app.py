"""
order_tracker.api.app

FastAPI app factory for the Order Tracker service.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Create and dispose shared infrastructure (HTTP clients, controller, poll loop).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from order_tracker.api.routers.dashboard import router as dashboard_router
from order_tracker.api.routers.health import router as health_router
from order_tracker.api.routers.orders import router as orders_router
from order_tracker.clients.geocoding import GeocodingClient
from order_tracker.clients.orders import OrderSource, OrderSourceConfig
from order_tracker.errors import ConfigError
from order_tracker.observability.logging import configure_logging, get_logger
from order_tracker.observability.middleware import RequestContextMiddleware
from order_tracker.services.area_resolver import AreaResolver
from order_tracker.services.dashboard import DashboardController
from order_tracker.settings import Settings

log = get_logger(__name__)


def create_app(
    *,
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """
    `transport` replaces the network for both outbound clients (tests pass a MockTransport).
    """

    configure_logging(service_name=settings.service_name, level=settings.log_level)
    source_config = OrderSourceConfig.from_settings(settings)

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        orders_http = httpx.AsyncClient(transport=transport)
        geocode_http = httpx.AsyncClient(
            transport=transport, timeout=settings.http_timeout_seconds
        )
        resolver = AreaResolver(
            geocoder=GeocodingClient(
                http=geocode_http,
                url=settings.geocode_url,
                user_agent=settings.geocode_user_agent,
            ),
            delay_seconds=settings.geocode_delay_seconds,
            fallback_label=settings.area_fallback_label,
            retain_resolved=settings.retain_resolved_areas,
        )
        controller = DashboardController(
            source=OrderSource(config=source_config, http=orders_http),
            resolver=resolver,
        )
        app.state.controller = controller
        controller.start()

        poller: asyncio.Task[None] | None = None
        if settings.refresh_interval_seconds > 0:
            poller = asyncio.create_task(controller.poll(settings.refresh_interval_seconds))

        try:
            yield
        finally:
            if poller is not None:
                poller.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await poller
            await controller.aclose()
            await orders_http.aclose()
            await geocode_http.aclose()
            log.info("shutdown")

    app = FastAPI(
        title="Order Tracker",
        version="0.1.0",
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(dashboard_router)
    app.include_router(orders_router)

    @app.exception_handler(ConfigError)
    async def _config_error(_: Request, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    return app


# --- Module Notes -----------------------------------------------------------
# OrderSourceConfig is validated before the app object exists, so a missing URL or
# token fails at construction rather than on the first fetch.
