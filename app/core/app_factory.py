"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build isolated instances.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.dependencies import close_network_capacity_service, get_network_capacity_service
from app.api.routes import health_router, network_router
from app.core.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the data backend at startup and release its HTTP client on shutdown.

    A misconfigured backend (e.g. missing Supabase credentials) fails at boot
    rather than on the first capacity check.
    """
    get_network_capacity_service()
    logger.info("app.startup", extra={"backend": settings.app.data_backend.lower()})
    try:
        yield
    finally:
        await close_network_capacity_service()
        logger.info("app.shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Sponsor Network Gate",
        description=(
            "Pre-subscription checks for the referral network: validates that a "
            "sponsor still has room for another direct member and reports sponsor "
            "capacity for dashboards. Requires X-API-Key and applies per-client "
            "fixed-window rate limits."
        ),
        version="0.1.0",
        debug=settings.app.debug,
        lifespan=lifespan,
    )

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(network_router, prefix="/v1")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
