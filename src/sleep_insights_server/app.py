"""Litestar application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from litestar import Litestar
from litestar.openapi import OpenAPIConfig

from sleep_insights_server import __version__
from sleep_insights_server.api import api_routers
from sleep_insights_server.core.config import settings
from sleep_insights_server.core.logging import configure_logging

# Configure structured logging
configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: Litestar) -> AsyncIterator[None]:
    """Application lifespan manager."""
    logger.info(
        "Starting sleep-insights-server",
        version=__version__,
        default_window=settings.default_window.value,
        advice_configured=settings.is_advice_configured(),
    )

    yield

    logger.info("Shutdown complete")


def create_app() -> Litestar:
    """Create Litestar application.

    Returns:
        Configured Litestar app instance
    """
    return Litestar(
        route_handlers=[*api_routers],
        lifespan=[lifespan],
        openapi_config=OpenAPIConfig(
            title="sleep-insights-server API",
            version=__version__,
            description="Sleep quality scoring, insights and narrative analysis",
        ),
        debug=settings.log_level == "DEBUG",
    )


# Application instance
app = create_app()
