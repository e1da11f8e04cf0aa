"""API routes."""

from litestar import Router

from sleep_insights_server.api.health import health_router
from sleep_insights_server.api.sleep import sleep_router
from sleep_insights_server.core.config import settings

# Versioned API routers
_v1_routers = [
    sleep_router,  # Insights, analysis and CSV upload
]

api_v1_router = Router(path=settings.api_prefix, route_handlers=_v1_routers)

# Export: health (root), v1 (prefixed)
api_routers = [health_router, api_v1_router]

__all__ = ["api_routers"]
