"""Service status endpoint."""

from typing import Any

from litestar import Router, get
from litestar.status_codes import HTTP_200_OK

from sleep_insights_server import __version__
from sleep_insights_server.core.config import settings


@get("/health", status_code=HTTP_200_OK, sync_to_thread=False)
def health_check() -> dict[str, Any]:
    """Report service status and how analyses will run.

    ``adviceConfigured`` tells clients whether narratives can come from the
    remote advice service or will always be composed locally.
    """
    return {
        "status": "ok",
        "version": __version__,
        "defaultWindow": settings.default_window.value,
        "adviceConfigured": settings.is_advice_configured(),
    }


health_router = Router(path="/", route_handlers=[health_check])
