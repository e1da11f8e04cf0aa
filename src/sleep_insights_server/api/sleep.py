"""Sleep analysis API endpoints."""

from collections.abc import Mapping, Sequence
from datetime import date
from typing import Annotated, Any

import structlog
from litestar import Request, Router, post
from litestar.di import Provide
from litestar.exceptions import ValidationException
from litestar.params import Parameter
from litestar.status_codes import HTTP_200_OK

from sleep_insights_server.core.config import settings
from sleep_insights_server.schemas.sleep import NightRecord, SleepWindowRequest, TimeWindow
from sleep_insights_server.services.advice import AdviceClient
from sleep_insights_server.services.analysis import SleepAnalysisService
from sleep_insights_server.services.ingest import (
    NoSleepDataError,
    filter_sleep_rows,
    load_sleep_records,
)
from sleep_insights_server.transformers.sleep import normalize_rows

logger = structlog.get_logger()


def provide_analysis_service() -> SleepAnalysisService:
    """Build the analysis service from settings."""
    return SleepAnalysisService(advice_client=AdviceClient.from_settings(settings))


def _records_from_rows(rows: Sequence[Mapping[str, Any]]) -> list[NightRecord]:
    """Filter and normalize raw rows, mapping an empty export to HTTP 400."""
    try:
        return normalize_rows(filter_sleep_rows(rows))
    except NoSleepDataError as e:
        raise ValidationException(str(e)) from e


@post("/sleep/insights", status_code=HTTP_200_OK)
async def post_sleep_insights(
    data: SleepWindowRequest,
    analysis_service: SleepAnalysisService,
) -> dict[str, Any]:
    """Compute sleep insights for a window of raw export rows.

    Returns averages, stage composition, quality and consistency scores,
    the duration trend, insights and recommendations.

    Example request:
    ```json
    {
      "window": "week",
      "rows": [
        {"Date": "2026-01-12", "Total Sleep": "7.5", "Deep Sleep": "1.4", "REM Sleep": "1.7"}
      ]
    }
    ```
    """
    records = _records_from_rows(data.rows)
    window = data.window or settings.default_window

    try:
        _, insights = analysis_service.window_insights(records, window, data.today)
    except NoSleepDataError as e:
        raise ValidationException(str(e)) from e

    return insights.model_dump(mode="json", by_alias=True)


@post("/sleep/analysis", status_code=HTTP_200_OK)
async def post_sleep_analysis(
    data: SleepWindowRequest,
    analysis_service: SleepAnalysisService,
) -> dict[str, Any]:
    """Run a full analysis cycle for raw export rows.

    The narrative comes from the advice service when it is configured and
    reachable, and is composed locally otherwise. The response reports
    which one was used (``analysis.source``, ``fallbackUsed``).
    """
    records = _records_from_rows(data.rows)
    window = data.window or settings.default_window

    try:
        report = await analysis_service.analyze(records, window, data.today)
    except NoSleepDataError as e:
        raise ValidationException(str(e)) from e

    return report.model_dump(mode="json", by_alias=True)


@post("/sleep/upload", status_code=HTTP_200_OK)
async def upload_sleep_csv(
    request: Request[Any, Any, Any],
    analysis_service: SleepAnalysisService,
    window: Annotated[
        TimeWindow | None,
        Parameter(query="window", description="week, month or all"),
    ] = None,
    today: Annotated[
        date | None,
        Parameter(query="today", description="Reference date (YYYY-MM-DD)"),
    ] = None,
) -> dict[str, Any]:
    """Analyze a CSV sleep export sent as the request body.

    Example:
        POST /api/v1/sleep/upload?window=month  (Content-Type: text/csv)
    """
    body = await request.body()
    text = body.decode("utf-8-sig", errors="replace")

    try:
        records = load_sleep_records(text)
        report = await analysis_service.analyze(
            records, window or settings.default_window, today
        )
    except NoSleepDataError as e:
        raise ValidationException(str(e)) from e

    logger.info("Analyzed uploaded export", nights=len(records), window=report.window.value)
    return report.model_dump(mode="json", by_alias=True)


sleep_router = Router(
    path="/",
    route_handlers=[post_sleep_insights, post_sleep_analysis, upload_sleep_csv],
    dependencies={
        "analysis_service": Provide(provide_analysis_service, sync_to_thread=False),
    },
    tags=["Sleep"],
)
