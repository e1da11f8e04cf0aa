"""CSV ingestion for sleep exports."""

import csv
import io
from collections.abc import Iterable, Mapping
from typing import Any

import structlog

from sleep_insights_server.schemas.sleep import NightRecord
from sleep_insights_server.transformers.sleep import SleepRowTransformer, normalize_rows

logger = structlog.get_logger()


class NoSleepDataError(ValueError):
    """Raised when an export or window holds no sleep data."""

    def __init__(self, message: str = "No sleep data found") -> None:
        super().__init__(message)


def read_sleep_csv(text: str) -> list[dict[str, str]]:
    """Parse CSV text with a header row into raw rows.

    Args:
        text: CSV content (a leading UTF-8 BOM is ignored)

    Returns:
        One dict per data row, keyed by header column
    """
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    return [dict(row) for row in reader]


def filter_sleep_rows(rows: Iterable[Mapping[str, Any]]) -> list[Mapping[str, Any]]:
    """Keep only rows carrying a sleep-duration column.

    Raises:
        NoSleepDataError: If no row qualifies
    """
    rows = list(rows)
    sleep_rows = [row for row in rows if SleepRowTransformer.has_sleep_data(row)]

    if not sleep_rows:
        logger.warning("No sleep data found", rows=len(rows))
        raise NoSleepDataError()

    logger.debug("Found sleep data rows", rows=len(rows), sleep_rows=len(sleep_rows))
    return sleep_rows


def load_sleep_records(text: str) -> list[NightRecord]:
    """Parse, filter and normalize a CSV export.

    Raises:
        NoSleepDataError: If the export holds no sleep data
    """
    return normalize_rows(filter_sleep_rows(read_sleep_csv(text)))
