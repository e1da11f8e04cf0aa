"""Window aggregates, duration trend, and time window filtering."""

import calendar
from collections.abc import Sequence
from datetime import date, timedelta
from statistics import mean

import structlog

from sleep_insights_server.schemas.sleep import NightRecord, SleepInsights, TimeWindow
from sleep_insights_server.services.insights import InsightGenerator
from sleep_insights_server.services.scoring import (
    compute_consistency,
    compute_quality_score,
    stage_percentage,
)

logger = structlog.get_logger()

MIN_NIGHTS_TREND = 6
TREND_HALF = 3


def _mean_present(values: Sequence[float]) -> float:
    """Mean over non-zero values; exports write 0 for a missing stage."""
    present = [value for value in values if value]
    return mean(present) if present else 0.0


def aggregate(records: Sequence[NightRecord]) -> SleepInsights:
    """Compute stage averages and composition percentages.

    Scores, trend, insights and recommendations are left at their defaults;
    see ``build_insights`` for the complete aggregate.
    """
    average_total = _mean_present([r.total_sleep for r in records])
    average_deep = _mean_present([r.deep_sleep for r in records])
    average_core = _mean_present([r.core_sleep for r in records])
    average_rem = _mean_present([r.rem_sleep for r in records])

    return SleepInsights(
        average_sleep_duration=average_total,
        average_deep_sleep=average_deep,
        average_core_sleep=average_core,
        average_rem_sleep=average_rem,
        deep_sleep_percentage=stage_percentage(average_deep, average_total),
        core_sleep_percentage=stage_percentage(average_core, average_total),
        rem_sleep_percentage=stage_percentage(average_rem, average_total),
    )


def trend(records: Sequence[NightRecord]) -> float:
    """Percent change of the last 3 nights' mean sleep vs the 3 nights before.

    Positive means sleeping longer. Returns 0 with fewer than 6 nights or
    when the earlier half averages 0 hours.
    """
    if len(records) < MIN_NIGHTS_TREND:
        return 0.0

    chronological = sorted(records, key=lambda r: (r.date is not None, r.date or date.min))
    last_six = chronological[-MIN_NIGHTS_TREND:]
    previous_avg = mean(r.total_sleep for r in last_six[:TREND_HALF])
    recent_avg = mean(r.total_sleep for r in last_six[TREND_HALF:])

    if previous_avg <= 0:
        return 0.0
    return (recent_avg - previous_avg) / previous_avg * 100


def build_insights(
    records: Sequence[NightRecord],
    generator: InsightGenerator | None = None,
) -> SleepInsights:
    """Build the complete SleepInsights aggregate for a window.

    Args:
        records: Night records of the window (at least one)
        generator: Insight generator (default: InsightGenerator())

    Returns:
        Aggregate with averages, scores, trend, insights and recommendations
    """
    generator = generator or InsightGenerator()

    scored = aggregate(records).model_copy(
        update={
            "sleep_quality_score": compute_quality_score(records),
            "sleep_consistency": compute_consistency(records),
            "average_sleep_duration_trend": trend(records),
        }
    )
    insights, recommendations = generator.generate(scored)

    return scored.model_copy(update={"insights": insights, "recommendations": recommendations})


def _one_month_before(day: date) -> date:
    """Same day of the previous calendar month, clamped to its length."""
    year, month = (day.year, day.month - 1) if day.month > 1 else (day.year - 1, 12)
    last_day = calendar.monthrange(year, month)[1]
    return day.replace(year=year, month=month, day=min(day.day, last_day))


def window_start(window: TimeWindow, today: date) -> date | None:
    """First date included in a window, or None for no cutoff.

    The cutoff day itself (a week or a calendar month back) is excluded,
    so a week holds the 7 nights ending today.
    """
    if window == TimeWindow.WEEK:
        return today - timedelta(days=6)
    if window == TimeWindow.MONTH:
        return _one_month_before(today) + timedelta(days=1)
    return None


def filter_window(
    records: Sequence[NightRecord],
    window: TimeWindow,
    today: date | None = None,
) -> list[NightRecord]:
    """Select the records inside a time window.

    Args:
        records: Normalized night records
        window: week, month or all
        today: Reference date (default: date.today())

    Returns:
        Records dated on or after the window start. Undated records are
        only kept for the ``all`` window.
    """
    start = window_start(window, today or date.today())
    if start is None:
        selected = list(records)
    else:
        selected = [r for r in records if r.date is not None and r.date >= start]

    logger.debug(
        "Filtered window",
        window=window.value,
        start=start.isoformat() if start else None,
        total=len(records),
        selected=len(selected),
    )
    return selected
