"""Compact window digest for the remote advice service."""

from collections.abc import Sequence

from sleep_insights_server.schemas.sleep import (
    AdviceDigest,
    DateRange,
    DigestAverages,
    DigestScores,
    NightRecord,
    SleepInsights,
)
from sleep_insights_server.services.formatting import format_hours_and_minutes, round_half_up


def date_range(records: Sequence[NightRecord]) -> DateRange | None:
    """Span of the dated records, or None if none is dated."""
    dates = sorted(r.date for r in records if r.date is not None)
    if not dates:
        return None
    start, end = dates[0], dates[-1]
    return DateRange(start=start, end=end, days=(end - start).days + 1)


def build_digest(records: Sequence[NightRecord], insights: SleepInsights) -> AdviceDigest:
    """Summarize a window for transmission to a text-generation service.

    Args:
        records: Night records of the window
        insights: Aggregate computed from the same records

    Returns:
        Digest with averages, formatted durations, scores and a one-line summary
    """
    average_formatted = format_hours_and_minutes(insights.average_sleep_duration)

    return AdviceDigest(
        data_points=len(records),
        date_range=date_range(records),
        averages=DigestAverages(
            total_sleep=insights.average_sleep_duration,
            total_sleep_formatted=average_formatted,
            deep_sleep=insights.average_deep_sleep,
            deep_sleep_formatted=format_hours_and_minutes(insights.average_deep_sleep),
            deep_sleep_percentage=round_half_up(insights.deep_sleep_percentage),
            rem_sleep=insights.average_rem_sleep,
            rem_sleep_formatted=format_hours_and_minutes(insights.average_rem_sleep),
            rem_sleep_percentage=round_half_up(insights.rem_sleep_percentage),
        ),
        scores=DigestScores(
            sleep_quality=insights.sleep_quality_score,
            sleep_consistency=insights.sleep_consistency,
        ),
        summary=(
            f"{len(records)} days of sleep data analyzed. "
            f"Average sleep: {average_formatted}. "
            f"Sleep quality score: {insights.sleep_quality_score}/100. "
            f"Sleep consistency: {insights.sleep_consistency}/10."
        ),
    )
