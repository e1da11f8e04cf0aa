"""Local narrative composer.

Produces the same three-paragraph analysis the advice service returns,
from the window aggregate alone. Used when the advice service is not
configured or the request fails.
"""

import structlog

from sleep_insights_server.schemas.sleep import (
    AnalysisSource,
    QualityCategory,
    SleepAnalysis,
    SleepInsights,
)
from sleep_insights_server.services.formatting import format_hours_and_minutes, round_half_up

logger = structlog.get_logger()

# (minimum score, category); first match wins
QUALITY_BANDS: tuple[tuple[int, QualityCategory], ...] = (
    (85, QualityCategory.EXCELLENT),
    (70, QualityCategory.GOOD),
    (50, QualityCategory.FAIR),
)

PARAGRAPH_SEPARATOR = "\n\n"


def quality_category(score: int) -> QualityCategory:
    """Map a quality score to its category band."""
    for minimum, category in QUALITY_BANDS:
        if score >= minimum:
            return category
    return QualityCategory.POOR


class NarrativeComposer:
    """Compose a deterministic sleep report from a window aggregate."""

    def __init__(self) -> None:
        """Initialize narrative composer."""
        self.logger = logger.bind(service="narrative")

    def compose(self, aggregate: SleepInsights, day_count: int) -> SleepAnalysis:
        """Compose the three-paragraph report.

        Args:
            aggregate: Window aggregate
            day_count: Number of nights analyzed

        Returns:
            Locally sourced SleepAnalysis
        """
        category = quality_category(aggregate.sleep_quality_score)
        paragraphs = [
            self._overview(aggregate, category),
            self._composition(aggregate),
            self._recommendations(aggregate),
        ]

        self.logger.debug(
            "Composed local narrative",
            quality_category=category.value,
            sleep_score=aggregate.sleep_quality_score,
            day_count=day_count,
        )
        return SleepAnalysis(
            summary=PARAGRAPH_SEPARATOR.join(paragraphs),
            quality_category=category,
            sleep_score=aggregate.sleep_quality_score,
            day_count=day_count,
            source=AnalysisSource.LOCAL,
        )

    def _overview(self, aggregate: SleepInsights, category: QualityCategory) -> str:
        duration = aggregate.average_sleep_duration
        meeting = "meeting" if duration >= 7 else "falling short of"
        return (
            f"Your overall sleep quality score is {aggregate.sleep_quality_score}/100, "
            f"indicating {category.value} sleep health. With an average of "
            f"{format_hours_and_minutes(duration)} of sleep per night, you are {meeting} "
            "the recommended 7-9 hours needed for optimal health and cognitive function."
        )

    def _composition(self, aggregate: SleepInsights) -> str:
        consistency = aggregate.sleep_consistency
        regularity = "good regularity" if consistency >= 7 else "irregular sleep patterns"
        return (
            f"Your sleep composition shows {round_half_up(aggregate.deep_sleep_percentage)}% "
            "deep sleep (ideal: 15-25%) and "
            f"{round_half_up(aggregate.rem_sleep_percentage)}% REM sleep (ideal: 20-25%), "
            "which are crucial for physical recovery and cognitive processing respectively. "
            f"Your sleep consistency score of {consistency}/10 indicates {regularity} that "
            "can affect your overall sleep quality and daytime alertness."
        )

    def _recommendations(self, aggregate: SleepInsights) -> str:
        if aggregate.deep_sleep_percentage < 15:
            deep = (
                "increasing deep sleep through regular exercise earlier in the day and "
                "limiting evening screen time"
            )
        else:
            deep = "maintaining your healthy deep sleep patterns"

        if aggregate.sleep_consistency < 5:
            schedule = (
                "Establish consistent sleep and wake times, even on weekends, to improve "
                "your sleep rhythm."
            )
        else:
            schedule = "Continue maintaining your consistent sleep schedule."

        if aggregate.average_sleep_duration < 7:
            duration = (
                "Aim to extend your sleep duration by 30-60 minutes to reach at least "
                "7 hours nightly for optimal health benefits."
            )
        else:
            duration = (
                "Your current sleep duration supports good health - maintain this pattern."
            )

        return f"To improve your sleep quality, focus on {deep}. {schedule} {duration}"
