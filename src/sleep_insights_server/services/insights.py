"""Rule-based insight and recommendation generator."""

from enum import Enum

import structlog

from sleep_insights_server.schemas.sleep import (
    IconName,
    Insight,
    InsightCategory,
    InsightColor,
    Recommendation,
    SleepInsights,
)

logger = structlog.get_logger()

# Thresholds
MIN_OPTIMAL_HOURS = 7
MAX_OPTIMAL_HOURS = 9
MIN_DEEP_SLEEP_PCT = 15
MIN_REM_SLEEP_PCT = 20
IRREGULAR_CONSISTENCY = 5  # Below this is irregular
CONSISTENT_CONSISTENCY = 8  # At or above this is very consistent


class RecommendationKind(str, Enum):
    """Entries of the recommendation catalogue."""

    BEDTIME_ROUTINE = "bedtime_routine"
    SCREEN_TIME = "screen_time"
    CAFFEINE = "caffeine"
    ACTIVITY = "activity"


# Not personalized: returned for every window, in this order
RECOMMENDATIONS: dict[RecommendationKind, Recommendation] = {
    RecommendationKind.BEDTIME_ROUTINE: Recommendation(
        title="Optimize your bedtime routine",
        description="Based on your sleep patterns, try going to bed between 10:00-10:30 PM "
        "for optimal sleep cycles.",
        icon_name=IconName.MOON,
    ),
    RecommendationKind.SCREEN_TIME: Recommendation(
        title="Limit screen time before bed",
        description="Reduce exposure to blue light from devices at least 1 hour before "
        "bedtime to improve sleep quality.",
        icon_name=IconName.SUN,
    ),
    RecommendationKind.CAFFEINE: Recommendation(
        title="Consider your caffeine intake",
        description="Avoiding caffeine after 2 PM could help improve your deep sleep percentage.",
        icon_name=IconName.COFFEE,
    ),
    RecommendationKind.ACTIVITY: Recommendation(
        title="Increase physical activity",
        description="Regular exercise can help improve both sleep duration and quality.",
        icon_name=IconName.FLAME,
    ),
}


class InsightGenerator:
    """Generate human-readable insights from a window aggregate.

    Rules are evaluated per category in a fixed order (duration, deep
    sleep, REM sleep, consistency). Each category emits at most one
    insight; some emit none for in-range values.
    """

    def __init__(self) -> None:
        """Initialize insight generator."""
        self.logger = logger.bind(service="insights")

    def generate(
        self, aggregate: SleepInsights
    ) -> tuple[list[Insight], list[Recommendation]]:
        """Generate insights and recommendations.

        Args:
            aggregate: Window aggregate with averages and scores

        Returns:
            Tuple of (insights in rule order, recommendation catalogue)
        """
        insights: list[Insight] = [
            self._duration_insight(aggregate.average_sleep_duration),
            self._deep_sleep_insight(aggregate.deep_sleep_percentage),
        ]

        rem = self._rem_sleep_insight(aggregate.rem_sleep_percentage)
        if rem:
            insights.append(rem)

        consistency = self._consistency_insight(aggregate.sleep_consistency)
        if consistency:
            insights.append(consistency)

        self.logger.debug(
            "Generated insights",
            count=len(insights),
            categories=[i.category.value for i in insights],
        )
        return insights, self.recommendations()

    @staticmethod
    def recommendations() -> list[Recommendation]:
        """Return the recommendation catalogue."""
        return list(RECOMMENDATIONS.values())

    def _duration_insight(self, average_hours: float) -> Insight:
        """Create insight about average sleep duration."""
        if average_hours < MIN_OPTIMAL_HOURS:
            return Insight(
                category=InsightCategory.DURATION,
                title="You're not getting enough sleep",
                description="Adults need 7-9 hours of sleep. Try going to bed 30 minutes "
                "earlier to improve your total sleep time.",
                icon_name=IconName.CLOCK,
                color=InsightColor.RED,
            )
        if average_hours > MAX_OPTIMAL_HOURS:
            return Insight(
                category=InsightCategory.DURATION,
                title="You may be sleeping too much",
                description="While sleep is important, consistently sleeping more than 9 hours "
                "may indicate other health issues.",
                icon_name=IconName.BED_DOUBLE,
                color=InsightColor.YELLOW,
            )
        return Insight(
            category=InsightCategory.DURATION,
            title="Your sleep duration is optimal",
            description="You're consistently getting the recommended 7-9 hours of sleep, "
            "which is great for your health.",
            icon_name=IconName.BED_DOUBLE,
            color=InsightColor.GREEN,
        )

    def _deep_sleep_insight(self, deep_pct: float) -> Insight:
        """Create insight about deep sleep share."""
        if deep_pct < MIN_DEEP_SLEEP_PCT:
            return Insight(
                category=InsightCategory.DEEP_SLEEP,
                title="Your deep sleep could be improved",
                description="Deep sleep is crucial for physical recovery. Consider limiting "
                "caffeine and alcohol before bed.",
                icon_name=IconName.ACTIVITY,
                color=InsightColor.YELLOW,
            )
        return Insight(
            category=InsightCategory.DEEP_SLEEP,
            title="Your deep sleep looks good",
            description="You're getting sufficient deep sleep, which helps with physical "
            "recovery and immune function.",
            icon_name=IconName.ACTIVITY,
            color=InsightColor.GREEN,
        )

    def _rem_sleep_insight(self, rem_pct: float) -> Insight | None:
        """Create insight about REM sleep share.

        Only a shortfall is reported; there is no positive REM insight.
        """
        if rem_pct < MIN_REM_SLEEP_PCT:
            return Insight(
                category=InsightCategory.REM_SLEEP,
                title="You could use more REM sleep",
                description="REM sleep is important for cognitive function and creativity. "
                "Regular exercise may help increase it.",
                icon_name=IconName.MOON,
                color=InsightColor.YELLOW,
            )
        return None

    def _consistency_insight(self, consistency: int) -> Insight | None:
        """Create insight about schedule regularity (none for mid-range scores)."""
        if consistency < IRREGULAR_CONSISTENCY:
            return Insight(
                category=InsightCategory.CONSISTENCY,
                title="Your sleep schedule is irregular",
                description="Try to go to bed and wake up at consistent times, even on "
                "weekends, to improve sleep quality.",
                icon_name=IconName.CLOCK,
                color=InsightColor.RED,
            )
        if consistency >= CONSISTENT_CONSISTENCY:
            return Insight(
                category=InsightCategory.CONSISTENCY,
                title="Your sleep schedule is very consistent",
                description="Great job maintaining a regular sleep schedule! This helps "
                "regulate your body's internal clock.",
                icon_name=IconName.CLOCK,
                color=InsightColor.GREEN,
            )
        return None
