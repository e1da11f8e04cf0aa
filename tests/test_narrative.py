"""Tests for the local narrative composer and formatting helpers."""

import math

import pytest

from sleep_insights_server.schemas.sleep import AnalysisSource, QualityCategory, SleepInsights
from sleep_insights_server.services.formatting import format_hours_and_minutes, round_half_up
from sleep_insights_server.services.narrative import NarrativeComposer, quality_category


class TestFormatting:
    """Tests for duration formatting and rounding."""

    @pytest.mark.parametrize(
        ("hours", "expected"),
        [
            (7.5, "7 hrs 30 min"),
            (8.25, "8 hrs 15 min"),
            (7.999, "8 hrs 0 min"),
            (0, "0 hrs 0 min"),
            (0.0083, "0 hrs 0 min"),
            (None, "0 hrs 0 min"),
            (math.nan, "0 hrs 0 min"),
        ],
    )
    def test_format_hours_and_minutes(self, hours: float | None, expected: str) -> None:
        """Minutes are rounded and carry into the hour."""
        assert format_hours_and_minutes(hours) == expected

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(92.5, 93), (2.5, 3), (2.4, 2), (0.5, 1), (-2.5, -3), (7.0, 7)],
    )
    def test_round_half_up(self, value: float, expected: int) -> None:
        """Halves round away from zero."""
        assert round_half_up(value) == expected


class TestQualityCategory:
    """Tests for quality score bands."""

    @pytest.mark.parametrize(
        ("score", "expected"),
        [
            (100, QualityCategory.EXCELLENT),
            (85, QualityCategory.EXCELLENT),
            (84, QualityCategory.GOOD),
            (70, QualityCategory.GOOD),
            (69, QualityCategory.FAIR),
            (50, QualityCategory.FAIR),
            (49, QualityCategory.POOR),
            (0, QualityCategory.POOR),
        ],
    )
    def test_bands(self, score: int, expected: QualityCategory) -> None:
        """Score thresholds are inclusive lower bounds."""
        assert quality_category(score) == expected


class TestNarrativeComposer:
    """Tests for NarrativeComposer."""

    @pytest.fixture
    def composer(self) -> NarrativeComposer:
        """Create composer."""
        return NarrativeComposer()

    def test_healthy_report(self, composer: NarrativeComposer) -> None:
        """A healthy window gets an encouraging three-paragraph report."""
        aggregate = SleepInsights(
            average_sleep_duration=7.5,
            deep_sleep_percentage=19.6,
            rem_sleep_percentage=22.4,
            sleep_quality_score=88,
            sleep_consistency=8,
        )

        analysis = composer.compose(aggregate, day_count=7)
        paragraphs = analysis.summary.split("\n\n")

        assert len(paragraphs) == 3
        assert "88/100" in paragraphs[0]
        assert "excellent" in paragraphs[0]
        assert "7 hrs 30 min" in paragraphs[0]
        assert "you are meeting the recommended" in paragraphs[0]
        assert "20% deep sleep" in paragraphs[1]
        assert "22% REM sleep" in paragraphs[1]
        assert "8/10 indicates good regularity" in paragraphs[1]
        assert "maintaining your healthy deep sleep patterns" in paragraphs[2]
        assert "Continue maintaining your consistent sleep schedule." in paragraphs[2]
        assert analysis.quality_category == QualityCategory.EXCELLENT
        assert analysis.sleep_score == 88
        assert analysis.day_count == 7
        assert analysis.source == AnalysisSource.LOCAL

    def test_poor_report(self, composer: NarrativeComposer) -> None:
        """Short, irregular sleep with little deep sleep gets corrective advice."""
        aggregate = SleepInsights(
            average_sleep_duration=5.75,
            deep_sleep_percentage=11.0,
            rem_sleep_percentage=17.0,
            sleep_quality_score=45,
            sleep_consistency=2,
        )

        analysis = composer.compose(aggregate, day_count=5)
        paragraphs = analysis.summary.split("\n\n")

        assert "indicating poor sleep health" in paragraphs[0]
        assert "you are falling short of the recommended" in paragraphs[0]
        assert "irregular sleep patterns" in paragraphs[1]
        assert "increasing deep sleep" in paragraphs[2]
        assert "Establish consistent sleep and wake times" in paragraphs[2]
        assert "extend your sleep duration by 30-60 minutes" in paragraphs[2]
        assert analysis.quality_category == QualityCategory.POOR

    def test_deterministic(self, composer: NarrativeComposer) -> None:
        """The same aggregate always composes the same text."""
        aggregate = SleepInsights(average_sleep_duration=7.0, sleep_quality_score=72)

        assert composer.compose(aggregate, 3) == composer.compose(aggregate, 3)
