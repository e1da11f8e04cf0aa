"""Tests for the sleep analysis service and advice cycle."""

from datetime import date

import httpx
import pytest

from sleep_insights_server.schemas.sleep import (
    AdviceErrorType,
    AnalysisSource,
    AnalysisStatus,
    TimeWindow,
)
from sleep_insights_server.services.advice import AdviceClient
from sleep_insights_server.services.analysis import AdviceCycle, SleepAnalysisService
from sleep_insights_server.services.ingest import NoSleepDataError
from tests.fixtures import make_series

REMOTE_ANALYSIS = {
    "summary": "Remote one.\n\nRemote two.\n\nRemote three.",
    "qualityCategory": "excellent",
    "sleepScore": 96,
    "dayCount": 7,
}


def _service(handler) -> SleepAnalysisService:
    client = AdviceClient(
        url="https://advice.test/analyze-sleep",
        transport=httpx.MockTransport(handler),
    )
    return SleepAnalysisService(advice_client=client)


class TestAdviceCycle:
    """Tests for the advice cycle state machine."""

    def test_success_path(self) -> None:
        """idle -> loading -> success."""
        cycle = AdviceCycle()
        cycle.transition(AnalysisStatus.LOADING)
        cycle.transition(AnalysisStatus.SUCCESS)

        assert cycle.status == AnalysisStatus.SUCCESS
        assert cycle.history == [
            AnalysisStatus.IDLE,
            AnalysisStatus.LOADING,
            AnalysisStatus.SUCCESS,
        ]
        assert not cycle.fallback_used

    def test_fallback_path(self) -> None:
        """idle -> loading -> error -> success."""
        cycle = AdviceCycle()
        cycle.transition(AnalysisStatus.LOADING)
        cycle.transition(AnalysisStatus.ERROR)
        cycle.transition(AnalysisStatus.SUCCESS)

        assert cycle.status == AnalysisStatus.SUCCESS
        assert cycle.fallback_used

    @pytest.mark.parametrize(
        "path",
        [
            [AnalysisStatus.SUCCESS],
            [AnalysisStatus.ERROR],
            [AnalysisStatus.LOADING, AnalysisStatus.LOADING],
            [AnalysisStatus.LOADING, AnalysisStatus.SUCCESS, AnalysisStatus.LOADING],
            [AnalysisStatus.LOADING, AnalysisStatus.ERROR, AnalysisStatus.ERROR],
        ],
    )
    def test_invalid_transitions(self, path: list[AnalysisStatus]) -> None:
        """Transitions outside the cycle raise."""
        cycle = AdviceCycle()

        with pytest.raises(RuntimeError, match="Invalid advice cycle transition"):
            for status in path:
                cycle.transition(status)


class TestSleepAnalysisService:
    """Tests for SleepAnalysisService."""

    async def test_local_fallback_when_not_configured(self, healthy_week, reference_day) -> None:
        """Without an advice client the narrative is composed locally."""
        service = SleepAnalysisService()

        report = await service.analyze(healthy_week, TimeWindow.WEEK, reference_day)

        assert report.status == AnalysisStatus.SUCCESS
        assert report.fallback_used
        assert report.error_type == AdviceErrorType.NOT_CONFIGURED
        assert report.analysis.source == AnalysisSource.LOCAL
        assert report.analysis.day_count == 7
        assert report.analysis.sleep_score == report.insights.sleep_quality_score
        assert report.digest.data_points == 7

    async def test_remote_success(self, healthy_week, reference_day) -> None:
        """A successful advice call is used as is."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"success": True, "analysis": REMOTE_ANALYSIS})

        report = await _service(handler).analyze(healthy_week, TimeWindow.WEEK, reference_day)

        assert report.status == AnalysisStatus.SUCCESS
        assert not report.fallback_used
        assert report.error_type is None
        assert report.analysis.source == AnalysisSource.REMOTE
        assert report.analysis.summary == REMOTE_ANALYSIS["summary"]

    async def test_remote_failure_falls_back(self, healthy_week, reference_day) -> None:
        """A failing advice call is classified and replaced locally."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502)

        report = await _service(handler).analyze(healthy_week, TimeWindow.WEEK, reference_day)

        assert report.status == AnalysisStatus.SUCCESS
        assert report.fallback_used
        assert report.error_type == AdviceErrorType.HTTP_ERROR
        assert report.analysis.source == AnalysisSource.LOCAL
        assert len(report.analysis.summary.split("\n\n")) == 3

    async def test_unreachable_falls_back(self, healthy_week, reference_day) -> None:
        """Connection errors fall back as UNAVAILABLE."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        report = await _service(handler).analyze(healthy_week, TimeWindow.WEEK, reference_day)

        assert report.error_type == AdviceErrorType.UNAVAILABLE
        assert report.analysis.source == AnalysisSource.LOCAL

    async def test_advice_skipped_when_not_wanted(self, healthy_week, reference_day) -> None:
        """use_advice=False never contacts the service."""
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json={"success": True, "analysis": REMOTE_ANALYSIS})

        report = await _service(handler).analyze(
            healthy_week, TimeWindow.WEEK, reference_day, use_advice=False
        )

        assert calls == []
        assert report.error_type == AdviceErrorType.NOT_CONFIGURED
        assert report.analysis.source == AnalysisSource.LOCAL

    async def test_window_applied(self, reference_day) -> None:
        """Only nights inside the window are analyzed."""
        nights = make_series(date(2026, 1, 1), [7.0] * 31)
        service = SleepAnalysisService()

        week = await service.analyze(nights, TimeWindow.WEEK, reference_day)
        everything = await service.analyze(nights, TimeWindow.ALL, reference_day)

        assert week.window == TimeWindow.WEEK
        assert week.digest.data_points == 7
        assert everything.digest.data_points == 31

    async def test_empty_window_raises(self, reference_day) -> None:
        """A window with no nights is an error, not a zero report."""
        nights = make_series(date(2025, 6, 1), [7.0, 7.5, 8.0])

        with pytest.raises(NoSleepDataError, match="No sleep data found"):
            await SleepAnalysisService().analyze(nights, TimeWindow.WEEK, reference_day)

    def test_build_insights_empty(self) -> None:
        """No records, no insights."""
        with pytest.raises(NoSleepDataError):
            SleepAnalysisService().build_insights([])

    async def test_report_serializes_camel_case(self, healthy_week, reference_day) -> None:
        """Reports serialize with camelCase keys."""
        report = await SleepAnalysisService().analyze(
            healthy_week, TimeWindow.WEEK, reference_day
        )

        data = report.model_dump(mode="json", by_alias=True)

        assert data["status"] == "success"
        assert data["fallbackUsed"] is True
        assert data["errorType"] == "not_configured"
        assert data["insights"]["sleepQualityScore"] == 100
        assert data["analysis"]["qualityCategory"] == "excellent"
        assert data["analysis"]["source"] == "local"
