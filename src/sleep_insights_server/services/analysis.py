"""Sleep analysis service.

Runs one analysis cycle over a window of night records:

1. Filter the records to the requested window
2. Build the SleepInsights aggregate and its digest
3. Ask the remote advice service for a narrative (if configured)
4. On any failure, compose the narrative locally

The remote request is tracked by an AdviceCycle state machine:

    idle -> loading -> success
                    -> error -> success (local fallback)
"""

from collections.abc import Sequence
from datetime import date

import structlog

from sleep_insights_server.schemas.sleep import (
    AdviceDigest,
    AdviceErrorType,
    AnalysisStatus,
    NightRecord,
    SleepAnalysis,
    SleepAnalysisReport,
    SleepInsights,
    TimeWindow,
)
from sleep_insights_server.services.advice import (
    AdviceClient,
    AdviceErrorHandler,
    AdviceRequestError,
)
from sleep_insights_server.services.aggregates import build_insights, filter_window
from sleep_insights_server.services.digest import build_digest
from sleep_insights_server.services.ingest import NoSleepDataError
from sleep_insights_server.services.insights import InsightGenerator
from sleep_insights_server.services.narrative import NarrativeComposer

logger = structlog.get_logger()

ALLOWED_TRANSITIONS: dict[AnalysisStatus, frozenset[AnalysisStatus]] = {
    AnalysisStatus.IDLE: frozenset({AnalysisStatus.LOADING}),
    AnalysisStatus.LOADING: frozenset({AnalysisStatus.SUCCESS, AnalysisStatus.ERROR}),
    AnalysisStatus.ERROR: frozenset({AnalysisStatus.SUCCESS}),
    AnalysisStatus.SUCCESS: frozenset(),
}


class AdviceCycle:
    """State of a single remote advice request."""

    def __init__(self) -> None:
        self.status = AnalysisStatus.IDLE
        self.history: list[AnalysisStatus] = [AnalysisStatus.IDLE]
        self.logger = logger.bind(component="advice_cycle")

    def transition(self, status: AnalysisStatus) -> None:
        """Move to a new state.

        Raises:
            RuntimeError: If the transition is not allowed
        """
        if status not in ALLOWED_TRANSITIONS[self.status]:
            raise RuntimeError(
                f"Invalid advice cycle transition: {self.status.value} -> {status.value}"
            )
        self.logger.debug(
            "Advice cycle transition", previous=self.status.value, status=status.value
        )
        self.status = status
        self.history.append(status)

    @property
    def fallback_used(self) -> bool:
        """Whether the cycle went through the error state."""
        return AnalysisStatus.ERROR in self.history


class SleepAnalysisService:
    """Service producing insights and narrative analyses for sleep windows."""

    def __init__(
        self,
        advice_client: AdviceClient | None = None,
        generator: InsightGenerator | None = None,
        composer: NarrativeComposer | None = None,
    ) -> None:
        """Initialize analysis service.

        Args:
            advice_client: Remote advice client (None means local narrative only)
            generator: Insight generator
            composer: Local narrative composer
        """
        self.advice_client = advice_client
        self.generator = generator or InsightGenerator()
        self.composer = composer or NarrativeComposer()
        self.error_handler = AdviceErrorHandler()
        self.logger = logger.bind(service="analysis")

    def build_insights(self, records: Sequence[NightRecord]) -> SleepInsights:
        """Build the SleepInsights aggregate for a window.

        Raises:
            NoSleepDataError: If the window holds no records
        """
        if not records:
            raise NoSleepDataError()

        insights = build_insights(records, self.generator)
        self.logger.info(
            "Built sleep insights",
            nights=len(records),
            sleep_quality_score=insights.sleep_quality_score,
            sleep_consistency=insights.sleep_consistency,
        )
        return insights

    def window_insights(
        self,
        records: Sequence[NightRecord],
        window: TimeWindow,
        today: date | None = None,
    ) -> tuple[list[NightRecord], SleepInsights]:
        """Filter records to a window and build its insights.

        Raises:
            NoSleepDataError: If no record falls inside the window
        """
        selected = filter_window(records, window, today)
        return selected, self.build_insights(selected)

    async def analyze(
        self,
        records: Sequence[NightRecord],
        window: TimeWindow = TimeWindow.ALL,
        today: date | None = None,
        use_advice: bool = True,
    ) -> SleepAnalysisReport:
        """Run a full analysis cycle.

        Args:
            records: Normalized night records
            window: Time window to analyze
            today: Reference date for the window (default: today)
            use_advice: Whether to call the remote advice service

        Returns:
            Report with insights, digest and narrative analysis

        Raises:
            NoSleepDataError: If no record falls inside the window
        """
        selected, insights = self.window_insights(records, window, today)
        digest = build_digest(selected, insights)

        cycle = AdviceCycle()
        cycle.transition(AnalysisStatus.LOADING)

        error_type: AdviceErrorType | None = None
        try:
            analysis = await self._request_advice(digest, use_advice)
        except Exception as e:
            error = self.error_handler.classify(
                e, context={"window": window.value, "data_points": len(selected)}
            )
            error_type = error.error_type
            cycle.transition(AnalysisStatus.ERROR)
            analysis = self.composer.compose(insights, day_count=len(selected))
            self.logger.info(
                "Using local sleep analysis",
                window=window.value,
                error_type=error_type.value,
            )

        cycle.transition(AnalysisStatus.SUCCESS)

        return SleepAnalysisReport(
            window=window,
            insights=insights,
            digest=digest,
            analysis=analysis,
            status=cycle.status,
            fallback_used=cycle.fallback_used,
            error_type=error_type,
        )

    async def _request_advice(self, digest: AdviceDigest, use_advice: bool) -> SleepAnalysis:
        if not use_advice or self.advice_client is None:
            raise AdviceRequestError(
                AdviceErrorType.NOT_CONFIGURED,
                "Advice service not configured",
            )
        return await self.advice_client.request_analysis(digest)
