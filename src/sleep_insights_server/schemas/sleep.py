"""Pydantic schemas for sleep records, insights, and analysis reports.

All models serialize with camelCase keys (``totalSleep``, ``sleepQualityScore``)
so that payloads match what dashboard clients and the advice service expect,
while Python code uses snake_case attribute names.
"""

from datetime import date as date_type
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TimeWindow(str, Enum):
    """Window of nights an analysis covers."""

    WEEK = "week"
    MONTH = "month"
    ALL = "all"


class InsightCategory(str, Enum):
    """Aspect of sleep an insight refers to."""

    DURATION = "duration"
    DEEP_SLEEP = "deep_sleep"
    REM_SLEEP = "rem_sleep"
    CONSISTENCY = "consistency"


class InsightColor(str, Enum):
    """Severity marker for an insight."""

    RED = "red"  # Needs attention
    YELLOW = "yellow"  # Could be improved
    GREEN = "green"  # Healthy


class IconName(str, Enum):
    """Presentation-agnostic icon tokens."""

    CLOCK = "clock"
    BED_DOUBLE = "bed-double"
    ACTIVITY = "activity"
    MOON = "moon"
    SUN = "sun"
    COFFEE = "coffee"
    FLAME = "flame"


class QualityCategory(str, Enum):
    """Overall sleep quality band derived from the quality score."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class AnalysisStatus(str, Enum):
    """State of a remote advice request cycle."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class AnalysisSource(str, Enum):
    """Where a narrative analysis came from."""

    REMOTE = "remote"
    LOCAL = "local"


class AdviceErrorType(str, Enum):
    """Classification of advice service failures."""

    NOT_CONFIGURED = "not_configured"
    TIMEOUT = "timeout"
    UNAVAILABLE = "unavailable"
    HTTP_ERROR = "http_error"
    INVALID_RESPONSE = "invalid_response"
    INTERNAL_ERROR = "internal_error"


class CamelModel(BaseModel):
    """Base model serializing to camelCase and accepting either casing."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NightRecord(CamelModel):
    """One measured night, in decimal hours."""

    model_config = ConfigDict(frozen=True)

    date: date_type | None = Field(default=None, description="Night's calendar date")

    total_sleep: float = Field(default=0.0, ge=0, description="Total sleep (hours)")
    deep_sleep: float = Field(default=0.0, ge=0, description="Deep sleep (hours)")
    core_sleep: float = Field(default=0.0, ge=0, description="Core/light sleep (hours)")
    rem_sleep: float = Field(default=0.0, ge=0, description="REM sleep (hours)")
    awake_during: float = Field(default=0.0, ge=0, description="Time awake in bed (hours)")

    # Vitals. The row normalizer fills absent values with 0.0.
    resting_heart_rate: float | None = Field(default=None, ge=0, description="Resting HR (bpm)")
    respiratory_rate: float | None = Field(default=None, ge=0, description="Breaths per minute")
    steps_count: float | None = Field(default=None, ge=0, description="Steps that day")
    active_energy: float | None = Field(default=None, ge=0, description="Active energy (kcal)")
    wrist_temperature: float | None = Field(
        default=None, ge=0, description="Sleeping wrist temperature (°F)"
    )


class NightScore(BaseModel):
    """Per-night sub-scores of the quality score."""

    duration: int = Field(ge=0, le=40, description="Duration sufficiency (max 40)")
    deep: int = Field(ge=0, le=25, description="Deep sleep share (max 25)")
    rem: int = Field(ge=0, le=25, description="REM sleep share (max 25)")
    awake: int = Field(ge=0, le=10, description="Sleep continuity (max 10)")

    @property
    def total(self) -> int:
        """Sum of the four sub-scores."""
        return self.duration + self.deep + self.rem + self.awake


class Insight(CamelModel):
    """Rule-based observation about a window of nights."""

    model_config = ConfigDict(frozen=True)

    category: InsightCategory = Field(description="Aspect of sleep")
    title: str = Field(description="Short headline")
    description: str = Field(description="Explanation and advice")
    icon_name: IconName = Field(description="Icon token")
    color: InsightColor = Field(description="Severity marker")


class Recommendation(CamelModel):
    """Entry of the static recommendation catalogue."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(description="Short headline")
    description: str = Field(description="What to do")
    icon_name: IconName = Field(description="Icon token")


class SleepInsights(CamelModel):
    """Derived aggregate over a window of night records."""

    model_config = ConfigDict(frozen=True)

    # Averages (hours)
    average_sleep_duration: float = Field(default=0.0, description="Mean total sleep")
    average_deep_sleep: float = Field(default=0.0, description="Mean deep sleep")
    average_core_sleep: float = Field(default=0.0, description="Mean core sleep")
    average_rem_sleep: float = Field(default=0.0, description="Mean REM sleep")

    # Composition (% of average duration)
    deep_sleep_percentage: float = Field(default=0.0, description="Deep share of sleep")
    core_sleep_percentage: float = Field(default=0.0, description="Core share of sleep")
    rem_sleep_percentage: float = Field(default=0.0, description="REM share of sleep")

    # Scores
    sleep_quality_score: int = Field(default=0, ge=0, le=100, description="Quality score")
    sleep_consistency: int = Field(default=0, ge=0, le=10, description="Consistency score")

    average_sleep_duration_trend: float = Field(
        default=0.0, description="Last 3 nights vs previous 3 nights (% change)"
    )

    insights: list[Insight] = Field(default_factory=list, description="Ordered insights")
    recommendations: list[Recommendation] = Field(
        default_factory=list, description="Static recommendations"
    )


class DateRange(CamelModel):
    """First and last dated night of a window."""

    start: date_type
    end: date_type
    days: int = Field(ge=1, description="Calendar days spanned, inclusive")


class DigestAverages(CamelModel):
    """Averages sent to the advice service."""

    total_sleep: float
    total_sleep_formatted: str
    deep_sleep: float
    deep_sleep_formatted: str
    deep_sleep_percentage: int
    rem_sleep: float
    rem_sleep_formatted: str
    rem_sleep_percentage: int


class DigestScores(CamelModel):
    """Scores sent to the advice service."""

    sleep_quality: int
    sleep_consistency: int


class AdviceDigest(CamelModel):
    """Compact summary of a window, suitable for a text-generation service."""

    data_points: int = Field(description="Number of nights in the window")
    date_range: DateRange | None = Field(default=None, description="None if no night is dated")
    averages: DigestAverages
    scores: DigestScores
    summary: str = Field(description="One-line summary")


class SleepAnalysis(CamelModel):
    """Narrative analysis of a window, from the advice service or composed locally."""

    summary: str = Field(description="Three paragraphs separated by a blank line")
    quality_category: QualityCategory
    sleep_score: int = Field(ge=0, le=100)
    day_count: int = Field(ge=0)
    source: AnalysisSource = Field(default=AnalysisSource.LOCAL)


class SleepAnalysisReport(CamelModel):
    """Full response of one analysis cycle."""

    window: TimeWindow
    insights: SleepInsights
    digest: AdviceDigest
    analysis: SleepAnalysis
    status: AnalysisStatus
    fallback_used: bool = Field(
        default=False, description="Local narrative replaced the remote one"
    )
    error_type: AdviceErrorType | None = Field(
        default=None, description="Why the remote advice call failed"
    )


class SleepWindowRequest(CamelModel):
    """Request body carrying raw export rows."""

    rows: list[dict[str, str | float | int | None]] = Field(
        description="Raw rows keyed by export column name"
    )
    window: TimeWindow | None = Field(default=None, description="Defaults to the configured window")
    today: date_type | None = Field(default=None, description="Reference date for the window")
