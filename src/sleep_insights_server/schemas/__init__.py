"""Pydantic schemas for sleep records and API responses."""

from sleep_insights_server.schemas.sleep import (
    AdviceDigest,
    AdviceErrorType,
    AnalysisSource,
    AnalysisStatus,
    DateRange,
    IconName,
    Insight,
    InsightCategory,
    InsightColor,
    NightRecord,
    NightScore,
    QualityCategory,
    Recommendation,
    SleepAnalysis,
    SleepAnalysisReport,
    SleepInsights,
    SleepWindowRequest,
    TimeWindow,
)

__all__ = [
    "AdviceDigest",
    "AdviceErrorType",
    "AnalysisSource",
    "AnalysisStatus",
    "DateRange",
    "IconName",
    "Insight",
    "InsightCategory",
    "InsightColor",
    "NightRecord",
    "NightScore",
    "QualityCategory",
    "Recommendation",
    "SleepAnalysis",
    "SleepAnalysisReport",
    "SleepInsights",
    "SleepWindowRequest",
    "TimeWindow",
]
