"""Application services."""

from sleep_insights_server.services.advice import AdviceClient, AdviceErrorHandler
from sleep_insights_server.services.analysis import SleepAnalysisService
from sleep_insights_server.services.ingest import NoSleepDataError, load_sleep_records
from sleep_insights_server.services.insights import InsightGenerator
from sleep_insights_server.services.narrative import NarrativeComposer

__all__ = [
    "AdviceClient",
    "AdviceErrorHandler",
    "InsightGenerator",
    "NarrativeComposer",
    "NoSleepDataError",
    "SleepAnalysisService",
    "load_sleep_records",
]
