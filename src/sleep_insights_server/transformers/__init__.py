"""Raw export row -> NightRecord transformers."""

from sleep_insights_server.transformers.sleep import SleepRowTransformer, normalize_rows

__all__ = [
    "SleepRowTransformer",
    "normalize_rows",
]
