"""Number and duration formatting helpers."""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero.

    ``round()`` rounds halves to even, which would turn a 92.5 score into 92.
    """
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)


def format_hours_and_minutes(hours: float | None) -> str:
    """Format decimal hours as ``"H hrs M min"``.

    Minutes are rounded; 60 rounded minutes carry into the hour, so 7.999
    formats as ``"8 hrs 0 min"``.

    Args:
        hours: Decimal hours (e.g., 7.5)

    Returns:
        Formatted string (e.g., "7 hrs 30 min"), "0 hrs 0 min" for None/NaN
    """
    if hours is None or not math.isfinite(hours):
        return "0 hrs 0 min"

    hrs = math.floor(hours)
    mins = round_half_up((hours - hrs) * 60)

    if mins == 60:
        return f"{hrs + 1} hrs 0 min"

    return f"{hrs} hrs {mins} min"
