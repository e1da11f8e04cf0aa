"""Test fixtures for sleep-insights-server."""

from tests.fixtures.sleep_seed import (
    export_csv,
    export_row,
    make_night,
    make_series,
)

__all__ = [
    "export_csv",
    "export_row",
    "make_night",
    "make_series",
]
