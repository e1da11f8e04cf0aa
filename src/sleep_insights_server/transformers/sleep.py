"""Sleep export row transformer.

Converts a raw export row (column name -> string value) to a NightRecord.
Column names differ between export versions, so every field accepts several
synonyms, matched case-insensitively. Rows are never rejected here: values
that cannot be parsed default to zero.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from datetime import date as date_type
from datetime import datetime
from typing import Any

from sleep_insights_server.schemas.sleep import NightRecord

# Field name -> accepted column names, in lookup order
FIELD_COLUMNS: dict[str, tuple[str, ...]] = {
    "total_sleep": (
        "Total Sleep",
        "Sleep Duration",
        "Sleep Analysis [Total] (hr)",
        "Sleep Analysis [Asleep] (hr)",
    ),
    "deep_sleep": ("Sleep Analysis [Deep] (hr)", "Deep Sleep"),
    "core_sleep": ("Sleep Analysis [Core] (hr)", "Core Sleep"),
    "rem_sleep": ("Sleep Analysis [REM] (hr)", "REM Sleep"),
    "awake_during": ("Sleep Analysis [Awake] (hr)", "Awake Time"),
    "resting_heart_rate": ("Resting Heart Rate (bpm)", "Resting Heart Rate"),
    "respiratory_rate": ("Respiratory Rate (count/min)", "Respiratory Rate"),
    "steps_count": ("Step Count (steps)", "Steps"),
    "active_energy": ("Active Energy (kcal)", "Active Energy"),
    "wrist_temperature": ("Apple Sleeping Wrist Temperature (ºF)", "Wrist Temperature"),
}

DATE_COLUMNS: tuple[str, ...] = ("Date", "Start Date")

# Columns whose presence marks a row as carrying sleep data
SLEEP_PRESENCE_COLUMNS: tuple[str, ...] = (
    *FIELD_COLUMNS["total_sleep"],
    "Sleep Analysis [Deep] (hr)",
)

MISSING_MARKERS = frozenset({"", "na", "n/a", "nan", "null", "none", "-"})

_DATE_FORMATS = ("%Y-%m-%d %H:%M:%S %z", "%Y-%m-%d %H:%M:%S", "%m/%d/%Y", "%Y/%m/%d")


def canonical_key(key: str) -> str:
    """Normalize a column name for case-insensitive lookup."""
    return " ".join(key.split()).casefold()


def is_missing(value: Any) -> bool:
    """Check whether a cell is empty or holds a missing-value marker."""
    if value is None:
        return True
    return isinstance(value, str) and value.strip().casefold() in MISSING_MARKERS


def lookup(row: Mapping[str, Any], columns: Iterable[str]) -> Any:
    """Return the first non-missing value among ``columns``, or None."""
    for column in columns:
        value = row.get(canonical_key(column))
        if not is_missing(value):
            return value
    return None


def coerce_hours(value: Any) -> float:
    """Parse a numeric cell, defaulting to 0.0.

    Accepts numbers or numeric strings (thousands separators allowed).
    Unparseable, non-finite, and negative values all become 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        number = float(value)
    else:
        try:
            number = float(str(value).strip().replace(",", ""))
        except ValueError:
            return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def parse_night_date(value: Any) -> date_type | None:
    """Parse the night's date from an export cell.

    Returns:
        The calendar date, or None if the value is not a recognizable date
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date_type):
        return value

    text = str(value).strip()
    if not text:
        return None

    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    # Leading YYYY-MM-DD followed by anything else
    try:
        return date_type.fromisoformat(text[:10])
    except ValueError:
        return None


class SleepRowTransformer:
    """Transform raw export row -> NightRecord."""

    @staticmethod
    def canonical_row(row: Mapping[str, Any]) -> dict[str, Any]:
        """Re-key a row by canonical column name."""
        return {canonical_key(str(key)): value for key, value in row.items() if key is not None}

    @staticmethod
    def has_sleep_data(row: Mapping[str, Any]) -> bool:
        """Check whether a row carries a sleep-duration-bearing column.

        A numeric zero (as sent in JSON rows) does not count as sleep data.
        """
        canonical = SleepRowTransformer.canonical_row(row)
        for column in SLEEP_PRESENCE_COLUMNS:
            value = canonical.get(canonical_key(column))
            if is_missing(value):
                continue
            if isinstance(value, int | float) and not value:
                continue
            return True
        return False

    @staticmethod
    def transform(row: Mapping[str, Any]) -> NightRecord:
        """Convert a raw row to a NightRecord, defaulting bad values to zero."""
        canonical = SleepRowTransformer.canonical_row(row)
        values = {
            field: coerce_hours(lookup(canonical, columns))
            for field, columns in FIELD_COLUMNS.items()
        }
        return NightRecord(date=parse_night_date(lookup(canonical, DATE_COLUMNS)), **values)


def normalize_rows(rows: Iterable[Mapping[str, Any]]) -> list[NightRecord]:
    """Normalize a batch of rows into a chronological series.

    Keeps one record per date (the last row for a date wins). Undated
    records are kept and sort before dated ones.
    """
    dated: dict[date_type, NightRecord] = {}
    undated: list[NightRecord] = []

    for row in rows:
        record = SleepRowTransformer.transform(row)
        if record.date is None:
            undated.append(record)
        else:
            dated[record.date] = record

    return undated + [dated[day] for day in sorted(dated)]
