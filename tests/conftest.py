"""Shared test fixtures."""

from datetime import date

import pytest

from sleep_insights_server.core.config import settings
from sleep_insights_server.schemas.sleep import NightRecord
from tests.fixtures import make_series

REFERENCE_DAY = date(2026, 1, 31)


@pytest.fixture
def reference_day() -> date:
    """Fixed 'today' so window tests do not depend on the clock."""
    return REFERENCE_DAY


@pytest.fixture
def healthy_week() -> list[NightRecord]:
    """Seven consecutive healthy 8h nights ending on the reference day."""
    return make_series(date(2026, 1, 25), [8.0] * 7)


@pytest.fixture
def short_week() -> list[NightRecord]:
    """Seven consecutive short nights with an irregular schedule."""
    return make_series(date(2026, 1, 25), [5.0, 8.5, 4.5, 7.0, 5.0, 9.0, 4.0])


@pytest.fixture
def local_only(monkeypatch: pytest.MonkeyPatch) -> None:
    """Disable the remote advice service for the duration of a test."""
    monkeypatch.setattr(settings, "advice_url", None)
