"""Sleep quality and consistency scoring.

Each night is scored on four independent axes, averaged per axis over the
window, then summed with a night-to-night consistency bonus:

    duration   max 40   total sleep against the 7-9h adult recommendation
    deep       max 25   deep sleep share of total sleep
    rem        max 25   REM sleep share of total sleep
    awake      max 10   time awake in bed as a share of total sleep
    consistency max 10  spread of nightly total sleep

The five axes add up to 110, so the sum is clamped to 100.
"""

from collections.abc import Sequence
from statistics import mean, pstdev

from sleep_insights_server.schemas.sleep import NightRecord, NightScore
from sleep_insights_server.services.formatting import round_half_up

MAX_QUALITY_SCORE = 100
MIN_NIGHTS_CONSISTENCY = 3

# (upper bound on std dev of total sleep in hours, score); first match wins
CONSISTENCY_BANDS: tuple[tuple[float, int], ...] = (
    (0.5, 10),
    (0.75, 8),
    (1.0, 6),
    (1.5, 4),
    (2.0, 2),
)


def stage_percentage(stage_hours: float, total_hours: float) -> float:
    """Share of total sleep spent in a stage, 0 when total is 0."""
    if total_hours <= 0:
        return 0.0
    return stage_hours / total_hours * 100


def duration_score(total_sleep: float) -> int:
    """Score total sleep (max 40)."""
    if 7 <= total_sleep <= 9:
        return 40
    if 6 <= total_sleep < 7:
        return 30
    if 9 < total_sleep <= 10:
        return 30
    if 5 <= total_sleep < 6:
        return 20
    if total_sleep > 10:
        return 15
    return 10


def deep_score(deep_pct: float) -> int:
    """Score deep sleep share (max 25). Ideal is 15-25%."""
    if 15 <= deep_pct <= 25:
        return 25
    if 10 <= deep_pct < 15:
        return 20
    if 25 < deep_pct <= 30:
        return 20
    return 15


def rem_score(rem_pct: float) -> int:
    """Score REM sleep share (max 25). Ideal is 20-25%."""
    if 20 <= rem_pct <= 25:
        return 25
    if 15 <= rem_pct < 20:
        return 20
    if 25 < rem_pct <= 30:
        return 20
    return 15


def awake_score(awake_pct: float) -> int:
    """Score time awake during the night (max 10)."""
    if awake_pct <= 5:
        return 10
    if awake_pct <= 10:
        return 7
    if awake_pct <= 15:
        return 5
    return 3


def score_night(record: NightRecord) -> NightScore:
    """Score a single night on the four per-night axes."""
    total = record.total_sleep
    return NightScore(
        duration=duration_score(total),
        deep=deep_score(stage_percentage(record.deep_sleep, total)),
        rem=rem_score(stage_percentage(record.rem_sleep, total)),
        awake=awake_score(stage_percentage(record.awake_during, total)),
    )


def compute_consistency(records: Sequence[NightRecord]) -> int:
    """Score night-to-night regularity of total sleep (0-10).

    Uses the population standard deviation of nightly total sleep.
    Fewer than 3 nights score 0.
    """
    if len(records) < MIN_NIGHTS_CONSISTENCY:
        return 0

    spread = pstdev(record.total_sleep for record in records)
    for upper_bound, score in CONSISTENCY_BANDS:
        if spread < upper_bound:
            return score
    return 0


def compute_quality_score(records: Sequence[NightRecord]) -> int:
    """Compute the composite sleep quality score (0-100).

    Returns 0 for an empty window.
    """
    if not records:
        return 0

    nights = [score_night(record) for record in records]
    raw = (
        mean(night.duration for night in nights)
        + mean(night.deep for night in nights)
        + mean(night.rem for night in nights)
        + mean(night.awake for night in nights)
        + compute_consistency(records)
    )

    # Five axes can reach 110
    return min(round_half_up(raw), MAX_QUALITY_SCORE)
