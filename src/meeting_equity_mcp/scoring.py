"""Equity scoring: aggregate participant statuses into a 0-100 fairness score."""

import math
from collections.abc import Iterable

from .types import EquityScoreResult, ParticipantStatus, StatusBreakdown

# green=100, orange=60, red=20, critical=0: an all-red meeting is "bad for
# everyone" (20), a single critical participant drags the mean down hard.
STATUS_WEIGHTS: dict[str, float] = {
    "green": 100.0,
    "orange": 60.0,
    "red": 20.0,
    "critical": 0.0,
}

# (minimum display score, quality, label), best first.
QUALITY_TIERS: tuple[tuple[int, str, str], ...] = (
    (71, "excellent", "Excellent/Optimal"),
    (41, "good", "Good/Acceptable"),
    (1, "fair", "Fair/Poor"),
    (0, "poor", "Poor/Critical"),
)


def display_score(score: float | None) -> int | None:
    """Round half up for display; None stays None."""
    if score is None:
        return None
    return int(math.floor(score + 0.5))


def _tier(score: float | None) -> tuple[str, str] | None:
    rounded = display_score(score)
    if rounded is None:
        return None
    for minimum, quality, label in QUALITY_TIERS:
        if rounded >= minimum:
            return quality, label
    return QUALITY_TIERS[-1][1], QUALITY_TIERS[-1][2]


def score_quality(score: float | None) -> str | None:
    """Return ``"excellent"``, ``"good"``, ``"fair"``, ``"poor"`` or None for no data."""
    tier = _tier(score)
    return tier[0] if tier else None


def quality_label(score: float | None) -> str | None:
    tier = _tier(score)
    return tier[1] if tier else None


def compare_scores(a: float, b: float) -> int:
    """Return 1 if *a* is better, -1 if *b* is better, 0 if equal."""
    if a > b:
        return 1
    if a < b:
        return -1
    return 0


def get_breakdown(statuses: Iterable[ParticipantStatus]) -> StatusBreakdown:
    """Count classified participants by status; unclassified ones are skipped."""
    counts = {name: 0 for name in STATUS_WEIGHTS}
    for s in statuses:
        if s.status is not None:
            counts[s.status] += 1
    return StatusBreakdown(**counts)


def calculate_equity_score(statuses: Iterable[ParticipantStatus]) -> EquityScoreResult:
    """Weighted mean of status weights over all classified participants.

    With no classified participants the score is None ("no data"), never 0.
    Participants that could not be classified are listed in ``errors``.
    """
    statuses = list(statuses)
    classified = [s for s in statuses if s.status is not None]
    errors = [s.participant_id for s in statuses if s.status is None]
    breakdown = get_breakdown(classified)

    score: float | None = None
    if classified:
        score = sum(STATUS_WEIGHTS[s.status] for s in classified) / len(classified)  # type: ignore[index]

    return EquityScoreResult(
        score=score,
        display_score=display_score(score),
        quality=score_quality(score),
        quality_label=quality_label(score),
        breakdown=breakdown,
        participant_count=len(statuses),
        errors=errors,
    )
