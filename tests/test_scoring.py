"""Tests for equity score aggregation and quality tiers."""

import itertools

import pytest

from meeting_equity_mcp.scoring import (
    STATUS_WEIGHTS,
    calculate_equity_score,
    compare_scores,
    get_breakdown,
    quality_label,
    score_quality,
)
from meeting_equity_mcp.types import ParticipantStatus


def _statuses(*names: str | None) -> list[ParticipantStatus]:
    return [
        ParticipantStatus(
            participant_id=f"p{i}",
            status=name,
            error=None if name else "Invalid time zone: 'Mars/Base'",
        )
        for i, name in enumerate(names)
    ]


class TestCalculateEquityScore:
    def test_no_participants_is_no_data(self):
        result = calculate_equity_score([])

        assert result.score is None
        assert result.display_score is None
        assert result.quality is None
        assert result.breakdown.total == 0

    def test_all_green(self):
        result = calculate_equity_score(_statuses("green", "green", "green"))

        assert result.score == 100
        assert result.quality == "excellent"
        assert result.quality_label == "Excellent/Optimal"

    def test_all_red_without_critical(self):
        result = calculate_equity_score(_statuses("red", "red"))

        assert result.score == 20
        assert result.quality == "fair"

    def test_all_critical(self):
        result = calculate_equity_score(_statuses("critical", "critical"))

        assert result.score == 0
        assert result.display_score == 0
        assert result.quality_label == "Poor/Critical"

    def test_green_orange_red(self):
        result = calculate_equity_score(_statuses("green", "orange", "red"))

        assert result.score == pytest.approx(60.0)
        assert result.quality_label == "Good/Acceptable"
        assert result.breakdown.model_dump() == {
            "green": 1,
            "orange": 1,
            "red": 1,
            "critical": 0,
            "total": 3,
        }

    def test_fractional_internally(self):
        result = calculate_equity_score(_statuses("green", "green", "orange"))

        assert result.score == pytest.approx(260 / 3)
        assert result.display_score == 87

    def test_single_critical_pulls_score_down(self):
        result = calculate_equity_score(_statuses("green", "critical"))

        assert result.score == 50

    def test_unclassified_participants_excluded(self):
        result = calculate_equity_score(_statuses("green", None))

        assert result.score == 100
        assert result.breakdown.total == 1
        assert result.errors == ["p1"]
        assert result.participant_count == 2

    def test_only_unclassified_is_no_data(self):
        result = calculate_equity_score(_statuses(None))

        assert result.score is None
        assert result.errors == ["p0"]

    @pytest.mark.parametrize("size", [1, 2, 3, 4])
    def test_breakdown_sums_and_bounds(self, size: int):
        for combo in itertools.product(STATUS_WEIGHTS, repeat=size):
            result = calculate_equity_score(_statuses(*combo))
            b = result.breakdown

            assert b.green + b.orange + b.red + b.critical == size
            assert 0 <= result.score <= 100


class TestQuality:
    @pytest.mark.parametrize(
        ("score", "quality"),
        [
            (100, "excellent"),
            (71, "excellent"),
            (70.6, "excellent"),
            (70.4, "good"),
            (41, "good"),
            (40, "fair"),
            (1, "fair"),
            (0.4, "poor"),
            (0, "poor"),
            (None, None),
        ],
    )
    def test_tiers(self, score, quality):
        assert score_quality(score) == quality

    def test_labels(self):
        assert quality_label(85) == "Excellent/Optimal"
        assert quality_label(65) == "Good/Acceptable"
        assert quality_label(20) == "Fair/Poor"
        assert quality_label(0) == "Poor/Critical"


class TestHelpers:
    def test_compare_scores(self):
        assert compare_scores(75, 50) == 1
        assert compare_scores(40, 80) == -1
        assert compare_scores(50, 50) == 0

    def test_get_breakdown_skips_unclassified(self):
        breakdown = get_breakdown(_statuses("orange", None, "critical"))

        assert (breakdown.orange, breakdown.critical, breakdown.total) == (1, 1, 2)
