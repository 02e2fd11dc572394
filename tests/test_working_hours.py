"""Tests for working-hours configs: validation, resolution and display."""

from datetime import time

import pytest
from pydantic import ValidationError

from meeting_equity_mcp.errors import InvalidCountryCode, InvalidWorkingHoursConfig
from meeting_equity_mcp.types import WorkingHoursConfig
from meeting_equity_mcp.working_hours import (
    DEFAULT_WORKING_HOURS,
    build_overrides,
    format_time_range,
    format_work_days,
    resolve_working_hours,
    validate_working_hours,
)

VALID = {
    "green_start": "09:00",
    "green_end": "17:00",
    "orange_morning_start": "08:00",
    "orange_morning_end": "09:00",
    "orange_evening_start": "17:00",
    "orange_evening_end": "18:00",
    "work_days": [1, 2, 3, 4, 5],
}


def _config(**changes) -> dict:
    return {**VALID, **changes}


class TestDefault:
    def test_default_windows(self):
        d = DEFAULT_WORKING_HOURS

        assert (d.green_start, d.green_end) == (time(9), time(17))
        assert (d.orange_morning_start, d.orange_morning_end) == (time(8), time(9))
        assert (d.orange_evening_start, d.orange_evening_end) == (time(17), time(18))
        assert d.work_days == frozenset({1, 2, 3, 4, 5})
        assert d.country_code is None

    def test_default_is_immutable(self):
        with pytest.raises(ValidationError):
            DEFAULT_WORKING_HOURS.green_start = time(7)  # type: ignore[misc]


class TestValidation:
    def test_valid_config(self):
        config = validate_working_hours(_config(country_code="de"))

        assert config.country_code == "DE"
        assert config.green_start == time(9)

    def test_seconds_accepted(self):
        config = validate_working_hours(_config(green_start="09:00:00"))

        assert config.green_start == time(9)

    @pytest.mark.parametrize(
        ("changes", "invariant"),
        [
            ({"green_start": "17:00", "green_end": "09:00"}, "green_order"),
            ({"green_start": "09:00", "green_end": "09:00"}, "green_order"),
            ({"green_start": "22:00", "green_end": "06:00"}, "green_order"),
            ({"orange_morning_start": "09:00", "orange_morning_end": "08:00"}, "orange_morning_order"),
            ({"orange_evening_start": "18:00", "orange_evening_end": "17:30"}, "orange_evening_order"),
            ({"orange_morning_end": "10:00"}, "orange_morning_before_green"),
            ({"orange_evening_start": "16:00"}, "orange_evening_after_green"),
            ({"work_days": []}, "work_days_empty"),
            ({"work_days": [0, 1]}, "work_days_range"),
            ({"work_days": [5, 8]}, "work_days_range"),
        ],
    )
    def test_invariant_violations(self, changes: dict, invariant: str):
        with pytest.raises(InvalidWorkingHoursConfig) as exc:
            validate_working_hours(_config(**changes))

        assert exc.value.invariant == invariant

    def test_gap_between_windows_allowed(self):
        config = validate_working_hours(
            _config(orange_morning_start="07:00", orange_morning_end="08:00")
        )

        assert config.orange_morning_end < config.green_start

    def test_invalid_country(self):
        with pytest.raises(InvalidCountryCode):
            validate_working_hours(_config(country_code="XX"))

    def test_revalidates_existing_config(self):
        assert validate_working_hours(DEFAULT_WORKING_HOURS) == DEFAULT_WORKING_HOURS

    @pytest.mark.parametrize(
        "changes",
        [
            {
                "green_start": "09:00+00:00",
                "green_end": "17:00+00:00",
                "orange_morning_start": "08:00+00:00",
                "orange_morning_end": "09:00+00:00",
                "orange_evening_start": "17:00+00:00",
                "orange_evening_end": "18:00+00:00",
            },
            {"green_start": "09:00+02:00"},
        ],
        ids=["all-offset", "mixed"],
    )
    def test_times_with_offset_rejected(self, changes: dict):
        with pytest.raises(InvalidWorkingHoursConfig) as exc:
            validate_working_hours(_config(country_code="US", **changes))

        assert exc.value.invariant == "naive_times"


class TestWeekPattern:
    @pytest.mark.parametrize(
        ("pattern", "days"),
        [
            ("MTWTF", {1, 2, 3, 4, 5}),
            ("MTWThF", {1, 2, 3, 4, 5}),
            ("SuMTWTh", {7, 1, 2, 3, 4}),
            ("SaSu", {6, 7}),
            ("MTWTFSa", {1, 2, 3, 4, 5, 6}),
        ],
    )
    def test_parse(self, pattern: str, days: set[int]):
        assert WorkingHoursConfig.parse_week_pattern(pattern) == frozenset(days)

    def test_unknown_token(self):
        with pytest.raises(InvalidWorkingHoursConfig) as exc:
            WorkingHoursConfig.parse_week_pattern("MXF")

        assert exc.value.invariant == "work_week_pattern"

    def test_pattern_in_mapping(self):
        data = {k: v for k, v in VALID.items() if k != "work_days"}
        config = validate_working_hours({**data, "work_week_pattern": "SuMTWTh"})

        assert config.work_days == frozenset({7, 1, 2, 3, 4})

    def test_from_week_pattern(self):
        data = {k: v for k, v in VALID.items() if k != "work_days"}
        config = WorkingHoursConfig.from_week_pattern("MTWTFSa", **data)

        assert 6 in config.work_days


class TestResolve:
    def test_override_wins(self):
        override = validate_working_hours(_config(country_code="JP", green_start="10:00"))
        overrides = build_overrides([override])

        assert resolve_working_hours("JP", overrides) is override
        assert resolve_working_hours("jp", overrides) is override

    def test_falls_back_to_default(self):
        override = validate_working_hours(_config(country_code="JP"))
        overrides = build_overrides([override])

        assert resolve_working_hours("US", overrides) is DEFAULT_WORKING_HOURS
        assert resolve_working_hours("US", None) is DEFAULT_WORKING_HOURS
        assert resolve_working_hours(None, overrides) is DEFAULT_WORKING_HOURS

    def test_deleted_override_reverts_to_default(self):
        overrides = build_overrides([validate_working_hours(_config(country_code="FR"))])
        del overrides["FR"]

        assert resolve_working_hours("FR", overrides) is DEFAULT_WORKING_HOURS


class TestDisplay:
    def test_format_time_range(self):
        assert format_time_range(time(9), time(17)) == "9:00 AM - 5:00 PM"
        assert format_time_range(time(0, 30), time(12, 0)) == "12:30 AM - 12:00 PM"

    def test_format_work_days(self):
        assert format_work_days({5, 1, 7}) == "Mon, Fri, Sun"
