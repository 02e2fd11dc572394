"""Per-country working-hours resolution with a global default."""

from collections.abc import Iterable, Mapping
from datetime import time
from typing import Any

from .types import WorkingHoursConfig

DEFAULT_WORKING_HOURS = WorkingHoursConfig(
    green_start=time(9, 0),
    green_end=time(17, 0),
    orange_morning_start=time(8, 0),
    orange_morning_end=time(9, 0),
    orange_evening_start=time(17, 0),
    orange_evening_end=time(18, 0),
    work_days=frozenset({1, 2, 3, 4, 5}),
)


def validate_working_hours(data: Mapping[str, Any] | WorkingHoursConfig) -> WorkingHoursConfig:
    """Validate a config on create/edit.

    Accepts a mapping (``work_week_pattern`` may replace ``work_days``) and
    raises :class:`~meeting_equity_mcp.errors.InvalidWorkingHoursConfig` naming
    the violated invariant.
    """
    if isinstance(data, WorkingHoursConfig):
        return WorkingHoursConfig.model_validate(data.model_dump())
    fields = dict(data)
    pattern = fields.pop("work_week_pattern", None)
    if pattern is not None and "work_days" not in fields:
        fields["work_days"] = WorkingHoursConfig.parse_week_pattern(pattern)
    return WorkingHoursConfig.model_validate(fields)


def build_overrides(configs: Iterable[WorkingHoursConfig]) -> dict[str, WorkingHoursConfig]:
    """Index country-specific configs by country code; later entries win."""
    return {c.country_code: c for c in configs if c.country_code}


def resolve_working_hours(
    country_code: str | None,
    overrides: Mapping[str, WorkingHoursConfig] | None = None,
) -> WorkingHoursConfig:
    """Return the override for *country_code*, else the default.

    Never validates: overrides are trusted to have passed
    :func:`validate_working_hours` when they were stored.
    """
    if not country_code or not overrides:
        return DEFAULT_WORKING_HOURS
    return overrides.get(country_code.strip().upper(), DEFAULT_WORKING_HOURS)


def _format_clock(t: time) -> str:
    hour = t.hour % 12 or 12
    return f"{hour}:{t.minute:02d} {'AM' if t.hour < 12 else 'PM'}"


def format_time_range(start: time, end: time) -> str:
    """Format a window for display, e.g. ``"9:00 AM - 5:00 PM"``."""
    return f"{_format_clock(start)} - {_format_clock(end)}"


_DAY_NAMES = {1: "Mon", 2: "Tue", 3: "Wed", 4: "Thu", 5: "Fri", 6: "Sat", 7: "Sun"}


def format_work_days(days: Iterable[int]) -> str:
    return ", ".join(_DAY_NAMES[d] for d in sorted(days))
