"""24-hour equity heatmap and ranked meeting-time suggestions."""

import asyncio
import logging
from collections.abc import Mapping, Sequence
from datetime import date, datetime

from .classifier import build_status, lookup_holiday, unclassified_status
from .errors import InvalidTimeZone
from .holidays import HolidayGateway
from .scoring import calculate_equity_score
from .timezone import UTC, ensure_utc, to_local_time
from .types import HeatmapSlot, HolidayCheck, Participant, ParticipantStatus, WorkingHoursConfig
from .working_hours import resolve_working_hours

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 24


def slot_instants(day: date) -> list[datetime]:
    """The 24 whole-hour UTC instants of *day*."""
    return [
        datetime(day.year, day.month, day.day, hour, tzinfo=UTC)
        for hour in range(HOURS_PER_DAY)
    ]


async def generate_slots(
    day: date | datetime,
    participants: Sequence[Participant],
    overrides: Mapping[str, WorkingHoursConfig] | None = None,
    gateway: HolidayGateway | None = None,
) -> list[HeatmapSlot]:
    """Classify and score every UTC hour of *day*.

    Holiday lookups for all hours are issued concurrently and de-duplicated
    per (local date, country); each one that fails counts as "unknown" for
    the participants it covers. Slots are only built once every lookup has
    settled.
    """
    if isinstance(day, datetime):
        day = ensure_utc(day).date()
    instants = slot_instants(day)

    local_times: dict[tuple[int, int], datetime | InvalidTimeZone] = {}
    keys: set[tuple[date, str]] = set()
    for hour, instant in enumerate(instants):
        for idx, participant in enumerate(participants):
            try:
                local = to_local_time(instant, participant.timezone)
            except InvalidTimeZone as e:
                local_times[hour, idx] = e
                continue
            local_times[hour, idx] = local
            keys.add((local.date(), participant.country))

    ordered = sorted(keys)
    answers = await asyncio.gather(*(lookup_holiday(gateway, d, c) for d, c in ordered))
    lookups: dict[tuple[date, str], HolidayCheck | None] = dict(zip(ordered, answers))
    logger.debug(
        "Heatmap for %s: %d participants, %d holiday lookups",
        day.isoformat(),
        len(participants),
        len(ordered),
    )

    slots: list[HeatmapSlot] = []
    for hour, instant in enumerate(instants):
        statuses: list[ParticipantStatus] = []
        for idx, participant in enumerate(participants):
            local = local_times[hour, idx]
            if isinstance(local, InvalidTimeZone):
                statuses.append(unclassified_status(participant, local))
                continue
            config = resolve_working_hours(participant.country, overrides)
            holiday = lookups[local.date(), participant.country]
            statuses.append(build_status(participant, local, config, holiday))

        result = calculate_equity_score(statuses)
        slots.append(
            HeatmapSlot(
                hour=hour,
                datetime=instant,
                score=result.score,
                display_score=result.display_score,
                quality=result.quality,
                quality_label=result.quality_label,
                breakdown=result.breakdown,
            )
        )
    return slots


def _rank_key(slot: HeatmapSlot) -> tuple[float, int, int]:
    return (-(slot.score or 0.0), slot.breakdown.critical, slot.hour)


def top_suggestions(slots: Sequence[HeatmapSlot], n: int = 3) -> list[HeatmapSlot]:
    """Best *n* slots: highest score, then fewest critical participants, then earliest hour.

    Slots without a score are never suggested.
    """
    if n <= 0:
        return []
    ranked = sorted((s for s in slots if s.score is not None), key=_rank_key)
    return ranked[:n]
