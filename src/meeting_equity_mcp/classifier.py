"""Per-participant convenience classification (green / orange / red / critical)."""

import asyncio
import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime

from .errors import GatewayError, InvalidTimeZone
from .holidays import HolidayGateway
from .timezone import get_offset_label, to_local_time
from .types import HolidayCheck, Participant, ParticipantStatus, StatusName, WorkingHoursConfig
from .working_hours import resolve_working_hours

logger = logging.getLogger(__name__)

UNKNOWN_HOLIDAY_SUFFIX = " (holiday status unknown)"


def determine_status(
    local_time: datetime,
    config: WorkingHoursConfig,
    holiday_name: str | None = None,
) -> tuple[StatusName, str]:
    """Classify a local wall-clock time against a working-hours config.

    Precedence: holiday, non-working day, green window, orange windows,
    then red. All windows are half-open.
    """
    if holiday_name:
        return "critical", f"Holiday: {holiday_name}"
    if local_time.isoweekday() not in config.work_days:
        return "critical", "Non-working day"

    clock = local_time.time().replace(tzinfo=None)
    if config.green_start <= clock < config.green_end:
        return "green", "Optimal working hours"
    if config.orange_morning_start <= clock < config.orange_morning_end:
        return "orange", "Acceptable (early)"
    if config.orange_evening_start <= clock < config.orange_evening_end:
        return "orange", "Acceptable (late)"
    return "red", "Outside working hours"


async def lookup_holiday(
    gateway: HolidayGateway | None, local_date: date, country_code: str
) -> HolidayCheck | None:
    """Ask the gateway about *local_date*; None means the answer is unknown."""
    if gateway is None:
        return HolidayCheck(is_holiday=False)
    try:
        return await gateway.is_holiday(local_date, country_code)
    except (GatewayError, TimeoutError) as e:
        logger.warning(
            "Holiday lookup failed for %s on %s, treating as unknown: %s",
            country_code,
            local_date.isoformat(),
            e,
        )
        return None
    except Exception:
        logger.warning(
            "Holiday gateway raised unexpectedly for %s on %s, treating as unknown",
            country_code,
            local_date.isoformat(),
            exc_info=True,
        )
        return None


def unclassified_status(participant: Participant, error: Exception) -> ParticipantStatus:
    return ParticipantStatus(
        participant_id=participant.id,
        participant_name=participant.name,
        error=str(error),
    )


def build_status(
    participant: Participant,
    local_time: datetime,
    config: WorkingHoursConfig,
    holiday: HolidayCheck | None,
) -> ParticipantStatus:
    """Assemble a participant's status from an already-resolved holiday answer."""
    holiday_name = None
    if holiday is not None and holiday.is_holiday:
        holiday_name = holiday.name or "Unnamed holiday"

    status, reason = determine_status(local_time, config, holiday_name)
    if holiday is None:
        reason += UNKNOWN_HOLIDAY_SUFFIX

    return ParticipantStatus(
        participant_id=participant.id,
        participant_name=participant.name,
        status=status,
        local_time=local_time,
        utc_offset=get_offset_label(local_time, participant.timezone),
        reason=reason,
        holiday_name=holiday_name,
        holiday_status_unknown=holiday is None,
    )


async def classify_participant(
    participant: Participant,
    instant: datetime,
    overrides: Mapping[str, WorkingHoursConfig] | None = None,
    gateway: HolidayGateway | None = None,
) -> ParticipantStatus:
    """Classify one participant at a UTC instant.

    An unresolvable time zone yields a status with ``error`` set instead of
    raising; a failed holiday lookup degrades to "unknown" and classification
    continues with the work-day and time-of-day checks.
    """
    try:
        local_time = to_local_time(instant, participant.timezone)
    except InvalidTimeZone as e:
        logger.warning("Cannot classify participant %s: %s", participant.id, e)
        return unclassified_status(participant, e)

    config = resolve_working_hours(participant.country, overrides)
    holiday = await lookup_holiday(gateway, local_time.date(), participant.country)
    return build_status(participant, local_time, config, holiday)


async def classify_participants(
    participants: Iterable[Participant],
    instant: datetime,
    overrides: Mapping[str, WorkingHoursConfig] | None = None,
    gateway: HolidayGateway | None = None,
) -> list[ParticipantStatus]:
    """Classify every participant concurrently, preserving input order."""
    return list(
        await asyncio.gather(
            *(classify_participant(p, instant, overrides, gateway) for p in participants)
        )
    )
