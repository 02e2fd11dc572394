"""Time-zone conversion and UTC offset formatting.

Backed by the IANA database through :mod:`zoneinfo`, so DST transitions,
historical offset changes and half/quarter-hour offsets come for free.
All functions are pure; naive datetimes are treated as UTC.
"""

import zoneinfo
from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import lru_cache

from .errors import InvalidTimeZone

UTC = zoneinfo.ZoneInfo("UTC")


@dataclass(frozen=True)
class OffsetInfo:
    """UTC offset of a zone at a given instant."""

    minutes: int
    offset_string: str
    is_dst: bool


@lru_cache(maxsize=512)
def get_zone(name: str) -> zoneinfo.ZoneInfo:
    """Resolve an IANA identifier, raising :class:`InvalidTimeZone` on failure."""
    if not isinstance(name, str) or not name.strip():
        raise InvalidTimeZone(name)
    try:
        return zoneinfo.ZoneInfo(name)
    except (zoneinfo.ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidTimeZone(name) from e


def validate_timezone(name: str) -> str:
    get_zone(name)
    return name


def ensure_utc(instant: datetime) -> datetime:
    """Return *instant* as an aware UTC datetime (naive input is assumed UTC)."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=UTC)
    return instant.astimezone(UTC)


def to_local_time(instant: datetime, zone: str) -> datetime:
    """Convert a UTC instant to the wall-clock time in *zone*."""
    return ensure_utc(instant).astimezone(get_zone(zone))


def to_utc(local: datetime, zone: str) -> datetime:
    """Interpret a naive wall-clock time in *zone* and return the UTC instant.

    Aware datetimes are simply converted. Ambiguous wall-clock times during a
    DST fall-back resolve to the first occurrence (``fold=0``).
    """
    if local.tzinfo is None:
        local = local.replace(tzinfo=get_zone(zone))
    return local.astimezone(UTC)


def _format_offset(offset: timedelta) -> tuple[int, str]:
    minutes = int(offset.total_seconds() // 60)
    sign = "+" if minutes >= 0 else "-"
    hours, mins = divmod(abs(minutes), 60)
    return minutes, f"{sign}{hours:02d}:{mins:02d}"


def get_offset_info(instant: datetime, zone: str) -> OffsetInfo:
    local = to_local_time(instant, zone)
    minutes, text = _format_offset(local.utcoffset() or timedelta(0))
    dst = local.dst()
    return OffsetInfo(minutes=minutes, offset_string=text, is_dst=bool(dst))


def get_offset_label(instant: datetime, zone: str) -> str:
    """Return a signed ``UTC±HH:MM`` label for *zone* at *instant*."""
    return f"UTC{get_offset_info(instant, zone).offset_string}"


def format_local_time(
    instant: datetime, zone: str, fmt: str = "%Y-%m-%d %H:%M"
) -> str:
    """Format a UTC instant in the given zone for display."""
    return to_local_time(instant, zone).strftime(fmt)
