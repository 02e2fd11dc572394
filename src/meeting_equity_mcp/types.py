"""Data models for participants, meetings and equity analysis results."""

from datetime import date, datetime, time
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from .countries import is_valid_country_code, normalize_country_code
from .errors import InvalidCountryCode, InvalidMeetingDuration, InvalidWorkingHoursConfig
from .timezone import ensure_utc, validate_timezone

StatusName = Literal["green", "orange", "red", "critical"]
STATUS_NAMES: tuple[StatusName, ...] = ("green", "orange", "red", "critical")

MIN_DURATION_MINUTES = 15
MAX_DURATION_MINUTES = 480
MAX_PARTICIPANTS = 50

# Work-week pattern tokens (Su, M, T, W, Th, F, Sa) → ISO weekday.
_PATTERN_TOKENS = {"Su": 7, "M": 1, "W": 3, "Th": 4, "F": 5, "Sa": 6}


class Participant(BaseModel):
    """A meeting participant located in an IANA time zone and a country."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    timezone: str
    country: str
    notes: str = ""

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, v: str) -> str:
        return validate_timezone(v)

    @field_validator("country", mode="before")
    @classmethod
    def _check_country(cls, v: object) -> str:
        if not is_valid_country_code(v):
            raise InvalidCountryCode(v)
        return normalize_country_code(v)  # type: ignore[arg-type]


class WorkingHoursConfig(BaseModel):
    """Optimal (green) and acceptable (orange) local windows plus work days.

    Windows are half-open ``[start, end)`` on a single local day; bands that
    cross midnight cannot be represented.
    """

    model_config = ConfigDict(frozen=True)

    country_code: str | None = None
    green_start: time
    green_end: time
    orange_morning_start: time
    orange_morning_end: time
    orange_evening_start: time
    orange_evening_end: time
    work_days: frozenset[int]

    @field_validator("country_code", mode="before")
    @classmethod
    def _check_country(cls, v: object) -> str | None:
        if v is None:
            return None
        if not is_valid_country_code(v):
            raise InvalidCountryCode(v)
        return normalize_country_code(v)  # type: ignore[arg-type]

    @field_validator(
        "green_start",
        "green_end",
        "orange_morning_start",
        "orange_morning_end",
        "orange_evening_start",
        "orange_evening_end",
    )
    @classmethod
    def _check_naive(cls, v: time) -> time:
        # Windows are local wall-clock times; the zone comes from the participant.
        if v.tzinfo is not None:
            raise InvalidWorkingHoursConfig(
                "naive_times", f"Working-hours times must not carry a UTC offset (got {v})"
            )
        return v

    @model_validator(mode="after")
    def _check_invariants(self) -> "WorkingHoursConfig":
        if not self.green_start < self.green_end:
            raise InvalidWorkingHoursConfig(
                "green_order", "green_start must be before green_end"
            )
        if not self.orange_morning_start < self.orange_morning_end:
            raise InvalidWorkingHoursConfig(
                "orange_morning_order",
                "orange_morning_start must be before orange_morning_end",
            )
        if not self.orange_evening_start < self.orange_evening_end:
            raise InvalidWorkingHoursConfig(
                "orange_evening_order",
                "orange_evening_start must be before orange_evening_end",
            )
        if self.orange_morning_end > self.green_start:
            raise InvalidWorkingHoursConfig(
                "orange_morning_before_green",
                "orange_morning_end must not be after green_start",
            )
        if self.orange_evening_start < self.green_end:
            raise InvalidWorkingHoursConfig(
                "orange_evening_after_green",
                "orange_evening_start must not be before green_end",
            )
        if not self.work_days:
            raise InvalidWorkingHoursConfig(
                "work_days_empty", "work_days must contain at least one day"
            )
        if not all(1 <= d <= 7 for d in self.work_days):
            raise InvalidWorkingHoursConfig(
                "work_days_range", "work_days must be ISO weekdays 1 (Mon) to 7 (Sun)"
            )
        return self

    @staticmethod
    def parse_week_pattern(pattern: str) -> frozenset[int]:
        """Parse a pattern such as ``"MTWTF"`` or ``"SuMTWTh"`` into ISO weekdays.

        A bare ``T`` is Tuesday unless it follows Wednesday or later, in which
        case it is Thursday.
        """
        days: set[int] = set()
        last = 0
        i = 0
        while i < len(pattern):
            pair = pattern[i : i + 2]
            if pair in _PATTERN_TOKENS:
                day = _PATTERN_TOKENS[pair]
                i += 2
            elif pattern[i] == "T":
                day = 2 if last < 3 else 4
                i += 1
            elif pattern[i] in _PATTERN_TOKENS:
                day = _PATTERN_TOKENS[pattern[i]]
                i += 1
            else:
                raise InvalidWorkingHoursConfig(
                    "work_week_pattern", f"Unrecognised work week pattern: {pattern!r}"
                )
            days.add(day)
            last = day if day != 7 else 0
        return frozenset(days)

    @classmethod
    def from_week_pattern(cls, pattern: str, **fields: object) -> "WorkingHoursConfig":
        return cls(work_days=cls.parse_week_pattern(pattern), **fields)  # type: ignore[arg-type]


class Meeting(BaseModel):
    """A meeting proposal with an ordered list of participant references."""

    id: str
    title: str
    proposed_time: datetime
    duration_minutes: int = 60
    notes: str = ""
    participant_ids: list[str] = []

    @field_validator("title")
    @classmethod
    def _check_title(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Meeting title cannot be empty")
        return v.strip()

    @field_validator("proposed_time")
    @classmethod
    def _to_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @field_validator("duration_minutes")
    @classmethod
    def _check_duration(cls, v: int) -> int:
        if not MIN_DURATION_MINUTES <= v <= MAX_DURATION_MINUTES:
            raise InvalidMeetingDuration(v, MIN_DURATION_MINUTES, MAX_DURATION_MINUTES)
        return v

    @field_validator("participant_ids")
    @classmethod
    def _check_participants(cls, v: list[str]) -> list[str]:
        if len(v) > MAX_PARTICIPANTS:
            raise ValueError(
                f"Maximum of {MAX_PARTICIPANTS} participants per meeting exceeded"
            )
        if len(set(v)) != len(v):
            raise ValueError("Participant already added to this meeting")
        return v

    def with_updates(self, **changes: object) -> "Meeting":
        """Return a re-validated copy with *changes* applied."""
        return Meeting.model_validate({**self.model_dump(), **changes})


class Holiday(BaseModel):
    """A public holiday as reported by the holiday data source."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    date: date
    name: str
    local_name: str | None = Field(default=None, alias="localName")
    country_code: str | None = Field(default=None, alias="countryCode")
    fixed: bool = False
    is_global: bool = Field(default=True, alias="global")
    counties: list[str] | None = None
    types: list[str] = []


class HolidayCheck(BaseModel):
    """Answer to "is this local date a holiday in this country?"."""

    is_holiday: bool
    name: str | None = None


class ParticipantStatus(BaseModel):
    """Convenience classification of one participant at one instant.

    ``status`` is None only when the participant could not be classified
    (see ``error``).
    """

    participant_id: str
    participant_name: str = ""
    status: StatusName | None = None
    local_time: datetime | None = None
    utc_offset: str | None = None
    reason: str | None = None
    holiday_name: str | None = None
    holiday_status_unknown: bool = False
    error: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_critical(self) -> bool:
        return self.status == "critical"


class StatusBreakdown(BaseModel):
    green: int = 0
    orange: int = 0
    red: int = 0
    critical: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total(self) -> int:
        return self.green + self.orange + self.red + self.critical


class EquityScoreResult(BaseModel):
    """Aggregate fairness of one instant; ``score`` is None when there is no data."""

    score: float | None
    display_score: int | None = None
    quality: str | None = None
    quality_label: str | None = None
    breakdown: StatusBreakdown = Field(default_factory=StatusBreakdown)
    participant_count: int = 0
    errors: list[str] = []


class HeatmapSlot(BaseModel):
    """Equity analysis for one whole UTC hour of an analysed date."""

    hour: int = Field(ge=0, le=23)
    datetime: datetime
    score: float | None
    display_score: int | None = None
    quality: str | None = None
    quality_label: str | None = None
    breakdown: StatusBreakdown = Field(default_factory=StatusBreakdown)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def label(self) -> str:
        return f"{self.hour:02d}:00 UTC"
