"""Loading the participant / meeting / working-hours snapshot from JSON."""

import json
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from .errors import EquityError
from .types import Holiday, Meeting, Participant, WorkingHoursConfig
from .working_hours import build_overrides, validate_working_hours

logger = logging.getLogger(__name__)


class StoreData(BaseModel):
    """Read-only snapshot of the persistent store."""

    participants: dict[str, Participant] = {}
    meetings: dict[str, Meeting] = {}
    working_hours: dict[str, WorkingHoursConfig] = {}
    holidays: dict[str, list[Holiday]] = {}
    last_updated: datetime | None = None

    @property
    def overrides(self) -> dict[str, WorkingHoursConfig]:
        return self.working_hours

    def participants_for(self, meeting: Meeting) -> list[Participant]:
        """Resolve a meeting's participant references, in order, skipping unknown ids."""
        found: list[Participant] = []
        for pid in meeting.participant_ids:
            participant = self.participants.get(pid)
            if participant is None:
                logger.warning("Meeting %s references unknown participant %s", meeting.id, pid)
                continue
            found.append(participant)
        return found

    def select_participants(self, ids: list[str]) -> tuple[list[Participant], list[str]]:
        """Return (known participants in order, unknown ids)."""
        known = [self.participants[i] for i in ids if i in self.participants]
        missing = [i for i in ids if i not in self.participants]
        return known, missing


def _records(raw: Any, section: str) -> list[dict[str, Any]]:
    value = raw.get(section, [])
    if isinstance(value, dict):
        # Mapping form: {"<id>": {...}}
        return [{"id": key, **item} for key, item in value.items() if isinstance(item, dict)]
    if isinstance(value, list):
        return [item for item in value if isinstance(item, dict)]
    logger.error("Section %r must be a list or mapping, ignoring", section)
    return []


def _parse_participants(raw: dict[str, Any]) -> dict[str, Participant]:
    participants: dict[str, Participant] = {}
    for record in _records(raw, "participants"):
        try:
            participant = Participant.model_validate(record)
        except (ValidationError, EquityError) as e:
            logger.error("Error parsing participant %s: %s", record.get("id"), e)
            continue
        participants[participant.id] = participant
    return participants


def _parse_meetings(raw: dict[str, Any]) -> dict[str, Meeting]:
    meetings: dict[str, Meeting] = {}
    for record in _records(raw, "meetings"):
        record = dict(record)
        if "participants" in record and "participant_ids" not in record:
            record["participant_ids"] = record.pop("participants")
        try:
            meeting = Meeting.model_validate(record)
        except (ValidationError, EquityError) as e:
            logger.error("Error parsing meeting %s: %s", record.get("id"), e)
            continue
        meetings[meeting.id] = meeting
    return meetings


def _parse_working_hours(raw: dict[str, Any]) -> dict[str, WorkingHoursConfig]:
    configs: list[WorkingHoursConfig] = []
    for record in _records(raw, "working_hours"):
        try:
            config = validate_working_hours(record)
        except (ValidationError, EquityError) as e:
            logger.error(
                "Error parsing working hours for %s: %s", record.get("country_code"), e
            )
            continue
        if config.country_code is None:
            logger.error("Working hours entry without country_code ignored")
            continue
        configs.append(config)
    return build_overrides(configs)


def _parse_holidays(raw: dict[str, Any]) -> dict[str, list[Holiday]]:
    holidays: dict[str, list[Holiday]] = {}
    section = raw.get("holidays", {})
    if not isinstance(section, dict):
        return holidays
    for code, items in section.items():
        parsed: list[Holiday] = []
        for item in items if isinstance(items, list) else []:
            try:
                parsed.append(Holiday.model_validate({"countryCode": code, **item}))
            except (ValidationError, TypeError) as e:
                logger.error("Error parsing holiday for %s: %s", code, e)
        holidays[code.upper()] = parsed
    return holidays


def load_store(store_path: str) -> StoreData:
    """Load and parse the snapshot.

    Returns an empty StoreData if the file is missing or unparseable;
    individual invalid records are logged and skipped.
    """
    path = Path(store_path)
    if not path.exists():
        return StoreData()

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, ValueError) as e:
        logger.error("Error loading store %s: %s", store_path, e)
        return StoreData()
    if not isinstance(raw, dict):
        logger.error("Store %s must contain a JSON object", store_path)
        return StoreData()

    return StoreData(
        participants=_parse_participants(raw),
        meetings=_parse_meetings(raw),
        working_hours=_parse_working_hours(raw),
        holidays=_parse_holidays(raw),
        last_updated=datetime.now(),
    )


def get_store_mtime(store_path: str) -> float:
    """Return the modification time of the store file, or 0.0 if missing."""
    try:
        return os.path.getmtime(store_path)
    except OSError:
        return 0.0
