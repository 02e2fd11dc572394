"""Shared fixtures for tests."""

import json
from pathlib import Path

import pytest

from meeting_equity_mcp.types import Participant

# Snapshot in the store's JSON format: participants across five zones, a
# Japanese working-hours override, and a small holiday table.
SAMPLE_STORE: dict = {
    "participants": [
        {
            "id": "alice",
            "name": "Alice",
            "timezone": "America/New_York",
            "country": "US",
            "notes": "Prefers mornings",
        },
        {"id": "bruno", "name": "Bruno", "timezone": "Europe/London", "country": "GB"},
        {"id": "chika", "name": "Chika", "timezone": "Asia/Tokyo", "country": "JP"},
        {"id": "dev", "name": "Dev", "timezone": "Asia/Kolkata", "country": "in"},
        {"id": "emma", "name": "Emma", "timezone": "Australia/Adelaide", "country": "AU"},
    ],
    "meetings": [
        {
            "id": "sync",
            "title": "Weekly Sync",
            "proposed_time": "2025-01-15T14:00:00Z",
            "duration_minutes": 30,
            "participants": ["alice", "bruno"],
        },
        {
            "id": "apac",
            "title": "APAC Review",
            "proposed_time": "2025-01-15T23:00:00Z",
            "duration_minutes": 60,
            "participants": ["alice", "chika", "dev"],
        },
        {
            "id": "xmas",
            "title": "Holiday Planning",
            "proposed_time": "2025-12-25T15:00:00Z",
            "duration_minutes": 45,
            "participants": ["alice", "bruno"],
        },
    ],
    "working_hours": [
        {
            "country_code": "JP",
            "green_start": "10:00",
            "green_end": "18:00",
            "orange_morning_start": "09:00",
            "orange_morning_end": "10:00",
            "orange_evening_start": "18:00",
            "orange_evening_end": "19:00",
            "work_week_pattern": "MTWTF",
        }
    ],
    "holidays": {
        "US": [
            {"date": "2025-01-01", "name": "New Year's Day"},
            {"date": "2025-12-25", "name": "Christmas Day"},
        ],
        "GB": [{"date": "2025-12-25", "name": "Christmas Day"}],
        "AU": [{"date": "2026-01-26", "name": "Australia Day"}],
    },
}


@pytest.fixture
def sample_store_path(tmp_path: Path) -> Path:
    """Write the sample snapshot to a temp file and return its path."""
    path = tmp_path / "store.json"
    path.write_text(json.dumps(SAMPLE_STORE))
    return path


@pytest.fixture
def new_york() -> Participant:
    return Participant(id="alice", name="Alice", timezone="America/New_York", country="US")


@pytest.fixture
def london() -> Participant:
    return Participant(id="bruno", name="Bruno", timezone="Europe/London", country="GB")


@pytest.fixture
def adelaide() -> Participant:
    return Participant(id="emma", name="Emma", timezone="Australia/Adelaide", country="AU")


@pytest.fixture
def sample_store_data() -> dict:
    """A fresh, mutable copy of the sample snapshot."""
    return json.loads(json.dumps(SAMPLE_STORE))
