"""Application settings via pydantic-settings."""

import os
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .holidays import DEFAULT_CACHE_TTL, NAGER_API_BASE

DEFAULT_STORE_PATH = "~/.meeting-equity/store.json"


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="MEETING_EQUITY_")

    store_path: str = Field(
        default=DEFAULT_STORE_PATH,
        description=(
            "Path to the JSON snapshot of participants, meetings, "
            "working-hours configs and holidays."
        ),
    )
    log_level: str = Field(default="info", description="Logging level")
    holiday_source: Literal["static", "nager"] = Field(
        default="static",
        description=(
            "'static' reads holidays from the snapshot, "
            "'nager' queries the Nager.Date API."
        ),
    )
    holiday_api_base: str = Field(default=NAGER_API_BASE)
    holiday_timeout: float = Field(
        default=10.0, gt=0, description="Per-request timeout in seconds."
    )
    holiday_retries: int = Field(default=3, ge=1)
    holiday_cache_ttl: float = Field(
        default=DEFAULT_CACHE_TTL,
        ge=0,
        description="Seconds a fetched holiday year stays cached.",
    )
    suggestion_count: int = Field(
        default=3, ge=1, le=24, description="Default number of suggested hours."
    )
    recompute_debounce: float = Field(
        default=0.0,
        ge=0,
        description="Seconds an analysis request waits before computing; newer requests replace it.",
    )

    @model_validator(mode="after")
    def _expand_paths(self) -> "Config":
        object.__setattr__(self, "store_path", os.path.expanduser(self.store_path))
        return self
