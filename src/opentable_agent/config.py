"""Configuration objects and helpers for the availability agent."""

from __future__ import annotations

import re

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/144.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    """Runtime configuration sourced from environment variables."""

    gql_url: HttpUrl = Field(
        "https://www.opentable.com/dapi/fe/gql?optype=query&opname=RestaurantsAvailability",
    )
    origin: str = Field("https://www.opentable.com")
    user_agent: str = Field(DEFAULT_USER_AGENT)
    headless: bool = Field(True)
    browser_channel: str = Field("chrome")
    capture_timeout_seconds: float = Field(30, gt=0)
    navigation_timeout_seconds: float = Field(60, gt=0)
    default_base_time: str = Field("19:00")
    forward_minutes: int = Field(295, ge=0)
    backward_minutes: int = Field(1140, ge=0)
    forward_timeslots: int = Field(20, ge=0)
    backward_timeslots: int = Field(76, ge=0)
    har_structural_match: bool = Field(False)
    log_level: str = Field("INFO")

    model_config = SettingsConfigDict(
        env_prefix="OPENTABLE_",
        env_file=(".env",),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("default_base_time")
    @classmethod
    def validate_base_time(cls, value: str) -> str:
        """Reject base times that are not zero-padded ``HH:MM``."""
        if not TIME_PATTERN.match(value):
            raise ValueError(f"default_base_time must be HH:MM, got {value!r}")
        return value

    @field_validator("gql_url")
    @classmethod
    def validate_gql_url(cls, value: HttpUrl) -> HttpUrl:
        """The replay target has to be the availability operation."""
        if "RestaurantsAvailability" not in str(value):
            raise ValueError("gql_url must target the RestaurantsAvailability operation")
        return value

    @property
    def capture_timeout_ms(self) -> int:
        return int(self.capture_timeout_seconds * 1000)

    @property
    def navigation_timeout_ms(self) -> int:
        return int(self.navigation_timeout_seconds * 1000)

    @property
    def window_variables(self) -> dict[str, int]:
        """Slot window sizing that asks the server for a full day of times."""
        return {
            "forwardMinutes": self.forward_minutes,
            "backwardMinutes": self.backward_minutes,
            "forwardTimeslots": self.forward_timeslots,
            "backwardTimeslots": self.backward_timeslots,
        }
