"""Shared data models used across the availability agent."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class CapturedRequest:
    """Body and whitelisted headers of the observed availability request."""

    body: str
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))


@dataclass(frozen=True)
class HarMatch:
    """A recorded availability exchange and the slots decoded from it."""

    base_time: str
    requested_date: str
    response: Mapping[str, Any]
    slots: list[DecodedSlot] = field(default_factory=list)


class DecodedSlot(BaseModel):
    """A bookable time on the requested day."""

    time: str
    type: str = "Standard"


class AvailabilityReport(BaseModel):
    """Decoded availability for a single date."""

    date: str
    slots: list[DecodedSlot] = Field(default_factory=list)
