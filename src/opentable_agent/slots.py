"""Decoding of RestaurantsAvailability responses into time slots."""

from __future__ import annotations

import math
from numbers import Real
from typing import Any, Mapping, Optional

import structlog

from .models import DecodedSlot
from .time_offsets import offset_to_time

LOGGER = structlog.get_logger(__name__)


def extract_slots(
    response: Mapping[str, Any],
    base_time: str,
    requested_date: str,
    *,
    strict: bool = False,
) -> list[DecodedSlot]:
    """
    Return the available slots of the requested day, in response order.

    Days and slots that are not JSON objects are skipped, or raise
    ``ValueError`` when ``strict`` is set.
    """
    day = _select_day(_availability_days(response), strict)
    if not day or not isinstance(day.get("slots"), list) or not day["slots"]:
        LOGGER.debug("slots.none", requested_date=requested_date)
        return []

    decoded: list[DecodedSlot] = []
    for index, slot in enumerate(day["slots"]):
        if not isinstance(slot, Mapping):
            if strict:
                raise ValueError(f"slot {index} is not an object")
            continue
        offset = slot.get("timeOffsetMinutes")
        if not slot.get("isAvailable") or not _is_number(offset):
            continue
        decoded.append(
            DecodedSlot(
                time=offset_to_time(base_time, int(offset)),
                type=str(slot.get("type") or "Standard"),
            )
        )

    LOGGER.debug(
        "slots.decoded",
        requested_date=requested_date,
        base_time=base_time,
        total=len(day["slots"]),
        available=len(decoded),
    )
    return decoded


def _availability_days(response: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    """Pull ``availability[0].availabilityDays`` out of a GraphQL payload."""
    payload = response.get("data", response) if isinstance(response, Mapping) else None
    if not isinstance(payload, Mapping):
        return []
    availability = payload.get("availability")
    if not isinstance(availability, list) or not availability or not isinstance(availability[0], Mapping):
        return []
    days = availability[0].get("availabilityDays")
    return days if isinstance(days, list) else []


def _select_day(days: list[Mapping[str, Any]], strict: bool) -> Optional[Mapping[str, Any]]:
    """Prefer the day with ``dayOffset == 0``; otherwise fall back to the first."""
    if strict and not all(isinstance(day, Mapping) for day in days):
        raise ValueError("availabilityDays holds a non-object entry")
    days = [day for day in days if isinstance(day, Mapping)]
    for day in days:
        if day.get("dayOffset") == 0:
            return day
    return days[0] if days else None


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)
