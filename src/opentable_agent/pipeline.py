"""End-to-end availability lookups: live capture/replay and offline HAR."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

import structlog

from .config import Settings
from .har import find, load_har
from .models import AvailabilityReport
from .mutator import build_variables, decode_response, mutate, request_variables
from .playwright_client import AvailabilityBrowser
from .slots import extract_slots

LOGGER = structlog.get_logger(__name__)

UNKNOWN_DATE = "date-unknown"


async def fetch_live_availability(
    settings: Settings,
    url: str,
    date_iso: str,
    party_size: int,
    *,
    browser_factory: Callable[[Settings], AvailabilityBrowser] = AvailabilityBrowser,
) -> AvailabilityReport:
    """Capture the restaurant page's availability call, retarget it and replay it."""
    LOGGER.info("live.start", url=url, date=date_iso, party_size=party_size)

    async with browser_factory(settings) as browser:
        captured = await browser.capture(url)
        body = mutate(captured, build_variables(date_iso, party_size, settings))
        text = await browser.replay(body, captured.headers, referer=url)

    response = decode_response(text)
    base_time = request_variables(body).get("time") or settings.default_base_time
    slots = extract_slots(response, base_time, date_iso)

    LOGGER.info("live.complete", date=date_iso, slots=len(slots))
    return AvailabilityReport(date=date_iso, slots=slots)


def read_har_availability(
    settings: Settings,
    har_path: str | Path,
    filter_date: Optional[str] = None,
    filter_party_size: Optional[int] = None,
) -> list[AvailabilityReport]:
    """Decode every recorded availability response that passes the filters."""
    LOGGER.info("har.start", path=str(har_path), date=filter_date, party_size=filter_party_size)

    matches = find(
        load_har(har_path),
        filter_date,
        filter_party_size,
        structural=settings.har_structural_match,
        default_base_time=settings.default_base_time,
    )

    reports = [
        AvailabilityReport(
            date=match.requested_date or UNKNOWN_DATE,
            slots=match.slots,
        )
        for match in matches
    ]
    if not reports:
        LOGGER.warning("har.nothing_decoded", path=str(har_path))
    return reports
