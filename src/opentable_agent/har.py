"""Offline lookup of availability exchanges recorded in a HAR file."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

import structlog

from .errors import MalformedCapture, NoMatchingEntries
from .models import HarMatch
from .mutator import request_variables
from .playwright_client import is_availability_request
from .slots import extract_slots

LOGGER = structlog.get_logger(__name__)

DEFAULT_BASE_TIME = "19:00"


def load_har(path: str | Path) -> dict[str, Any]:
    """Read a HAR document from disk."""
    try:
        har_log = json.loads(Path(path).read_text(encoding="utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedCapture(f"HAR file {path} is not valid UTF-8 JSON") from exc
    if not isinstance(har_log, dict):
        raise MalformedCapture(f"HAR file {path} does not contain a JSON object")
    return har_log


def find(
    har_log: Mapping[str, Any],
    filter_date: Optional[str] = None,
    filter_party_size: Optional[int] = None,
    *,
    structural: bool = False,
    default_base_time: str = DEFAULT_BASE_TIME,
) -> list[HarMatch]:
    """
    Collect and decode recorded RestaurantsAvailability exchanges in log order.

    The date and party filters are substring tests on the raw request body
    (``"date":"2026-02-26"`` and ``"partySize":4``), so a body serialised with
    different spacing will not match. ``structural=True`` compares the parsed
    ``variables`` instead. Filters only apply to entries that recorded a request
    body, and a party size below 1 disables the party filter. Entries whose
    response cannot be decoded are logged and skipped; when any filter is
    active the first entry that decodes is returned on its own.

    Raises :class:`NoMatchingEntries` if no entry matches.
    """
    if filter_party_size is not None and filter_party_size < 1:
        filter_party_size = None
    filtering = bool(filter_date) or bool(filter_party_size)
    candidates = [
        entry
        for entry in _entries(har_log)
        if _is_candidate(entry)
        and _passes_filters(_request_body(entry), filter_date, filter_party_size, structural)
    ]
    if not candidates:
        raise NoMatchingEntries("No matching RestaurantsAvailability entries in HAR")

    LOGGER.info("har.candidates", count=len(candidates), filtering=filtering)

    matches: list[HarMatch] = []
    for index, entry in enumerate(candidates):
        variables = request_variables(_request_body(entry))
        base_time = str(variables.get("time") or default_base_time)
        requested_date = str(filter_date or variables.get("date") or "")

        try:
            response = json.loads(entry["response"]["content"]["text"])
            if not isinstance(response, dict):
                raise ValueError("response is not a JSON object")
            slots = extract_slots(response, base_time, requested_date, strict=True)
        except (AttributeError, TypeError, ValueError) as exc:
            LOGGER.warning("har.entry_skipped", index=index, error=str(exc))
            continue

        matches.append(
            HarMatch(
                base_time=base_time,
                requested_date=requested_date,
                response=response,
                slots=slots,
            )
        )
        if filtering:
            break

    return matches


def _entries(har_log: Mapping[str, Any]) -> Iterable[Mapping[str, Any]]:
    log = har_log.get("log")
    entries = log.get("entries") if isinstance(log, Mapping) else None
    if not isinstance(entries, list):
        return []
    return [entry for entry in entries if isinstance(entry, Mapping)]


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _request_body(entry: Mapping[str, Any]) -> Optional[str]:
    post_data = _mapping(_mapping(entry.get("request")).get("postData"))
    text = post_data.get("text")
    return text if isinstance(text, str) and text else None


def _is_candidate(entry: Mapping[str, Any]) -> bool:
    request = _mapping(entry.get("request"))
    content = _mapping(_mapping(entry.get("response")).get("content"))
    method, url = request.get("method"), request.get("url")
    if not isinstance(method, str) or not isinstance(url, str):
        return False
    if not is_availability_request(method, url):
        return False
    text = content.get("text")
    return isinstance(text, str) and bool(text)


def _passes_filters(
    body: Optional[str],
    filter_date: Optional[str],
    filter_party_size: Optional[int],
    structural: bool,
) -> bool:
    if not body:
        return True
    if structural:
        variables = request_variables(body)
        if filter_date and variables.get("date") != filter_date:
            return False
        if filter_party_size and variables.get("partySize") != filter_party_size:
            return False
        return True
    if filter_date and f'"date":"{filter_date}"' not in body:
        return False
    if filter_party_size and f'"partySize":{filter_party_size}' not in body:
        return False
    return True
