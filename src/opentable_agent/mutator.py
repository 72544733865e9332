"""Rewriting of captured persisted-query bodies."""

from __future__ import annotations

import json
from typing import Any, Mapping

import structlog

from .config import Settings
from .errors import MalformedCapture, MalformedResponse
from .models import CapturedRequest

LOGGER = structlog.get_logger(__name__)


def build_variables(date_iso: str, party_size: int, settings: Settings) -> dict[str, Any]:
    """Variables that retarget the captured query at a new date and party size."""
    return {
        "date": date_iso,
        "partySize": party_size,
        **settings.window_variables,
    }


def mutate(captured: CapturedRequest, new_variables: Mapping[str, Any]) -> str:
    """
    Merge ``new_variables`` into the captured body and re-serialise it.

    ``operationName`` and ``extensions.persistedQuery`` pass through untouched;
    the server accepts the body only while the persisted query hash matches.
    Output is compact, the same form the front end sends.
    """
    try:
        body = json.loads(captured.body)
    except json.JSONDecodeError as exc:
        raise MalformedCapture("Invalid captured request body") from exc
    if not isinstance(body, dict):
        raise MalformedCapture("Captured request body is not a JSON object")

    variables = body.get("variables")
    if not isinstance(variables, dict):
        variables = {}
    body["variables"] = {**variables, **new_variables}

    LOGGER.debug(
        "mutate.complete",
        operation=body.get("operationName"),
        overridden=sorted(new_variables),
    )
    return json.dumps(body, separators=(",", ":"))


def request_variables(body: str | None) -> dict[str, Any]:
    """Best-effort extraction of ``variables`` from a request body."""
    if not body:
        return {}
    try:
        parsed = json.loads(body)
    except json.JSONDecodeError:
        return {}
    if not isinstance(parsed, dict) or not isinstance(parsed.get("variables"), dict):
        return {}
    return parsed["variables"]


def decode_response(text: str) -> dict[str, Any]:
    """Parse the replayed availability response."""
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedResponse("Invalid API response") from exc
    if not isinstance(parsed, dict):
        raise MalformedResponse("API response is not a JSON object")
    return parsed
