"""Exceptions raised by the availability pipeline."""

from __future__ import annotations


class AvailabilityError(RuntimeError):
    """Base class for failures that end an availability lookup."""


class CaptureTimeout(AvailabilityError):
    """No RestaurantsAvailability request was observed before the deadline."""

    def __init__(self, timeout_seconds: float):
        super().__init__(
            f"Timeout waiting for RestaurantsAvailability request after {timeout_seconds:g}s"
        )
        self.timeout_seconds = timeout_seconds


class MalformedCapture(AvailabilityError):
    """Captured request body (or recorded HAR file) is not usable JSON."""


class MalformedResponse(AvailabilityError):
    """Replayed response body is not valid JSON."""


class ReplayHttpError(AvailabilityError):
    """The availability endpoint answered the replay with a non-success status."""

    def __init__(self, status: int, body: str):
        super().__init__(f"API request failed with {status}: {body}")
        self.status = status
        self.body = body


class NoMatchingEntries(AvailabilityError):
    """Offline mode found no RestaurantsAvailability entry in the HAR log."""
