"""Pytest fixtures and Playwright stand-ins for the availability agent tests."""

import asyncio
import json

import pytest

from opentable_agent.config import Settings

GQL_URL = "https://www.opentable.com/dapi/fe/gql?optype=query&opname=RestaurantsAvailability"
PERSISTED_QUERY = {
    "version": 1,
    "sha256Hash": "e6b87021ed6e865a7778aa39d35d09864c1be29c683c707602dd3de43c854d86",
}


def make_request_body(**variables):
    """Serialise a RestaurantsAvailability body the way the site's front end does."""
    base = {
        "restaurantIds": [1234],
        "date": "2026-02-26",
        "time": "19:00",
        "partySize": 2,
        "databaseRegion": "NA",
    }
    base.update(variables)
    return json.dumps(
        {
            "operationName": "RestaurantsAvailability",
            "variables": base,
            "extensions": {"persistedQuery": PERSISTED_QUERY},
        },
        separators=(",", ":"),
    )


def make_response(days):
    return {"data": {"availability": [{"restaurantId": 1234, "availabilityDays": days}]}}


def make_har_entry(body, response_text, *, method="POST", url=GQL_URL):
    request = {"method": method, "url": url}
    if body is not None:
        request["postData"] = {"mimeType": "application/json", "text": body}
    return {"request": request, "response": {"status": 200, "content": {"text": response_text}}}


def make_har(*entries):
    return {"log": {"version": "1.2", "entries": list(entries)}}


class FakeRequest:
    def __init__(self, method, url, post_data=None, headers=None):
        self.method = method
        self.url = url
        self.post_data = post_data
        self.headers = headers or {}


class FakeAPIResponse:
    def __init__(self, status=200, body="{}"):
        self.status = status
        self.ok = 200 <= status < 300
        self._body = body

    async def text(self):
        return self._body


class FakeAPIRequestContext:
    def __init__(self, response):
        self.response = response
        self.calls = []

    async def post(self, url, data=None, headers=None):
        self.calls.append({"url": url, "data": data, "headers": headers})
        return self.response


class FakePage:
    """Page that fires scripted requests at its listeners during ``goto``."""

    def __init__(self, requests=(), *, goto_error=None, hang=False, response=None):
        self.requests_to_fire = list(requests)
        self.goto_error = goto_error
        self.hang = hang
        self.listeners = []
        self.goto_calls = []
        self.navigation_cancelled = False
        self.request = FakeAPIRequestContext(response or FakeAPIResponse())

    def on(self, event, handler):
        assert event == "request"
        self.listeners.append(handler)

    def remove_listener(self, event, handler):
        self.listeners.remove(handler)

    async def goto(self, url, wait_until=None, timeout=None):
        self.goto_calls.append({"url": url, "wait_until": wait_until, "timeout": timeout})
        for request in self.requests_to_fire:
            for listener in list(self.listeners):
                listener(request)
        if self.goto_error is not None:
            raise self.goto_error
        if self.hang:
            try:
                await asyncio.sleep(3600)
            except asyncio.CancelledError:
                self.navigation_cancelled = True
                raise


class FakeContext:
    def __init__(self, page):
        self.page = page
        self.closed = False

    async def new_page(self):
        return self.page

    async def close(self):
        self.closed = True


class FakeBrowser:
    def __init__(self, page):
        self.context = FakeContext(page)
        self.context_kwargs = None
        self.closed = False

    async def new_context(self, **kwargs):
        self.context_kwargs = kwargs
        return self.context

    async def close(self):
        self.closed = True


class FakeChromium:
    def __init__(self, browser, launch_errors=()):
        self.browser = browser
        self.launch_errors = list(launch_errors)
        self.launch_calls = []

    async def launch(self, **kwargs):
        self.launch_calls.append(kwargs)
        if self.launch_errors:
            raise self.launch_errors.pop(0)
        return self.browser


class FakePlaywright:
    def __init__(self, chromium):
        self.chromium = chromium
        self.stopped = False

    async def stop(self):
        self.stopped = True


class FakePlaywrightManager:
    def __init__(self, page, launch_errors=()):
        self.page = page
        self.browser = FakeBrowser(page)
        self.chromium = FakeChromium(self.browser, launch_errors)
        self.playwright = FakePlaywright(self.chromium)

    def __call__(self):
        return self

    async def start(self):
        return self.playwright


@pytest.fixture
def settings():
    return Settings(_env_file=None, capture_timeout_seconds=0.2, navigation_timeout_seconds=1)


@pytest.fixture
def availability_response():
    """Response with a next-day entry first and the requested day second."""
    return make_response(
        [
            {
                "dayOffset": 1,
                "slots": [{"isAvailable": True, "timeOffsetMinutes": -60, "type": "Standard"}],
            },
            {
                "dayOffset": 0,
                "slots": [
                    {"isAvailable": True, "timeOffsetMinutes": 0, "type": "Standard"},
                    {"isAvailable": False, "timeOffsetMinutes": 30},
                ],
            },
        ]
    )
