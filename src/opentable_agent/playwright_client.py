"""Playwright automation for capturing and replaying OpenTable availability calls."""

from __future__ import annotations

import asyncio
from contextlib import suppress
from typing import Callable, Mapping, Optional

import structlog
from playwright.async_api import Browser, BrowserContext, Page, Request, async_playwright
from playwright.async_api import Error as PlaywrightError

from .config import Settings
from .errors import CaptureTimeout, ReplayHttpError
from .models import CapturedRequest

LOGGER = structlog.get_logger(__name__)

OPERATION_NAME = "RestaurantsAvailability"

CAPTURED_HEADERS = frozenset(
    {
        "content-type",
        "x-csrf-token",
        "origin",
        "referer",
        "ot-page-group",
        "ot-page-type",
    }
)

REPLAY_OVERRIDDEN_HEADERS = frozenset({"content-type", "origin", "referer"})


def is_availability_request(method: str, url: str) -> bool:
    """True for POSTs aimed at the availability GraphQL operation."""
    return method.upper() == "POST" and OPERATION_NAME in url


def whitelist_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Keep only the headers the endpoint needs to accept a replay."""
    return {name: value for name, value in headers.items() if name.lower() in CAPTURED_HEADERS}


class AvailabilityBrowser:
    """Helper that manages a Playwright session used for capture and replay."""

    def __init__(self, settings: Settings, *, playwright_factory: Callable = async_playwright):
        self._settings = settings
        self._playwright_factory = playwright_factory
        self._playwright = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    async def __aenter__(self) -> "AvailabilityBrowser":
        self._playwright = await self._playwright_factory().start()
        try:
            self._browser = await self._launch_browser()
            self._context = await self._browser.new_context(user_agent=self._settings.user_agent)
            self._page = await self._context.new_page()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Release the context, browser and Playwright driver."""
        if self._context:
            await self._context.close()
            self._context = None
        if self._browser:
            await self._browser.close()
            self._browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None
        self._page = None
        LOGGER.debug("browser.closed")

    async def _launch_browser(self) -> Browser:
        """Launch Chromium, falling back to an installed channel when the bundled build is missing."""
        chromium = self._playwright.chromium
        headless = self._settings.headless
        LOGGER.info("browser.launch", headless=headless)
        try:
            return await chromium.launch(headless=headless)
        except PlaywrightError as exc:
            if "Executable doesn't exist" not in str(exc):
                raise
            channel = self._settings.browser_channel
            LOGGER.warning("browser.bundled_missing", channel=channel)
            try:
                return await chromium.launch(headless=headless, channel=channel)
            except PlaywrightError:
                raise exc

    async def capture(self, url: str) -> CapturedRequest:
        """
        Load ``url`` and return the first availability request the page sends.

        The request listener and the capture deadline race each other; the
        navigation is best-effort and its failures are only logged.
        """
        page = self._require_page()
        loop = asyncio.get_running_loop()
        result: asyncio.Future[CapturedRequest] = loop.create_future()

        def on_request(request: Request) -> None:
            if result.done() or not is_availability_request(request.method, request.url):
                return
            body = request.post_data
            if not body:
                return
            result.set_result(
                CapturedRequest(body=body, headers=whitelist_headers(request.headers))
            )

        LOGGER.info("capture.start", url=url, timeout_seconds=self._settings.capture_timeout_seconds)
        page.on("request", on_request)
        navigation = asyncio.create_task(self._navigate(page, url))
        try:
            captured = await asyncio.wait_for(result, timeout=self._settings.capture_timeout_seconds)
        except asyncio.TimeoutError as exc:
            LOGGER.error("capture.timeout", url=url)
            raise CaptureTimeout(self._settings.capture_timeout_seconds) from exc
        finally:
            page.remove_listener("request", on_request)
            if not navigation.done():
                navigation.cancel()
            with suppress(asyncio.CancelledError):
                await navigation

        LOGGER.info("capture.matched", headers=sorted(captured.headers))
        return captured

    async def _navigate(self, page: Page, url: str) -> None:
        """Navigate until the network goes quiet; some pages never do."""
        try:
            await page.goto(
                url,
                wait_until="networkidle",
                timeout=self._settings.navigation_timeout_ms,
            )
        except PlaywrightError as exc:
            LOGGER.warning("capture.navigation_incomplete", url=url, error=str(exc))

    async def replay(self, body: str, headers: Mapping[str, str], referer: str) -> str:
        """POST ``body`` to the availability endpoint from the captured context."""
        page = self._require_page()
        request_headers = {
            name: value
            for name, value in headers.items()
            if name.lower() not in REPLAY_OVERRIDDEN_HEADERS
        }
        request_headers.update(
            {
                "content-type": "application/json",
                "origin": self._settings.origin,
                "referer": referer,
            }
        )

        url = str(self._settings.gql_url)
        LOGGER.info("replay.start", url=url)
        response = await page.request.post(url, data=body, headers=request_headers)
        text = await response.text()
        if not response.ok:
            LOGGER.error("replay.failed", status_code=response.status, body=text[:500])
            raise ReplayHttpError(response.status, text)

        LOGGER.info("replay.success", status_code=response.status, length=len(text))
        return text

    def _require_page(self) -> Page:
        if not self._page:
            raise RuntimeError("Playwright page has not been initialised")
        return self._page
