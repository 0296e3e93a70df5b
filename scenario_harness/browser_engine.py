import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from playwright.async_api import (
    APIRequestContext,
    Browser,
    Error as PlaywrightError,
    Locator,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from .config import HarnessConfig
from .errors import CapabilityUnavailableError
from .models import Capability

logger = logging.getLogger(__name__)


def _ms(seconds: float) -> float:
    return seconds * 1000


class Element:
    """A lazily resolved element on a page"""

    def __init__(self, locator: Locator, description: str, default_timeout: float):
        self._locator = locator
        self.description = description
        self.default_timeout = default_timeout

    async def click(self, timeout: Optional[float] = None):
        await self._locator.click(timeout=_ms(timeout if timeout is not None else self.default_timeout))

    async def is_visible(self) -> bool:
        """Check visibility once, without waiting"""
        return await self._locator.is_visible()

    async def wait_until_visible(self, timeout: Optional[float] = None) -> bool:
        """Wait for the element to become visible; False when time runs out"""
        try:
            await self._locator.wait_for(
                state="visible",
                timeout=_ms(timeout if timeout is not None else self.default_timeout)
            )
            return True
        except PlaywrightTimeoutError:
            return False

    def __repr__(self):
        return f"<Element {self.description}>"


class PageHandle:
    """Page automation capability for one scenario"""

    def __init__(self, page: Page, config: HarnessConfig):
        self._page = page
        self._config = config

    @property
    def url(self) -> str:
        return self._page.url

    async def navigate(self, url: str) -> Optional[int]:
        response = await self._page.goto(url, wait_until=self._config.wait_until)
        return response.status if response else None

    async def title(self) -> str:
        return await self._page.title()

    def find_by_role(self, role: str, name: Optional[str] = None, exact: bool = False) -> Element:
        locator = self._page.get_by_role(role, name=name, exact=exact)
        description = f"role={role}" + (f" name={name!r}" if name else "")
        return Element(locator, description, self._config.expect_timeout)

    async def click(self, element: Element):
        await element.click()

    async def is_visible(self, element: Element) -> bool:
        return await element.is_visible()


class HttpResponse:
    """Fully read HTTP response, usable after its request context is gone"""

    def __init__(self, status: int, headers: Dict[str, str], body: bytes, url: str = ""):
        self.status = status
        self.headers = headers
        self.body = body
        self.url = url

    @property
    def ok(self) -> bool:
        return 200 <= self.status <= 299

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.body)

    def __repr__(self):
        return f"<HttpResponse {self.status} {self.url}>"


class RequestHandle:
    """HTTP client capability for one scenario"""

    def __init__(self, context: APIRequestContext, config: HarnessConfig):
        self._context = context
        self._config = config

    async def request(
            self,
            method: str,
            url: str,
            data: Any = None,
            headers: Optional[Dict[str, str]] = None
    ) -> HttpResponse:
        response = await self._context.fetch(
            url,
            method=method.upper(),
            data=data,
            headers=headers,
            timeout=_ms(self._config.scenario_timeout)
        )
        body = await response.body()
        logger.debug("%s %s -> %s", method.upper(), url, response.status)
        return HttpResponse(response.status, response.headers, body, response.url)

    async def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> HttpResponse:
        return await self.request("GET", url, headers=headers)

    async def post(self, url: str, data: Any = None, headers: Optional[Dict[str, str]] = None) -> HttpResponse:
        return await self.request("POST", url, data=data, headers=headers)


class BrowserEngine:
    """Owns the Playwright driver and browser; hands out isolated sessions"""

    def __init__(self, config: Optional[HarnessConfig] = None):
        self.config = config or HarnessConfig()
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self._lock = asyncio.Lock()

    async def initialize(self):
        """Start the Playwright driver"""
        async with self._lock:
            await self._start_driver()

    async def _start_driver(self) -> Playwright:
        if self.playwright is None:
            self.playwright = await async_playwright().start()
        return self.playwright

    async def _ensure_browser(self) -> Browser:
        async with self._lock:
            if self.browser is None:
                playwright = await self._start_driver()
                browser_type = getattr(playwright, self.config.browser)
                self.browser = await browser_type.launch(
                    headless=self.config.headless,
                    args=self.config.launch_args
                )
                logger.info("Launched %s (headless=%s)", self.config.browser, self.config.headless)
            return self.browser

    @asynccontextmanager
    async def page_session(self) -> AsyncIterator[PageHandle]:
        """Fresh browser context and page, closed on exit"""
        try:
            browser = await self._ensure_browser()
            context = await browser.new_context()
        except (PlaywrightError, OSError) as e:
            raise CapabilityUnavailableError(Capability.PAGE.value, str(e)) from e

        try:
            page = await context.new_page()
            page.set_default_timeout(_ms(self.config.expect_timeout))
            page.on("console", lambda msg: logger.debug("Console: %s", msg.text))
            page.on("pageerror", lambda err: logger.debug("Page error: %s", err))
            yield PageHandle(page, self.config)
        finally:
            await context.close()

    @asynccontextmanager
    async def request_session(self) -> AsyncIterator[RequestHandle]:
        """Fresh API request context, disposed on exit"""
        try:
            async with self._lock:
                playwright = await self._start_driver()
            context = await playwright.request.new_context()
        except (PlaywrightError, OSError) as e:
            raise CapabilityUnavailableError(Capability.REQUEST.value, str(e)) from e

        try:
            yield RequestHandle(context, self.config)
        finally:
            await context.dispose()

    async def cleanup(self):
        """Clean up browser resources"""
        if self.browser:
            await self.browser.close()
            self.browser = None
        if self.playwright:
            await self.playwright.stop()
            self.playwright = None
