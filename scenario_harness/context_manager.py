import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncIterator, Iterable, Optional

from .browser_engine import BrowserEngine, PageHandle, RequestHandle
from .config import HarnessConfig
from .errors import CapabilityUnavailableError
from .models import Capability

logger = logging.getLogger(__name__)


class ScenarioContext:
    """Capability handles available to a single scenario body"""

    def __init__(
            self,
            suite: str,
            scenario: str,
            page: Optional[PageHandle] = None,
            request: Optional[RequestHandle] = None
    ):
        self.suite = suite
        self.scenario = scenario
        self._page = page
        self._request = request

    @property
    def page(self) -> PageHandle:
        if self._page is None:
            raise CapabilityUnavailableError(Capability.PAGE.value, "not requested by scenario")
        return self._page

    @property
    def request(self) -> RequestHandle:
        if self._request is None:
            raise CapabilityUnavailableError(Capability.REQUEST.value, "not requested by scenario")
        return self._request

    @property
    def capabilities(self) -> frozenset:
        provided = set()
        if self._page is not None:
            provided.add(Capability.PAGE)
        if self._request is not None:
            provided.add(Capability.REQUEST)
        return frozenset(provided)


class ContextProvider:
    """Builds a fresh ScenarioContext per scenario and releases it afterwards"""

    def __init__(self, engine: Optional[BrowserEngine] = None, config: Optional[HarnessConfig] = None):
        self.engine = engine or BrowserEngine(config)

    async def start(self):
        await self.engine.initialize()

    async def close(self):
        await self.engine.cleanup()

    async def __aenter__(self) -> "ContextProvider":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    @asynccontextmanager
    async def create_context(
            self,
            requirements: Iterable[Capability],
            *,
            suite: str = "",
            scenario: str = ""
    ) -> AsyncIterator[ScenarioContext]:
        requirements = frozenset(Capability(req) for req in requirements)

        async with AsyncExitStack() as stack:
            page = None
            request = None
            if Capability.PAGE in requirements:
                page = await stack.enter_async_context(self.engine.page_session())
            if Capability.REQUEST in requirements:
                request = await stack.enter_async_context(self.engine.request_session())

            logger.debug(
                "Context for %s / %s: %s",
                suite, scenario, sorted(req.value for req in requirements)
            )
            yield ScenarioContext(suite, scenario, page=page, request=request)
