"""Shared fakes standing in for Playwright-backed capability handles"""

from contextlib import asynccontextmanager
from typing import Dict, List, Optional, Tuple

import pytest

from scenario_harness.browser_engine import HttpResponse
from scenario_harness.context_manager import ScenarioContext
from scenario_harness.errors import CapabilityUnavailableError
from scenario_harness.models import Capability

PLAYWRIGHT_TITLE = "Playwright: Fast and reliable end-to-end testing"


class FakeElement:
    def __init__(self, page: "FakePage", role: str, name: Optional[str]):
        self.page = page
        self.role = role
        self.name = name
        self.description = f"role={role} name={name!r}"

    async def click(self, timeout=None):
        self.page.clicked.append((self.role, self.name))
        target = self.page.links.get(self.name)
        if target:
            self.page.visible.update(target)

    async def is_visible(self) -> bool:
        return (self.role, self.name) in self.page.visible

    async def wait_until_visible(self, timeout=None) -> bool:
        return await self.is_visible()


class FakePage:
    """A page fixture; clicking a link in `links` reveals its elements"""

    def __init__(
            self,
            title: str = PLAYWRIGHT_TITLE,
            visible: Tuple = (("link", "Get started"),),
            links: Optional[Dict[str, set]] = None
    ):
        self._title = title
        self.visible = set(visible)
        self.links = links if links is not None else {"Get started": {("heading", "Installation")}}
        self.visited: List[str] = []
        self.clicked: List[Tuple] = []

    @property
    def url(self) -> str:
        return self.visited[-1] if self.visited else "about:blank"

    async def navigate(self, url: str):
        self.visited.append(url)
        return 200

    async def title(self) -> str:
        return self._title

    def find_by_role(self, role, name=None, exact=False):
        return FakeElement(self, role, name)

    async def click(self, element):
        await element.click()

    async def is_visible(self, element) -> bool:
        return await element.is_visible()


class FakeRequest:
    """Answers every request with a canned status and body"""

    def __init__(self, status: int = 201, body: bytes = b"{}"):
        self.status = status
        self.body = body
        self.calls: List[Tuple] = []

    async def request(self, method, url, data=None, headers=None):
        self.calls.append((method, url, data))
        return HttpResponse(self.status, {"content-type": "application/json"}, self.body, url)

    async def get(self, url, headers=None):
        return await self.request("GET", url, headers=headers)

    async def post(self, url, data=None, headers=None):
        return await self.request("POST", url, data=data, headers=headers)


class FakeProvider:
    """Context provider building fresh fakes per scenario and tracking release"""

    def __init__(self, page_factory=FakePage, request_factory=FakeRequest, unavailable=()):
        self.page_factory = page_factory
        self.request_factory = request_factory
        self.unavailable = set(unavailable)
        self.opened: List[ScenarioContext] = []
        self.released: List[ScenarioContext] = []
        self.closed = False

    async def start(self):
        pass

    async def close(self):
        self.closed = True

    @asynccontextmanager
    async def create_context(self, requirements, *, suite="", scenario=""):
        requirements = frozenset(Capability(req) for req in requirements)
        for capability in requirements & self.unavailable:
            raise CapabilityUnavailableError(capability.value, "fixture offline")

        context = ScenarioContext(
            suite,
            scenario,
            page=self.page_factory() if Capability.PAGE in requirements else None,
            request=self.request_factory() if Capability.REQUEST in requirements else None
        )
        self.opened.append(context)
        try:
            yield context
        finally:
            self.released.append(context)


@pytest.fixture
def provider():
    return FakeProvider()
