"""
Example suites: a browser suite against the Playwright site and an API suite
against the JSONPlaceholder mock API.
"""

import re
from typing import Optional

from .config import HarnessConfig
from .expectations import (
    expect_object_subset,
    expect_title,
    expect_truthy,
    expect_visible,
)
from .models import Capability
from .registry import ScenarioRegistry, scenario

NEW_TODO = {
    "title": "Learn Playwright",
    "completed": False,
    "userId": 1
}


def example_tests(base_url: str):
    @scenario("has title", tags=("browser",))
    async def has_title(ctx):
        await ctx.page.navigate(base_url)

        # Title should contain the substring
        await expect_title(ctx.page, re.compile("Playwright"))

    @scenario("get started link", tags=("browser",))
    async def get_started_link(ctx):
        await ctx.page.navigate(base_url)

        await ctx.page.click(ctx.page.find_by_role("link", name="Get started"))

        await expect_visible(ctx.page.find_by_role("heading", name="Installation"))

    return [has_title, get_started_link]


def api_tests(api_url: str):
    todos_url = api_url.rstrip("/") + "/todos"

    @scenario("should create a TODO item", requires=(Capability.REQUEST,), tags=("api",))
    async def create_todo(ctx):
        response = await ctx.request.post(todos_url, data=NEW_TODO)

        expect_truthy(response.ok)
        expect_object_subset(response.json(), NEW_TODO)

    return [create_todo]


def build_registry(config: Optional[HarnessConfig] = None) -> ScenarioRegistry:
    config = config or HarnessConfig()
    registry = ScenarioRegistry()
    registry.register_suite("Example Tests", example_tests(config.base_url))
    registry.register_suite("API Testing Example", api_tests(config.api_url))
    return registry
