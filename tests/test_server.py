import json
from functools import partial

import pytest
from mcp.types import TextContent, Tool

from scenario_harness.config import HarnessConfig
from scenario_harness.example_suites import NEW_TODO
from scenario_harness.server import HarnessServer, main

from conftest import FakePage, FakeProvider, FakeRequest


class TestHarnessServer:
    """Test suite for the scenario harness MCP server"""

    @pytest.fixture
    def provider(self):
        return FakeProvider(
            request_factory=partial(FakeRequest, status=201, body=json.dumps(NEW_TODO).encode()),
            page_factory=partial(FakePage, title="Other Site")
        )

    @pytest.fixture
    def server(self, provider):
        """Create server instance over the example suites and fake handles"""
        return HarnessServer(config=HarnessConfig(), provider=provider)

    def test_server_initialization(self, server, provider):
        assert server.provider is provider
        assert server.runner.provider is provider
        assert len(server.registry) == 2
        assert server.server.name == "scenario-harness"

    @pytest.mark.asyncio
    async def test_list_tools(self, server):
        tools = await server.list_tools()

        assert all(isinstance(tool, Tool) for tool in tools)
        assert [tool.name for tool in tools] == ["list_suites", "run_suites"]

    @pytest.mark.asyncio
    async def test_list_suites_tool(self, server):
        content = await server.call_tool("list_suites", {})

        assert isinstance(content[0], TextContent)
        data = json.loads(content[0].text)
        assert [suite["name"] for suite in data["suites"]] == ["Example Tests", "API Testing Example"]
        api = data["suites"][1]["scenarios"][0]
        assert api == {"name": "should create a TODO item", "tags": ["api"], "requires": ["request"]}

    @pytest.mark.asyncio
    async def test_run_suites_tool(self, server):
        content = await server.call_tool("run_suites", {"suites": ["API Testing Example"]})

        data = json.loads(content[0].text)
        assert data["success"] is True
        assert data["total"] == 1
        assert data["results"][0]["state"] == "passed"
        assert data["results"][0]["scenario"] == "should create a TODO item"

    @pytest.mark.asyncio
    async def test_run_all_suites_reports_failures(self, server):
        content = await server.call_tool("run_suites", None)

        data = json.loads(content[0].text)
        assert data["success"] is False
        states = {r["scenario"]: r["state"] for r in data["results"]}
        assert states == {
            "has title": "failed",
            "get started link": "passed",
            "should create a TODO item": "passed",
        }

    @pytest.mark.asyncio
    async def test_unknown_tool(self, server):
        content = await server.call_tool("delete_everything", {})

        assert json.loads(content[0].text) == {"error": "Unknown tool: delete_everything"}

    @pytest.mark.asyncio
    async def test_tool_error_is_reported(self, server):
        content = await server.call_tool("run_suites", {"suites": ["Missing"]})

        data = json.loads(content[0].text)
        assert data["tool"] == "run_suites"
        assert "Missing" in data["error"]
        assert data["arguments"] == {"suites": ["Missing"]}

    @pytest.mark.asyncio
    async def test_cleanup_closes_provider(self, server, provider):
        await server.cleanup()

        assert provider.closed


class TestMain:
    def test_invalid_configuration_exits(self, monkeypatch):
        monkeypatch.setenv("HARNESS_WORKERS", "0")

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 2
