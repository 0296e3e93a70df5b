import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool
from pydantic import ValidationError

from .config import HarnessConfig
from .context_manager import ContextProvider
from .example_suites import build_registry
from .registry import ScenarioRegistry
from .runner import ScenarioRunner

logger = logging.getLogger(__name__)


class HarnessServer:
    """MCP server exposing the scenario registry and runner as tools"""

    def __init__(
            self,
            registry: Optional[ScenarioRegistry] = None,
            config: Optional[HarnessConfig] = None,
            provider: Optional[ContextProvider] = None
    ):
        self.config = config or HarnessConfig()
        self.registry = registry if registry is not None else build_registry(self.config)
        self.provider = provider or ContextProvider(config=self.config)
        self.runner = ScenarioRunner(self.provider, self.config)
        self.server = Server("scenario-harness")
        self.setup_tools()

    def setup_tools(self):
        """Register available tools with MCP protocol"""
        self.server.list_tools()(self.list_tools)
        self.server.call_tool()(self.call_tool)

    async def list_tools(self) -> List[Tool]:
        return [
            Tool(
                name="list_suites",
                description="List registered suites and their scenarios",
                inputSchema={"type": "object", "properties": {}}
            ),
            Tool(
                name="run_suites",
                description="Run registered scenarios and return their results",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "suites": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "Suite names to run; all suites when omitted"
                        }
                    }
                }
            )
        ]

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> List[TextContent]:
        arguments = arguments or {}
        try:
            if name == "list_suites":
                result = self.describe_suites()

            elif name == "run_suites":
                result = await self.run_suites(arguments.get("suites"))

            else:
                result = {"error": f"Unknown tool: {name}"}

            return [TextContent(type="text", text=json.dumps(result, indent=2))]

        except Exception as e:
            logger.exception("Tool %s failed", name)
            return [TextContent(
                type="text",
                text=json.dumps({
                    "error": str(e),
                    "tool": name,
                    "arguments": arguments
                }, indent=2)
            )]

    def describe_suites(self) -> Dict[str, Any]:
        return {
            "suites": [
                {
                    "name": suite.name,
                    "scenarios": [
                        {
                            "name": scenario.name,
                            "tags": list(scenario.tags),
                            "requires": sorted(cap.value for cap in scenario.requires)
                        }
                        for scenario in suite.scenarios
                    ]
                }
                for suite in self.registry.list_suites()
            ]
        }

    async def run_suites(self, suite_names: Optional[List[str]] = None) -> Dict[str, Any]:
        report = await self.runner.run(self.registry, suite_names)
        return {
            **report.summary(),
            "results": [result.model_dump(mode="json") for result in report.results]
        }

    async def cleanup(self):
        await self.provider.close()

    async def run(self):
        """Start the MCP server"""
        try:
            async with stdio_server() as (read_stream, write_stream):
                await self.server.run(
                    read_stream,
                    write_stream,
                    self.server.create_initialization_options()
                )
        finally:
            await self.cleanup()


def main():
    """Entry point for the MCP server"""
    import sys

    try:
        config = HarnessConfig.from_env()
    except ValidationError as e:
        logging.basicConfig(format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        logging.error(f"Invalid configuration: {e}")
        sys.exit(2)

    logging.basicConfig(
        level=config.log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    server = HarnessServer(config=config)

    try:
        asyncio.run(server.run())
    except KeyboardInterrupt:
        logging.info("Server stopped by user")
    except Exception as e:
        logging.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
