import asyncio
import json
import logging
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from .client import PlankaClient
from .config import DEFAULT_TIMEOUT, build_parser, load_config
from .logging_config import configure_logging
from .tools import TOOLS, ToolExecutor

logger = logging.getLogger(__name__)


class PlankaMCPServer:
    def __init__(self, api_url: str, token: str, timeout: float = DEFAULT_TIMEOUT):
        self.client = PlankaClient(base_url=api_url, token=token, timeout=timeout)
        self.executor = ToolExecutor(self.client)
        self.server = Server("planka-mcp")
        self._setup_handlers()

    def _setup_handlers(self):
        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            return [Tool(name=t["name"], description=t["description"], inputSchema=t["input_schema"]) for t in TOOLS]

        @self.server.call_tool()
        async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
            try:
                result = self.executor.execute(name, arguments)
                return [TextContent(type="text", text=json.dumps(result, indent=2))]
            except Exception as e:
                logger.warning(f"Tool {name} failed: {e}")
                return [TextContent(type="text", text=f"Error: {str(e)}")]

    async def run(self):
        try:
            async with stdio_server() as (read_stream, write_stream):
                await self.server.run(read_stream, write_stream, self.server.create_initialization_options())
        finally:
            self.client.close()


def main():
    parser = build_parser("Planka MCP Server (stdio)")
    args = parser.parse_args()
    config = load_config(parser, args)

    configure_logging(verbose=args.verbose)
    server = PlankaMCPServer(config.api_url, config.token, timeout=config.timeout)
    asyncio.run(server.run())


if __name__ == "__main__":
    main()
