"""
MCP stdio server exposing the introspection tools.

Tool results are pretty-printed JSON text. Errors the user can act on (no
dev server, bad tab name) come back as plain text; transport failures while
talking to the dev server are reported as tool errors.
"""

import inspect
import logging
from typing import Any, Callable

import httpx
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from mcp.types import Resource

from sst_introspect.config import IntrospectConfig
from sst_introspect.exceptions import IntrospectError
from sst_introspect.tools import IntrospectTools
from sst_introspect.utils import to_text

logger = logging.getLogger(__name__)

SERVER_NAME = "sst-introspect"


async def respond(call: Callable[[], Any]) -> str:
    """Run a tool call and render its result, or its user-facing error, as text."""
    try:
        result = call()
        if inspect.isawaitable(result):
            result = await result
        return to_text(result)
    except IntrospectError as e:
        return str(e)
    except httpx.HTTPError as e:
        logger.warning(f"Tool call failed: {e}")
        raise ToolError(f"Failed to connect to SST dev server: {e}") from e


class SSTIntrospectServer(FastMCP):
    """FastMCP app that also lists the log tabs present right now as resources."""

    def __init__(self, tools: IntrospectTools):
        super().__init__(SERVER_NAME)
        self.tools = tools

    async def list_resources(self) -> list[Resource]:
        resources = await super().list_resources()
        for info in self.tools.list_log_resources():
            resources.append(
                Resource(
                    uri=info["uri"],
                    name=info["name"],
                    description=info["description"],
                    mimeType=info["mimeType"],
                )
            )
        return resources


def create_server(config: IntrospectConfig) -> SSTIntrospectServer:
    tools = IntrospectTools(config)
    mcp = SSTIntrospectServer(tools)

    @mcp.tool(description="Discover running SST dev servers and available stages.")
    async def sst_discover(directory: str | None = None) -> str:
        """directory: Directory to search (defaults to cwd)"""
        return await respond(lambda: tools.discover(directory))

    @mcp.tool(description="List all available log tabs/files from SST dev.")
    async def sst_list_tabs(stage: str | None = None) -> str:
        """stage: Stage name (optional)"""
        return await respond(lambda: tools.list_tabs(stage))

    @mcp.tool(description="Read the last N lines from a specific SST dev log tab.")
    async def sst_read_logs(tab: str, lines: int = 50, offset: int = 0) -> str:
        """tab: Tab name (e.g., 'sst', 'ui-function', 'pulumi')"""
        return await respond(lambda: tools.read_logs(tab, lines=lines, offset=offset))

    @mcp.tool(description="Get current deployment status and resources from SST dev.")
    async def sst_get_status(stage: str | None = None) -> str:
        """stage: Stage name"""
        return await respond(lambda: tools.get_status(stage))

    @mcp.tool(description="Get recent Lambda function invocations from SST dev.")
    async def sst_get_invocations(timeoutMs: int = 1000) -> str:
        """timeoutMs: Listen time in ms"""
        return await respond(lambda: tools.get_invocations(timeout_ms=timeoutMs))

    @mcp.tool(description="Get recent events from the SST dev event stream.")
    async def sst_get_events(
        timeoutMs: int = 1000, eventType: str | None = None
    ) -> str:
        """timeoutMs: Listen time in ms. eventType: Filter to specific event type"""
        return await respond(
            lambda: tools.get_events(timeout_ms=timeoutMs, event_type=eventType)
        )

    @mcp.resource(
        "sst://logs/{stage}/{name}",
        name="sst-log",
        description="SST dev log tab",
        mime_type="text/plain",
    )
    def sst_log(stage: str, name: str) -> str:
        return tools.read_stage_log(stage, name)

    return mcp


def run(config: IntrospectConfig) -> None:
    mcp = create_server(config)
    logger.info("MCP-SST server started")
    logger.info(f"Working directory: {config.working_dir}")
    mcp.run()
