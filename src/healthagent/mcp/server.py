"""In-process MCP server built with FastMCP.

Each chat request gets its own server instance from ``create_mcp_server``;
the server is never exposed over a network transport. To add a tool,
implement it under ``healthagent.mcp.tools`` and register it here. The
orchestrator discovers tools through ``tools/list`` and needs no change.
"""

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from healthagent.config import get_settings
from healthagent.mcp.tools.status import GET_SERVER_STATUS_DESCRIPTION, get_server_status

READ_ONLY_LOCAL = ToolAnnotations(
    readOnlyHint=True,
    destructiveHint=False,
    idempotentHint=True,
    openWorldHint=False,
)


def create_mcp_server(name: str | None = None) -> FastMCP:
    """Create a FastMCP server with the full tool catalog registered."""
    server = FastMCP(name or get_settings().mcp_server_name)

    server.tool(
        name="get_server_status",
        title="Server status",
        description=GET_SERVER_STATUS_DESCRIPTION,
        annotations=READ_ONLY_LOCAL,
    )(get_server_status)

    return server
