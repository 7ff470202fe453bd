"""MCP tool server and per-request sessions.

Modules:
- server: FastMCP server factory with the tool catalog
- session: in-process client/server sessions scoped to one request
- tools: tool implementations
"""

from healthagent.mcp.server import create_mcp_server
from healthagent.mcp.session import ToolSession, ToolSessionFactory

__all__ = [
    "create_mcp_server",
    "ToolSession",
    "ToolSessionFactory",
]
