"""Server health chat agent backed by an in-process MCP tool server."""

__version__ = "1.0.0"
