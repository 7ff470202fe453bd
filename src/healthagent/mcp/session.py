"""Per-request MCP sessions over linked in-memory streams.

A ``ToolSession`` pairs one MCP client with one freshly built MCP server.
Sessions are opened at the start of a chat request and closed on every exit
path; nothing is cached between requests.
"""

from collections.abc import AsyncIterator, Callable
from contextlib import AsyncExitStack, asynccontextmanager

from mcp import ClientSession
from mcp import types as mcp_types
from mcp.server.fastmcp import FastMCP
from mcp.shared.memory import create_connected_server_and_client_session

from healthagent.domain.chat.types import ContentItem, ToolDescriptor, ToolInvocation, ToolResult
from healthagent.mcp.server import create_mcp_server
from healthagent.shared.exceptions import SessionClosedError
from healthagent.shared.logging import get_logger

logger = get_logger(__name__)

ServerFactory = Callable[[], FastMCP]


class ToolSession:
    """A connected MCP client/server pair scoped to one request.

    Satisfies the chat domain's ``ToolSessionPort``.
    """

    def __init__(self, client: ClientSession, exit_stack: AsyncExitStack, server_name: str):
        self._client = client
        self._exit_stack = exit_stack
        self.server_name = server_name
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _require_open(self) -> ClientSession:
        if self._closed:
            raise SessionClosedError()
        return self._client

    async def list_tools(self) -> list[ToolDescriptor]:
        """Return the server's current tool catalog."""
        client = self._require_open()
        result = await client.list_tools()
        return [
            ToolDescriptor(
                name=tool.name,
                description=tool.description or "",
                input_schema=dict(tool.inputSchema or {}),
            )
            for tool in result.tools
        ]

    async def call_tool(self, invocation: ToolInvocation) -> ToolResult:
        """Forward one tool call to the server and return its content."""
        client = self._require_open()
        result = await client.call_tool(invocation.name, invocation.arguments or {})
        return ToolResult(
            content=[
                ContentItem(type=item.type, text=getattr(item, "text", None))
                for item in result.content
            ],
            is_error=bool(result.isError),
        )

    async def close(self) -> None:
        """Tear down the client and the server.

        Safe to call more than once. Teardown failures are logged and never
        raised, so they cannot replace the request's own result or error.
        """
        if self._closed:
            return
        self._closed = True
        try:
            await self._exit_stack.aclose()
        except Exception:
            logger.warning("tool_session_close_failed", server=self.server_name, exc_info=True)
        else:
            logger.debug("tool_session_closed", server=self.server_name)


class ToolSessionFactory:
    """Opens fresh in-process tool sessions.

    Inject a different ``server_factory`` to serve another tool catalog, or
    replace the factory entirely with a test double.
    """

    def __init__(
        self,
        server_factory: ServerFactory = create_mcp_server,
        client_name: str = "inner-mcp-agent-host",
        client_version: str = "1.0.0",
    ):
        self.server_factory = server_factory
        self.client_info = mcp_types.Implementation(name=client_name, version=client_version)

    async def open(self) -> ToolSession:
        """Build a server, connect a client to it and initialize the session."""
        exit_stack = AsyncExitStack()
        try:
            server = self.server_factory()
            client = await exit_stack.enter_async_context(
                create_connected_server_and_client_session(
                    server,
                    client_info=self.client_info,
                )
            )
        except BaseException:
            await exit_stack.aclose()
            raise

        logger.debug("tool_session_opened", server=server.name)
        return ToolSession(client, exit_stack, server_name=server.name)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[ToolSession]:
        """Open a session and close it on every exit path."""
        tool_session = await self.open()
        try:
            yield tool_session
        finally:
            await tool_session.close()
