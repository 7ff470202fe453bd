"""Ports for chat orchestration dependencies."""

from __future__ import annotations

from typing import AsyncContextManager, Protocol

from google.genai import types

from healthagent.domain.chat.types import (
    ModelResponse,
    ModelTurn,
    ToolDescriptor,
    ToolInvocation,
    ToolResult,
)


class ModelClient(Protocol):
    """Function-calling model interface."""

    async def generate(
        self,
        contents: str | list[ModelTurn],
        tools: list[types.FunctionDeclaration] | None = None,
    ) -> ModelResponse:
        """Run one model round, optionally offering function declarations."""


class ToolSessionPort(Protocol):
    """An open connection to the tool server."""

    async def list_tools(self) -> list[ToolDescriptor]:
        """Return the server's current tool catalog."""

    async def call_tool(self, invocation: ToolInvocation) -> ToolResult:
        """Execute one tool call."""


class ToolSessionFactoryPort(Protocol):
    """Opens a fresh tool session scoped to one request."""

    def session(self) -> AsyncContextManager[ToolSessionPort]:
        """Open a session that is closed when the block exits."""
