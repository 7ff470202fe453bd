"""Shared chat domain types.

Keep these types small and provider-agnostic so the orchestrator, the MCP
session and the Gemini client can exchange them without circular imports.
Model output is a tagged union of parts; reasoning parts are a separate
variant so history construction can drop them by type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal


@dataclass(frozen=True)
class TextPart:
    """Plain text authored by the user or the model."""

    text: str
    thought_signature: bytes | None = None


@dataclass(frozen=True)
class ReasoningPart:
    """Model reasoning trace. Never sent back to the model."""

    text: str = ""
    thought_signature: bytes | None = None


@dataclass(frozen=True)
class FunctionCallPart:
    """A function the model asks us to invoke."""

    name: str
    args: dict[str, Any] = field(default_factory=dict)
    thought_signature: bytes | None = None


@dataclass(frozen=True)
class FunctionResponsePart:
    """The grounded result of a function call, fed back to the model."""

    name: str
    response: dict[str, Any] = field(default_factory=dict)


Part = TextPart | ReasoningPart | FunctionCallPart | FunctionResponsePart


@dataclass(frozen=True)
class ModelTurn:
    """One turn of the conversation history."""

    role: Literal["user", "model"]
    parts: list[Part]


@dataclass
class ModelResponse:
    """Normalised output of one model round."""

    text: str | None = None
    parts: list[Part] = field(default_factory=list)

    @property
    def function_calls(self) -> list[FunctionCallPart]:
        return [part for part in self.parts if isinstance(part, FunctionCallPart)]


@dataclass(frozen=True)
class ToolDescriptor:
    """A tool as advertised by the MCP server."""

    name: str
    description: str = ""
    input_schema: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ToolInvocation:
    """A single tool call forwarded to the MCP server."""

    name: str
    arguments: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ContentItem:
    """One content item of a tool result."""

    type: str
    text: str | None = None


@dataclass
class ToolResult:
    """Result of executing a tool through the MCP session."""

    content: list[ContentItem] = field(default_factory=list)
    is_error: bool = False

    def text(self) -> str:
        """Join the text items, dropping every other content type."""
        return "\n".join(item.text or "" for item in self.content if item.type == "text")
