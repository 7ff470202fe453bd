"""Chat domain module.

This module answers server-health questions with a function-calling model
that may consult the in-process MCP tool server.

Modules:
- service: ChatService, one tool session per request
- orchestrator: two-round conversation protocol
- ports: model client and tool session interfaces
- schema: MCP tool schema to Gemini declaration translation
- types: provider-agnostic parts, turns and tool types
"""

from healthagent.domain.chat.orchestrator import ChatOrchestrator, extract_text
from healthagent.domain.chat.ports import ModelClient
from healthagent.domain.chat.schema import translate_tool, translate_tools
from healthagent.domain.chat.service import ChatService
from healthagent.domain.chat.types import ModelResponse, ModelTurn, ToolInvocation, ToolResult

__all__ = [
    "ChatService",
    "ChatOrchestrator",
    "extract_text",
    "ModelClient",
    "translate_tool",
    "translate_tools",
    "ModelResponse",
    "ModelTurn",
    "ToolInvocation",
    "ToolResult",
]
