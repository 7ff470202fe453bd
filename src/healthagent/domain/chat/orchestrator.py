"""Two-round function-calling orchestration.

Round 1 sends the user's message with the translated tool catalog. If the
model answers directly, that answer is the reply. If it requests a tool, the
first requested call is executed through the MCP session and round 2 sends
the conversation back with the tool's text as a function response, without
tools, to obtain the grounded final reply.
"""

from healthagent.domain.chat.ports import ModelClient, ToolSessionPort
from healthagent.domain.chat.schema import translate_tools
from healthagent.domain.chat.types import (
    FunctionCallPart,
    FunctionResponsePart,
    ModelResponse,
    ModelTurn,
    ReasoningPart,
    TextPart,
    ToolInvocation,
    ToolResult,
)
from healthagent.observability.metrics import MODEL_CALLS, TOOL_CALLS
from healthagent.shared.exceptions import OrchestrationError
from healthagent.shared.logging import get_logger, tool_log_context

logger = get_logger(__name__)

NO_ANSWER_PLACEHOLDER = "(no answer)"
NO_RESULT_PLACEHOLDER = "(no result)"


def extract_text(response: ModelResponse) -> str:
    """Pull the reply text out of a model response.

    Prefers the consolidated text, then the non-reasoning text parts, then a
    placeholder. Never returns an empty string.
    """
    if response.text:
        return response.text
    texts = [part.text for part in response.parts if isinstance(part, TextPart) and part.text]
    return "\n".join(texts) or NO_ANSWER_PLACEHOLDER


def tool_result_text(result: ToolResult) -> str:
    return result.text() or NO_RESULT_PLACEHOLDER


def build_followup_history(
    message: str,
    first_response: ModelResponse,
    call: FunctionCallPart,
    result_text: str,
) -> list[ModelTurn]:
    """Build the round-2 conversation.

    Reasoning parts from round 1 are dropped; the model cannot continue from
    its own reasoning trace.
    """
    model_parts = [part for part in first_response.parts if not isinstance(part, ReasoningPart)]
    return [
        ModelTurn(role="user", parts=[TextPart(text=message)]),
        ModelTurn(role="model", parts=model_parts),
        ModelTurn(
            role="user",
            parts=[FunctionResponsePart(name=call.name, response={"result": result_text})],
        ),
    ]


class ChatOrchestrator:
    """Runs the two-round conversation against one tool session."""

    def __init__(self, model_client: ModelClient):
        self.model_client = model_client

    async def handle(self, message: str, session: ToolSessionPort) -> str:
        """Answer a message, consulting at most one tool.

        Raises:
            OrchestrationError: If any step fails. The original message is
                carried when available.
        """
        try:
            return await self._run(message, session)
        except Exception as exc:
            raise OrchestrationError.from_exception(exc) from exc

    async def _run(self, message: str, session: ToolSessionPort) -> str:
        tools = await session.list_tools()
        logger.info("tools_listed", tools=[tool.name for tool in tools])
        declarations = translate_tools(tools)

        first_response = await self.model_client.generate(message, tools=declarations)
        MODEL_CALLS.labels(round="1").inc()

        function_calls = first_response.function_calls
        if not function_calls:
            logger.info("direct_reply")
            return extract_text(first_response)

        call = function_calls[0]
        if not call.name:
            raise OrchestrationError("The model requested a function call without a name.")
        if len(function_calls) > 1:
            logger.info("extra_function_calls_ignored", ignored=len(function_calls) - 1)
        with tool_log_context(call.name):
            return await self._answer_with_tool(message, session, first_response, call)

    async def _answer_with_tool(
        self,
        message: str,
        session: ToolSessionPort,
        first_response: ModelResponse,
        call: FunctionCallPart,
    ) -> str:
        logger.info("tool_selected")
        result = await session.call_tool(ToolInvocation(name=call.name, arguments=dict(call.args)))
        TOOL_CALLS.labels(tool=call.name, is_error=str(result.is_error).lower()).inc()
        if result.is_error:
            logger.warning("tool_returned_error")
        result_text = tool_result_text(result)
        logger.debug("tool_result", chars=len(result_text))

        history = build_followup_history(message, first_response, call, result_text)
        second_response = await self.model_client.generate(history, tools=None)
        MODEL_CALLS.labels(round="2").inc()

        logger.info("final_reply_generated")
        return extract_text(second_response)
