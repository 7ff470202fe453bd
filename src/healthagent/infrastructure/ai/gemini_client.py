"""Gemini API client wrapper.

Converts between the provider-agnostic chat types and the ``google-genai``
SDK so the orchestrator never touches SDK response objects directly.
"""

import time

from google import genai
from google.genai import types

from healthagent.config import DEFAULT_GEMINI_MODEL
from healthagent.domain.chat.types import (
    FunctionCallPart,
    FunctionResponsePart,
    ModelResponse,
    ModelTurn,
    Part,
    ReasoningPart,
    TextPart,
)
from healthagent.shared.logging import get_logger

logger = get_logger(__name__)


def to_sdk_part(part: Part) -> types.Part:
    """Convert a domain part into an SDK part."""
    if isinstance(part, FunctionCallPart):
        return types.Part(
            function_call=types.FunctionCall(name=part.name, args=dict(part.args)),
            thought_signature=part.thought_signature,
        )
    if isinstance(part, FunctionResponsePart):
        return types.Part(
            function_response=types.FunctionResponse(name=part.name, response=dict(part.response))
        )
    if isinstance(part, ReasoningPart):
        return types.Part(text=part.text, thought=True, thought_signature=part.thought_signature)
    return types.Part(text=part.text, thought_signature=part.thought_signature)


def from_sdk_part(part: types.Part) -> Part | None:
    """Convert an SDK part into a domain part.

    Parts flagged as thoughts always become ReasoningPart, whatever else they
    carry. Content kinds the bridge does not use are dropped.
    """
    if part.thought:
        return ReasoningPart(text=part.text or "", thought_signature=part.thought_signature)
    if part.function_call is not None:
        return FunctionCallPart(
            name=part.function_call.name or "",
            args=dict(part.function_call.args or {}),
            thought_signature=part.thought_signature,
        )
    if part.function_response is not None:
        return FunctionResponsePart(
            name=part.function_response.name or "",
            response=dict(part.function_response.response or {}),
        )
    if part.text is not None:
        return TextPart(text=part.text, thought_signature=part.thought_signature)
    return None


def to_sdk_contents(contents: str | list[ModelTurn]) -> str | list[types.Content]:
    if isinstance(contents, str):
        return contents
    return [
        types.Content(role=turn.role, parts=[to_sdk_part(part) for part in turn.parts])
        for turn in contents
    ]


def from_sdk_response(response: types.GenerateContentResponse) -> ModelResponse:
    """Normalise an SDK response: consolidated text plus first-candidate parts."""
    parts: list[Part] = []
    candidates = response.candidates or []
    content = candidates[0].content if candidates else None
    for sdk_part in (content.parts if content is not None else None) or []:
        part = from_sdk_part(sdk_part)
        if part is not None:
            parts.append(part)
    return ModelResponse(text=response.text, parts=parts)


class GeminiClient:
    """Wrapper for the Gemini generate_content API.

    Implements the ``ModelClient`` port of the chat domain.

    Features:
    - Async SDK client (non-blocking)
    - Optional function declarations per call
    - Structured logging with latency
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_GEMINI_MODEL,
        client: genai.Client | None = None,
    ) -> None:
        self.client = client or genai.Client(api_key=api_key)
        self.model = model

    async def generate(
        self,
        contents: str | list[ModelTurn],
        tools: list[types.FunctionDeclaration] | None = None,
    ) -> ModelResponse:
        """Run one generate_content round.

        Args:
            contents: A raw user message or a structured conversation history
            tools: Function declarations to offer; None sends no tools

        Returns:
            ModelResponse with text and parts of the first candidate
        """
        config = None
        if tools:
            config = types.GenerateContentConfig(
                tools=[types.Tool(function_declarations=list(tools))]
            )

        start_time = time.monotonic()
        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=to_sdk_contents(contents),
            config=config,
        )
        latency_ms = (time.monotonic() - start_time) * 1000

        logger.debug(
            "gemini_generate_success",
            model=self.model,
            tools=len(tools or []),
            latency_ms=round(latency_ms, 2),
        )
        return from_sdk_response(response)

    async def close(self) -> None:
        aclose = getattr(self.client.aio, "aclose", None)
        if aclose is not None:
            await aclose()
