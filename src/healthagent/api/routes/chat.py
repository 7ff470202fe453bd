"""Chat API with Gemini function calling over the in-process MCP server.

Checks run in a fixed order before any upstream work: identity, model
configuration, then the request body.
"""

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field, StrictStr, ValidationError

from healthagent.api.deps import ModelClientDep, SessionFactoryDep, SettingsDep
from healthagent.api.middleware.access import AllowedIdentity
from healthagent.api.ratelimit import RATE_LIMIT_CHAT, limiter
from healthagent.domain.chat import ChatService
from healthagent.shared.exceptions import ClientInputError
from healthagent.shared.logging import chat_log_context, get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])

INVALID_BODY_MESSAGE = "The request body is invalid. Send { message: string }."
MISSING_MESSAGE_MESSAGE = "The message field is required."


# ----- Request/Response Models -----


class ChatRequest(BaseModel):
    """Request to send a chat message."""

    message: StrictStr = Field(..., min_length=1)


class ChatResponse(BaseModel):
    """Response from the chat endpoint."""

    reply: str = Field(..., description="Final answer, grounded in tool output when a tool was used")


class ErrorResponse(BaseModel):
    error: str


class ToolSummary(BaseModel):
    name: str
    description: str


class ToolListResponse(BaseModel):
    tools: list[ToolSummary]
    count: int


async def parse_chat_request(request: Request) -> ChatRequest:
    """Read and validate the JSON body.

    Raises:
        ClientInputError: If the body is not JSON or lacks a non-empty
            string ``message``.
    """
    try:
        body = await request.json()
    except ValueError as exc:
        raise ClientInputError(INVALID_BODY_MESSAGE) from exc
    try:
        return ChatRequest.model_validate(body)
    except ValidationError as exc:
        raise ClientInputError(MISSING_MESSAGE_MESSAGE) from exc


# ----- API Endpoints -----


@router.post(
    "",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@limiter.limit(RATE_LIMIT_CHAT)
async def chat(
    request: Request,
    _identity: AllowedIdentity,
    model_client: ModelClientDep,
    session_factory: SessionFactoryDep,
    settings: SettingsDep,
) -> ChatResponse:
    """Answer a server-health question.

    The model decides whether to call ``get_server_status``; when it does,
    the final reply is grounded in the tool's output.

    Example messages:
    - "Check the server status"
    - "Is the disk healthy?"
    """
    chat_request = await parse_chat_request(request)

    with chat_log_context(request.url.path, chat_request.message):
        logger.info("chat_request_received")
        service = ChatService(
            model_client=model_client,
            session_factory=session_factory,
            timeout_seconds=settings.chat_timeout_seconds,
        )
        reply = await service.reply(chat_request.message)
        logger.info("chat_reply_sent", reply_length=len(reply))
    return ChatResponse(reply=reply)


@router.get("/tools", response_model=ToolListResponse)
async def list_tools(
    _identity: AllowedIdentity,
    session_factory: SessionFactoryDep,
) -> ToolListResponse:
    """List the tools the model can use."""
    async with session_factory.session() as session:
        tools = await session.list_tools()
    return ToolListResponse(
        tools=[
            ToolSummary(
                name=tool.name,
                description=tool.description[:200] + "..."
                if len(tool.description) > 200
                else tool.description,
            )
            for tool in tools
        ],
        count=len(tools),
    )
