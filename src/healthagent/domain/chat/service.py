"""Chat service: one tool session and one orchestration per request."""

import asyncio

from healthagent.domain.chat.orchestrator import ChatOrchestrator
from healthagent.domain.chat.ports import ModelClient, ToolSessionFactoryPort
from healthagent.observability.metrics import CHAT_OUTCOMES
from healthagent.shared.exceptions import OrchestrationError
from healthagent.shared.logging import get_logger

logger = get_logger(__name__)


class ChatService:
    """Answers one chat message.

    Opens a private tool session, runs the orchestrator against it and closes
    the session on every exit path. An optional deadline bounds the whole
    exchange.
    """

    def __init__(
        self,
        model_client: ModelClient,
        session_factory: ToolSessionFactoryPort,
        timeout_seconds: float = 0.0,
    ):
        """Initialize the chat service.

        Args:
            model_client: Function-calling model client
            session_factory: Opens in-process MCP sessions
            timeout_seconds: Deadline for the whole request; 0 disables it
        """
        self.orchestrator = ChatOrchestrator(model_client)
        self.session_factory = session_factory
        self.timeout_seconds = timeout_seconds

    async def reply(self, message: str) -> str:
        """Return the final reply for a message.

        Raises:
            OrchestrationError: On any failure, including session setup.
        """
        deadline = self.timeout_seconds or None
        try:
            async with asyncio.timeout(deadline):
                async with self.session_factory.session() as session:
                    reply = await self.orchestrator.handle(message, session)
        except OrchestrationError:
            CHAT_OUTCOMES.labels(outcome="error").inc()
            raise
        except TimeoutError as exc:
            CHAT_OUTCOMES.labels(outcome="timeout").inc()
            if deadline is None:
                raise OrchestrationError.from_exception(exc) from exc
            raise OrchestrationError(
                f"The chat request timed out after {deadline:g} seconds.",
                details={"timeout_seconds": deadline},
            ) from exc
        except Exception as exc:
            CHAT_OUTCOMES.labels(outcome="error").inc()
            raise OrchestrationError.from_exception(exc) from exc

        CHAT_OUTCOMES.labels(outcome="reply").inc()
        return reply
