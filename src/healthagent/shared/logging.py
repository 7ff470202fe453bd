"""Structured logging for the health agent.

A chat request binds its route and message length with ``chat_log_context``
and the orchestrator binds the selected tool, so every event logged while the
request runs carries them. The message text itself is never bound.
"""

import logging
import sys
from contextlib import AbstractContextManager
from typing import Any, cast

import structlog

from healthagent.config import get_settings

# Per-message loggers of the in-process MCP transport and the SDK HTTP clients
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "mcp", "google_genai")


def _render_processors(json_output: bool) -> list[Any]:
    if json_output:
        return [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    return [structlog.dev.ConsoleRenderer(colors=True)]


def setup_logging() -> None:
    """Route structlog through stdlib logging; JSON outside development."""
    settings = get_settings()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            *_render_processors(json_output=not settings.is_development),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if settings.app_debug else logging.INFO,
    )
    for logger_name in QUIET_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def chat_log_context(route: str, message: str) -> AbstractContextManager[None]:
    """Bind a chat request's route and message length for the duration of a block."""
    return structlog.contextvars.bound_contextvars(route=route, message_length=len(message))


def tool_log_context(tool: str) -> AbstractContextManager[None]:
    return structlog.contextvars.bound_contextvars(tool=tool)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
