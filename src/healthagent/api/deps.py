"""FastAPI dependencies for API routes."""

from typing import Annotated

from fastapi import Depends, Request

from healthagent.config import Settings, get_settings
from healthagent.domain.chat.ports import ModelClient
from healthagent.infrastructure.ai.factory import get_model_client
from healthagent.mcp.session import ToolSessionFactory


def build_session_factory(settings: Settings) -> ToolSessionFactory:
    return ToolSessionFactory(
        client_name=settings.mcp_client_name,
        client_version=settings.mcp_client_version,
    )


def get_session_factory(request: Request) -> ToolSessionFactory:
    """Get the app's tool session factory (sessions themselves are per request)."""
    factory = getattr(request.app.state, "tool_session_factory", None)
    if factory is None:
        factory = build_session_factory(get_settings())
        request.app.state.tool_session_factory = factory
    return factory


def get_chat_model_client(
    settings: Annotated[Settings, Depends(get_settings)],
) -> ModelClient:
    """Resolve the model client, failing fast when the API key is missing."""
    return get_model_client(settings)


SettingsDep = Annotated[Settings, Depends(get_settings)]
SessionFactoryDep = Annotated[ToolSessionFactory, Depends(get_session_factory)]
ModelClientDep = Annotated[ModelClient, Depends(get_chat_model_client)]

__all__ = [
    "build_session_factory",
    "get_chat_model_client",
    "get_session_factory",
    "ModelClientDep",
    "SessionFactoryDep",
    "SettingsDep",
]
