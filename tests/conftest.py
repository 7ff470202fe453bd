"""
Pytest configuration and fixtures for the health agent tests.
"""
import base64
import json
from collections.abc import Callable
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from healthagent.api.ratelimit import limiter
from healthagent.config import Settings, get_settings
from healthagent.domain.chat.types import (
    FunctionCallPart,
    ModelResponse,
    ModelTurn,
    ReasoningPart,
    TextPart,
)
from healthagent.main import create_app


class FakeModelClient:
    """Model client double that replays canned responses and records calls."""

    def __init__(self, responses: list[ModelResponse | BaseException]):
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    async def generate(
        self,
        contents: str | list[ModelTurn],
        tools: list[Any] | None = None,
    ) -> ModelResponse:
        self.calls.append({"contents": contents, "tools": tools})
        if not self.responses:
            raise AssertionError("Unexpected model call")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


def text_response(text: str) -> ModelResponse:
    return ModelResponse(text=text, parts=[TextPart(text=text)])


def tool_call_response(name: str = "get_server_status", **args: Any) -> ModelResponse:
    return ModelResponse(
        text=None,
        parts=[
            ReasoningPart(text="The user wants live metrics."),
            FunctionCallPart(name=name, args=args, thought_signature=b"sig-1"),
        ],
    )


def encode_principal(principal: Any) -> str:
    return base64.b64encode(json.dumps(principal).encode("utf-8")).decode("ascii")


@pytest.fixture(autouse=True)
def reset_rate_limits() -> None:
    limiter.reset()


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        app_env="development",
        gemini_api_key="test-api-key",
        gemini_model="gemini-2.5-flash",
        allowed_domain="",
    )


@pytest.fixture
def fake_model() -> Callable[[list[ModelResponse | BaseException]], FakeModelClient]:
    return FakeModelClient


@pytest.fixture
def responses() -> Any:
    """Builders for canned model responses."""

    class _Builders:
        text = staticmethod(text_response)
        tool_call = staticmethod(tool_call_response)

    return _Builders


@pytest.fixture
def principal() -> Callable[[Any], str]:
    return encode_principal


@pytest.fixture
def app(test_settings: Settings) -> FastAPI:
    application = create_app()
    application.dependency_overrides[get_settings] = lambda: test_settings
    return application


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
