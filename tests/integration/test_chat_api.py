"""
Integration tests for the chat API.

Exercises POST /api/chat end to end: real routing, dependencies, exception
handlers and the in-process MCP server, with the model client replaced by a
scripted double.
"""
from unittest.mock import MagicMock

import pytest

from healthagent.api.deps import get_chat_model_client, get_session_factory
from healthagent.config import Settings, get_settings


@pytest.fixture
def untouched_factory(app):
    """Session factory that must never be opened."""
    factory = MagicMock()
    app.dependency_overrides[get_session_factory] = lambda: factory
    return factory


@pytest.fixture
def domain_settings(app):
    settings = Settings(
        _env_file=None,
        gemini_api_key="test-api-key",
        allowed_domain="example.com",
    )
    app.dependency_overrides[get_settings] = lambda: settings
    return settings


class TestChatHappyPath:
    """Tests for successful chat requests."""

    def test_tool_grounded_reply(self, app, client, fake_model, responses):
        model = fake_model(
            [
                responses.tool_call(),
                responses.text("CPU 88%、メモリ 94%、ディスクは危険な状態です。"),
            ]
        )
        app.dependency_overrides[get_chat_model_client] = lambda: model

        response = client.post("/api/chat", json={"message": "サーバーの状態を確認して"})

        assert response.status_code == 200
        assert response.json() == {"reply": "CPU 88%、メモリ 94%、ディスクは危険な状態です。"}
        assert len(model.calls) == 2
        tool_result = model.calls[1]["contents"][2].parts[0].response["result"]
        assert '"memory_usage_percent": 94' in tool_result

    def test_direct_reply(self, app, client, fake_model, responses):
        model = fake_model([responses.text("Hello! Ask me about the server.")])
        app.dependency_overrides[get_chat_model_client] = lambda: model

        response = client.post("/api/chat", json={"message": "hello"})

        assert response.status_code == 200
        assert response.json() == {"reply": "Hello! Ask me about the server."}
        assert len(model.calls) == 1

    def test_admitted_identity(self, app, client, fake_model, responses, principal, domain_settings):
        model = fake_model([responses.text("ok")])
        app.dependency_overrides[get_chat_model_client] = lambda: model

        response = client.post(
            "/api/chat",
            json={"message": "status"},
            headers={"x-ms-client-principal": principal({"userDetails": "alice@example.com"})},
        )

        assert response.status_code == 200


class TestChatInputErrors:
    """Body validation runs before any upstream work."""

    def test_missing_message(self, app, client, fake_model, untouched_factory):
        model = fake_model([])
        app.dependency_overrides[get_chat_model_client] = lambda: model

        response = client.post("/api/chat", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "The message field is required."}
        assert model.calls == []
        untouched_factory.session.assert_not_called()

    @pytest.mark.parametrize("body", [{"message": ""}, {"message": 42}, {"message": None}, []])
    def test_invalid_message(self, app, client, fake_model, untouched_factory, body):
        app.dependency_overrides[get_chat_model_client] = lambda: fake_model([])

        response = client.post("/api/chat", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "The message field is required."}

    def test_invalid_json(self, app, client, fake_model, untouched_factory):
        app.dependency_overrides[get_chat_model_client] = lambda: fake_model([])

        response = client.post(
            "/api/chat",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {
            "error": "The request body is invalid. Send { message: string }."
        }


class TestChatAccessErrors:
    """Identity checks come first."""

    def test_wrong_domain(self, app, client, fake_model, principal, domain_settings, untouched_factory):
        model = fake_model([])
        app.dependency_overrides[get_chat_model_client] = lambda: model

        response = client.post(
            "/api/chat",
            json={"message": "status"},
            headers={"x-ms-client-principal": principal({"userDetails": "eve@other.com"})},
        )

        assert response.status_code == 403
        assert response.json() == {
            "error": "Access denied. Please sign in with an account from the allowed domain."
        }
        assert model.calls == []

    def test_garbled_header(self, app, client, domain_settings, untouched_factory):
        response = client.post(
            "/api/chat",
            json={"message": "status"},
            headers={"x-ms-client-principal": "%%%garbled%%%"},
        )

        assert response.status_code == 403
        assert response.json() == {"error": "Failed to parse the authentication information."}

    def test_identity_checked_before_body(self, app, client, principal, domain_settings):
        response = client.post(
            "/api/chat",
            content=b"{not json",
            headers={
                "content-type": "application/json",
                "x-ms-client-principal": principal({"userDetails": "eve@other.com"}),
            },
        )

        assert response.status_code == 403

    def test_no_header_is_admitted(self, app, client, fake_model, responses, domain_settings):
        app.dependency_overrides[get_chat_model_client] = lambda: fake_model([responses.text("ok")])

        response = client.post("/api/chat", json={"message": "status"})

        assert response.status_code == 200

    def test_whitespace_domain_disables_check(self, app, client, fake_model, responses, principal):
        app.dependency_overrides[get_settings] = lambda: Settings(
            _env_file=None, gemini_api_key="test-api-key", allowed_domain="   "
        )
        app.dependency_overrides[get_chat_model_client] = lambda: fake_model([responses.text("ok")])

        response = client.post(
            "/api/chat",
            json={"message": "status"},
            headers={"x-ms-client-principal": principal({"userDetails": "alice@example.com"})},
        )

        assert response.status_code == 200


class TestChatServerErrors:
    """Configuration and upstream failures map to 500."""

    def test_missing_api_key(self, app, client, untouched_factory):
        settings = Settings(_env_file=None, gemini_api_key="")
        app.dependency_overrides[get_settings] = lambda: settings

        response = client.post("/api/chat", json={"message": "status"})

        assert response.status_code == 500
        assert response.json() == {"error": "GEMINI_API_KEY is not configured."}
        untouched_factory.session.assert_not_called()

    def test_missing_api_key_checked_before_body(self, app, client, untouched_factory):
        app.dependency_overrides[get_settings] = lambda: Settings(_env_file=None, gemini_api_key="")

        response = client.post("/api/chat", json={})

        assert response.status_code == 500

    def test_model_failure(self, app, client, fake_model):
        app.dependency_overrides[get_chat_model_client] = lambda: fake_model(
            [RuntimeError("Resource exhausted")]
        )

        response = client.post("/api/chat", json={"message": "status"})

        assert response.status_code == 500
        assert response.json() == {"error": "Resource exhausted"}

    def test_failure_without_message(self, app, client, fake_model):
        app.dependency_overrides[get_chat_model_client] = lambda: fake_model([RuntimeError()])

        response = client.post("/api/chat", json={"message": "status"})

        assert response.status_code == 500
        assert response.json() == {"error": "An unexpected error occurred."}


class TestChatRateLimit:
    def test_limit_returns_429(self, app, client, fake_model, responses):
        model = fake_model([responses.text("ok")] * 21)
        app.dependency_overrides[get_chat_model_client] = lambda: model

        statuses = [
            client.post("/api/chat", json={"message": "status"}).status_code for _ in range(21)
        ]

        assert statuses[:20] == [200] * 20
        assert statuses[20] == 429


class TestToolCatalogEndpoint:
    def test_lists_tools(self, client):
        response = client.get("/api/chat/tools")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["tools"][0]["name"] == "get_server_status"
