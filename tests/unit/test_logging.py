"""Unit tests for structured logging setup and request context binding."""

import logging

import structlog

from healthagent.shared.logging import (
    QUIET_LOGGERS,
    chat_log_context,
    setup_logging,
    tool_log_context,
)


class TestChatLogContext:
    def test_binds_route_and_message_length(self):
        with chat_log_context("/api/chat", "サーバーの状態を確認して"):
            bound = structlog.contextvars.get_contextvars()

        assert bound == {"route": "/api/chat", "message_length": 12}

    def test_message_text_is_never_bound(self):
        with chat_log_context("/api/chat", "secret question"):
            bound = structlog.contextvars.get_contextvars()

        assert "secret question" not in bound.values()

    def test_context_is_cleared_after_block(self):
        with chat_log_context("/api/chat", "hi"):
            with tool_log_context("get_server_status"):
                assert structlog.contextvars.get_contextvars()["tool"] == "get_server_status"
            assert "tool" not in structlog.contextvars.get_contextvars()

        assert structlog.contextvars.get_contextvars() == {}


class TestSetupLogging:
    def test_quiets_transport_loggers(self):
        setup_logging()

        for logger_name in QUIET_LOGGERS:
            assert logging.getLogger(logger_name).level == logging.WARNING
        assert "mcp" in QUIET_LOGGERS
        assert "google_genai" in QUIET_LOGGERS
