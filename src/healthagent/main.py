"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from healthagent import __version__
from healthagent.api.deps import build_session_factory
from healthagent.api.ratelimit import limiter, rate_limit_exceeded_handler
from healthagent.api.router import api_router
from healthagent.api.routes import health
from healthagent.config import get_settings
from healthagent.infrastructure.ai.factory import close_model_clients
from healthagent.observability.metrics import setup_metrics
from healthagent.shared.exceptions import (
    GENERIC_FAILURE_MESSAGE,
    AuthorizationDeniedError,
    ClientInputError,
    ConfigurationError,
    HealthAgentError,
    OrchestrationError,
)
from healthagent.shared.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan - startup and shutdown events."""
    setup_logging()
    settings = get_settings()
    logger.info(
        "healthagent_starting",
        version=__version__,
        model=settings.gemini_model,
        domain_check=settings.domain_check_enabled,
    )

    # The factory is shared; every request still opens its own session
    if getattr(app.state, "tool_session_factory", None) is None:
        app.state.tool_session_factory = build_session_factory(settings)

    yield

    logger.info("healthagent_stopping")
    await close_model_clients()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Server Health Agent API",
        description="Answers server health questions with Gemini function calling over MCP",
        version=__version__,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]

    # CORS middleware
    if settings.is_production:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Content-Type", "X-MS-CLIENT-PRINCIPAL"],
        )
    else:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(api_router, prefix="/api")

    setup_metrics(app)

    return app


def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers.

    Every failure is returned as ``{"error": message}``.
    """

    @app.exception_handler(ClientInputError)
    async def client_input_error_handler(request: Request, exc: ClientInputError) -> JSONResponse:
        _ = request
        return JSONResponse(status_code=400, content={"error": exc.message})

    @app.exception_handler(AuthorizationDeniedError)
    async def authorization_denied_handler(
        request: Request, exc: AuthorizationDeniedError
    ) -> JSONResponse:
        _ = request
        logger.warning("access_denied", reason=type(exc).__name__)
        return JSONResponse(status_code=403, content={"error": exc.message})

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        _ = request
        logger.error("configuration_error", error=exc.message)
        return JSONResponse(status_code=500, content={"error": exc.message})

    @app.exception_handler(OrchestrationError)
    async def orchestration_error_handler(
        request: Request, exc: OrchestrationError
    ) -> JSONResponse:
        _ = request
        logger.error("chat_failed", error=exc.message, details=exc.details)
        return JSONResponse(status_code=500, content={"error": exc.message})

    @app.exception_handler(HealthAgentError)
    async def healthagent_error_handler(request: Request, exc: HealthAgentError) -> JSONResponse:
        _ = request
        logger.error("unhandled_error", error=exc.message, details=exc.details)
        return JSONResponse(status_code=500, content={"error": GENERIC_FAILURE_MESSAGE})

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        _ = request
        logger.exception("unexpected_error", error=str(exc))
        return JSONResponse(status_code=500, content={"error": GENERIC_FAILURE_MESSAGE})


# Create app instance
app = create_app()
