"""Health check endpoints."""

from fastapi import APIRouter, Request
from pydantic import BaseModel

from healthagent.api.deps import SessionFactoryDep, SettingsDep
from healthagent.api.ratelimit import RATE_LIMIT_HEALTH, limiter
from healthagent.shared.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    model: str


class ReadyResponse(BaseModel):
    """Readiness check response."""

    ready: bool
    checks: dict[str, bool]


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: SettingsDep) -> HealthResponse:
    """Basic health check - always returns OK if service is running."""
    from healthagent import __version__

    return HealthResponse(status="healthy", version=__version__, model=settings.gemini_model)


@router.get("/ready", response_model=ReadyResponse)
@limiter.limit(RATE_LIMIT_HEALTH)
async def readiness_check(
    request: Request,
    settings: SettingsDep,
    session_factory: SessionFactoryDep,
) -> ReadyResponse:
    """Readiness check - verifies the model key and the tool server."""
    checks: dict[str, bool] = {"model_api_key": bool(settings.gemini_api_key)}

    try:
        async with session_factory.session() as session:
            tools = await session.list_tools()
        checks["tool_server"] = bool(tools)
    except Exception as e:
        logger.warning("tool_server_check_failed", error=str(e))
        checks["tool_server"] = False

    return ReadyResponse(ready=all(checks.values()), checks=checks)
