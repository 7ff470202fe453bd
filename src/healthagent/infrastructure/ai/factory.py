"""Model client factory - returns the configured Gemini client."""

from healthagent.config import Settings, get_settings
from healthagent.domain.chat.ports import ModelClient
from healthagent.infrastructure.ai.gemini_client import GeminiClient
from healthagent.shared.exceptions import ConfigurationError
from healthagent.shared.logging import get_logger

logger = get_logger(__name__)

# Keyed by (api_key, model); clients hold no conversation state
_clients: dict[tuple[str, str], GeminiClient] = {}


def get_model_client(settings: Settings | None = None) -> ModelClient:
    """Get the shared Gemini client for the given settings.

    Raises:
        ConfigurationError: If GEMINI_API_KEY is not set.
    """
    settings = settings or get_settings()
    if not settings.gemini_api_key:
        raise ConfigurationError("GEMINI_API_KEY is not configured.")

    key = (settings.gemini_api_key, settings.gemini_model)
    client = _clients.get(key)
    if client is None:
        logger.info("using_model", provider="gemini", model=settings.gemini_model)
        client = GeminiClient(api_key=settings.gemini_api_key, model=settings.gemini_model)
        _clients[key] = client
    return client


async def close_model_clients() -> None:
    """Close and clear the shared model clients (used at app shutdown)."""
    clients = list(_clients.values())
    _clients.clear()
    for client in clients:
        await client.close()
