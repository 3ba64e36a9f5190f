"""FastAPI dependencies wiring settings, registry and gateway client per request."""

from typing import AsyncIterator

from fastapi import Depends, Request

from .config import Settings, settings
from .orchestration import FallbackManager, ProviderRegistry
from .providers.openrouter import OpenRouterClient
from .reliability.retry_strategy import BackoffPolicy


def get_settings() -> Settings:
    return settings


def get_registry(app_settings: Settings = Depends(get_settings)) -> ProviderRegistry:
    return ProviderRegistry.from_settings(app_settings)


async def get_provider(
    request: Request,
    app_settings: Settings = Depends(get_settings),
) -> AsyncIterator[OpenRouterClient]:
    # raises ConfigurationError before any attempt when the key is missing
    session = getattr(request.app.state, "http_session", None)
    provider = OpenRouterClient.from_settings(app_settings, session=session)
    try:
        yield provider
    finally:
        await provider.close()


def get_fallback_manager(
    registry: ProviderRegistry = Depends(get_registry),
    provider: OpenRouterClient = Depends(get_provider),
    app_settings: Settings = Depends(get_settings),
) -> FallbackManager:
    return FallbackManager(
        registry=registry,
        provider=provider,
        backoff=BackoffPolicy(delay=app_settings.rate_limit_backoff_seconds),
    )
