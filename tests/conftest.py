"""Global test configuration and fixtures."""
from typing import Dict, List, Optional, Union
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from content_ai.dependencies import get_fallback_manager
from content_ai.main import app
from content_ai.orchestration import FallbackManager, ProviderRegistry
from content_ai.providers.base_provider import AttemptOutcome, BaseProvider, OutcomeKind, PromptRequest
from content_ai.reliability.retry_strategy import BackoffPolicy


def chat_body(content: Optional[str] = None, reasoning: Optional[str] = None, **message) -> Dict:
    """Build a chat-completion success body."""
    if content is not None:
        message["content"] = content
    if reasoning is not None:
        message["reasoning"] = reasoning
    return {"choices": [{"message": message, "finish_reason": "stop"}]}


def ok(model: str, content: str) -> AttemptOutcome:
    return AttemptOutcome.success(model, chat_body(content), latency_ms=12.0)


def failed(model: str, kind: OutcomeKind, status: Optional[int] = None, message: str = "boom") -> AttemptOutcome:
    return AttemptOutcome(kind, model, message=message, status_code=status, latency_ms=5.0)


class ScriptedProvider(BaseProvider):
    """Returns a fixed outcome per model and records the attempt order."""

    def __init__(self, script: Dict[str, Union[AttemptOutcome, List[AttemptOutcome]]]):
        self.script = script
        self.calls: List[str] = []
        self.requests: List[PromptRequest] = []

    @property
    def name(self) -> str:
        return "Scripted"

    async def attempt(self, model: str, request: PromptRequest) -> AttemptOutcome:
        self.calls.append(model)
        self.requests.append(request)
        return self.script[model]


@pytest.fixture
def registry() -> ProviderRegistry:
    return ProviderRegistry(["model-a", "model-b", "model-c"])


@pytest.fixture
def sleep() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def backoff(sleep) -> BackoffPolicy:
    return BackoffPolicy(delay=2.0, sleep=sleep)


@pytest.fixture
def make_manager(registry, backoff):
    def factory(script) -> FallbackManager:
        return FallbackManager(registry, ScriptedProvider(script), backoff)
    return factory


@pytest.fixture
def client():
    """Test client whose fallback manager is swapped per test via ``use_manager``."""
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def use_manager():
    def install(manager: FallbackManager) -> FallbackManager:
        app.dependency_overrides[get_fallback_manager] = lambda: manager
        return manager
    return install
