"""Base provider interface for LLM gateway attempts."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from ..exceptions import (
    FatalProviderError,
    ProviderError,
    RateLimitError,
    RetryableProviderError,
    TimeoutProviderError,
)


class OutcomeKind(Enum):
    """Result category of a single attempt."""

    SUCCESS = "success"
    FATAL = "fatal"
    RETRYABLE = "retryable"
    RATE_LIMITED = "rate_limited"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class PromptRequest:
    """Everything needed to issue one attempt, fixed for the whole orchestration."""

    feature: str
    prompt: str
    max_tokens: int
    temperature: float = 0.7
    timeout: float = 30.0  # seconds, per attempt
    app_title: str = "Content AI Assistant"


@dataclass(frozen=True)
class AttemptOutcome:
    """Outcome of one attempt against one model."""

    kind: OutcomeKind
    model: str
    message: str = ""
    status_code: Optional[int] = None
    body: Optional[Dict[str, Any]] = None
    latency_ms: float = 0.0

    @classmethod
    def success(cls, model: str, body: Dict[str, Any], latency_ms: float = 0.0) -> "AttemptOutcome":
        return cls(OutcomeKind.SUCCESS, model, body=body, status_code=200, latency_ms=latency_ms)

    @property
    def ok(self) -> bool:
        return self.kind == OutcomeKind.SUCCESS

    def as_error(self) -> ProviderError:
        """Convert a failed outcome into the matching provider error."""
        if self.kind == OutcomeKind.FATAL:
            return FatalProviderError(self.message, self.status_code, self.model)
        if self.kind == OutcomeKind.RATE_LIMITED:
            return RateLimitError(self.message, self.status_code or 429, self.model)
        if self.kind == OutcomeKind.TIMED_OUT:
            return TimeoutProviderError(self.message or "Request timeout", None, self.model)
        if self.kind == OutcomeKind.RETRYABLE:
            return RetryableProviderError(self.message, self.status_code, self.model)
        raise ValueError("A successful outcome has no error")


class BaseProvider(ABC):
    """Abstract gateway client: one bounded request per call, never raises for upstream failures."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return provider name."""
        pass

    @abstractmethod
    async def attempt(self, model: str, request: PromptRequest) -> AttemptOutcome:
        """Issue one request for ``model`` and classify the result."""
        pass

    async def close(self) -> None:
        """Release network resources."""
        pass

    def __repr__(self) -> str:
        return f"{self.name}()"
