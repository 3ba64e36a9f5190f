"""OpenRouter gateway adapter: one bounded chat-completion request per attempt."""

import asyncio
import json
import time
from typing import Any, Dict, Optional
import logging

import aiohttp

from ..config import Settings
from ..exceptions import ConfigurationError
from ..reliability.error_classifier import ErrorCategory, ErrorClassifier, error_classifier
from .base_provider import AttemptOutcome, BaseProvider, OutcomeKind, PromptRequest

logger = logging.getLogger(__name__)

_CATEGORY_TO_KIND = {
    ErrorCategory.FATAL: OutcomeKind.FATAL,
    ErrorCategory.RATE_LIMITED: OutcomeKind.RATE_LIMITED,
    ErrorCategory.RETRYABLE: OutcomeKind.RETRYABLE,
}


class OpenRouterClient(BaseProvider):
    """Chat-completion client for the OpenRouter gateway."""

    DEFAULT_API_URL = "https://openrouter.ai/api/v1/chat/completions"

    def __init__(
        self,
        api_key: str,
        api_url: str = DEFAULT_API_URL,
        referer: str = "http://localhost:3000",
        session: Optional[aiohttp.ClientSession] = None,
        classifier: Optional[ErrorClassifier] = None,
    ):
        if not api_key:
            raise ConfigurationError("OpenRouter API key not configured")
        self.api_key = api_key
        self.api_url = api_url
        self.referer = referer
        self.session = session
        self._owns_session = session is None
        self.classifier = classifier or error_classifier

    @classmethod
    def from_settings(cls, settings: Settings, session: Optional[aiohttp.ClientSession] = None) -> "OpenRouterClient":
        if not settings.openrouter_api_key:
            raise ConfigurationError("OpenRouter API key not configured")
        return cls(
            api_key=settings.openrouter_api_key,
            api_url=settings.openrouter_api_url,
            referer=settings.app_url,
            session=session,
        )

    @property
    def name(self) -> str:
        return "OpenRouter"

    def build_headers(self, app_title: str) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            "HTTP-Referer": self.referer,
            "X-Title": app_title,
        }

    @staticmethod
    def build_payload(model: str, request: PromptRequest) -> Dict[str, Any]:
        return {
            "model": model,
            "messages": [{"role": "user", "content": request.prompt}],
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
        }

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure aiohttp session exists."""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession()
            self._owns_session = True
        return self.session

    async def attempt(self, model: str, request: PromptRequest) -> AttemptOutcome:
        start_time = time.time()
        try:
            # wait_for cancels the in-flight request on expiry; later attempts get their own timer
            outcome = await asyncio.wait_for(self._post(model, request), timeout=request.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Model {model} timed out after {request.timeout:g}s")
            return AttemptOutcome(
                OutcomeKind.TIMED_OUT,
                model,
                message=f"Request timeout after {request.timeout:g}s",
            )
        except aiohttp.ClientError as e:
            logger.warning(f"Network error with model {model}: {e}")
            return AttemptOutcome(OutcomeKind.RETRYABLE, model, message=str(e) or "Network error")

        latency_ms = (time.time() - start_time) * 1000
        return AttemptOutcome(
            outcome.kind,
            model,
            message=outcome.message,
            status_code=outcome.status_code,
            body=outcome.body,
            latency_ms=latency_ms,
        )

    async def _post(self, model: str, request: PromptRequest) -> AttemptOutcome:
        session = await self._ensure_session()

        async with session.post(
            self.api_url,
            json=self.build_payload(model, request),
            headers=self.build_headers(request.app_title),
        ) as response:
            text = await response.text()

            if 200 <= response.status < 300:
                try:
                    data = json.loads(text)
                except ValueError:
                    return AttemptOutcome(
                        OutcomeKind.RETRYABLE,
                        model,
                        message="Invalid JSON in model response",
                    )
                if not isinstance(data, dict):
                    return AttemptOutcome(
                        OutcomeKind.RETRYABLE,
                        model,
                        message="Unexpected model response shape",
                    )
                return AttemptOutcome.success(model, data)

            error_body = self._parse_error_body(text)
            classification = self.classifier.classify(response.status, error_body)
            return AttemptOutcome(
                _CATEGORY_TO_KIND[classification.category],
                model,
                message=classification.message,
                status_code=response.status,
                body=error_body,
            )

    @staticmethod
    def _parse_error_body(text: str) -> Dict[str, Any]:
        if not text:
            return {}
        try:
            data = json.loads(text)
        except ValueError:
            return {"raw": text}
        return data if isinstance(data, dict) else {"raw": text}

    async def close(self) -> None:
        if self.session is not None and self._owns_session and not self.session.closed:
            await self.session.close()
