from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple
import logging

from pydantic import BaseModel

from ..exceptions import (
    AllModelsExhaustedError,
    FatalProviderError,
    NoUsableContentError,
    ProviderError,
    RateLimitError,
)
from ..features.base import ContentFeature
from ..monitoring.metrics import backoff_waits, model_attempts, model_latency, orchestration_results
from ..providers.base_provider import AttemptOutcome, BaseProvider, PromptRequest
from ..providers.response_extractor import ResponseExtractor
from ..reliability.retry_strategy import BackoffPolicy
from .registry import ProviderRegistry

logger = logging.getLogger(__name__)

ALL_RATE_LIMITED_MESSAGE = (
    "All free AI models are temporarily rate-limited upstream. Please try again in a few moments."
)
ALL_UNAVAILABLE_MESSAGE = "All AI models are currently unavailable. Please try again later."
EXHAUSTED_STATUS = 503


class OrchestrationStatus(Enum):
    SUCCEEDED = "succeeded"
    FATAL = "fatal"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class OrchestrationResult:
    """Terminal result of one orchestration; exactly one per request."""

    status: OrchestrationStatus
    model_used: Optional[str] = None
    raw_text: Optional[str] = None
    last_failure: Optional[ProviderError] = None
    attempts: List[AttemptOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status == OrchestrationStatus.SUCCEEDED

    @property
    def retryable(self) -> bool:
        return self.status == OrchestrationStatus.EXHAUSTED

    def raise_for_failure(self) -> None:
        """Turn a FATAL or EXHAUSTED result into the error the caller renders."""
        if self.status == OrchestrationStatus.FATAL:
            raise self.last_failure
        if self.status == OrchestrationStatus.EXHAUSTED:
            last = self.last_failure
            if isinstance(last, RateLimitError):
                message = ALL_RATE_LIMITED_MESSAGE
            elif last is not None and last.message:
                message = last.message
            else:
                message = ALL_UNAVAILABLE_MESSAGE
            status_code = last.upstream_status if last is not None else None
            if not status_code or status_code < 400:
                status_code = EXHAUSTED_STATUS
            raise AllModelsExhaustedError(message, status_code, last_failure=last)


class FallbackManager:
    """Runs one request across the registry, one model at a time, in order.

    Fatal failures stop the loop at once. Rate-limited failures pause before
    the next model (never after the last one). Every other failure advances
    immediately. Nothing here is shared between requests.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        provider: BaseProvider,
        backoff: Optional[BackoffPolicy] = None,
    ):
        self.registry = registry
        self.provider = provider
        self.backoff = backoff or BackoffPolicy()

    async def execute_with_fallback(
        self,
        request: PromptRequest,
        extractor: Optional[ResponseExtractor] = None,
    ) -> OrchestrationResult:
        extractor = extractor or ResponseExtractor()
        attempts: List[AttemptOutcome] = []
        last_failure: Optional[ProviderError] = None
        total = len(self.registry)

        for index, model in enumerate(self.registry):
            is_last = self.registry.is_last(model)
            logger.info(f"[{request.feature}] Attempting model {index + 1}/{total}: {model}")

            outcome = await self.provider.attempt(model, request)
            attempts.append(outcome)
            self._record_attempt(request.feature, outcome)

            if outcome.ok:
                try:
                    text = extractor.extract(outcome.body or {})
                except NoUsableContentError as e:
                    logger.warning(f"[{request.feature}] Model {model} returned no usable content: {e.message}")
                    e.model = model
                    last_failure = e
                    continue

                logger.info(f"[{request.feature}] Successfully generated with model: {model}")
                return self._finish(
                    request.feature,
                    OrchestrationResult(
                        OrchestrationStatus.SUCCEEDED,
                        model_used=model,
                        raw_text=text,
                        attempts=attempts,
                    ),
                )

            error = outcome.as_error()

            if isinstance(error, FatalProviderError):
                logger.error(
                    f"[{request.feature}] Model {model} failed with non-retryable "
                    f"status {outcome.status_code}: {outcome.message}"
                )
                return self._finish(
                    request.feature,
                    OrchestrationResult(
                        OrchestrationStatus.FATAL,
                        last_failure=error,
                        attempts=attempts,
                    ),
                )

            logger.warning(f"[{request.feature}] Model {model} failed ({outcome.kind.value}): {outcome.message}")
            last_failure = error

            if await self.backoff.wait(outcome, is_last):
                backoff_waits.labels(feature=request.feature).inc()

        logger.error(f"[{request.feature}] All {total} models failed")
        return self._finish(
            request.feature,
            OrchestrationResult(
                OrchestrationStatus.EXHAUSTED,
                last_failure=last_failure,
                attempts=attempts,
            ),
        )

    async def generate(self, feature: ContentFeature, payload: Any) -> Tuple[BaseModel, str]:
        """Validate, prompt, orchestrate and sanitize for one feature.

        Returns the rendered response and the model that produced it. Raises
        the error taxonomy for every failure path.
        """
        feature.validate(payload)
        request = feature.build_request(payload)

        result = await self.execute_with_fallback(request, feature.extractor())
        result.raise_for_failure()

        # the provider already succeeded; a rejected output is not retried elsewhere
        sanitized = feature.sanitize(result.raw_text, payload)
        return feature.render(sanitized, result.model_used, payload), result.model_used

    @staticmethod
    def _record_attempt(feature: str, outcome: AttemptOutcome) -> None:
        model_attempts.labels(feature=feature, model=outcome.model, outcome=outcome.kind.value).inc()
        # only attempts that got a response carry a latency
        if outcome.latency_ms:
            model_latency.labels(feature=feature, model=outcome.model).observe(outcome.latency_ms / 1000)

    @staticmethod
    def _finish(feature: str, result: OrchestrationResult) -> OrchestrationResult:
        orchestration_results.labels(feature=feature, status=result.status.value).inc()
        return result
