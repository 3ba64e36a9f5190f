"""Error taxonomy for AI content generation.

Every error carries the HTTP status the API should answer with. Provider
errors are recorded per attempt by the fallback manager and only the terminal
one ever reaches a caller.
"""

from typing import Any, Dict, Optional


class ContentAIError(Exception):
    """Base class for errors rendered as a JSON ``{"error": ...}`` body."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class ConfigurationError(ContentAIError):
    """Missing credential or unusable configuration, raised before any attempt."""

    status_code = 500


class InputValidationError(ContentAIError):
    """Caller input rejected before any attempt."""

    status_code = 400


class ProviderError(ContentAIError):
    """Failure of a single attempt against one model."""

    status_code = 502
    retryable = True

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        model: Optional[str] = None,
    ):
        super().__init__(message, status_code)
        # status reported by the gateway, None when no response was received
        self.upstream_status = status_code
        self.model = model


class FatalProviderError(ProviderError):
    """400/401/402/403 from the gateway; no other model can fix it."""

    retryable = False


class RetryableProviderError(ProviderError):
    """Any other non-2xx status or a transport failure."""


class RateLimitError(RetryableProviderError):
    """429 from the gateway."""

    status_code = 429


class TimeoutProviderError(RetryableProviderError):
    """The attempt exceeded its local timeout and was cancelled."""

    status_code = 504


class NoUsableContentError(RetryableProviderError):
    """A 2xx response from which no generated text could be extracted."""


class AllModelsExhaustedError(ContentAIError):
    """Every model in the registry was attempted without success."""

    status_code = 503

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        last_failure: Optional[ProviderError] = None,
    ):
        super().__init__(message, status_code)
        self.last_failure = last_failure

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "retryable": True}


class OutputValidationError(ContentAIError):
    """Generated text rejected by a feature sanitizer."""

    status_code = 500
