"""Map gateway error responses to a failure category and a user-facing message."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

# Retrying another model cannot fix a malformed request, a bad key or a policy block
FATAL_STATUS_CODES = frozenset({400, 401, 402, 403})
RATE_LIMIT_STATUS = 429


class ErrorCategory(Enum):
    FATAL = "fatal"
    RETRYABLE = "retryable"
    RATE_LIMITED = "rate_limited"


@dataclass(frozen=True)
class Classification:
    category: ErrorCategory
    message: str
    status_code: int


def extract_upstream_message(status_code: int, error_body: Optional[Dict[str, Any]] = None) -> str:
    """Best upstream message: error.metadata.raw, then error.message, then raw."""
    error_body = error_body or {}
    error = error_body.get("error")

    if isinstance(error, dict):
        message = "Unknown error"
        if error.get("message"):
            message = str(error["message"])
        metadata = error.get("metadata")
        if isinstance(metadata, dict) and metadata.get("raw"):
            message = str(metadata["raw"])
        return message
    if isinstance(error, str) and error:
        return error
    if error_body.get("raw"):
        return str(error_body["raw"])
    return f"Error {status_code}"


def is_fatal_status(status_code: int) -> bool:
    return status_code in FATAL_STATUS_CODES


class ErrorClassifier:
    """Pure mapping of (status, error body) to a classification. No side effects."""

    MESSAGES = {
        401: "Invalid API key. Please check your OpenRouter API key.",
        402: "Insufficient credits. Please add credits to your OpenRouter account.",
        408: "Request timeout. The model took too long to respond.",
        502: "Bad gateway. The upstream provider is experiencing issues.",
        503: "Service unavailable. Please try again later.",
    }

    def classify(self, status_code: int, error_body: Optional[Dict[str, Any]] = None) -> Classification:
        return Classification(
            category=self.category_for(status_code),
            message=self.message_for(status_code, error_body),
            status_code=status_code,
        )

    @staticmethod
    def category_for(status_code: int) -> ErrorCategory:
        if is_fatal_status(status_code):
            return ErrorCategory.FATAL
        if status_code == RATE_LIMIT_STATUS:
            return ErrorCategory.RATE_LIMITED
        return ErrorCategory.RETRYABLE

    def message_for(self, status_code: int, error_body: Optional[Dict[str, Any]] = None) -> str:
        upstream = extract_upstream_message(status_code, error_body)

        if status_code == 400:
            return f"Invalid request: {upstream}"
        if status_code == 403:
            return f"Content filtered: {upstream}"
        if status_code == RATE_LIMIT_STATUS:
            return upstream or "Rate limited"
        if status_code in self.MESSAGES:
            return self.MESSAGES[status_code]
        return upstream


error_classifier = ErrorClassifier()
