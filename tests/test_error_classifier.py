import pytest

from content_ai.reliability.error_classifier import (
    ErrorCategory,
    ErrorClassifier,
    extract_upstream_message,
)


@pytest.fixture
def classifier():
    return ErrorClassifier()


@pytest.mark.parametrize("status", [400, 401, 402, 403])
def test_fatal_statuses(classifier, status):
    assert classifier.classify(status).category == ErrorCategory.FATAL


def test_rate_limit_is_its_own_category(classifier):
    result = classifier.classify(429, {"error": {"message": "slow down"}})
    assert result.category == ErrorCategory.RATE_LIMITED
    assert result.message == "slow down"
    assert result.status_code == 429


@pytest.mark.parametrize("status", [404, 408, 500, 502, 503, 504, 520])
def test_everything_else_is_retryable(classifier, status):
    assert classifier.classify(status).category == ErrorCategory.RETRYABLE


def test_bad_request_includes_upstream_message(classifier):
    result = classifier.classify(400, {"error": {"message": "max_tokens too large"}})
    assert result.message == "Invalid request: max_tokens too large"


def test_content_filtered_prefers_metadata_raw(classifier):
    body = {"error": {"message": "Forbidden", "metadata": {"raw": "flagged as unsafe"}}}
    assert classifier.classify(403, body).message == "Content filtered: flagged as unsafe"


def test_fixed_messages(classifier):
    assert classifier.classify(401).message.startswith("Invalid API key")
    assert classifier.classify(402).message.startswith("Insufficient credits")
    assert classifier.classify(408).message.startswith("Request timeout")
    assert classifier.classify(502).message.startswith("Bad gateway")
    assert classifier.classify(503).message.startswith("Service unavailable")


def test_unknown_status_falls_back_to_status_text(classifier):
    assert classifier.classify(418).message == "Error 418"
    assert classifier.classify(500, {"raw": "upstream crashed"}).message == "upstream crashed"


def test_error_object_without_message():
    assert extract_upstream_message(429, {"error": {}}) == "Unknown error"
    assert extract_upstream_message(429, {}) == "Error 429"
    assert extract_upstream_message(429, None) == "Error 429"
