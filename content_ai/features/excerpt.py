import re

from ..exceptions import InputValidationError, OutputValidationError
from ..models.ai import ExcerptRequest, ExcerptResponse
from ..providers.response_extractor import (
    ClosingSentencesStrategy,
    MarkerSentencesStrategy,
    QuotedTextStrategy,
    TailStrategy,
)
from .base import ContentFeature, strip_html, strip_markdown, strip_quotes

PROMPT_CONTENT_LIMIT = 1500
MIN_EXCERPT_LENGTH = 50
MAX_EXCERPT_LENGTH = 500

_REASONING_LABELS = re.compile(r"^(?:first sentence|second sentence|third|excerpt:)\s*", re.IGNORECASE)


def trim_to_sentence(text: str, limit: int = MAX_EXCERPT_LENGTH) -> str:
    """Cut overlong text at the last sentence end past 100 chars, else hard-cut with an ellipsis."""
    if len(text) <= limit:
        return text
    truncated = text[: limit - 3]
    last_end = max(truncated.rfind("."), truncated.rfind("!"), truncated.rfind("?"))
    if last_end > 100:
        return truncated[: last_end + 1]
    return truncated + "..."


def sanitize_excerpt(raw: str) -> str:
    excerpt = _REASONING_LABELS.sub("", raw.strip())
    excerpt = re.sub(r"^\*+|\*+$", "", excerpt).strip()
    excerpt = strip_markdown(strip_quotes(excerpt)).strip()

    if len(excerpt) < MIN_EXCERPT_LENGTH:
        raise OutputValidationError(
            "Generated excerpt is too short. Please try again or provide more content."
        )
    return trim_to_sentence(excerpt)


class ExcerptFeature(ContentFeature[ExcerptRequest]):
    name = "excerpt"
    app_title = "Blog Excerpt Generator"
    temperature = 0.7
    reasoning_strategies = (
        MarkerSentencesStrategy("excerpt:"),
        QuotedTextStrategy(MIN_EXCERPT_LENGTH, MAX_EXCERPT_LENGTH),
        ClosingSentencesStrategy(MIN_EXCERPT_LENGTH),
        TailStrategy(MAX_EXCERPT_LENGTH),
    )

    def validate(self, payload: ExcerptRequest) -> None:
        if not payload.title or not payload.content:
            raise InputValidationError("Title and content are required")
        if len(payload.title.split()) <= 1:
            raise InputValidationError("Title must have more than 1 word")
        if not strip_html(payload.content):
            raise InputValidationError(
                "Content is empty or contains only HTML tags. Please provide text content."
            )

    def build_prompt(self, payload: ExcerptRequest) -> str:
        content = strip_html(payload.content)[:PROMPT_CONTENT_LIMIT]
        return (
            "Write a 2-3 sentence blog excerpt (max 500 chars, no markdown/quotes) for:\n\n"
            f"Title: {payload.title}\n"
            f"Content: {content}\n\n"
            "Excerpt:"
        )

    def max_tokens(self, payload: ExcerptRequest) -> int:
        # reasoning models spend tokens thinking before they answer
        return 600

    def timeout(self, payload: ExcerptRequest) -> float:
        length = len(strip_html(payload.content)[:PROMPT_CONTENT_LIMIT])
        if length > 1200:
            return 60.0
        if length > 800:
            return 45.0
        return 30.0

    def sanitize(self, raw_text: str, payload: ExcerptRequest) -> str:
        return sanitize_excerpt(raw_text)

    def render(self, result: str, model: str, payload: ExcerptRequest) -> ExcerptResponse:
        return ExcerptResponse(excerpt=result)
