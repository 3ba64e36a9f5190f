import re

from ..exceptions import InputValidationError, OutputValidationError
from ..models.ai import TitleRequest, TitleResponse
from ..providers.response_extractor import FirstSentenceStrategy, LabeledPatternStrategy
from .base import ContentFeature, strip_html, strip_markdown, strip_quotes

MIN_CONTENT_LENGTH = 50
PROMPT_CONTENT_LIMIT = 2000

MIN_TITLE_LENGTH = 20
MAX_TITLE_LENGTH = 60
TRUNCATE_AT = 57  # leaves room for the ellipsis
MIN_WORD_BOUNDARY = 40

_LEADING_LABEL = re.compile(
    r"^(?:title[:\s]+|option\s*\d*:?\s*|choice\s*\d*:?\s*|alternative\s*\d*:?\s*|suggestion\s*\d*:?\s*)\s*",
    re.IGNORECASE,
)
_LEADING_SEPARATOR = re.compile(r"^[:\-–—]\s*")
_TRAILING_SEPARATOR = re.compile(r"\s*[:\-–—]$")

PROMPT_TEMPLATE = """Based on the following blog post content, generate a compelling, SEO-friendly title that:
- Is between 40-60 characters long
- Captures the main topic and value proposition
- Is engaging and click-worthy
- Includes relevant keywords naturally
- Avoids clickbait or misleading language

Requirements:
- No labels, prefixes, or formatting (no "Title:", "Option:", "Choice:", etc.)
- No markdown, quotes, or special characters
- Just the title text directly
- Between 40-60 characters

Content:
{content}

Title:"""


def clean_title(raw: str) -> str:
    """Remove labels, markdown, quotes and stray separators from model output."""
    title = _LEADING_LABEL.sub("", raw)
    title = re.sub(r"\n+", " ", title)
    title = re.sub(r"\s+", " ", title)
    title = strip_quotes(title)
    title = strip_markdown(title)
    title = _LEADING_SEPARATOR.sub("", title)
    title = _TRAILING_SEPARATOR.sub("", title)
    return title.strip()


def sanitize_title(raw: str) -> str:
    title = clean_title(raw)

    if len(title) < MIN_TITLE_LENGTH:
        raise OutputValidationError("Generated title is too short. Please try again.")

    if len(title) > MAX_TITLE_LENGTH:
        truncated = title[:TRUNCATE_AT]
        last_space = truncated.rfind(" ")
        if last_space > MIN_WORD_BOUNDARY:
            title = truncated[:last_space] + "..."
        else:
            title = truncated + "..."

    return title


class TitleFeature(ContentFeature[TitleRequest]):
    name = "title"
    app_title = "Blog Title Generator"
    temperature = 0.7
    reasoning_strategies = (
        LabeledPatternStrategy("title", 40, 60),
        FirstSentenceStrategy(MAX_TITLE_LENGTH),
    )

    def validate(self, payload: TitleRequest) -> None:
        if len(strip_html(payload.content)) < MIN_CONTENT_LENGTH:
            raise InputValidationError(
                "Content must be at least 50 characters long to generate a title"
            )

    def build_prompt(self, payload: TitleRequest) -> str:
        text = strip_html(payload.content)[:PROMPT_CONTENT_LIMIT]
        return PROMPT_TEMPLATE.format(content=text)

    def max_tokens(self, payload: TitleRequest) -> int:
        return 100

    def timeout(self, payload: TitleRequest) -> float:
        return 30.0

    def sanitize(self, raw_text: str, payload: TitleRequest) -> str:
        return sanitize_title(raw_text)

    def render(self, result: str, model: str, payload: TitleRequest) -> TitleResponse:
        return TitleResponse(title=result)
