import json
import math
import re
from typing import Any, Dict, List, Optional
import logging

from pydantic import ValidationError

from ..exceptions import InputValidationError, OutputValidationError
from ..models.ai import SEORequest, SEOResponse, SEOSuggestions
from ..providers.response_extractor import RawTextStrategy
from .base import ContentFeature, strip_html

logger = logging.getLogger(__name__)

MIN_CONTENT_LENGTH = 50
PROMPT_CONTENT_LIMIT = 1000
REQUIRED_SECTIONS = ("title", "description", "keywords")
PARSE_ERROR = "Failed to parse SEO suggestions. Please try again."

_FENCED_JSON = re.compile(r"```(?:json)?\s*(\{[\s\S]*\})\s*```")
_BRACED = re.compile(r"\{[\s\S]*\}")


def build_seo_prompt(
    title: str,
    content: str,
    description: Optional[str] = None,
    keywords: Optional[List[str]] = None,
) -> str:
    keyword_text = ", ".join(keywords) if keywords else "Not provided"
    return (
        "Analyze the following blog post and provide SEO optimization suggestions in JSON format:\n\n"
        f"Title: {title or 'Not provided'}\n"
        f"Description: {description or 'Not provided'}\n"
        f"Keywords: {keyword_text}\n"
        f"Content: {content[:PROMPT_CONTENT_LIMIT]}...\n\n"
        "Provide a JSON response with this structure:\n"
        "{\n"
        '  "title": {\n'
        f'    "current": {json.dumps(title or "")},\n'
        '    "suggested": "optimized title (40-60 chars)",\n'
        '    "score": 0-100,\n'
        '    "feedback": ["issue 1", "issue 2"]\n'
        "  },\n"
        '  "description": {\n'
        f'    "current": {json.dumps(description or "")},\n'
        '    "suggested": "optimized meta description (150-160 chars)",\n'
        '    "score": 0-100,\n'
        '    "feedback": ["issue 1", "issue 2"]\n'
        "  },\n"
        '  "keywords": {\n'
        '    "suggested": ["keyword1", "keyword2", "keyword3", "keyword4", "keyword5"],\n'
        '    "score": 0-100,\n'
        '    "feedback": ["issue 1", "issue 2"]\n'
        "  },\n"
        '  "overall": {\n'
        '    "score": 0-100,\n'
        '    "feedback": ["general feedback 1", "general feedback 2"]\n'
        "  }\n"
        "}\n\n"
        "Only return the JSON, no other text."
    )


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_score(value: Any) -> int:
    """Coerce a model-provided score into an integer in [0, 100]."""
    try:
        score = float(value or 0)
    except (TypeError, ValueError):
        return 0
    if math.isnan(score):
        return 0
    return round_half_up(max(0.0, min(100.0, score)))


def find_json_object(text: str) -> Dict[str, Any]:
    """Locate and parse the JSON object in model output.

    Prefers a fenced code block, then the first decodable top-level object,
    then the widest brace-delimited span.
    """
    fenced = _FENCED_JSON.search(text)
    if fenced:
        return json.loads(fenced.group(1))

    decoder = json.JSONDecoder()
    start = text.find("{")
    while start != -1:
        try:
            obj, _ = decoder.raw_decode(text, start)
        except ValueError:
            start = text.find("{", start + 1)
            continue
        if isinstance(obj, dict):
            return obj
        start = text.find("{", start + 1)

    braced = _BRACED.search(text)
    return json.loads(braced.group(0) if braced else text)


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


def sanitize_seo(raw: str) -> SEOSuggestions:
    try:
        data = find_json_object(raw)
    except ValueError as e:
        logger.error(f"Failed to parse SEO suggestions: {e}")
        raise OutputValidationError(PARSE_ERROR)

    if not isinstance(data, dict):
        raise OutputValidationError(PARSE_ERROR)

    for section in REQUIRED_SECTIONS:
        if not isinstance(data.get(section), dict):
            logger.error(f"Invalid SEO response format: missing {section}")
            raise OutputValidationError(PARSE_ERROR)

    title, description, keywords = (data[s] for s in REQUIRED_SECTIONS)

    title_score = clamp_score(title.get("score"))
    description_score = clamp_score(description.get("score"))
    keywords_score = clamp_score(keywords.get("score"))

    overall = data.get("overall")
    if isinstance(overall, dict):
        overall = {
            "score": clamp_score(overall.get("score")),
            "feedback": [_as_text(f) for f in _as_list(overall.get("feedback"))],
        }
    else:
        overall = {
            "score": round_half_up((title_score + description_score + keywords_score) / 3),
            "feedback": [],
        }

    try:
        return SEOSuggestions(
            title={
                "current": _as_text(title.get("current")),
                "suggested": _as_text(title.get("suggested")),
                "score": title_score,
                "feedback": [_as_text(f) for f in _as_list(title.get("feedback"))],
            },
            description={
                "current": None if description.get("current") is None
                else _as_text(description["current"]),
                "suggested": _as_text(description.get("suggested")),
                "score": description_score,
                "feedback": [_as_text(f) for f in _as_list(description.get("feedback"))],
            },
            keywords={
                "suggested": [_as_text(k) for k in _as_list(keywords.get("suggested"))],
                "score": keywords_score,
                "feedback": [_as_text(f) for f in _as_list(keywords.get("feedback"))],
            },
            overall=overall,
        )
    except ValidationError as e:
        logger.error(f"SEO suggestions failed validation: {e}")
        raise OutputValidationError(PARSE_ERROR)


class SEOFeature(ContentFeature[SEORequest]):
    name = "seo"
    app_title = "SEO Optimization Assistant"
    temperature = 0.5
    # reasoning is searched for JSON as a whole
    reasoning_strategies = (RawTextStrategy(),)

    def validate(self, payload: SEORequest) -> None:
        if len(strip_html(payload.content)) < MIN_CONTENT_LENGTH:
            raise InputValidationError("Content must be at least 50 characters long")

    def build_prompt(self, payload: SEORequest) -> str:
        return build_seo_prompt(
            payload.title,
            strip_html(payload.content),
            payload.description,
            payload.keywords,
        )

    def max_tokens(self, payload: SEORequest) -> int:
        return 800

    def timeout(self, payload: SEORequest) -> float:
        return 45.0

    def sanitize(self, raw_text: str, payload: SEORequest) -> SEOSuggestions:
        return sanitize_seo(raw_text)

    def render(self, result: SEOSuggestions, model: str, payload: SEORequest) -> SEOResponse:
        return SEOResponse(suggestions=result)
