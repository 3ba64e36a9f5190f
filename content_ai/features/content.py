import re
from typing import Optional

from ..exceptions import InputValidationError, OutputValidationError
from ..models.ai import ImproveContentRequest, ImproveContentResponse
from .base import ContentFeature, strip_html, strip_quotes

MIN_CONTENT_LENGTH = 10
MIN_RESULT_LENGTH = 10

_VERBS = "improved|rephrased|shortened|expanded|corrected"

# Boilerplate lead-ins models put before the actual rewrite
_LEAD_INS = [
    re.compile(rf"^Here is the ({_VERBS}) (content|version):?\s*", re.IGNORECASE),
    re.compile(rf"^Here's (the|a) ({_VERBS}) (content|version):?\s*", re.IGNORECASE),
    re.compile(rf"^({_VERBS}) (content|version):?\s*", re.IGNORECASE),
]
_CODE_FENCE = re.compile(r"^```\w*\n?|\n?```$")
_SENTENCE_END = re.compile(r"[.!?][\"']?$")

_INSTRUCTIONS = {
    "improve": (
        "Please improve the following blog post content by:\n"
        "- Making it more engaging and readable\n"
        "- Improving the flow and structure\n"
        "- Enhancing clarity and conciseness\n"
        "- Adding better transitions between ideas\n"
        "- Maintaining the original meaning and key points\n\n"
        "Content to improve:",
        "Please provide only the improved content without any additional explanations or formatting.",
    ),
    "rephrase": (
        "Please rephrase the following blog post content while:\n"
        "- Keeping the same meaning and key points\n"
        "- Using different words and sentence structures\n"
        "- Making it more natural and flowing\n"
        "- Maintaining a professional tone\n"
        "- Preserving all important information\n\n"
        "Content to rephrase:",
        "Please provide only the rephrased content without any additional explanations.",
    ),
    "shorten": (
        "Please shorten the following blog post content by:\n"
        "- Reducing word count by 30-50%\n"
        "- Keeping all essential information and key points\n"
        "- Maintaining clarity and coherence\n"
        "- Preserving the main message and conclusions\n\n"
        "Content to shorten:",
        "Please provide only the shortened content without any additional explanations.",
    ),
    "expand": (
        "Please expand the following blog post content by:\n"
        "- Adding more details and explanations where appropriate\n"
        "- Providing examples or elaborations\n"
        "- Improving transitions between ideas\n"
        "- Making the content more comprehensive\n"
        "- Adding relevant context when helpful\n\n"
        "Content to expand:",
        "Please provide only the expanded content without any additional explanations.",
    ),
    "grammar": (
        "Please fix grammar, spelling, and punctuation in the following blog post content:\n"
        "- Correct any grammatical errors\n"
        "- Fix spelling mistakes\n"
        "- Improve punctuation\n"
        "- Make sentences clearer\n"
        "- Ensure consistent tense and style\n\n"
        "Content to fix:",
        "Please provide only the corrected content without any additional explanations.",
    ),
}


def build_rewrite_prompt(action: str, content: str, title: Optional[str] = None) -> str:
    context = f'Title: "{title}"\n\n' if title else ""
    instructions = _INSTRUCTIONS.get(action)
    if instructions is None:
        return (
            f"{context}Please improve the following blog post content by making it more "
            f"engaging, clear, and well-structured:\n\nContent:\n{content}\n\n"
            "Please provide only the improved content without any additional explanations."
        )
    lead, closing = instructions
    return f"{context}{lead}\n{content}\n\n{closing}"


def sanitize_rewrite(raw: str, action: str) -> str:
    content = strip_quotes(raw)
    for pattern in _LEAD_INS:
        content = pattern.sub("", content)
    content = _CODE_FENCE.sub("", content)
    content = content.strip()

    # grammar fixes must not alter the author's final punctuation
    if content and action != "grammar" and not _SENTENCE_END.search(content):
        content += "."

    if len(content) < MIN_RESULT_LENGTH:
        raise OutputValidationError("AI response too short")
    return content


class ImproveContentFeature(ContentFeature[ImproveContentRequest]):
    name = "content"
    app_title = "Blog Content Improver"
    temperature = 0.7

    def validate(self, payload: ImproveContentRequest) -> None:
        if len(strip_html(payload.content)) < MIN_CONTENT_LENGTH:
            raise InputValidationError("Content must be at least 10 characters after removing HTML")

    def build_prompt(self, payload: ImproveContentRequest) -> str:
        return build_rewrite_prompt(payload.action, strip_html(payload.content), payload.title)

    def max_tokens(self, payload: ImproveContentRequest) -> int:
        return min(4000, max(1000, int(len(strip_html(payload.content)) * 1.5)))

    def timeout(self, payload: ImproveContentRequest) -> float:
        # 10s base plus 2ms per character, capped at a minute
        return min(60.0, 10.0 + len(strip_html(payload.content)) * 0.002)

    def sanitize(self, raw_text: str, payload: ImproveContentRequest) -> str:
        return sanitize_rewrite(raw_text, payload.action)

    def render(self, result: str, model: str, payload: ImproveContentRequest) -> ImproveContentResponse:
        return ImproveContentResponse(improved_content=result, model=model, action=payload.action)
