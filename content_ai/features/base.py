"""Feature strategy: what a content feature supplies to the shared fallback loop."""

import re
from abc import ABC, abstractmethod
from typing import Any, Generic, Sequence, TypeVar

from pydantic import BaseModel

from ..providers.base_provider import PromptRequest
from ..providers.response_extractor import ExtractionStrategy, ResponseExtractor

PayloadT = TypeVar("PayloadT", bound=BaseModel)

_HTML_TAG = re.compile(r"<[^>]*>")
_SURROUNDING_QUOTES = re.compile(r"^([\"'])(.*)\1$", re.DOTALL)
_MARKDOWN = re.compile(r"\*\*|\*|__|_|`")


def strip_html(content: str) -> str:
    return _HTML_TAG.sub("", content).strip()


def strip_quotes(text: str) -> str:
    """Drop one matching pair of quotes wrapping the whole text."""
    return _SURROUNDING_QUOTES.sub(r"\2", text)


def strip_markdown(text: str) -> str:
    return _MARKDOWN.sub("", text)


class ContentFeature(ABC, Generic[PayloadT]):
    """One AI feature: its prompt, its generation budget and its output rules.

    The fallback manager owns the model loop; a feature only describes how to
    ask and how to judge the answer.
    """

    name: str = "feature"
    app_title: str = "Content AI Assistant"
    temperature: float = 0.7
    reasoning_strategies: Sequence[ExtractionStrategy] = ()

    def validate(self, payload: PayloadT) -> None:
        """Raise InputValidationError when the payload cannot produce a prompt."""

    @abstractmethod
    def build_prompt(self, payload: PayloadT) -> str:
        pass

    @abstractmethod
    def max_tokens(self, payload: PayloadT) -> int:
        pass

    @abstractmethod
    def timeout(self, payload: PayloadT) -> float:
        pass

    @abstractmethod
    def sanitize(self, raw_text: str, payload: PayloadT) -> Any:
        """Shape raw model text into the feature result or raise OutputValidationError."""

    @abstractmethod
    def render(self, result: Any, model: str, payload: PayloadT) -> BaseModel:
        """Caller-facing JSON body for a successful result."""

    def build_request(self, payload: PayloadT) -> PromptRequest:
        return PromptRequest(
            feature=self.name,
            prompt=self.build_prompt(payload),
            max_tokens=self.max_tokens(payload),
            temperature=self.temperature,
            timeout=self.timeout(payload),
            app_title=self.app_title,
        )

    def extractor(self) -> ResponseExtractor:
        return ResponseExtractor(self.reasoning_strategies)
