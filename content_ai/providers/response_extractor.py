"""Pull generated text out of a chat-completion response.

Models disagree on where the answer lives. Most fill ``message.content``;
reasoning models sometimes leave it empty and put everything in
``message.reasoning`` (or ``message.reasoning_details``). The extractor tries
each source in order, and free-form reasoning text is run through a chain of
strategies supplied by the feature. Each strategy returns text or ``None`` to
pass to the next one.
"""

import re
from typing import Any, Dict, List, Optional, Sequence
import logging

from ..exceptions import NoUsableContentError

logger = logging.getLogger(__name__)

_SENTENCE_SPLIT = re.compile(r"[.!?]+")


class ExtractionStrategy:
    """Turns free-form reasoning text into the wanted output, or None."""

    def extract(self, text: str) -> Optional[str]:
        raise NotImplementedError


class LabeledPatternStrategy(ExtractionStrategy):
    """``label: "..."`` followed by min_length..max_length characters."""

    def __init__(self, label: str, min_length: int = 40, max_length: int = 60):
        self.pattern = re.compile(
            rf"{re.escape(label)}[:\s]+[\"']?([^\"'\n]{{{min_length},{max_length}}})[\"']?",
            re.IGNORECASE,
        )

    def extract(self, text: str) -> Optional[str]:
        match = self.pattern.search(text)
        if match:
            return match.group(1).strip() or None
        return None


class FirstSentenceStrategy(ExtractionStrategy):
    """Text up to the first sentence terminator, truncated."""

    def __init__(self, max_length: int = 60):
        self.max_length = max_length

    def extract(self, text: str) -> Optional[str]:
        first = re.split(r"[.!?]", text, maxsplit=1)[0].strip()
        return first[: self.max_length] or None


class RawTextStrategy(ExtractionStrategy):
    """The whole text; used when the sanitizer can cope with noise (e.g. JSON search)."""

    def extract(self, text: str) -> Optional[str]:
        return text.strip() or None


class MarkerSentencesStrategy(ExtractionStrategy):
    """Up to ``max_sentences`` substantial sentences after the last ``marker``."""

    def __init__(self, marker: str, max_sentences: int = 3, min_length: int = 50, max_length: int = 500):
        self.marker = marker.lower()
        self.max_sentences = max_sentences
        self.min_length = min_length
        self.max_length = max_length

    def extract(self, text: str) -> Optional[str]:
        index = text.lower().rfind(self.marker)
        if index == -1:
            return None
        after = text[index + len(self.marker):].strip()
        sentences = [s.strip() for s in _SENTENCE_SPLIT.split(after) if len(s.strip()) > 20]
        found = ". ".join(sentences[: self.max_sentences]).strip()
        if self.min_length < len(found) <= self.max_length:
            return found
        return None


class QuotedTextStrategy(ExtractionStrategy):
    """Last quoted span within the length bounds; reasoning models usually quote their final answer."""

    def __init__(self, min_length: int = 50, max_length: int = 500):
        self.pattern = re.compile(rf"[\"']([^\"']{{{min_length},{max_length}}})[\"']")

    def extract(self, text: str) -> Optional[str]:
        matches = self.pattern.findall(text)
        if matches:
            return matches[-1].strip() or None
        return None


class ClosingSentencesStrategy(ExtractionStrategy):
    """Last sentences of the reasoning, skipping ones that read as thinking aloud."""

    THINKING_PHRASES = (
        "wait -",
        "let me",
        "hmm",
        "brainstorming",
        "potential pitfalls",
        "refining:",
        "first,",
        "looking at",
        "i notice",
        "should",
        "must",
    )

    def __init__(self, min_length: int = 50):
        self.min_length = min_length

    def extract(self, text: str) -> Optional[str]:
        sentences = [s for s in _SENTENCE_SPLIT.split(text) if len(s.strip()) > 30]
        if not sentences:
            return None

        candidates = [
            s for s in sentences
            if not any(phrase in s.lower() for phrase in self.THINKING_PHRASES)
        ][-3:]

        if len(candidates) >= 2:
            found = ". ".join(s.strip() for s in candidates[-2:])
        elif len(candidates) == 1 and len(candidates[0]) > self.min_length:
            found = candidates[0].strip()
        else:
            found = ". ".join(s.strip() for s in sentences[-2:])

        if len(found) < self.min_length:
            return None
        return found


class TailStrategy(ExtractionStrategy):
    """Last resort: the final ``length`` characters."""

    def __init__(self, length: int = 500):
        self.length = length

    def extract(self, text: str) -> Optional[str]:
        return text[-self.length:].strip() or None


class ResponseExtractor:
    """Ordered chain of field sources, with strategies for the reasoning fields.

    An empty ``reasoning_strategies`` list means only ``message.content`` is used.
    """

    def __init__(self, reasoning_strategies: Sequence[ExtractionStrategy] = ()):
        self.reasoning_strategies = list(reasoning_strategies)

    def extract(self, body: Dict[str, Any]) -> str:
        choice = self._first_choice(body)

        error = choice.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise NoUsableContentError(message or "Error in AI response")

        finish_reason = choice.get("finish_reason")
        if finish_reason == "length":
            logger.warning("Generation stopped due to max_tokens limit")

        message = choice.get("message") or {}
        if not isinstance(message, dict):
            raise NoUsableContentError("No content received from AI model")

        content = message.get("content")
        if isinstance(content, str) and content.strip():
            return content.strip()

        if self.reasoning_strategies:
            for reasoning in self._reasoning_texts(message):
                text = self._apply_strategies(reasoning)
                if text:
                    return text

        if finish_reason == "content_filter":
            raise NoUsableContentError("Content was filtered by the AI model")
        raise NoUsableContentError("No content received from AI model")

    @staticmethod
    def _first_choice(body: Dict[str, Any]) -> Dict[str, Any]:
        choices = body.get("choices") if isinstance(body, dict) else None
        if not choices or not isinstance(choices, list) or not isinstance(choices[0], dict):
            raise NoUsableContentError("No choices in AI response")
        return choices[0]

    @staticmethod
    def _reasoning_texts(message: Dict[str, Any]) -> List[str]:
        texts = []
        reasoning = message.get("reasoning")
        if isinstance(reasoning, str) and reasoning.strip():
            texts.append(reasoning.strip())

        details = message.get("reasoning_details")
        if isinstance(details, list):
            joined = " ".join(
                item["text"].strip()
                for item in details
                if isinstance(item, dict)
                and item.get("type") == "reasoning.text"
                and isinstance(item.get("text"), str)
            ).strip()
            if joined:
                texts.append(joined)
        return texts

    def _apply_strategies(self, text: str) -> Optional[str]:
        for strategy in self.reasoning_strategies:
            found = strategy.extract(text)
            if found:
                return found
        return None
