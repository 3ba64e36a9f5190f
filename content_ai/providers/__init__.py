from .base_provider import AttemptOutcome, BaseProvider, OutcomeKind, PromptRequest
from .openrouter import OpenRouterClient
from .response_extractor import ResponseExtractor

__all__ = [
    "AttemptOutcome",
    "BaseProvider",
    "OutcomeKind",
    "PromptRequest",
    "OpenRouterClient",
    "ResponseExtractor",
]
