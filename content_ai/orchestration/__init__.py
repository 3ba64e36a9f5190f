from .registry import ProviderRegistry
from .fallback_manager import FallbackManager, OrchestrationResult, OrchestrationStatus

__all__ = [
    "ProviderRegistry",
    "FallbackManager",
    "OrchestrationResult",
    "OrchestrationStatus",
]
