from typing import Iterable, Iterator

from ..config import Settings
from ..exceptions import ConfigurationError


class ProviderRegistry:
    """Immutable, priority-ordered list of model identifiers.

    Order is fixed at construction and never re-ranked from runtime feedback.
    """

    __slots__ = ("_models",)

    def __init__(self, models: Iterable[str]):
        # duplicates dropped; a model is attempted once per request
        cleaned = tuple(dict.fromkeys(m.strip() for m in models if m and m.strip()))
        if not cleaned:
            raise ConfigurationError("No AI models configured")
        object.__setattr__(self, "_models", cleaned)

    def __setattr__(self, name, value):
        raise AttributeError("ProviderRegistry is immutable")

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderRegistry":
        return cls(settings.models)

    @property
    def last(self) -> str:
        return self._models[-1]

    def is_last(self, model: str) -> bool:
        return model == self.last

    def __iter__(self) -> Iterator[str]:
        return iter(self._models)

    def __len__(self) -> int:
        return len(self._models)

    def __repr__(self) -> str:
        return f"ProviderRegistry(models={len(self._models)})"
