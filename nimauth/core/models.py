"""
Model catalog types for nimauth.

A Model describes one invokable inference target. Providers build these from
their upstream model listings; nothing here is persisted.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Tuple

# Wire protocol dialect for OpenAI-style chat completions endpoints
OPENAI_COMPLETIONS_API = "openai-completions"


@dataclass(frozen=True)
class ModelCost:
    """Per-million-token pricing. All zero when the upstream has no pricing."""
    input: float = 0
    output: float = 0
    cache_read: float = 0
    cache_write: float = 0

    def to_dict(self) -> Dict[str, float]:
        return {
            "input": self.input,
            "output": self.output,
            "cacheRead": self.cache_read,
            "cacheWrite": self.cache_write,
        }


@dataclass(frozen=True)
class Model:
    """Catalog entry for a single model."""
    id: str
    name: str
    api: str
    provider: str
    base_url: str
    reasoning: bool = False
    input: Tuple[str, ...] = ("text",)
    cost: ModelCost = field(default_factory=ModelCost)
    context_window: int = 8192
    max_tokens: int = 4096

    def replace(self, **changes: Any) -> "Model":
        """Return a copy with the given fields changed."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the catalog's camelCase keys."""
        return {
            "id": self.id,
            "name": self.name,
            "api": self.api,
            "provider": self.provider,
            "baseUrl": self.base_url,
            "reasoning": self.reasoning,
            "input": list(self.input),
            "cost": self.cost.to_dict(),
            "contextWindow": self.context_window,
            "maxTokens": self.max_tokens,
        }
