# app/llm/service/catalog.py
from dataclasses import dataclass
from typing import List, Tuple

from app.llm.entity.chat import ProviderFamily
from app.llm.service.credentials import CredentialResolver


@dataclass(frozen=True)
class ModelInfo:
    id: str
    name: str
    provider: ProviderFamily


DEFAULT_MODELS: Tuple[ModelInfo, ...] = (
    ModelInfo("gpt-4o-mini", "GPT-4o Mini", ProviderFamily.OPENAI),
    ModelInfo("claude-3-5-sonnet-20241022", "Claude 3.5 Sonnet", ProviderFamily.ANTHROPIC),
    ModelInfo("gemini-1.5-flash", "Gemini 1.5 Flash", ProviderFamily.GEMINI),
    ModelInfo("gemma-2-9b-it", "Google Gemma 2 9B", ProviderFamily.GEMINI),
    ModelInfo("mistral-large-latest", "Mistral Large", ProviderFamily.MISTRAL),
    ModelInfo("command-r-plus", "Command R+", ProviderFamily.COHERE),
)


@dataclass(frozen=True)
class ModelCatalog:
    """Known models, built once at startup and injected via app.state."""

    models: Tuple[ModelInfo, ...] = DEFAULT_MODELS

    def describe(self, resolver: CredentialResolver) -> List[dict]:
        """Catalog entries with `enabled` derived from credential presence."""
        return [
            {
                "id": m.id,
                "name": m.name,
                "provider": m.provider.value,
                "enabled": resolver.is_configured(m.provider, m.id),
            }
            for m in self.models
        ]
