# app/llm/service/router_service.py
from typing import Dict, List, Optional, Tuple

import httpx

from app.core.errors import UnsupportedModelError
from app.core.logger import get_logger
from app.llm.entity.chat import NormalizedChatRequest, NormalizedChatResponse, ProviderFamily
from app.llm.service.credentials import CredentialResolver
from app.llm.service.provider.base_provider import BaseProvider

logger = get_logger("ModelRouter")

# Checked in order, first match wins.
MODEL_PREFIXES: List[Tuple[str, ProviderFamily]] = [
    ("gpt-", ProviderFamily.OPENAI),
    ("claude-", ProviderFamily.ANTHROPIC),
    ("gemini-", ProviderFamily.GEMINI),
    ("gemma-", ProviderFamily.GEMINI),
    ("mistral-", ProviderFamily.MISTRAL),
    ("command-", ProviderFamily.COHERE),
]


def family_for_model(model_id: str) -> Optional[ProviderFamily]:
    for prefix, family in MODEL_PREFIXES:
        if model_id.startswith(prefix):
            return family
    return None


def default_providers(
    resolver: Optional[CredentialResolver] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    timeout_ms: Optional[int] = None,
) -> Dict[ProviderFamily, BaseProvider]:
    from app.llm.service.provider.openai_provider import OpenAIProvider
    from app.llm.service.provider.anthropic import AnthropicProvider
    from app.llm.service.provider.gemini import GeminiProvider
    from app.llm.service.provider.mistral import MistralProvider
    from app.llm.service.provider.cohere import CohereProvider

    resolver = resolver or CredentialResolver()
    return {
        provider.family: provider
        for provider in (
            OpenAIProvider(resolver, http_client, timeout_ms),
            AnthropicProvider(resolver, http_client, timeout_ms),
            GeminiProvider(resolver, http_client, timeout_ms),
            MistralProvider(resolver, http_client, timeout_ms),
            CohereProvider(resolver, http_client, timeout_ms),
        )
    }


class ModelRouter:
    """
    Central routing layer for LLM requests.
    Picks the provider adapter from the model id prefix and delegates to it;
    credential handling stays inside the adapters.
    """

    def __init__(self, providers: Optional[Dict[ProviderFamily, BaseProvider]] = None):
        self.providers = providers if providers is not None else default_providers()

    def provider_for(self, model_id: str) -> BaseProvider:
        family = family_for_model(model_id)
        if family is None or family not in self.providers:
            raise UnsupportedModelError(model_id)
        return self.providers[family]

    async def route(self, request: NormalizedChatRequest) -> NormalizedChatResponse:
        provider = self.provider_for(request.model_id)
        logger.debug(f"route | model={request.model_id} provider={provider.name} history={len(request.history)}")
        return await provider.invoke(
            request.model_id,
            request.user_message,
            request.history,
            request.sampling,
        )

    def __repr__(self):
        return f"<ModelRouter providers={[f.value for f in self.providers]}>"
