# app/llm/service/provider/mistral.py
from typing import List, Optional

import httpx

from app.llm.entity.chat import ChatTurn, NormalizedChatResponse, ProviderFamily, SamplingConfig
from app.llm.service.credentials import ResolvedCredential
from .base_provider import BaseProvider
from .openai_provider import create_chat_completion, openai_error_message


class MistralProvider(BaseProvider):
    """Handles Mistral models. Direct only: Mistral's API speaks the chat-completions schema."""

    family = ProviderFamily.MISTRAL

    async def _call(
        self,
        client: httpx.AsyncClient,
        credential: ResolvedCredential,
        model_id: str,
        user_message: str,
        history: List[ChatTurn],
        sampling: SamplingConfig,
    ) -> NormalizedChatResponse:
        messages = self.chat_messages(history, user_message)
        return await create_chat_completion(
            client, credential, model_id, messages, sampling, self.timeout_seconds
        )

    def _error_message(self, error: Exception) -> Optional[str]:
        return openai_error_message(error) or super()._error_message(error)
