# app/llm/service/provider/openai_provider.py
from typing import List, Optional

import httpx
import openai
from openai import AsyncOpenAI

from app.llm.entity.chat import ChatTurn, NormalizedChatResponse, ProviderFamily, SamplingConfig
from app.llm.service.credentials import ResolvedCredential
from app.llm.service.normalizer import chat_response, extract_error_message, to_usage_total
from .base_provider import BaseProvider


def openai_compatible_client(
    client: httpx.AsyncClient,
    credential: ResolvedCredential,
    timeout_seconds: float,
) -> AsyncOpenAI:
    """
    SDK client for any endpoint speaking the chat-completions schema
    (OpenAI itself, Mistral, and the proxy for every vendor it fronts).
    Retries are disabled: one invocation is exactly one POST.
    """
    return AsyncOpenAI(
        api_key=credential.api_key,
        base_url=credential.base_url,
        default_headers=credential.headers,
        max_retries=0,
        timeout=timeout_seconds,
        http_client=client,
    )


async def create_chat_completion(
    client: httpx.AsyncClient,
    credential: ResolvedCredential,
    model_id: str,
    messages: List[dict],
    sampling: SamplingConfig,
    timeout_seconds: float,
) -> NormalizedChatResponse:
    sdk = openai_compatible_client(client, credential, timeout_seconds)
    completion = await sdk.chat.completions.create(
        model=credential.wire_model(model_id),
        messages=messages,
        temperature=sampling.temperature,
        max_tokens=sampling.max_tokens,
    )
    content = completion.choices[0].message.content
    if content is None:
        raise ValueError("completion has no message content")
    return chat_response(content, model_id, to_usage_total(completion.usage))


def openai_error_message(error: Exception) -> Optional[str]:
    if isinstance(error, openai.APIStatusError):
        message = extract_error_message(error.body)
        if message:
            return message
        try:
            return extract_error_message(error.response.json())
        except ValueError:
            return None
    return None


class OpenAIProvider(BaseProvider):
    """Handles GPT models, directly or through the proxy."""

    family = ProviderFamily.OPENAI

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
