# app/llm/service/provider/anthropic.py
from typing import List, Optional

import anthropic
import httpx
from anthropic import AsyncAnthropic

from app.llm.entity.chat import ChatTurn, NormalizedChatResponse, ProviderFamily, SamplingConfig
from app.llm.service.credentials import ResolvedCredential
from app.llm.service.normalizer import chat_response, extract_error_message, to_usage_total
from .base_provider import BaseProvider
from .openai_provider import create_chat_completion, openai_error_message


class AnthropicProvider(BaseProvider):
    """Handles Claude (Anthropic) models."""

    family = ProviderFamily.ANTHROPIC

    @staticmethod
    def claude_messages(history: List[ChatTurn], user_message: str) -> List[dict]:
        # Messages API only knows user/assistant; anything else is sent as user.
        messages = [
            {"role": "assistant" if turn.role == "assistant" else "user", "content": turn.content}
            for turn in history
        ]
        messages.append({"role": "user", "content": user_message})
        return messages

    async def _call(
        self,
        client: httpx.AsyncClient,
        credential: ResolvedCredential,
        model_id: str,
        user_message: str,
        history: List[ChatTurn],
        sampling: SamplingConfig,
    ) -> NormalizedChatResponse:
        messages = self.claude_messages(history, user_message)

        if credential.uses_proxy:
            return await create_chat_completion(
                client, credential, model_id, messages, sampling, self.timeout_seconds
            )

        sdk = AsyncAnthropic(
            api_key=credential.api_key,
            base_url=credential.base_url,
            default_headers=credential.headers,
            max_retries=0,
            timeout=self.timeout_seconds,
            http_client=client,
        )
        msg = await sdk.messages.create(
            model=model_id,
            messages=messages,
            max_tokens=sampling.max_tokens,
            temperature=sampling.temperature,
        )
        text = getattr(msg.content[0], "text", None)
        if text is None:
            raise ValueError("first content block carries no text")
        # The Messages API reports input/output tokens only, so this stays None
        # unless a total is present.
        return chat_response(text, model_id, to_usage_total(msg.usage))

    def _error_message(self, error: Exception) -> Optional[str]:
        if isinstance(error, anthropic.APIStatusError):
            message = extract_error_message(error.body)
            if message:
                return message
            try:
                return extract_error_message(error.response.json())
            except ValueError:
                return None
        return openai_error_message(error) or super()._error_message(error)
