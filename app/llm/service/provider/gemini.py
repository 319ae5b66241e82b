# app/llm/service/provider/gemini.py
from typing import List, Optional

import httpx

from app.llm.entity.chat import ChatTurn, NormalizedChatResponse, ProviderFamily, SamplingConfig
from app.llm.service.credentials import ResolvedCredential
from app.llm.service.normalizer import chat_response
from .base_provider import BaseProvider
from .openai_provider import create_chat_completion, openai_error_message
from .payloads import GeminiGenerateContentResponse


class GeminiProvider(BaseProvider):
    """
    Handles Google Gemini and Gemma models.

    The native generateContent API and the proxy speak incompatible schemas,
    so the credential's routing decision also picks the wire format.
    """

    family = ProviderFamily.GEMINI

    def is_enabled(self) -> bool:
        return self.resolver.is_configured(self.family) or self.resolver.is_configured(self.family, "gemma-")

    @staticmethod
    def gemini_contents(history: List[ChatTurn], user_message: str) -> List[dict]:
        contents = [
            {"role": "user" if turn.role == "user" else "model", "parts": [{"text": turn.content}]}
            for turn in history
        ]
        contents.append({"role": "user", "parts": [{"text": user_message}]})
        return contents

    async def _call(
        self,
        client: httpx.AsyncClient,
        credential: ResolvedCredential,
        model_id: str,
        user_message: str,
        history: List[ChatTurn],
        sampling: SamplingConfig,
    ) -> NormalizedChatResponse:
        if credential.uses_proxy:
            messages = self.chat_messages(history, user_message)
            return await create_chat_completion(
                client, credential, model_id, messages, sampling, self.timeout_seconds
            )

        payload = {
            "contents": self.gemini_contents(history, user_message),
            "generationConfig": {
                "temperature": float(sampling.temperature),
                "maxOutputTokens": int(sampling.max_tokens),
            },
        }
        url = f"{credential.base_url}/models/{model_id}:generateContent"
        res = await client.post(
            url,
            params={"key": credential.api_key},
            json=payload,
            headers=credential.headers,
            timeout=self.timeout_seconds,
        )
        res.raise_for_status()
        reply = GeminiGenerateContentResponse.model_validate(res.json())
        # The native API does not report usage.total_tokens.
        return chat_response(reply.reply_text(), model_id)

    def _error_message(self, error: Exception) -> Optional[str]:
        return openai_error_message(error) or super()._error_message(error)
