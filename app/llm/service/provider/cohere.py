# app/llm/service/provider/cohere.py
from typing import List

import httpx

from app.llm.entity.chat import ChatTurn, NormalizedChatResponse, ProviderFamily, SamplingConfig
from app.llm.service.credentials import ResolvedCredential
from app.llm.service.normalizer import chat_response
from .base_provider import BaseProvider
from .payloads import CohereChatResponse


class CohereProvider(BaseProvider):
    """Handles Cohere Command models through the v1 chat endpoint."""

    family = ProviderFamily.COHERE

    @staticmethod
    def chat_history(history: List[ChatTurn]) -> List[dict]:
        return [
            {"role": "USER" if turn.role == "user" else "CHATBOT", "message": turn.content}
            for turn in history
        ]

    async def _call(
        self,
        client: httpx.AsyncClient,
        credential: ResolvedCredential,
        model_id: str,
        user_message: str,
        history: List[ChatTurn],
        sampling: SamplingConfig,
    ) -> NormalizedChatResponse:
        payload = {
            "model": model_id,
            "message": user_message,
            "chat_history": self.chat_history(history),
            "temperature": sampling.temperature,
            "max_tokens": sampling.max_tokens,
        }
        res = await client.post(
            f"{credential.base_url}/chat",
            json=payload,
            headers=credential.headers,
            timeout=self.timeout_seconds,
        )
        res.raise_for_status()
        reply = CohereChatResponse.model_validate(res.json())
        return chat_response(reply.reply_text(), model_id)
