# app/llm/service/provider/base_provider.py
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

import httpx

from app.core.config import settings
from app.core.errors import ChatServiceError, UpstreamError
from app.core.logger import get_logger
from app.llm.entity.chat import ChatTurn, NormalizedChatResponse, ProviderFamily, SamplingConfig
from app.llm.service.credentials import CredentialResolver, ResolvedCredential
from app.llm.service.normalizer import extract_error_message

logger = get_logger("Provider")


class BaseProvider(ABC):
    """
    Abstract base provider for all LLM integrations.

    Subclasses only build the vendor payload and read the vendor reply in `_call`;
    credential resolution, client lifetime and error translation live here so no
    vendor or transport exception leaves `invoke`.
    """

    family: ProviderFamily

    def __init__(
        self,
        resolver: Optional[CredentialResolver] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout_ms: Optional[int] = None,
    ):
        self.resolver = resolver or CredentialResolver()
        self._shared_client = http_client
        self.timeout_seconds = (timeout_ms or settings.REQUEST_TIMEOUT_MS) / 1000

    @property
    def name(self) -> str:
        return self.family.value

    @property
    def label(self) -> str:
        return self.family.label

    def is_enabled(self) -> bool:
        """Whether this provider is usable (API key present)."""
        return self.resolver.is_configured(self.family)

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._shared_client is not None:
            yield self._shared_client
            return
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            yield client

    async def invoke(
        self,
        model_id: str,
        user_message: str,
        history: Optional[List[ChatTurn]] = None,
        sampling: Optional[SamplingConfig] = None,
    ) -> NormalizedChatResponse:
        # ConfigurationError propagates as-is: it is a 503, not an upstream failure.
        credential = self.resolver.resolve(self.family, model_id)
        history = history or []
        sampling = sampling or SamplingConfig()

        try:
            async with self._client() as client:
                return await self._call(client, credential, model_id, user_message, history, sampling)
        except ChatServiceError:
            raise
        except Exception as e:
            message = self._error_message(e) or f"{self.label} API error"
            logger.error(
                f"{self.label} call failed | model={model_id} proxy={credential.uses_proxy} "
                f"error_type={type(e).__name__} message={message}"
            )
            raise UpstreamError(message) from e

    @abstractmethod
    async def _call(
        self,
        client: httpx.AsyncClient,
        credential: ResolvedCredential,
        model_id: str,
        user_message: str,
        history: List[ChatTurn],
        sampling: SamplingConfig,
    ) -> NormalizedChatResponse:
        """Issue exactly one upstream request and normalize its reply."""
        pass

    def _error_message(self, error: Exception) -> Optional[str]:
        """Vendor-provided message for a failed call, if the vendor sent one."""
        if isinstance(error, httpx.HTTPStatusError):
            try:
                return extract_error_message(error.response.json())
            except ValueError:
                return None
        return None

    @staticmethod
    def chat_messages(history: List[ChatTurn], user_message: str) -> List[dict]:
        """Generic `{role, content}` message array: history followed by the new prompt."""
        messages = [{"role": turn.role, "content": turn.content} for turn in history]
        messages.append({"role": "user", "content": user_message})
        return messages

    def __repr__(self):
        return f"<{type(self).__name__} family={self.family.value}>"
