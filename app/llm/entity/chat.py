# app/llm/entity/chat.py
"""
Provider-agnostic request/response models.
The router, the adapters and the comparison orchestrator only ever exchange
these shapes; vendor payloads never leave the adapter layer.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2048


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ProviderFamily(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    MISTRAL = "mistral"
    COHERE = "cohere"

    @property
    def label(self) -> str:
        return {
            ProviderFamily.OPENAI: "OpenAI",
            ProviderFamily.ANTHROPIC: "Anthropic",
            ProviderFamily.GEMINI: "Gemini",
            ProviderFamily.MISTRAL: "Mistral",
            ProviderFamily.COHERE: "Cohere",
        }[self]


class ChatTurn(BaseModel):
    """One message of a conversation, in conversation order."""
    role: Literal["user", "assistant"]
    content: str
    model_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)


class SamplingConfig(BaseModel):
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS

    @classmethod
    def from_client(cls, temperature: Optional[float] = None, max_tokens: Optional[int] = None) -> "SamplingConfig":
        # Zero or missing values fall back to the defaults.
        return cls(
            temperature=temperature or DEFAULT_TEMPERATURE,
            max_tokens=max_tokens or DEFAULT_MAX_TOKENS,
        )


class NormalizedChatRequest(BaseModel):
    model_id: str
    user_message: str
    history: List[ChatTurn] = Field(default_factory=list)
    sampling: SamplingConfig = Field(default_factory=SamplingConfig)


class NormalizedChatResponse(BaseModel):
    text: str
    model_id: str
    produced_at: datetime = Field(default_factory=utc_now)
    tokens_used: Optional[int] = None


class ComparisonResult(BaseModel):
    model_id: str
    text: str = ""
    latency_ms: int = 0
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error


class ComparisonRun(BaseModel):
    prompt: str
    model_ids: List[str]
    results: List[ComparisonResult] = Field(default_factory=list)
    user_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
