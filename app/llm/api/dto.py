# app/llm/api/dto.py
from pydantic import BaseModel, Field
from typing import List, Optional, Literal


class HistoryMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str
    model: Optional[str] = None


class ChatConfig(BaseModel):
    temperature: Optional[float] = Field(default=None, ge=0)
    maxTokens: Optional[int] = Field(default=None, ge=0)
    topP: Optional[float] = None
    frequencyPenalty: Optional[float] = None
    presencePenalty: Optional[float] = None


class ChatMessageRequest(BaseModel):
    model: str
    message: str
    conversationHistory: Optional[List[HistoryMessage]] = None
    config: Optional[ChatConfig] = None


class ChatMessageResponse(BaseModel):
    message: str
    model: str
    timestamp: str
    tokensUsed: Optional[int] = None


class CompareModelsRequest(BaseModel):
    prompt: str = Field(..., min_length=1)
    # The two-model minimum is enforced by the orchestrator so it surfaces as a 400.
    models: List[str]


class ComparisonResponseItem(BaseModel):
    model: str
    text: str
    responseTime: int
    error: str = ""


class CompareModelsResponse(BaseModel):
    responses: List[ComparisonResponseItem]


class ModelInfoResponse(BaseModel):
    id: str
    name: str
    provider: str
    enabled: bool


class ModelListResponse(BaseModel):
    models: List[ModelInfoResponse]
