# app/llm/service/provider/payloads.py
"""
Typed reply shapes for the vendors called over raw HTTP.
Each exposes `reply_text()`, raising ValueError when the reply is unusable;
the adapter boundary turns that into an UpstreamError.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class GeminiPart(BaseModel):
    text: Optional[str] = None


class GeminiContent(BaseModel):
    role: Optional[str] = None
    parts: List[GeminiPart] = Field(default_factory=list)


class GeminiCandidate(BaseModel):
    content: GeminiContent = Field(default_factory=GeminiContent)
    finishReason: Optional[str] = None


class GeminiGenerateContentResponse(BaseModel):
    candidates: List[GeminiCandidate] = Field(default_factory=list)

    def reply_text(self) -> str:
        if not self.candidates or not self.candidates[0].content.parts:
            raise ValueError("Gemini reply has no candidates")
        text = self.candidates[0].content.parts[0].text
        if text is None:
            raise ValueError("Gemini reply part carries no text")
        return text


class CohereChatResponse(BaseModel):
    text: str
    generation_id: Optional[str] = None

    def reply_text(self) -> str:
        return self.text
