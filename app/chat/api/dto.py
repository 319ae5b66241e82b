from pydantic import BaseModel, Field
from typing import Literal, Optional


class CreateChatDTO(BaseModel):
    title: Optional[str] = Field(default=None, max_length=255)


class AddMessageDTO(BaseModel):
    role: Literal["user", "assistant"]
    content: str
    model: Optional[str] = None


class UpdateChatTitleDTO(BaseModel):
    title: str = Field(..., min_length=1, max_length=255, description="New title for the chat")
