# app/chat/entity/chat.py
"""
Models for saved chats and their messages.
A chat belongs to one owner and keeps its messages in insertion order.
"""

from datetime import datetime
from pydantic import BaseModel, Field
from typing import List, Optional, Literal

from app.llm.entity.chat import utc_now


class ChatMessage(BaseModel):
    """A single saved message; `model` records which AI model produced it."""
    role: Literal["user", "assistant"]
    content: str
    model: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)


class Chat(BaseModel):
    chat_id: str
    user_id: str
    title: str = "New Chat"
    messages: List[ChatMessage] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def to_summary(self) -> dict:
        """Chat metadata without messages, for list views."""
        return {
            "id": self.chat_id,
            "title": self.title,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    def to_dict(self) -> dict:
        data = self.to_summary()
        data["messages"] = [
            {
                "role": m.role,
                "content": m.content,
                "model": m.model,
                "createdAt": m.created_at.isoformat(),
            }
            for m in self.messages
        ]
        return data
