from datetime import datetime
from uuid import uuid4
from typing import Optional
from pydantic import BaseModel, Field

from app.llm.entity.chat import utc_now


class Entity(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class User(Entity):
    email: str
    password_hash: Optional[str] = None
    name: str = ""
    role: str = "user"

    def to_public(self) -> dict:
        """Fields safe to return to the client."""
        return {"id": self.id, "email": self.email, "name": self.name, "role": self.role}
