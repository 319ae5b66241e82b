from pydantic import BaseModel, Field
from typing import Optional


class ExportRequestDTO(BaseModel):
    # Validated against ExportFormat by the service so a bad value is a 400.
    format: str
    response: str = Field(..., min_length=1)
    prompt: Optional[str] = None
    model: Optional[str] = None
    chatId: Optional[str] = None
    fileName: Optional[str] = None


class ChatExportRequestDTO(BaseModel):
    chatId: str = Field(..., min_length=1)
    format: str
    fileName: Optional[str] = None
