# app/export/entity/export.py
import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional
from urllib.parse import quote

from pydantic import BaseModel, Field

from app.llm.entity.chat import utc_now

# Header values are Latin-1; anything outside ASCII word characters goes.
_NON_ASCII_NAME_CHARS = re.compile(r"[^\w.\- ]", re.ASCII)


class ExportFormat(str, Enum):
    PDF = "pdf"
    MARKDOWN = "markdown"
    JSON = "json"
    TEXT = "text"

    @property
    def mime_type(self) -> str:
        return {
            ExportFormat.PDF: "application/pdf",
            ExportFormat.MARKDOWN: "text/markdown",
            ExportFormat.JSON: "application/json",
            ExportFormat.TEXT: "text/plain",
        }[self]

    @property
    def extension(self) -> str:
        return {
            ExportFormat.PDF: "pdf",
            ExportFormat.MARKDOWN: "md",
            ExportFormat.JSON: "json",
            ExportFormat.TEXT: "txt",
        }[self]


@dataclass(frozen=True)
class ExportedFile:
    content: bytes
    mime_type: str
    file_name: str

    @property
    def ascii_file_name(self) -> str:
        """Latin-1 safe stand-in for `file_name`, for clients that ignore `filename*`."""
        stem, dot, extension = self.file_name.rpartition(".")
        if not dot:
            stem, extension = self.file_name, ""
        stem = _NON_ASCII_NAME_CHARS.sub("", stem)
        stem = re.sub(r"_{2,}", "_", stem).strip(" _") or "export"
        return f"{stem}.{extension}" if extension else stem

    @property
    def content_disposition(self) -> str:
        # RFC 6266 with an RFC 5987 UTF-8 name when the ASCII one lost characters.
        ascii_name = self.ascii_file_name
        value = f'attachment; filename="{ascii_name}"'
        if ascii_name != self.file_name:
            value += f"; filename*=UTF-8''{quote(self.file_name, safe='')}"
        return value


class ExportRecord(BaseModel):
    """Log entry written for every export."""
    user_id: str
    format: ExportFormat
    file_name: str
    chat_id: Optional[str] = None
    model: Optional[str] = None
    response_preview: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
