import asyncio
import re
from abc import ABC, abstractmethod
from typing import List, Optional

from app.chat.service.service import ChatService
from app.core.errors import ValidationError
from app.core.logger import get_logger
from app.export.entity.export import ExportFormat, ExportedFile, ExportRecord
from app.export.service import renderers
from app.llm.entity.chat import utc_now

logger = get_logger("ExportService")

PREVIEW_CHARS = 200
# Characters allowed in an attachment file name.
_UNSAFE_FILENAME = re.compile(r"[^\w.\- ]")


class IExportRepository(ABC):
    @abstractmethod
    async def save_export(self, record: ExportRecord) -> str:
        pass

    @abstractmethod
    async def list_exports(self, user_id: str, limit: int = 20) -> List[ExportRecord]:
        pass


def parse_format(value: str) -> ExportFormat:
    try:
        return ExportFormat(value)
    except ValueError:
        raise ValidationError("Invalid export format")


def _safe_file_name(name: str) -> str:
    return _UNSAFE_FILENAME.sub("", name).strip() or "export"


class ExportService:
    """Renders responses and saved chats into downloadable files and logs every export."""

    def __init__(self, chat_service: ChatService, repository: Optional[IExportRepository] = None):
        self.chat_service = chat_service
        self.repository = repository

    async def export_response(
        self,
        user_id: str,
        fmt: str,
        response: str,
        prompt: Optional[str] = None,
        model: Optional[str] = None,
        chat_id: Optional[str] = None,
        file_name: Optional[str] = None,
    ) -> ExportedFile:
        export_format = parse_format(fmt)
        clean_response = renderers.sanitize_text(response)
        clean_prompt = renderers.sanitize_text(prompt) if prompt else None

        base_name = _safe_file_name(file_name or f"ai_response_{utc_now().date().isoformat()}")

        if export_format is ExportFormat.PDF:
            # reportlab is synchronous; keep it off the event loop.
            content = await asyncio.to_thread(renderers.response_pdf, clean_response, clean_prompt, model)
        elif export_format is ExportFormat.MARKDOWN:
            content = renderers.response_markdown(clean_response, clean_prompt, model)
        elif export_format is ExportFormat.JSON:
            content = renderers.response_json(clean_response, clean_prompt, model, chat_id)
        else:
            content = renderers.response_text(clean_response, clean_prompt)

        exported = ExportedFile(
            content=content,
            mime_type=export_format.mime_type,
            file_name=f"{base_name}.{export_format.extension}",
        )
        await self._log(ExportRecord(
            user_id=user_id,
            chat_id=chat_id,
            format=export_format,
            file_name=exported.file_name,
            model=model,
            response_preview=clean_response[:PREVIEW_CHARS],
        ))
        return exported

    async def export_chat(self, user_id: str, chat_id: str, fmt: str, file_name: Optional[str] = None) -> ExportedFile:
        export_format = parse_format(fmt)
        chat = await self.chat_service.get_chat(user_id, chat_id)

        title_part = re.sub(r"\s+", "_", chat.title[:20])
        default_name = f"chat_{title_part}_{utc_now().date().isoformat()}"
        base_name = _safe_file_name(file_name or default_name)

        if export_format is ExportFormat.PDF:
            content = await asyncio.to_thread(renderers.chat_pdf, chat)
        elif export_format is ExportFormat.MARKDOWN:
            content = renderers.chat_markdown(chat).encode("utf-8")
        elif export_format is ExportFormat.JSON:
            content = renderers.chat_json(chat)
        else:
            content = renderers.chat_text(chat).encode("utf-8")

        exported = ExportedFile(
            content=content,
            mime_type=export_format.mime_type,
            file_name=f"{base_name}.{export_format.extension}",
        )
        await self._log(ExportRecord(
            user_id=user_id,
            chat_id=chat_id,
            format=export_format,
            file_name=exported.file_name,
            response_preview=f"Full conversation: {len(chat.messages)} messages",
        ))
        return exported

    async def history(self, user_id: str, limit: int = 20) -> List[ExportRecord]:
        if self.repository is None:
            return []
        return await self.repository.list_exports(user_id, limit=limit)

    async def _log(self, record: ExportRecord) -> None:
        if self.repository is None:
            return
        try:
            await self.repository.save_export(record)
        except Exception as e:
            logger.error(f"Failed to log export: {e}", exc_info=True)
