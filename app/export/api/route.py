from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import Response

from app.auth.api.dependencies import get_current_user
from app.auth.api.dto import BaseResponse
from app.export.api.dto import ChatExportRequestDTO, ExportRequestDTO
from app.export.entity.export import ExportedFile
from app.export.service.export_service import ExportService

export_router = APIRouter(prefix="/export", tags=["Export"])


def get_export_service(request: Request) -> ExportService:
    """Dependency to get export service from app.state."""
    if not hasattr(request.app.state, "export_service"):
        raise HTTPException(status_code=503, detail="Export service not initialized. Check application logs.")
    return request.app.state.export_service


def _file_response(exported: ExportedFile) -> Response:
    return Response(
        content=exported.content,
        media_type=exported.mime_type,
        headers={"Content-Disposition": exported.content_disposition},
    )


@export_router.post("")
async def export_response(
    body: ExportRequestDTO,
    current_user: dict = Depends(get_current_user),
    export_service: ExportService = Depends(get_export_service),
):
    """Download one AI response as pdf, markdown, json or text."""
    exported = await export_service.export_response(
        current_user["user_id"],
        body.format,
        body.response,
        prompt=body.prompt,
        model=body.model,
        chat_id=body.chatId,
        file_name=body.fileName,
    )
    return _file_response(exported)


@export_router.post("/chat")
async def export_chat(
    body: ChatExportRequestDTO,
    current_user: dict = Depends(get_current_user),
    export_service: ExportService = Depends(get_export_service),
):
    """Download a whole saved conversation."""
    exported = await export_service.export_chat(
        current_user["user_id"], body.chatId, body.format, file_name=body.fileName
    )
    return _file_response(exported)


@export_router.get("/history", response_model=BaseResponse)
async def export_history(
    current_user: dict = Depends(get_current_user),
    export_service: ExportService = Depends(get_export_service),
    limit: int = Query(default=20, ge=1, le=100),
):
    records = await export_service.history(current_user["user_id"], limit=limit)
    return BaseResponse(
        status=True,
        message="Export history fetched successfully",
        data={
            "exports": [
                {
                    "chatId": r.chat_id,
                    "format": r.format.value,
                    "fileName": r.file_name,
                    "model": r.model,
                    "responsePreview": r.response_preview,
                    "createdAt": r.created_at.isoformat(),
                }
                for r in records
            ]
        },
    )
