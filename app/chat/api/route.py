from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from app.auth.api.dependencies import get_current_user
from app.auth.api.dto import BaseResponse
from app.chat.api.dto import AddMessageDTO, CreateChatDTO, UpdateChatTitleDTO
from app.chat.entity.chat import ChatMessage
from app.chat.service.service import ChatService
from app.core.logger import get_logger

chat_router = APIRouter(prefix="/chats", tags=["Chat History"])
logger = get_logger("ChatRouter")


def get_chat_service(request: Request) -> ChatService:
    """Dependency to get chat service from app.state."""
    if not hasattr(request.app.state, "chat_service"):
        raise HTTPException(status_code=503, detail="Chat service not initialized. Check application logs.")
    return request.app.state.chat_service


@chat_router.post("", response_model=BaseResponse)
async def create_chat(
    body: CreateChatDTO,
    current_user: dict = Depends(get_current_user),
    chat_service: ChatService = Depends(get_chat_service),
):
    chat = await chat_service.create_chat(current_user["user_id"], body.title)
    return BaseResponse(status=True, message="Chat created successfully", data=chat.to_dict())


@chat_router.get("", response_model=BaseResponse)
async def list_chats(
    current_user: dict = Depends(get_current_user),
    chat_service: ChatService = Depends(get_chat_service),
):
    """Chats for the authenticated user, most recently updated first, without messages."""
    chats = await chat_service.list_chats(current_user["user_id"])
    return BaseResponse(
        status=True,
        message="Chats fetched successfully",
        data={"chats": [c.to_summary() for c in chats]},
    )


@chat_router.get("/{chat_id}", response_model=BaseResponse)
async def get_chat(
    chat_id: str,
    current_user: dict = Depends(get_current_user),
    chat_service: ChatService = Depends(get_chat_service),
):
    chat = await chat_service.get_chat(current_user["user_id"], chat_id)
    return BaseResponse(status=True, message="Chat fetched successfully", data=chat.to_dict())


@chat_router.post("/{chat_id}/messages", response_model=BaseResponse)
async def add_message(
    chat_id: str,
    body: AddMessageDTO,
    current_user: dict = Depends(get_current_user),
    chat_service: ChatService = Depends(get_chat_service),
):
    """Append a message. The first user message also becomes the chat title."""
    message = ChatMessage(role=body.role, content=body.content, model=body.model)
    chat = await chat_service.add_message(current_user["user_id"], chat_id, message)
    return BaseResponse(status=True, message="Message added successfully", data=chat.to_dict())


@chat_router.put("/{chat_id}/title", response_model=BaseResponse)
async def update_chat_title(
    chat_id: str,
    body: UpdateChatTitleDTO,
    current_user: dict = Depends(get_current_user),
    chat_service: ChatService = Depends(get_chat_service),
):
    chat = await chat_service.update_title(current_user["user_id"], chat_id, body.title)
    logger.info(f"Renamed chat_id={chat_id} to '{body.title}'")
    return BaseResponse(status=True, message="Chat renamed successfully", data=chat.to_summary())


@chat_router.delete("/{chat_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_chat(
    chat_id: str,
    current_user: dict = Depends(get_current_user),
    chat_service: ChatService = Depends(get_chat_service),
):
    await chat_service.delete_chat(current_user["user_id"], chat_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
