# app/llm/api/route.py

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from app.auth.api.dependencies import get_current_user
from app.auth.api.dto import BaseResponse
from app.llm.api.dto import ChatMessageRequest, CompareModelsRequest, CompareModelsResponse, ModelListResponse
from app.llm.api.handler import LLMHandler


def get_llm_handler(request: Request) -> LLMHandler:
    """Build the handler around the LLM service wired on app.state."""
    if not hasattr(request.app.state, "llm_service"):
        raise HTTPException(status_code=503, detail="LLM service not initialized. Check application logs.")
    return LLMHandler(request.app.state.llm_service)


llm_router = APIRouter(tags=["LLM"])


@llm_router.post("/chat", response_class=JSONResponse)
async def chat(body: ChatMessageRequest, handler: LLMHandler = Depends(get_llm_handler)):
    """Single-model chat turn."""
    return await handler.chat(body)


@llm_router.post("/chat/compare", response_model=CompareModelsResponse)
async def compare_models(
    body: CompareModelsRequest,
    current_user: dict = Depends(get_current_user),
    handler: LLMHandler = Depends(get_llm_handler),
):
    """Fan one prompt out to every selected model concurrently."""
    return await handler.compare(body, user_id=current_user["user_id"])


@llm_router.get("/chat/compare/history", response_model=BaseResponse)
async def comparison_history(
    current_user: dict = Depends(get_current_user),
    handler: LLMHandler = Depends(get_llm_handler),
    limit: int = Query(default=10, ge=1, le=50),
):
    data = await handler.comparison_history(current_user["user_id"], limit=limit)
    return BaseResponse(status=True, message="Comparison history fetched successfully", data=data)


@llm_router.get("/models", response_model=ModelListResponse)
async def list_models(
    handler: LLMHandler = Depends(get_llm_handler),
):
    """Known models; `enabled` reflects whether a credential is configured."""
    return await handler.models()
