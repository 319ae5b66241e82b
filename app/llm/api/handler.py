from typing import List, Optional

from app.llm.api.dto import (
    ChatMessageRequest,
    CompareModelsRequest,
    CompareModelsResponse,
    ComparisonResponseItem,
    ModelInfoResponse,
    ModelListResponse,
)
from app.llm.entity.chat import ChatTurn, ComparisonRun, SamplingConfig
from app.llm.service.llm_service import LLMService
from app.llm.service.normalizer import to_chat_payload, to_comparison_payload
from app.core.logger import get_logger

logger = get_logger("LLMHandler")


class LLMHandler:
    """Handler for chat, comparison and model catalog endpoints."""

    def __init__(self, llm_service: LLMService):
        self.llm_service = llm_service

    async def chat(self, body: ChatMessageRequest) -> dict:
        history = [
            ChatTurn(role=m.role, content=m.content, model_id=m.model)
            for m in (body.conversationHistory or [])
        ]
        config = body.config
        sampling = SamplingConfig.from_client(
            config.temperature if config else None,
            config.maxTokens if config else None,
        )
        logger.debug(f"chat start | model={body.model} history={len(history)}")
        response = await self.llm_service.send_message(body.model, body.message, history, sampling)
        return to_chat_payload(response)

    async def compare(self, body: CompareModelsRequest, user_id: Optional[str] = None) -> CompareModelsResponse:
        run = await self.llm_service.compare(body.prompt, body.models, user_id=user_id)
        return self._to_compare_response(run)

    async def comparison_history(self, user_id: str, limit: int = 10) -> dict:
        runs = await self.llm_service.comparison_history(user_id, limit=limit)
        return {
            "comparisons": [
                {
                    "prompt": run.prompt,
                    "models": run.model_ids,
                    "responses": [to_comparison_payload(r) for r in run.results],
                    "createdAt": run.created_at.isoformat(),
                }
                for run in runs
            ]
        }

    async def models(self) -> ModelListResponse:
        entries: List[dict] = self.llm_service.available_models()
        return ModelListResponse(models=[ModelInfoResponse(**e) for e in entries])

    @staticmethod
    def _to_compare_response(run: ComparisonRun) -> CompareModelsResponse:
        return CompareModelsResponse(
            responses=[ComparisonResponseItem(**to_comparison_payload(r)) for r in run.results]
        )
