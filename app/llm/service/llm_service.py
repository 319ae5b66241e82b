from typing import List, Optional, Sequence

from app.core.logger import get_logger
from app.llm.entity.chat import (
    ChatTurn,
    ComparisonRun,
    NormalizedChatRequest,
    NormalizedChatResponse,
    SamplingConfig,
)
from app.llm.service.catalog import ModelCatalog
from app.llm.service.comparison_service import ComparisonOrchestrator
from app.llm.service.credentials import CredentialResolver
from app.llm.service.router_service import ModelRouter

logger = get_logger(__name__)


class LLMService:
    """Handles high-level LLM generation, comparison and the model catalog."""

    def __init__(
        self,
        router: ModelRouter,
        orchestrator: ComparisonOrchestrator,
        catalog: ModelCatalog,
        resolver: CredentialResolver,
    ):
        self.router = router
        self.orchestrator = orchestrator
        self.catalog = catalog
        self.resolver = resolver

    async def send_message(
        self,
        model_id: str,
        message: str,
        history: Optional[List[ChatTurn]] = None,
        sampling: Optional[SamplingConfig] = None,
    ) -> NormalizedChatResponse:
        request = NormalizedChatRequest(
            model_id=model_id,
            user_message=message,
            history=history or [],
            sampling=sampling or SamplingConfig(),
        )
        response = await self.router.route(request)
        logger.info(f"send_message | model={model_id} tokens={response.tokens_used}")
        return response

    async def compare(self, prompt: str, model_ids: Sequence[str], user_id: Optional[str] = None) -> ComparisonRun:
        return await self.orchestrator.compare(prompt, model_ids, user_id=user_id)

    async def comparison_history(self, user_id: str, limit: int = 10) -> List[ComparisonRun]:
        return await self.orchestrator.history(user_id, limit=limit)

    def available_models(self) -> List[dict]:
        return self.catalog.describe(self.resolver)
