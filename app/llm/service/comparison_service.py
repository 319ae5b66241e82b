# app/llm/service/comparison_service.py
import asyncio
import time
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from app.core.config import settings
from app.core.errors import ValidationError
from app.core.logger import get_logger
from app.llm.entity.chat import ComparisonResult, ComparisonRun, NormalizedChatRequest
from app.llm.service.normalizer import comparison_failure, comparison_success
from app.llm.service.router_service import ModelRouter

logger = get_logger("ComparisonOrchestrator")

MIN_COMPARISON_MODELS = 2


class IComparisonRepository(ABC):
    @abstractmethod
    async def save_comparison(self, run: ComparisonRun) -> str:
        pass

    @abstractmethod
    async def list_comparisons(self, user_id: str, limit: int = 10) -> List[ComparisonRun]:
        pass


class ComparisonOrchestrator:
    """
    Sends one prompt to several models at once and collects a result per model.

    Every call is started before any is awaited, so the run takes as long as the
    slowest model. A failing model only fills its own `error` slot.
    """

    def __init__(
        self,
        router: ModelRouter,
        repository: Optional[IComparisonRepository] = None,
        max_concurrency: Optional[int] = None,
    ):
        self.router = router
        self.repository = repository
        self.max_concurrency = settings.COMPARE_MAX_CONCURRENCY if max_concurrency is None else max_concurrency

    async def compare(self, prompt: str, model_ids: Sequence[str], user_id: Optional[str] = None) -> ComparisonRun:
        model_ids = list(model_ids)
        if len(model_ids) < MIN_COMPARISON_MODELS:
            raise ValidationError(f"At least {MIN_COMPARISON_MODELS} models must be selected for comparison")

        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency > 0 else None
        logger.info(f"compare start | models={model_ids} cap={self.max_concurrency or 'none'}")

        # gather keeps the input order regardless of completion order.
        results = await asyncio.gather(
            *(self._run_one(prompt, model_id, semaphore) for model_id in model_ids)
        )

        run = ComparisonRun(prompt=prompt, model_ids=model_ids, results=list(results), user_id=user_id)
        failed = sum(1 for r in run.results if not r.ok)
        logger.info(f"compare done | models={len(model_ids)} failed={failed}")

        await self._audit(run)
        return run

    async def history(self, user_id: str, limit: int = 10) -> List[ComparisonRun]:
        if self.repository is None:
            return []
        return await self.repository.list_comparisons(user_id, limit=limit)

    async def _run_one(
        self,
        prompt: str,
        model_id: str,
        semaphore: Optional[asyncio.Semaphore],
    ) -> ComparisonResult:
        if semaphore is None:
            return await self._timed_route(prompt, model_id)
        async with semaphore:
            return await self._timed_route(prompt, model_id)

    async def _timed_route(self, prompt: str, model_id: str) -> ComparisonResult:
        request = NormalizedChatRequest(model_id=model_id, user_message=prompt)
        start = time.perf_counter()
        try:
            response = await self.router.route(request)
        except Exception as e:
            latency_ms = int((time.perf_counter() - start) * 1000)
            logger.warning(f"compare branch failed | model={model_id} latency_ms={latency_ms} error={e}")
            return comparison_failure(model_id, e, latency_ms)
        latency_ms = int((time.perf_counter() - start) * 1000)
        return comparison_success(model_id, response, latency_ms)

    async def _audit(self, run: ComparisonRun) -> None:
        """Persist the run for history. A failed write is logged and dropped."""
        if self.repository is None:
            return
        try:
            await self.repository.save_comparison(run)
        except Exception as e:
            logger.error(f"Failed to save comparison: {e}", exc_info=True)
