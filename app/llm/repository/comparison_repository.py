# app/llm/repository/comparison_repository.py

from typing import List
from sqlalchemy.future import select
from sqlalchemy.exc import SQLAlchemyError

from app.core.errors import PersistenceError
from app.llm.entity.chat import ComparisonResult, ComparisonRun
from app.llm.repository.sql_schema.comparison import ComparisonModel
from app.llm.service.comparison_service import IComparisonRepository
from app.llm.service.normalizer import to_comparison_payload
from pkg.db_util.postgres_conn import PostgresConnection
from pkg.log.logger import get_logger

logger = get_logger(__name__)


class ComparisonRepository(IComparisonRepository):
    """Stores comparison runs for the history view."""

    def __init__(self, postgres: PostgresConnection):
        self.postgres = postgres
        self.logger = logger

    async def save_comparison(self, run: ComparisonRun) -> str:
        try:
            async with self.postgres.get_session() as session:
                row = ComparisonModel(
                    user_id=run.user_id,
                    prompt=run.prompt,
                    models=run.model_ids,
                    responses=[to_comparison_payload(r) for r in run.results],
                    created_at=run.created_at,
                )
                session.add(row)
                await session.commit()
                return row.id
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to save comparison: {e}") from e

    async def list_comparisons(self, user_id: str, limit: int = 10) -> List[ComparisonRun]:
        try:
            async with self.postgres.get_session() as session:
                result = await session.execute(
                    select(ComparisonModel)
                    .where(ComparisonModel.user_id == user_id)
                    .order_by(ComparisonModel.created_at.desc())
                    .limit(limit)
                )
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing comparisons for user_id={user_id}: {e!s}")
            raise PersistenceError("Failed to fetch comparison history") from e

        return [
            ComparisonRun(
                prompt=row.prompt,
                model_ids=list(row.models or []),
                results=[
                    ComparisonResult(
                        model_id=r.get("model", ""),
                        text=r.get("text") or "",
                        latency_ms=r.get("responseTime") or 0,
                        error=r.get("error") or "",
                    )
                    for r in (row.responses or [])
                ],
                user_id=row.user_id,
                created_at=row.created_at,
            )
            for row in rows
        ]
