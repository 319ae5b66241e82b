# app/export/repository/export_repository.py

from typing import List
from sqlalchemy.future import select
from sqlalchemy.exc import SQLAlchemyError

from app.core.errors import PersistenceError
from app.export.entity.export import ExportFormat, ExportRecord
from app.export.repository.sql_schema.export import ExportModel
from app.export.service.export_service import IExportRepository
from pkg.db_util.postgres_conn import PostgresConnection
from pkg.log.logger import get_logger

logger = get_logger(__name__)


class ExportRepository(IExportRepository):
    def __init__(self, postgres: PostgresConnection):
        self.postgres = postgres
        self.logger = logger

    async def save_export(self, record: ExportRecord) -> str:
        try:
            async with self.postgres.get_session() as session:
                row = ExportModel(
                    user_id=record.user_id,
                    chat_id=record.chat_id,
                    format=record.format.value,
                    file_name=record.file_name,
                    model=record.model,
                    response_preview=record.response_preview,
                    created_at=record.created_at,
                )
                session.add(row)
                await session.commit()
                return row.id
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to log export: {e}") from e

    async def list_exports(self, user_id: str, limit: int = 20) -> List[ExportRecord]:
        try:
            async with self.postgres.get_session() as session:
                result = await session.execute(
                    select(ExportModel)
                    .where(ExportModel.user_id == user_id)
                    .order_by(ExportModel.created_at.desc())
                    .limit(limit)
                )
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing exports for user_id={user_id}: {e!s}")
            raise PersistenceError("Failed to fetch export history") from e

        return [
            ExportRecord(
                user_id=row.user_id,
                chat_id=row.chat_id,
                format=ExportFormat(row.format),
                file_name=row.file_name,
                model=row.model,
                response_preview=row.response_preview,
                created_at=row.created_at,
            )
            for row in rows
        ]
