from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
import uuid

from pkg.db_util.sql_alchemy.declarative_base import Base


def generate_uuid():
    return str(uuid.uuid4())


# Export log table
class ExportModel(Base):
    __tablename__ = "exports"

    id = Column(String, primary_key=True, default=generate_uuid, index=True)
    user_id = Column(String, nullable=False, index=True)
    chat_id = Column(String, nullable=True)
    format = Column(String, nullable=False)  # pdf | markdown | json | text
    file_name = Column(String, nullable=False)
    model = Column(String, nullable=True)
    # first 200 chars of the exported response
    response_preview = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
