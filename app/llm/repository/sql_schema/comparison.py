from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
import uuid

from pkg.db_util.sql_alchemy.declarative_base import Base


def generate_uuid():
    return str(uuid.uuid4())


# Comparison audit table: one row per fan-out run
class ComparisonModel(Base):
    __tablename__ = "comparisons"

    id = Column(String, primary_key=True, default=generate_uuid, index=True)
    user_id = Column(String, nullable=True, index=True)
    prompt = Column(Text, nullable=False)
    models = Column(JSONB, nullable=False)
    # [{model, text, responseTime, error}] in request order
    responses = Column(JSONB, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
