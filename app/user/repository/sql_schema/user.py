from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime
from pkg.db_util.sql_alchemy.declarative_base import Base
import uuid


def generate_uuid():
    return str(uuid.uuid4())


def _now():
    return datetime.now(timezone.utc)


class UserModel(Base):
    __tablename__ = "users"

    user_id = Column(String, primary_key=True, default=generate_uuid)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=True)
    role = Column(String, nullable=False, default="user")
    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)
