from sqlalchemy.future import select
from sqlalchemy.exc import SQLAlchemyError
import logging

from app.core.errors import PersistenceError
from app.user.entities.entity import User
from app.user.repository.sql_schema.user import UserModel
from app.user.service.user_service import IUserRepository


def _to_entity(user: UserModel) -> User:
    return User(
        id=user.user_id,
        email=user.email,
        password_hash=user.password_hash,
        name=user.name or "",
        role=user.role or "user",
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


class UserRepository(IUserRepository):
    def __init__(self, db_session_factory, logger: logging.Logger):
        self.db_session_factory = db_session_factory
        self.logger = logger

    async def create_user(self, email: str, password_hash: str, name: str) -> User:
        """Create a new user"""
        try:
            async with self.db_session_factory() as session:
                async with session.begin():
                    user = UserModel(email=email.lower(), password_hash=password_hash, name=name)
                    session.add(user)
                await session.refresh(user)
                return _to_entity(user)
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating user: {e!s}")
            raise PersistenceError("Failed to create user") from e

    async def get_user_by_email(self, email: str) -> User | None:
        try:
            async with self.db_session_factory() as session:
                result = await session.execute(select(UserModel).filter(UserModel.email == email))
                user = result.scalars().first()
                return _to_entity(user) if user else None
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting user by email: {e!s}")
            raise PersistenceError("Failed to fetch user by email") from e

    async def get_user_by_id(self, user_id: str) -> User | None:
        try:
            async with self.db_session_factory() as session:
                result = await session.execute(select(UserModel).filter(UserModel.user_id == user_id))
                user = result.scalars().first()
                return _to_entity(user) if user else None
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting user by ID: {e!s}")
            raise PersistenceError("Failed to fetch user by ID") from e
