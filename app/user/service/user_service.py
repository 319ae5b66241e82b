from abc import ABC, abstractmethod
import logging

from app.core.errors import NotFoundError
from app.user.entities.entity import User


class IUserRepository(ABC):
    @abstractmethod
    async def create_user(self, email: str, password_hash: str, name: str) -> User:
        pass

    @abstractmethod
    async def get_user_by_email(self, email: str) -> User | None:
        pass

    @abstractmethod
    async def get_user_by_id(self, user_id: str) -> User | None:
        pass


class UserService:
    def __init__(self, user_repository: IUserRepository, logger: logging.Logger):
        self.user_repository = user_repository
        self.logger = logger

    async def create_user(self, email: str, password_hash: str, name: str) -> User:
        """Create a new user; callers check for duplicates first."""
        user = await self.user_repository.create_user(email=email, password_hash=password_hash, name=name)
        self.logger.info(f"User created | user_id={user.id}")
        return user

    async def get_user_by_email(self, email: str) -> User | None:
        return await self.user_repository.get_user_by_email(email.lower())

    async def get_user_by_id(self, user_id: str) -> User | None:
        return await self.user_repository.get_user_by_id(user_id)

    async def get_user_profile(self, user_id: str) -> User:
        user = await self.user_repository.get_user_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user
