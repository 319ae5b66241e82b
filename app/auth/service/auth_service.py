import logging

import bcrypt
from fastapi import HTTPException

from app.user.entities.entity import User
from app.user.service.user_service import UserService
from pkg.auth_token_client.client import TokenClient, TokenPayload


class AuthService:
    def __init__(self, user_service: UserService, token_client: TokenClient, logger: logging.Logger):
        self.user_service = user_service
        self.token_client = token_client
        self.logger = logger

    def _hash_password(self, password: str) -> str:
        salt = bcrypt.gensalt()
        return bcrypt.hashpw(password.encode(), salt).decode()

    def _verify_password(self, password: str, hashed: str) -> bool:
        return bcrypt.checkpw(password.encode(), hashed.encode())

    def _session(self, user: User) -> dict:
        tokens = self.token_client.create_tokens(TokenPayload(user_id=user.id, role=user.role, email=user.email))
        return {
            "access_token": tokens["access_token"],
            "refresh_token": tokens["refresh_token"],
            "token_type": "bearer",
            "user": user.to_public(),
        }

    async def signup(self, email: str, password: str, name: str) -> dict:
        if await self.user_service.get_user_by_email(email):
            raise HTTPException(status_code=409, detail="Email already exists")
        user = await self.user_service.create_user(
            email=email.lower(), password_hash=self._hash_password(password), name=name
        )
        return self._session(user)

    async def login(self, email: str, password: str) -> dict:
        user = await self.user_service.get_user_by_email(email)
        if not user or not user.password_hash or not self._verify_password(password, user.password_hash):
            raise HTTPException(status_code=401, detail="Invalid credentials")
        self.logger.info(f"Login successful | user_id={user.id}")
        return self._session(user)

    async def verify_token(self, token: str) -> dict:
        """Decode an access token and confirm its user still exists."""
        try:
            payload = self.token_client.decode_token(token, is_refresh=False)
        except ValueError:
            raise HTTPException(status_code=401, detail="Invalid or expired token")

        user_id = payload.get("user_id")
        if not user_id:
            raise HTTPException(status_code=401, detail="Invalid or expired token")

        user = await self.user_service.get_user_by_id(user_id)
        if not user:
            raise HTTPException(status_code=401, detail="User not found")
        return {"user_id": user.id, "email": user.email, "role": user.role}

    async def profile(self, user_id: str) -> dict:
        user = await self.user_service.get_user_profile(user_id)
        return user.to_public()
