from app.auth.api.dto import AuthSessionResponse, BaseResponse, LoginDTO, SignUpDTO
from app.auth.service.auth_service import AuthService
import logging


class AuthHandler:
    def __init__(self, auth_service: AuthService, logger: logging.Logger):
        self.auth_service = auth_service
        self.logger = logger

    async def signup(self, data: SignUpDTO) -> AuthSessionResponse:
        result = await self.auth_service.signup(data.email, data.password, data.name)
        return AuthSessionResponse(**result)

    async def login(self, data: LoginDTO) -> AuthSessionResponse:
        result = await self.auth_service.login(data.email, data.password)
        return AuthSessionResponse(**result)

    async def profile(self, user_id: str) -> BaseResponse:
        data = await self.auth_service.profile(user_id)
        return BaseResponse(status=True, message="User profile retrieved successfully", data=data)
