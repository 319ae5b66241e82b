from fastapi import APIRouter, Depends

from app.auth.api.dto import AuthSessionResponse, BaseResponse, LoginDTO, SignUpDTO
from app.auth.api.dependencies import get_auth_handler, get_current_user
from app.auth.api.handlers import AuthHandler


auth_router = APIRouter(prefix="/auth", tags=["Authentication"])


@auth_router.post("/signup", response_model=AuthSessionResponse)
async def signup(user_data: SignUpDTO, auth_handler: AuthHandler = Depends(get_auth_handler)):
    """Register a new user and return an access token"""
    return await auth_handler.signup(user_data)


@auth_router.post("/login", response_model=AuthSessionResponse)
async def login(login_data: LoginDTO, auth_handler: AuthHandler = Depends(get_auth_handler)):
    """Login with email and password"""
    return await auth_handler.login(login_data)


@auth_router.get("/profile", response_model=BaseResponse)
async def profile(
    current_user: dict = Depends(get_current_user),
    auth_handler: AuthHandler = Depends(get_auth_handler),
):
    return await auth_handler.profile(current_user["user_id"])
