from typing import Optional
from fastapi import Depends, Request, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.auth.api.handlers import AuthHandler
from app.auth.service.auth_service import AuthService
from app.core.logger import get_logger

logger = get_logger("AuthDependencies")

# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_auth_service(request: Request) -> AuthService:
    """Get auth service from app state."""
    if not hasattr(request.app.state, "auth_service"):
        raise HTTPException(status_code=503, detail="Auth service not initialized. Check application logs.")
    return request.app.state.auth_service


def get_auth_handler(request: Request) -> AuthHandler:
    """Get auth handler from app state, building it on first use."""
    if hasattr(request.app.state, "auth_handler"):
        return request.app.state.auth_handler
    auth_handler = AuthHandler(get_auth_service(request), logger)
    request.app.state.auth_handler = auth_handler
    return auth_handler


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    """
    Dependency to get current authenticated user from JWT token.

    Usage:
        @router.get("/protected")
        async def protected_route(current_user: dict = Depends(get_current_user)):
            user_id = current_user["user_id"]
            ...
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return await get_auth_service(request).verify_token(credentials.credentials)
    except HTTPException as e:
        raise HTTPException(
            status_code=e.status_code,
            detail=e.detail,
            headers={"WWW-Authenticate": "Bearer"},
        )
    except Exception as e:
        logger.error(f"Error authenticating user: {e!s}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )


