from pydantic import BaseModel, constr


class SignUpDTO(BaseModel):
    """DTO for user registration"""

    name: str
    email: constr(strip_whitespace=True, min_length=3, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")  # type: ignore
    password: constr(min_length=8, max_length=100)  # type: ignore


class LoginDTO(BaseModel):
    """DTO for user login"""

    email: str
    password: str


class BaseResponse(BaseModel):
    status: bool
    message: str
    data: dict | None = None


class UserData(BaseModel):
    id: str
    email: str
    name: str
    role: str


class AuthSessionResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str
    user: UserData
