from pydantic import BaseModel

from app.schemas.users.user_base import UserOut


class LoginRequest(BaseModel):
    email: str
    password: str


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserOut
