from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from jose import jwt, JWTError
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.core.config import settings
from app.core.errors import AuthenticationError, AuthorizationError
from app.services.roles import Role

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class RequestContext:
    """Identity of the caller, decoded once from the bearer token."""

    user_id: UUID
    role: Role


# Password hashing
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password, hashed_password) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


# Token generation
def create_access_token(user_id: UUID, role: Role, expires_delta: Optional[timedelta] = None) -> str:
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    expire = datetime.utcnow() + expires_delta
    to_encode = {"userId": str(user_id), "role": Role(role).value, "exp": expire}
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


# Token verification
def verify_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        return payload
    except JWTError:
        raise AuthenticationError("Token is invalid or expired")


def decode_request_context(token: str) -> RequestContext:
    payload = verify_token(token)
    try:
        return RequestContext(user_id=UUID(str(payload["userId"])), role=Role(payload["role"]))
    except (KeyError, ValueError):
        raise AuthenticationError("Invalid token payload")


def get_request_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> RequestContext:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("No token provided, authorization denied")
    return decode_request_context(credentials.credentials)


def require_roles(*allowed: Role):
    allowed_roles = frozenset(allowed)

    def checker(context: RequestContext = Depends(get_request_context)) -> RequestContext:
        if context.role not in allowed_roles:
            names = " or ".join(role.value for role in allowed)
            raise AuthorizationError(f"Forbidden: This action requires {names} role")
        return context

    return checker


require_admin = require_roles(Role.admin)
