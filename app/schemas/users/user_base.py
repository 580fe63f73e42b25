from pydantic import BaseModel, EmailStr, Field
from uuid import UUID
from typing import Optional
from datetime import datetime

from app.schemas.common.camel_model import CamelModel
from app.services.roles import Role


class UserCreate(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)


class ProfileUpdate(CamelModel):
    name: Optional[str] = None
    college: Optional[str] = None
    bio: Optional[str] = None
    profile_picture: Optional[str] = None


class UserOut(CamelModel):
    id: UUID
    name: str
    email: str
    role: Role
    college: str = ""
    bio: str = ""
    profile_picture: str = ""
    created_at: Optional[datetime] = None


class UserSummary(CamelModel):
    id: UUID
    name: str


class PublicUser(CamelModel):
    name: str
    college: str = ""
    profile_picture: str = ""


class UserStats(CamelModel):
    total_quizzes: int
    avg_quiz_score: int
    total_contests: int
    avg_rank_percentile: int
    best_contest_rank: Optional[int] = None
