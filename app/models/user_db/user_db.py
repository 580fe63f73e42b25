import uuid
from sqlalchemy import Column, String, DateTime, Text, Enum, Uuid
from app.core.database import Base
from app.services.roles import Role
from datetime import datetime


class User(Base):
    __tablename__ = "users"

    id = Column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        unique=True,
        index=True
    )

    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    hashed_password = Column(String, nullable=False)
    role = Column(Enum(Role, name="user_role"), nullable=False, default=Role.user)
    college = Column(String, nullable=False, default="")
    bio = Column(Text, nullable=False, default="")
    profile_picture = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, default=datetime.utcnow)
