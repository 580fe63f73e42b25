import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base


class Quiz(Base):
    __tablename__ = "quiz"

    id = Column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        unique=True,
        index=True
    )

    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    quiz_type = Column(String, nullable=False, default="manual")
    is_public = Column(Boolean, nullable=False, default=True)
    duration = Column(Integer, nullable=False, default=30)  # minutes
    created_by = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    creator = relationship("User")
    questions = relationship(
        "Question",
        back_populates="quiz",
        order_by="Question.position",
        cascade="all, delete-orphan",
    )
