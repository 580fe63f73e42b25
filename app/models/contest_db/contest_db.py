import uuid
from datetime import datetime
from sqlalchemy import (
    Column, String, Text, Integer, Boolean, DateTime, ForeignKey, JSON, UniqueConstraint, Uuid
)
from sqlalchemy.orm import relationship
from app.core.database import Base


class Contest(Base):
    __tablename__ = "contests"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, unique=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    # embedded questions, answers included:
    # [{questionText, questionImage, options, correctOption, explanation, explanationImage}]
    questions = Column(JSON, nullable=False, default=list)
    created_by = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    duration = Column(Integer, nullable=False, default=30)  # minutes per attempt
    is_active = Column(Boolean, nullable=False, default=True)
    max_participants = Column(Integer, nullable=True)  # None = unlimited
    rules = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    creator = relationship("User")


class ContestResult(Base):
    __tablename__ = "contest_results"
    __table_args__ = (
        UniqueConstraint("user_id", "contest_id", name="uq_contest_result_user_contest"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    contest_id = Column(Uuid, ForeignKey("contests.id"), nullable=False, index=True)
    score = Column(Integer, nullable=False)
    total_questions = Column(Integer, nullable=False)
    correct_answers = Column(Integer, nullable=False)
    percentage = Column(Integer, nullable=False)
    time_taken = Column(Integer, nullable=False)  # seconds
    started_at = Column(DateTime, nullable=False)
    submitted_at = Column(DateTime, nullable=False)
    # [{questionIndex, selectedOption, isCorrect, timeSpent}]
    answers = Column(JSON, nullable=False, default=list)

    user = relationship("User")
    contest = relationship("Contest")
