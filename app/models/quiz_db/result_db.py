import uuid
from datetime import datetime
from sqlalchemy import Column, Integer, Float, Boolean, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base


class Result(Base):
    """One user's attempt at a quiz. Repeat attempts are allowed."""

    __tablename__ = "results"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    quiz_id = Column(Uuid, ForeignKey("quiz.id"), nullable=False, index=True)
    score = Column(Integer, nullable=False)
    total_questions = Column(Integer, nullable=False)
    percentage = Column(Float, nullable=False)
    total_time_taken = Column(Integer, nullable=False, default=0)  # seconds
    submitted_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User")
    quiz = relationship("Quiz")
    answers = relationship(
        "ResultAnswer",
        back_populates="result",
        order_by="ResultAnswer.position",
        cascade="all, delete-orphan",
    )


class ResultAnswer(Base):
    __tablename__ = "result_answers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    result_id = Column(Uuid, ForeignKey("results.id"), nullable=False, index=True)
    question_id = Column(Uuid, nullable=False)
    position = Column(Integer, nullable=False, default=0)
    selected_option = Column(Integer, nullable=False, default=-1)  # -1 = unattempted
    is_correct = Column(Boolean, nullable=False, default=False)
    time_spent = Column(Integer, nullable=False, default=0)  # seconds

    result = relationship("Result", back_populates="answers")
