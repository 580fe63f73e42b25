import uuid
from sqlalchemy import Column, Text, ForeignKey, Integer, JSON, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base


class Question(Base):
    __tablename__ = "questions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    quiz_id = Column(Uuid, ForeignKey("quiz.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    question_text = Column(Text, nullable=False)
    question_image = Column(Text, nullable=False, default="")
    options = Column(JSON, nullable=False)  # ["A", "B", ...]
    correct_option = Column(Integer, nullable=False)
    explanation = Column(Text, nullable=False, default="")
    explanation_image = Column(Text, nullable=False, default="")

    quiz = relationship("Quiz", back_populates="questions")
