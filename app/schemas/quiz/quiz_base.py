from uuid import UUID

from pydantic import Field, model_validator
from typing import List, Optional
from datetime import datetime

from app.schemas.common.camel_model import CamelModel
from app.schemas.users.user_base import UserSummary


class QuestionBase(CamelModel):
    question_text: str = Field(min_length=1)
    question_image: str = ""
    options: List[str] = Field(min_length=2, max_length=4)
    correct_option: int = Field(ge=0, le=3)
    explanation: str = ""
    explanation_image: str = ""

    @model_validator(mode="after")
    def correct_option_in_range(self):
        if self.correct_option >= len(self.options):
            raise ValueError("correctOption must point at one of the options")
        return self


class QuestionIn(QuestionBase):
    pass


class QuestionOut(QuestionBase):
    id: UUID


class QuestionForAttempt(CamelModel):
    id: UUID
    question_text: str
    question_image: str = ""
    options: List[str]


class QuizCreate(CamelModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    duration: int = Field(default=30, gt=0)
    is_public: bool = True
    questions: List[QuestionIn] = Field(min_length=1)


class QuizUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[int] = Field(default=None, gt=0)
    is_public: Optional[bool] = None
    questions: Optional[List[QuestionIn]] = None


class QuizOut(CamelModel):
    id: UUID
    title: str
    description: str
    quiz_type: str
    is_public: bool
    duration: int
    created_by: UUID
    created_at: Optional[datetime] = None
    questions: List[QuestionOut]


class AdminQuizOut(QuizOut):
    attempt_count: int


class QuizListItem(CamelModel):
    id: UUID
    title: str
    description: str
    quiz_type: str
    duration: int
    created_at: Optional[datetime] = None
    creator: Optional[UserSummary] = None
    question_count: int


class QuizForAttempt(CamelModel):
    id: UUID
    title: str
    description: str
    duration: int
    creator: Optional[UserSummary] = None
    questions: List[QuestionForAttempt]


class AnswerSubmission(CamelModel):
    question_id: UUID
    selected_option: int = Field(default=-1, ge=-1, le=3)
    time_spent: int = Field(default=0, ge=0)


class QuizSubmission(CamelModel):
    answers: List[AnswerSubmission] = []
    total_time_taken: int = Field(default=0, ge=0)


class ResultAnswerOut(CamelModel):
    question_id: UUID
    selected_option: int
    is_correct: bool
    time_spent: int


class QuizSummary(CamelModel):
    id: UUID
    title: str
    description: str


class ResultOut(CamelModel):
    id: UUID
    user_id: UUID
    quiz_id: UUID
    quiz: Optional[QuizSummary] = None
    score: int
    total_questions: int
    percentage: float
    total_time_taken: int
    submitted_at: Optional[datetime] = None
    answers: List[ResultAnswerOut]


class DetailedAnswer(CamelModel):
    question_text: str
    question_image: str = ""
    options: List[str]
    selected_option: int
    correct_option: Optional[int] = None
    is_correct: bool
    explanation: str = ""
    explanation_image: str = ""
    time_spent: int


class ResultDetailsOut(ResultOut):
    detailed_answers: List[DetailedAnswer]
    avg_time_per_question: int


class SubmitQuizOut(CamelModel):
    message: str
    result: ResultOut
    score: int
    total_questions: int
    percentage: float


class QuizMessageOut(CamelModel):
    message: str
    quiz: QuizOut


class AdminQuizListOut(CamelModel):
    quizzes: List[AdminQuizOut]


class QuizDetailOut(CamelModel):
    quiz: QuizOut


class QuizListOut(CamelModel):
    quizzes: List[QuizListItem]


class QuizAttemptOut(CamelModel):
    quiz: QuizForAttempt


class QuizHistoryOut(CamelModel):
    results: List[ResultOut]


class ResultDetailsResponse(CamelModel):
    result: ResultDetailsOut
