from uuid import UUID

from pydantic import Field, field_validator
from typing import List, Optional
from datetime import datetime

from app.schemas.common.camel_model import CamelModel
from app.schemas.quiz.quiz_base import QuestionBase
from app.schemas.users.user_base import PublicUser, UserSummary
from app.services.clock import to_naive_utc
from app.services.contest_status import ContestStatus


class ContestQuestion(QuestionBase):
    pass


class ContestQuestionPublic(CamelModel):
    question_text: str
    question_image: str = ""
    options: List[str]


class ContestQuestionForAttempt(ContestQuestionPublic):
    index: int


class ContestCreate(CamelModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    questions: List[ContestQuestion] = []
    start_time: datetime
    end_time: datetime
    duration: int = Field(default=30, gt=0)
    max_participants: Optional[int] = Field(default=None, gt=0)
    rules: str = ""

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_time(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class ContestUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    questions: Optional[List[ContestQuestion]] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration: Optional[int] = Field(default=None, gt=0)
    max_participants: Optional[int] = Field(default=None, gt=0)
    rules: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_time(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value) if value is not None else None


class ContestStatusFields(CamelModel):
    is_live: bool
    has_ended: bool
    is_upcoming: bool
    status: ContestStatus


class ContestOut(ContestStatusFields):
    """Full contest, answer key included. Owners only."""

    id: UUID
    title: str
    description: str
    questions: List[ContestQuestion]
    created_by: UUID
    start_time: datetime
    end_time: datetime
    duration: int
    is_active: bool
    max_participants: Optional[int] = None
    rules: str = ""
    created_at: Optional[datetime] = None


class AdminContestOut(ContestOut):
    participant_count: int
    question_count: int


class ContestListItem(ContestStatusFields):
    id: UUID
    title: str
    description: str
    questions: List[ContestQuestionPublic]
    creator: Optional[UserSummary] = None
    start_time: datetime
    end_time: datetime
    duration: int
    max_participants: Optional[int] = None
    rules: str = ""
    has_attempted: bool
    question_count: int


class ContestAttemptInfo(CamelModel):
    id: UUID
    title: str
    description: str
    duration: int  # effective minutes for this attempt
    end_time: datetime
    rules: str = ""


class ContestAttemptOut(CamelModel):
    contest: ContestAttemptInfo
    questions: List[ContestQuestionForAttempt]


class ContestAnswerIn(CamelModel):
    question_index: int = Field(ge=0)
    selected_option: Optional[int] = Field(default=None, ge=-1, le=3)
    time_spent: int = Field(default=0, ge=0)


class ContestSubmission(CamelModel):
    answers: List[ContestAnswerIn] = []
    started_at: datetime

    @field_validator("started_at")
    @classmethod
    def normalize_started_at(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class ContestSubmitSummary(CamelModel):
    id: UUID
    score: int
    total_questions: int
    percentage: int
    time_taken: int


class ContestSubmitOut(CamelModel):
    message: str
    result: ContestSubmitSummary


class LeaderboardContest(CamelModel):
    title: str
    start_time: datetime
    end_time: datetime
    has_ended: bool
    is_live: bool


class LeaderboardEntry(CamelModel):
    rank: int
    user: PublicUser
    score: int
    total_questions: int
    percentage: int
    time_taken: int


class AdminLeaderboardUser(PublicUser):
    id: UUID
    email: str


class AdminLeaderboardEntry(LeaderboardEntry):
    user: AdminLeaderboardUser
    submitted_at: datetime


class LeaderboardOut(CamelModel):
    contest: LeaderboardContest
    leaderboard: List[LeaderboardEntry]
    user_rank: Optional[int] = None
    total_participants: int


class AdminLeaderboardOut(CamelModel):
    contest: LeaderboardContest
    leaderboard: List[AdminLeaderboardEntry]
    total_participants: int


class HistoryContest(CamelModel):
    id: UUID
    title: str
    start_time: datetime
    end_time: datetime


class ContestHistoryItem(CamelModel):
    id: UUID
    contest: HistoryContest
    score: int
    total_questions: int
    correct_answers: int
    percentage: int
    time_taken: int
    started_at: datetime
    submitted_at: datetime
    rank: int
    total_participants: int
    has_ended: bool


class ContestDetailedAnswer(CamelModel):
    question_text: str
    question_image: str = ""
    options: List[str]
    correct_option: int
    explanation: str = ""
    explanation_image: str = ""
    selected_option: Optional[int] = None
    is_correct: bool
    time_spent: int


class ContestResultDetails(CamelModel):
    id: UUID
    contest_id: UUID
    contest_title: str
    score: int
    total_questions: int
    percentage: int
    time_taken: int
    rank: int
    total_participants: int
    submitted_at: datetime
    detailed_answers: List[ContestDetailedAnswer]
    avg_time_per_question: int


class ContestMessageOut(CamelModel):
    message: str
    contest: ContestOut



class AdminContestListOut(CamelModel):
    contests: List[AdminContestOut]


class AdminContestDetailOut(CamelModel):
    contest: AdminContestOut


class ContestListOut(CamelModel):
    contests: List[ContestListItem]


class ContestHistoryOut(CamelModel):
    history: List[ContestHistoryItem]


class ContestResultOut(CamelModel):
    result: ContestResultDetails
