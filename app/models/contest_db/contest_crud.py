import logging
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import (
    AuthorizationError,
    DomainConflictError,
    NotFoundError,
    ValidationFailedError,
)
from app.core.security import RequestContext
from app.models.contest_db.contest_db import Contest, ContestResult
from app.schemas.contest.contest_base import (
    AdminContestOut,
    AdminLeaderboardOut,
    ContestAttemptOut,
    ContestCreate,
    ContestHistoryItem,
    ContestListItem,
    ContestOut,
    ContestResultDetails,
    ContestSubmission,
    ContestUpdate,
    LeaderboardOut,
)
from app.services.clock import utcnow
from app.services.contest_status import (
    contest_status,
    effective_duration_minutes,
    has_ended,
    is_live,
    is_upcoming,
)
from app.services.ranking import contest_percentage, rank_of, rank_results, round_half_up

logger = logging.getLogger(__name__)

ALREADY_SUBMITTED = "You have already submitted this contest"


def _status_fields(contest: Contest, now: datetime) -> dict:
    return {
        "is_live": is_live(now, contest.start_time, contest.end_time, contest.is_active),
        "has_ended": has_ended(now, contest.end_time),
        "is_upcoming": is_upcoming(now, contest.start_time),
        "status": contest_status(now, contest.start_time, contest.end_time),
    }


def _contest_fields(contest: Contest) -> dict:
    return {
        column: getattr(contest, column)
        for column in (
            "id", "title", "description", "questions", "created_by", "start_time", "end_time",
            "duration", "is_active", "max_participants", "rules", "created_at",
        )
    }


def serialize_contest(contest: Contest, now: Optional[datetime] = None) -> ContestOut:
    now = now or utcnow()
    return ContestOut.model_validate({**_contest_fields(contest), **_status_fields(contest, now)})


def _check_window(start_time: datetime, end_time: datetime):
    if start_time >= end_time:
        raise ValidationFailedError("End time must be after start time")


def _participant_count(db: Session, contest_id: UUID) -> int:
    return db.query(ContestResult).filter(ContestResult.contest_id == contest_id).count()


def _results_for(db: Session, contest_id: UUID) -> List[ContestResult]:
    return db.query(ContestResult).filter(ContestResult.contest_id == contest_id).all()


def _find_result(db: Session, user_id: UUID, contest_id: UUID) -> Optional[ContestResult]:
    return (
        db.query(ContestResult)
        .filter(ContestResult.user_id == user_id, ContestResult.contest_id == contest_id)
        .first()
    )


def get_contest(db: Session, contest_id: UUID) -> Contest:
    contest = db.query(Contest).filter(Contest.id == contest_id).first()
    if not contest:
        raise NotFoundError("Contest not found")
    return contest


# ==================== admin catalog ====================

def create_contest(db: Session, context: RequestContext, contest_in: ContestCreate) -> Contest:
    if not contest_in.questions:
        raise ValidationFailedError("At least one question is required")
    _check_window(contest_in.start_time, contest_in.end_time)

    contest = Contest(
        title=contest_in.title.strip(),
        description=contest_in.description,
        questions=[q.model_dump() for q in contest_in.questions],
        created_by=context.user_id,
        start_time=contest_in.start_time,
        end_time=contest_in.end_time,
        duration=contest_in.duration,
        max_participants=contest_in.max_participants,
        rules=contest_in.rules,
    )
    db.add(contest)
    db.commit()
    db.refresh(contest)
    logger.info("Contest %s created by %s", contest.id, context.user_id)
    return contest


def get_owned_contest(db: Session, context: RequestContext, contest_id: UUID) -> Contest:
    contest = (
        db.query(Contest)
        .filter(Contest.id == contest_id, Contest.created_by == context.user_id)
        .first()
    )
    if not contest:
        raise NotFoundError("Contest not found")
    return contest


def _admin_view(contest: Contest, participant_count: int, now: datetime) -> AdminContestOut:
    return AdminContestOut.model_validate(
        {
            **_contest_fields(contest),
            **_status_fields(contest, now),
            "participant_count": participant_count,
            "question_count": len(contest.questions),
        }
    )


def list_my_contests(db: Session, context: RequestContext) -> List[AdminContestOut]:
    contests = (
        db.query(Contest)
        .filter(Contest.created_by == context.user_id)
        .order_by(Contest.created_at.desc())
        .all()
    )
    counts: Dict[UUID, int] = dict(
        db.query(ContestResult.contest_id, func.count(ContestResult.id))
        .filter(ContestResult.contest_id.in_([c.id for c in contests]))
        .group_by(ContestResult.contest_id)
        .all()
    ) if contests else {}

    now = utcnow()
    return [_admin_view(contest, counts.get(contest.id, 0), now) for contest in contests]


def get_admin_contest(db: Session, context: RequestContext, contest_id: UUID) -> AdminContestOut:
    contest = get_owned_contest(db, context, contest_id)
    return _admin_view(contest, _participant_count(db, contest.id), utcnow())


def update_contest(db: Session, context: RequestContext, contest_id: UUID, contest_in: ContestUpdate) -> Contest:
    contest = get_owned_contest(db, context, contest_id)

    if utcnow() >= contest.start_time:
        raise DomainConflictError(
            "Cannot edit contest after it has started. You can only edit contests before they begin."
        )

    if contest_in.questions is not None and not contest_in.questions:
        raise ValidationFailedError("At least one question is required")
    _check_window(contest_in.start_time or contest.start_time, contest_in.end_time or contest.end_time)

    if contest_in.title:
        contest.title = contest_in.title.strip()
    if contest_in.description is not None:
        contest.description = contest_in.description
    if contest_in.questions:
        contest.questions = [q.model_dump() for q in contest_in.questions]
    if contest_in.start_time:
        contest.start_time = contest_in.start_time
    if contest_in.end_time:
        contest.end_time = contest_in.end_time
    if contest_in.duration:
        contest.duration = contest_in.duration
    if "max_participants" in contest_in.model_fields_set:
        contest.max_participants = contest_in.max_participants
    if contest_in.rules is not None:
        contest.rules = contest_in.rules
    if contest_in.is_active is not None:
        contest.is_active = contest_in.is_active

    db.commit()
    db.refresh(contest)
    logger.info("Contest %s updated", contest.id)
    return contest


def delete_contest(db: Session, context: RequestContext, contest_id: UUID):
    contest = get_owned_contest(db, context, contest_id)

    removed = (
        db.query(ContestResult)
        .filter(ContestResult.contest_id == contest.id)
        .delete(synchronize_session=False)
    )
    db.delete(contest)
    db.commit()
    logger.info("Contest %s deleted with %d results", contest_id, removed)


# ==================== participants ====================

def list_active_contests(db: Session, context: RequestContext) -> List[ContestListItem]:
    contests = (
        db.query(Contest)
        .filter(Contest.is_active.is_(True))
        .order_by(Contest.start_time.desc())
        .all()
    )
    attempted = {
        row.contest_id
        for row in db.query(ContestResult.contest_id).filter(ContestResult.user_id == context.user_id)
    }

    now = utcnow()
    return [
        ContestListItem.model_validate(
            {
                **_contest_fields(contest),
                **_status_fields(contest, now),
                "creator": contest.creator,
                "has_attempted": contest.id in attempted,
                "question_count": len(contest.questions),
            }
        )
        for contest in contests
    ]


def get_contest_for_attempt(db: Session, context: RequestContext, contest_id: UUID) -> ContestAttemptOut:
    contest = get_contest(db, contest_id)

    if not contest.is_active:
        raise DomainConflictError("Contest is not active")

    now = utcnow()
    if now < contest.start_time:
        raise DomainConflictError("Contest has not started yet")
    if now > contest.end_time:
        raise DomainConflictError("Contest has ended")

    if _find_result(db, context.user_id, contest.id):
        raise DomainConflictError("You have already attempted this contest")

    if contest.max_participants:
        if _participant_count(db, contest.id) >= contest.max_participants:
            raise DomainConflictError("Contest has reached maximum participants")

    questions = [
        {
            "index": index,
            "question_text": q["question_text"],
            "question_image": q.get("question_image", ""),
            "options": q["options"],
        }
        for index, q in enumerate(contest.questions)
    ]

    return ContestAttemptOut.model_validate(
        {
            "contest": {
                "id": contest.id,
                "title": contest.title,
                "description": contest.description,
                "duration": effective_duration_minutes(contest.duration, contest.end_time, now),
                "end_time": contest.end_time,
                "rules": contest.rules,
            },
            "questions": questions,
        }
    )


def score_contest_answers(questions: List[dict], submission: ContestSubmission) -> List[dict]:
    """One graded record per contest question; unanswered ones count as wrong."""
    by_index = {}
    for answer in submission.answers:
        by_index.setdefault(answer.question_index, answer)

    graded = []
    for index, question in enumerate(questions):
        answer = by_index.get(index)
        selected = answer.selected_option if answer else None
        graded.append(
            {
                "question_index": index,
                "selected_option": selected,
                "is_correct": selected is not None and selected == question["correct_option"],
                "time_spent": answer.time_spent if answer else 0,
            }
        )
    return graded


def submit_contest(db: Session, context: RequestContext, contest_id: UUID, submission: ContestSubmission) -> ContestResult:
    contest = get_contest(db, contest_id)

    if _find_result(db, context.user_id, contest.id):
        raise DomainConflictError(ALREADY_SUBMITTED)

    answers = score_contest_answers(contest.questions, submission)
    correct_answers = sum(1 for a in answers if a["is_correct"])
    total_questions = len(contest.questions)
    submitted_at = utcnow()
    # started_at comes from the client and is trusted as-is
    time_taken = round_half_up((submitted_at - submission.started_at).total_seconds())

    result = ContestResult(
        user_id=context.user_id,
        contest_id=contest.id,
        score=correct_answers,
        total_questions=total_questions,
        correct_answers=correct_answers,
        percentage=contest_percentage(correct_answers, total_questions),
        time_taken=time_taken,
        started_at=submission.started_at,
        submitted_at=submitted_at,
        answers=answers,
    )
    db.add(result)
    try:
        db.commit()
    except IntegrityError:
        # a concurrent submit won the unique (user, contest) constraint
        db.rollback()
        logger.warning("Duplicate contest submission by %s for %s", context.user_id, contest.id)
        raise DomainConflictError(ALREADY_SUBMITTED)

    db.refresh(result)
    logger.info(
        "Contest %s submitted by %s: %d/%d in %ds",
        contest.id, context.user_id, correct_answers, total_questions, time_taken,
    )
    return result


def _leaderboard_contest(contest: Contest, now: datetime) -> dict:
    return {
        "title": contest.title,
        "start_time": contest.start_time,
        "end_time": contest.end_time,
        "has_ended": has_ended(now, contest.end_time),
        "is_live": is_live(now, contest.start_time, contest.end_time, contest.is_active),
    }


def get_leaderboard(db: Session, context: RequestContext, contest_id: UUID) -> LeaderboardOut:
    contest = get_contest(db, contest_id)
    ranked = rank_results(_results_for(db, contest.id))

    leaderboard = []
    user_rank = None
    for rank, result in ranked:
        if result.user_id == context.user_id:
            user_rank = rank
        leaderboard.append(
            {
                "rank": rank,
                "user": result.user,
                "score": result.score,
                "total_questions": result.total_questions,
                "percentage": result.percentage,
                "time_taken": result.time_taken,
            }
        )

    return LeaderboardOut.model_validate(
        {
            "contest": _leaderboard_contest(contest, utcnow()),
            "leaderboard": leaderboard,
            "user_rank": user_rank,
            "total_participants": len(ranked),
        }
    )


def get_admin_leaderboard(db: Session, contest_id: UUID) -> AdminLeaderboardOut:
    contest = get_contest(db, contest_id)
    ranked = rank_results(_results_for(db, contest.id))

    leaderboard = [
        {
            "rank": rank,
            "user": result.user,
            "score": result.score,
            "total_questions": result.total_questions,
            "percentage": result.percentage,
            "time_taken": result.time_taken,
            "submitted_at": result.submitted_at,
        }
        for rank, result in ranked
    ]

    return AdminLeaderboardOut.model_validate(
        {
            "contest": _leaderboard_contest(contest, utcnow()),
            "leaderboard": leaderboard,
            "total_participants": len(ranked),
        }
    )


def get_contest_history(db: Session, context: RequestContext) -> List[ContestHistoryItem]:
    results = (
        db.query(ContestResult)
        .filter(ContestResult.user_id == context.user_id)
        .order_by(ContestResult.submitted_at.desc())
        .all()
    )

    now = utcnow()
    history = []
    for result in results:
        all_results = _results_for(db, result.contest_id)
        history.append(
            ContestHistoryItem.model_validate(
                {
                    "id": result.id,
                    "contest": result.contest,
                    "score": result.score,
                    "total_questions": result.total_questions,
                    "correct_answers": result.correct_answers,
                    "percentage": result.percentage,
                    "time_taken": result.time_taken,
                    "started_at": result.started_at,
                    "submitted_at": result.submitted_at,
                    "rank": rank_of(all_results, result.id),
                    "total_participants": len(all_results),
                    "has_ended": has_ended(now, result.contest.end_time),
                }
            )
        )
    return history


def get_contest_result_details(db: Session, context: RequestContext, result_id: UUID) -> ContestResultDetails:
    result = db.query(ContestResult).filter(ContestResult.id == result_id).first()
    if not result:
        raise NotFoundError("Result not found")

    if result.user_id != context.user_id:
        raise AuthorizationError("Not authorized to view this result")

    contest = result.contest
    if utcnow() <= contest.end_time:
        raise AuthorizationError(
            "Contest has not ended yet. Results will be available after the contest ends."
        )

    answers = {a["question_index"]: a for a in result.answers}
    detailed = []
    for index, question in enumerate(contest.questions):
        answer = answers.get(index)
        detailed.append(
            {
                "question_text": question["question_text"],
                "question_image": question.get("question_image", ""),
                "options": question["options"],
                "correct_option": question["correct_option"],
                "explanation": question.get("explanation", ""),
                "explanation_image": question.get("explanation_image", ""),
                "selected_option": answer["selected_option"] if answer else None,
                "is_correct": answer["is_correct"] if answer else False,
                "time_spent": answer.get("time_spent", 0) if answer else 0,
            }
        )

    total_time_spent = sum(a["time_spent"] for a in detailed)
    avg_time = round_half_up(total_time_spent / result.total_questions) if result.total_questions > 0 else 0

    all_results = _results_for(db, contest.id)
    return ContestResultDetails.model_validate(
        {
            "id": result.id,
            "contest_id": contest.id,
            "contest_title": contest.title,
            "score": result.score,
            "total_questions": result.total_questions,
            "percentage": result.percentage,
            "time_taken": result.time_taken,
            "rank": rank_of(all_results, result.id),
            "total_participants": len(all_results),
            "submitted_at": result.submitted_at,
            "detailed_answers": detailed,
            "avg_time_per_question": avg_time,
        }
    )
