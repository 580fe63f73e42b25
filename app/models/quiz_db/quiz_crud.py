import logging
from typing import List
from uuid import UUID
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.errors import AuthorizationError, NotFoundError
from app.core.security import RequestContext
from app.models.quiz_db.question_db import Question
from app.models.quiz_db.quiz_db import Quiz
from app.models.quiz_db.result_db import Result, ResultAnswer
from app.schemas.quiz.quiz_base import (
    AdminQuizOut,
    DetailedAnswer,
    QuestionIn,
    QuizCreate,
    QuizForAttempt,
    QuizListItem,
    QuizSubmission,
    QuizUpdate,
    ResultDetailsOut,
)

logger = logging.getLogger(__name__)


def quiz_percentage(score: int, total_questions: int) -> float:
    """Quiz scores keep two decimals, unlike contest scores."""
    if total_questions <= 0:
        return 0.0
    return round(score * 100 / total_questions, 2)


def _build_questions(questions: List[QuestionIn]) -> List[Question]:
    return [
        Question(
            position=index,
            question_text=q.question_text,
            question_image=q.question_image,
            options=list(q.options),
            correct_option=q.correct_option,
            explanation=q.explanation,
            explanation_image=q.explanation_image,
        )
        for index, q in enumerate(questions)
    ]


# ---------- admin catalog ----------

def create_quiz(db: Session, context: RequestContext, quiz_in: QuizCreate) -> Quiz:
    quiz = Quiz(
        title=quiz_in.title.strip(),
        description=quiz_in.description,
        duration=quiz_in.duration,
        is_public=quiz_in.is_public,
        quiz_type="manual",
        created_by=context.user_id,
    )
    quiz.questions = _build_questions(quiz_in.questions)
    db.add(quiz)
    db.commit()
    db.refresh(quiz)
    logger.info("Quiz %s created by %s", quiz.id, context.user_id)
    return quiz


def get_owned_quiz(db: Session, context: RequestContext, quiz_id: UUID) -> Quiz:
    quiz = db.query(Quiz).filter(Quiz.id == quiz_id, Quiz.created_by == context.user_id).first()
    if not quiz:
        raise NotFoundError("Quiz not found or unauthorized")
    return quiz


def list_admin_quizzes(db: Session, context: RequestContext) -> List[AdminQuizOut]:
    quizzes = (
        db.query(Quiz)
        .filter(Quiz.created_by == context.user_id, Quiz.quiz_type == "manual")
        .order_by(Quiz.created_at.desc())
        .all()
    )
    counts = dict(
        db.query(Result.quiz_id, func.count(Result.id))
        .filter(Result.quiz_id.in_([q.id for q in quizzes]))
        .group_by(Result.quiz_id)
        .all()
    ) if quizzes else {}

    out = []
    for quiz in quizzes:
        item = AdminQuizOut.model_validate(
            {
                **{c: getattr(quiz, c) for c in
                   ("id", "title", "description", "quiz_type", "is_public", "duration", "created_by", "created_at")},
                "questions": quiz.questions,
                "attempt_count": counts.get(quiz.id, 0),
            }
        )
        out.append(item)
    return out


def update_quiz(db: Session, context: RequestContext, quiz_id: UUID, quiz_in: QuizUpdate) -> Quiz:
    quiz = get_owned_quiz(db, context, quiz_id)

    if quiz_in.title:
        quiz.title = quiz_in.title.strip()
    if quiz_in.description:
        quiz.description = quiz_in.description
    if quiz_in.duration:
        quiz.duration = quiz_in.duration
    if quiz_in.is_public is not None:
        quiz.is_public = quiz_in.is_public

    if quiz_in.questions is not None:
        # the question set is always replaced as a whole
        quiz.questions.clear()
        db.flush()
        quiz.questions.extend(_build_questions(quiz_in.questions))

    db.commit()
    db.refresh(quiz)
    logger.info("Quiz %s updated", quiz.id)
    return quiz


def delete_quiz(db: Session, context: RequestContext, quiz_id: UUID):
    quiz = get_owned_quiz(db, context, quiz_id)

    results = db.query(Result).filter(Result.quiz_id == quiz.id).all()
    for result in results:
        db.delete(result)
    db.delete(quiz)
    db.commit()
    logger.info("Quiz %s deleted with %d results", quiz_id, len(results))


# ---------- attempts ----------

def list_available_quizzes(db: Session) -> List[QuizListItem]:
    quizzes = db.query(Quiz).filter(Quiz.is_public.is_(True)).order_by(Quiz.created_at.desc()).all()
    return [
        QuizListItem.model_validate(
            {
                "id": quiz.id,
                "title": quiz.title,
                "description": quiz.description,
                "quiz_type": quiz.quiz_type,
                "duration": quiz.duration,
                "created_at": quiz.created_at,
                "creator": quiz.creator,
                "question_count": len(quiz.questions),
            }
        )
        for quiz in quizzes
    ]


def get_quiz(db: Session, quiz_id: UUID) -> Quiz:
    quiz = db.query(Quiz).filter(Quiz.id == quiz_id).first()
    if not quiz:
        raise NotFoundError("Quiz not found")
    return quiz


def get_quiz_for_attempt(db: Session, context: RequestContext, quiz_id: UUID) -> QuizForAttempt:
    quiz = get_quiz(db, quiz_id)
    if not quiz.is_public and quiz.created_by != context.user_id:
        raise AuthorizationError("Access denied to this quiz")
    # QuizForAttempt has no answer fields, so validation drops them
    return QuizForAttempt.model_validate(quiz)


def submit_quiz(db: Session, context: RequestContext, quiz_id: UUID, submission: QuizSubmission) -> Result:
    quiz = get_quiz(db, quiz_id)
    questions = {q.id: q for q in quiz.questions}

    score = 0
    answers = []
    for position, answer in enumerate(submission.answers):
        question = questions.get(answer.question_id)
        if question is None:
            continue

        is_correct = question.correct_option == answer.selected_option
        if is_correct:
            score += 1

        answers.append(
            ResultAnswer(
                question_id=question.id,
                position=position,
                selected_option=answer.selected_option,
                is_correct=is_correct,
                time_spent=answer.time_spent,
            )
        )

    total_questions = len(quiz.questions)
    result = Result(
        user_id=context.user_id,
        quiz_id=quiz.id,
        score=score,
        total_questions=total_questions,
        percentage=quiz_percentage(score, total_questions),
        total_time_taken=submission.total_time_taken,
        answers=answers,
    )
    db.add(result)
    db.commit()
    db.refresh(result)
    return result


def get_owned_result(db: Session, context: RequestContext, result_id: UUID) -> Result:
    result = db.query(Result).filter(Result.id == result_id).first()
    if not result:
        raise NotFoundError("Result not found")
    if result.user_id != context.user_id:
        raise AuthorizationError("Unauthorized access")
    return result


def get_result_details(db: Session, context: RequestContext, result_id: UUID) -> ResultDetailsOut:
    result = get_owned_result(db, context, result_id)

    question_ids = [a.question_id for a in result.answers]
    questions = {
        q.id: q for q in db.query(Question).filter(Question.id.in_(question_ids)).all()
    } if question_ids else {}

    detailed = []
    for answer in result.answers:
        question = questions.get(answer.question_id)
        if question is None:
            # the quiz was edited after this attempt
            detailed.append(
                DetailedAnswer(
                    question_text="This question is no longer available",
                    options=[],
                    selected_option=answer.selected_option,
                    is_correct=answer.is_correct,
                    time_spent=answer.time_spent,
                )
            )
            continue
        detailed.append(
            DetailedAnswer(
                question_text=question.question_text,
                question_image=question.question_image,
                options=question.options,
                selected_option=answer.selected_option,
                correct_option=question.correct_option,
                is_correct=answer.is_correct,
                explanation=question.explanation,
                explanation_image=question.explanation_image,
                time_spent=answer.time_spent,
            )
        )

    # based on the quiz's allotted duration, not the time actually spent
    duration_seconds = result.quiz.duration * 60
    avg_time = round(duration_seconds / result.total_questions) if result.total_questions > 0 else 0

    return ResultDetailsOut.model_validate(
        {
            **_result_fields(result),
            "detailed_answers": detailed,
            "avg_time_per_question": avg_time,
        }
    )


def _result_fields(result: Result) -> dict:
    return {
        "id": result.id,
        "user_id": result.user_id,
        "quiz_id": result.quiz_id,
        "quiz": result.quiz,
        "score": result.score,
        "total_questions": result.total_questions,
        "percentage": result.percentage,
        "total_time_taken": result.total_time_taken,
        "submitted_at": result.submitted_at,
        "answers": result.answers,
    }


def get_quiz_history(db: Session, context: RequestContext) -> List[Result]:
    return (
        db.query(Result)
        .filter(Result.user_id == context.user_id)
        .order_by(Result.submitted_at.desc())
        .all()
    )


def delete_result(db: Session, context: RequestContext, result_id: UUID):
    result = db.query(Result).filter(Result.id == result_id).first()
    if not result:
        raise NotFoundError("Result not found")
    if result.user_id != context.user_id:
        raise AuthorizationError("Unauthorized to delete this result")
    db.delete(result)
    db.commit()
