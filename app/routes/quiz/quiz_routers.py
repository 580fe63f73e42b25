from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
from app.core.database import get_db
from app.core.security import RequestContext, get_request_context, require_admin
from app.models.quiz_db import quiz_crud
from app.schemas.common.message import ImageUploadOut, MessageOut
from app.schemas.quiz.quiz_base import (
    AdminQuizListOut,
    QuizAttemptOut,
    QuizCreate,
    QuizDetailOut,
    QuizHistoryOut,
    QuizListOut,
    QuizMessageOut,
    QuizSubmission,
    QuizUpdate,
    ResultDetailsResponse,
    SubmitQuizOut,
)
from app.services.uploads import store_image

admin_quiz_router = APIRouter(prefix="/api/admin/quiz", tags=["Admin Quiz"])
user_quiz_router = APIRouter(prefix="/api/user/quiz", tags=["Quiz"])


# ---------- admin ----------

@admin_quiz_router.post("/create", response_model=QuizMessageOut, status_code=status.HTTP_201_CREATED)
def create_quiz(
    quiz_in: QuizCreate,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(require_admin),
):
    quiz = quiz_crud.create_quiz(db, context, quiz_in)
    return {"message": "Quiz created successfully", "quiz": quiz}


@admin_quiz_router.post("/upload-image", response_model=ImageUploadOut)
def upload_question_image(
    image: Optional[UploadFile] = File(None),
    context: RequestContext = Depends(require_admin),
):
    url = store_image(image, folder="questions")
    return {"message": "Image uploaded successfully", "image_url": url}


@admin_quiz_router.get("/my-quizzes", response_model=AdminQuizListOut)
def list_my_quizzes(
    db: Session = Depends(get_db),
    context: RequestContext = Depends(require_admin),
):
    return {"quizzes": quiz_crud.list_admin_quizzes(db, context)}


@admin_quiz_router.get("/{quiz_id}", response_model=QuizDetailOut)
def get_quiz(
    quiz_id: UUID,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(require_admin),
):
    return {"quiz": quiz_crud.get_owned_quiz(db, context, quiz_id)}


@admin_quiz_router.put("/{quiz_id}", response_model=QuizMessageOut)
def update_quiz(
    quiz_id: UUID,
    quiz_in: QuizUpdate,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(require_admin),
):
    quiz = quiz_crud.update_quiz(db, context, quiz_id, quiz_in)
    return {"message": "Quiz updated successfully", "quiz": quiz}


@admin_quiz_router.delete("/{quiz_id}", response_model=MessageOut)
def delete_quiz(
    quiz_id: UUID,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(require_admin),
):
    quiz_crud.delete_quiz(db, context, quiz_id)
    return {"message": "Quiz deleted successfully"}


# ---------- attempts ----------

@user_quiz_router.get("/all", response_model=QuizListOut)
def list_quizzes(
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    return {"quizzes": quiz_crud.list_available_quizzes(db)}


@user_quiz_router.get("/history", response_model=QuizHistoryOut)
def quiz_history(
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    return {"results": quiz_crud.get_quiz_history(db, context)}


@user_quiz_router.get("/result/{result_id}", response_model=ResultDetailsResponse)
def result_details(
    result_id: UUID,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    return {"result": quiz_crud.get_result_details(db, context, result_id)}


@user_quiz_router.delete("/result/{result_id}", response_model=MessageOut)
def delete_result(
    result_id: UUID,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    quiz_crud.delete_result(db, context, result_id)
    return {"message": "Result deleted successfully"}


@user_quiz_router.get("/{quiz_id}/attempt", response_model=QuizAttemptOut)
def quiz_for_attempt(
    quiz_id: UUID,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    return {"quiz": quiz_crud.get_quiz_for_attempt(db, context, quiz_id)}


@user_quiz_router.post("/{quiz_id}/submit", response_model=SubmitQuizOut, status_code=status.HTTP_201_CREATED)
def submit_quiz(
    quiz_id: UUID,
    submission: QuizSubmission,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    result = quiz_crud.submit_quiz(db, context, quiz_id, submission)
    return {
        "message": "Quiz submitted successfully",
        "result": result,
        "score": result.score,
        "total_questions": result.total_questions,
        "percentage": result.percentage,
    }
