from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
from app.core.database import get_db
from app.core.security import RequestContext, get_request_context, require_admin
from app.models.contest_db import contest_crud
from app.schemas.common.message import ImageUploadOut, MessageOut
from app.schemas.contest.contest_base import (
    AdminContestDetailOut,
    AdminContestListOut,
    AdminLeaderboardOut,
    ContestAttemptOut,
    ContestCreate,
    ContestHistoryOut,
    ContestListOut,
    ContestMessageOut,
    ContestResultOut,
    ContestSubmission,
    ContestSubmitOut,
    ContestUpdate,
    LeaderboardOut,
)
from app.services.uploads import store_image

contest_router = APIRouter(prefix="/api/contest", tags=["Contest"])


# ==================== admin ====================

@contest_router.post("/admin/create", response_model=ContestMessageOut, status_code=status.HTTP_201_CREATED)
def create_contest(
    contest_in: ContestCreate,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(require_admin),
):
    contest = contest_crud.create_contest(db, context, contest_in)
    return {"message": "Contest created successfully", "contest": contest_crud.serialize_contest(contest)}


@contest_router.post("/admin/upload-image", response_model=ImageUploadOut)
def upload_question_image(
    image: Optional[UploadFile] = File(None),
    context: RequestContext = Depends(require_admin),
):
    url = store_image(image, folder="contests")
    return {"message": "Image uploaded successfully", "image_url": url}


@contest_router.get("/admin/my-contests", response_model=AdminContestListOut)
def list_my_contests(
    db: Session = Depends(get_db),
    context: RequestContext = Depends(require_admin),
):
    return {"contests": contest_crud.list_my_contests(db, context)}


@contest_router.get("/admin/{contest_id}", response_model=AdminContestDetailOut)
def get_contest(
    contest_id: UUID,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(require_admin),
):
    return {"contest": contest_crud.get_admin_contest(db, context, contest_id)}


@contest_router.put("/admin/{contest_id}", response_model=ContestMessageOut)
def update_contest(
    contest_id: UUID,
    contest_in: ContestUpdate,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(require_admin),
):
    contest = contest_crud.update_contest(db, context, contest_id, contest_in)
    return {"message": "Contest updated successfully", "contest": contest_crud.serialize_contest(contest)}


@contest_router.delete("/admin/{contest_id}", response_model=MessageOut)
def delete_contest(
    contest_id: UUID,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(require_admin),
):
    contest_crud.delete_contest(db, context, contest_id)
    return {"message": "Contest deleted successfully"}


@contest_router.get("/admin/{contest_id}/leaderboard", response_model=AdminLeaderboardOut)
def admin_leaderboard(
    contest_id: UUID,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(require_admin),
):
    return contest_crud.get_admin_leaderboard(db, contest_id)


# ==================== participants ====================

@contest_router.get("/all", response_model=ContestListOut)
def list_contests(
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    return {"contests": contest_crud.list_active_contests(db, context)}


@contest_router.get("/history", response_model=ContestHistoryOut)
def contest_history(
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    return {"history": contest_crud.get_contest_history(db, context)}


@contest_router.get("/result/{result_id}", response_model=ContestResultOut)
def contest_result(
    result_id: UUID,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    return {"result": contest_crud.get_contest_result_details(db, context, result_id)}


@contest_router.get("/{contest_id}/attempt", response_model=ContestAttemptOut)
def contest_for_attempt(
    contest_id: UUID,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    return contest_crud.get_contest_for_attempt(db, context, contest_id)


@contest_router.post("/{contest_id}/submit", response_model=ContestSubmitOut)
def submit_contest(
    contest_id: UUID,
    submission: ContestSubmission,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    result = contest_crud.submit_contest(db, context, contest_id, submission)
    return {"message": "Contest submitted successfully", "result": result}


@contest_router.get("/{contest_id}/leaderboard", response_model=LeaderboardOut)
def leaderboard(
    contest_id: UUID,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    return contest_crud.get_leaderboard(db, context, contest_id)
