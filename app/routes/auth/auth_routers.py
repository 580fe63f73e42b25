from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.errors import AuthenticationError
from app.core.security import (
    RequestContext,
    verify_password,
    create_access_token,
    get_request_context,
)
from app.models.user_db.user_db_crud import (
    get_existing_user,
    get_user_by_email,
    get_user_stats,
    register_user,
    set_profile_picture,
    update_profile,
)
from app.schemas.login.login_base import AuthResponse, LoginRequest
from app.schemas.users.user_base import UserCreate, ProfileUpdate
from app.schemas.users.user_out import ProfileOut, ProfilePictureOut, ProfileUpdateOut, StatsOut
from app.services.uploads import store_image

auth_router = APIRouter(prefix="/api/auth", tags=["Auth"])


@auth_router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(payload: UserCreate, db: Session = Depends(get_db)):
    user = register_user(db, payload)
    token = create_access_token(user.id, user.role)
    return {"message": "User registered successfully", "user": user, "token": token}


@auth_router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = get_user_by_email(db, payload.email)
    if not user or not verify_password(payload.password, user.hashed_password):
        raise AuthenticationError("Invalid email or password")

    token = create_access_token(user.id, user.role)
    return {"message": "Login successful", "user": user, "token": token}


@auth_router.get("/profile", response_model=ProfileOut)
def get_profile(
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    return {"user": get_existing_user(db, context.user_id)}


@auth_router.put("/profile", response_model=ProfileUpdateOut)
def edit_profile(
    updates: ProfileUpdate,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    user = update_profile(db, context.user_id, updates)
    return {"message": "Profile updated successfully", "user": user}


@auth_router.post("/profile/upload-picture", response_model=ProfilePictureOut)
def upload_profile_picture(
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    get_existing_user(db, context.user_id)
    url = store_image(image, folder="profiles")
    user = set_profile_picture(db, context.user_id, url)
    return {
        "message": "Profile picture uploaded successfully",
        "profile_picture": url,
        "user": user,
    }


@auth_router.get("/stats", response_model=StatsOut)
def get_stats(
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    return {"stats": get_user_stats(db, context.user_id)}
