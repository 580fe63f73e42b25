import logging
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.core.config import settings
from app.core.database import SessionLocal, create_db_and_tables
from app.core.errors import register_error_handlers
from app.models.user_db.user_db_crud import create_default_admin
from app.routes.auth.auth_routers import auth_router
from app.routes.contest.contest_routers import contest_router
from app.routes.quiz.quiz_routers import admin_quiz_router, user_quiz_router

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:5174",
]
if settings.CLIENT_URL:
    ALLOWED_ORIGINS.append(settings.CLIENT_URL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    db = SessionLocal()
    try:
        create_default_admin(db)
    finally:
        db.close()
    logger.info("Quiz Arena API started (%s)", settings.ENVIRONMENT)
    yield


app = FastAPI(title="Quiz Arena API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)
register_error_handlers(app)

Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

app.include_router(auth_router)
app.include_router(admin_quiz_router)
app.include_router(user_quiz_router)
app.include_router(contest_router)


@app.get("/api/health")
def health_check():
    return {
        "status": "OK",
        "message": "Quiz Platform API is running",
        "timestamp": datetime.utcnow().isoformat(),
    }
