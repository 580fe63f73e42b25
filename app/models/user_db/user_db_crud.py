import logging
from uuid import UUID
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.errors import DomainConflictError, NotFoundError
from app.models.user_db.user_db import User
from app.models.quiz_db.result_db import Result
from app.models.contest_db.contest_db import ContestResult
from app.schemas.users.user_base import UserCreate, ProfileUpdate, UserStats
from app.core.security import hash_password
from app.services.ranking import percentile, rank_of, round_half_up
from app.services.roles import Role

logger = logging.getLogger(__name__)


def create_user(db: Session, user: UserCreate, role: Role = Role.user) -> User:
    db_user = User(
        name=user.name,
        email=user.email.lower(),
        hashed_password=hash_password(user.password),
        role=role,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def register_user(db: Session, user: UserCreate) -> User:
    # public registration never grants admin
    if get_user_by_email(db, user.email):
        raise DomainConflictError("User already exists with this email")
    return create_user(db, user, role=Role.user)


def get_user_by_email(db: Session, email: str):
    return db.query(User).filter(User.email == email.lower()).first()


def get_user_by_id(db: Session, user_id: UUID):
    return db.query(User).filter(User.id == user_id).first()


def get_existing_user(db: Session, user_id: UUID) -> User:
    user = get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def update_profile(db: Session, user_id: UUID, updates: ProfileUpdate) -> User:
    user = get_existing_user(db, user_id)

    if updates.name:
        user.name = updates.name
    if updates.college is not None:
        user.college = updates.college
    if updates.bio is not None:
        user.bio = updates.bio
    if updates.profile_picture is not None:
        user.profile_picture = updates.profile_picture

    db.commit()
    db.refresh(user)
    return user


def set_profile_picture(db: Session, user_id: UUID, url: str) -> User:
    user = get_existing_user(db, user_id)
    user.profile_picture = url
    db.commit()
    db.refresh(user)
    return user


def create_default_admin(db: Session):
    """Create the bootstrap admin account if it does not exist yet.

    Failures are logged and swallowed so a broken bootstrap never blocks
    startup.
    """
    try:
        if get_user_by_email(db, settings.ADMIN_EMAIL):
            return None
        admin = create_user(
            db,
            UserCreate(
                name=settings.ADMIN_NAME,
                email=settings.ADMIN_EMAIL,
                password=settings.ADMIN_PASSWORD,
            ),
            role=Role.admin,
        )
        logger.info("Default admin created: %s", admin.email)
        return admin
    except Exception as e:
        db.rollback()
        logger.warning("Admin creation warning: %s", e)
        return None


def get_user_stats(db: Session, user_id: UUID) -> UserStats:
    quiz_scores = [r.percentage for r in db.query(Result).filter(Result.user_id == user_id).all()]
    avg_quiz_score = round_half_up(sum(quiz_scores) / len(quiz_scores)) if quiz_scores else 0

    contest_results = db.query(ContestResult).filter(ContestResult.user_id == user_id).all()
    ranks = []
    percentiles = []
    for result in contest_results:
        field = db.query(ContestResult).filter(ContestResult.contest_id == result.contest_id).all()
        rank = rank_of(field, result.id)
        ranks.append(rank)
        percentiles.append(percentile(rank, len(field)))

    return UserStats(
        total_quizzes=len(quiz_scores),
        avg_quiz_score=avg_quiz_score,
        total_contests=len(contest_results),
        avg_rank_percentile=round_half_up(sum(percentiles) / len(percentiles)) if percentiles else 0,
        best_contest_rank=min(ranks) if ranks else None,
    )
