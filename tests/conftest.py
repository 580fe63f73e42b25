import os
import tempfile
from datetime import datetime, timedelta

import pytest

_tmp_dir = tempfile.mkdtemp(prefix="quiz-arena-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmp_dir, 'test.db')}"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["UPLOAD_DIR"] = os.path.join(_tmp_dir, "uploads")
os.environ["ENVIRONMENT"] = "test"
os.environ["ADMIN_EMAIL"] = "admin@quizify.com"
os.environ["ADMIN_PASSWORD"] = "admin123456"

from fastapi.testclient import TestClient  # noqa: E402

from app.core.database import Base, SessionLocal, engine  # noqa: E402
from main import app  # noqa: E402

ADMIN_EMAIL = "admin@quizify.com"
ADMIN_PASSWORD = "admin123456"


def iso(value: datetime) -> str:
    return value.isoformat()


def sample_questions(count=3):
    return [
        {
            "questionText": f"Question {i + 1}?",
            "options": ["A", "B", "C", "D"],
            "correctOption": i % 4,
            "explanation": f"Because {i % 4}",
        }
        for i in range(count)
    ]


@pytest.fixture
def client():
    Base.metadata.drop_all(bind=engine)
    with TestClient(app) as test_client:
        yield test_client
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(client):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(client):
    response = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert response.status_code == 200, response.text
    return auth_headers(response.json()["token"])


@pytest.fixture
def register_user(client):
    def _register(name="Alice", email=None, password="secret123"):
        email = email or f"{name.lower()}@quizify.com"
        response = client.post(
            "/api/auth/register", json={"name": name, "email": email, "password": password}
        )
        assert response.status_code == 201, response.text
        body = response.json()
        return auth_headers(body["token"]), body["user"]

    return _register


@pytest.fixture
def create_contest(client, admin_headers):
    def _create(start_offset=timedelta(minutes=-1), end_offset=timedelta(minutes=10), **overrides):
        now = datetime.utcnow()
        payload = {
            "title": "Weekly Contest",
            "description": "Three quick questions",
            "questions": sample_questions(3),
            "startTime": iso(now + start_offset),
            "endTime": iso(now + end_offset),
            "duration": 5,
            "rules": "No cheating",
        }
        payload.update(overrides)
        response = client.post("/api/contest/admin/create", json=payload, headers=admin_headers)
        assert response.status_code == 201, response.text
        return response.json()["contest"]

    return _create


@pytest.fixture
def quiz_payload():
    def _payload(**overrides):
        payload = {
            "title": "Python Basics",
            "description": "Warm-up quiz",
            "duration": 30,
            "questions": sample_questions(3),
        }
        payload.update(overrides)
        return payload

    return _payload
