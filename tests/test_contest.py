from datetime import datetime, timedelta
from uuid import UUID

import pytest

from app.models.contest_db import contest_crud
from app.models.contest_db.contest_db import Contest, ContestResult
from app.models.user_db.user_db_crud import create_user
from app.schemas.users.user_base import UserCreate
from app.services.roles import Role


def started(seconds_ago):
    return (datetime.utcnow() - timedelta(seconds=seconds_ago)).isoformat()


def all_correct():
    return [{"questionIndex": i, "selectedOption": i, "timeSpent": 20} for i in range(3)]


def submit(client, contest, headers, answers, seconds_ago=60):
    return client.post(
        f"/api/contest/{contest['id']}/submit",
        json={"answers": answers, "startedAt": started(seconds_ago)},
        headers=headers,
    )


def end_contest(db, contest):
    db.query(Contest).filter(Contest.id == UUID(contest["id"])).update(
        {
            Contest.start_time: datetime.utcnow() - timedelta(hours=2),
            Contest.end_time: datetime.utcnow() - timedelta(minutes=1),
        }
    )
    db.commit()


# ---------- catalog ----------

def test_create_rejects_bad_window_and_empty_questions(client, admin_headers):
    now = datetime.utcnow()
    base = {
        "title": "Broken",
        "description": "x",
        "startTime": (now + timedelta(hours=1)).isoformat(),
        "endTime": now.isoformat(),
        "questions": [{"questionText": "q", "options": ["a", "b"], "correctOption": 0}],
    }

    response = client.post("/api/contest/admin/create", json=base, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "End time must be after start time"

    base["endTime"] = (now + timedelta(hours=2)).isoformat()
    base["questions"] = []
    response = client.post("/api/contest/admin/create", json=base, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "At least one question is required"


def test_edit_allowed_only_before_start(client, admin_headers, create_contest):
    upcoming = create_contest(start_offset=timedelta(hours=1), end_offset=timedelta(hours=2))
    live = create_contest()

    ok = client.put(
        f"/api/contest/admin/{upcoming['id']}",
        json={"title": "Renamed", "maxParticipants": 10},
        headers=admin_headers,
    )
    assert ok.status_code == 200
    assert ok.json()["contest"]["title"] == "Renamed"
    assert ok.json()["contest"]["maxParticipants"] == 10
    assert ok.json()["contest"]["isUpcoming"] is True
    assert ok.json()["contest"]["status"] == "upcoming"

    rejected = client.put(f"/api/contest/admin/{live['id']}", json={"title": "Late"}, headers=admin_headers)
    assert rejected.status_code == 400
    assert rejected.json()["kind"] == "conflict"


def test_other_admin_cannot_touch_contest(client, db, create_contest):
    contest = create_contest(start_offset=timedelta(hours=1), end_offset=timedelta(hours=2))
    create_user(db, UserCreate(name="Other", email="other@quizify.com", password="secret123"), role=Role.admin)
    login = client.post("/api/auth/login", json={"email": "other@quizify.com", "password": "secret123"})
    other = {"Authorization": f"Bearer {login.json()['token']}"}

    renamed = client.put(f"/api/contest/admin/{contest['id']}", json={"title": "Mine now"}, headers=other)
    deleted = client.delete(f"/api/contest/admin/{contest['id']}", headers=other)

    assert renamed.status_code == 404
    assert deleted.status_code == 404
    assert db.query(Contest).filter(Contest.id == UUID(contest["id"])).one().title == "Weekly Contest"


def test_my_contests_counts_participants(client, admin_headers, register_user, create_contest):
    contest = create_contest()
    headers, _ = register_user("Alice")
    submit(client, contest, headers, all_correct())

    [mine] = client.get("/api/contest/admin/my-contests", headers=admin_headers).json()["contests"]
    assert mine["participantCount"] == 1
    assert mine["questionCount"] == 3
    assert mine["isLive"] is True
    assert mine["status"] == "live"

    detail = client.get(f"/api/contest/admin/{contest['id']}", headers=admin_headers).json()["contest"]
    assert detail["participantCount"] == 1


def test_list_marks_attempts_and_strips_answers(client, register_user, create_contest):
    contest = create_contest()
    headers, _ = register_user("Alice")
    submit(client, contest, headers, all_correct())

    [listed] = client.get("/api/contest/all", headers=headers).json()["contests"]

    assert listed["hasAttempted"] is True
    assert listed["questionCount"] == 3
    for question in listed["questions"]:
        assert "correctOption" not in question
        assert "explanation" not in question


# ---------- entry gate ----------

def test_attempt_strips_answers_and_caps_duration(client, register_user, create_contest):
    contest = create_contest(end_offset=timedelta(minutes=10), duration=30)
    headers, _ = register_user("Alice")

    response = client.get(f"/api/contest/{contest['id']}/attempt", headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["contest"]["duration"] <= 10
    assert [q["index"] for q in body["questions"]] == [0, 1, 2]
    for question in body["questions"]:
        assert "correctOption" not in question
        assert "explanation" not in question


@pytest.mark.parametrize(
    "start_offset, end_offset, message",
    [
        (timedelta(minutes=5), timedelta(minutes=30), "Contest has not started yet"),
        (timedelta(minutes=-30), timedelta(minutes=-5), "Contest has ended"),
    ],
)
def test_attempt_requires_live_contest(client, register_user, create_contest, start_offset, end_offset, message):
    contest = create_contest(start_offset=start_offset, end_offset=end_offset)
    headers, _ = register_user("Alice")

    response = client.get(f"/api/contest/{contest['id']}/attempt", headers=headers)

    assert response.status_code == 400
    assert response.json()["message"] == message


def test_attempt_rejects_inactive_contest(client, db, register_user, create_contest):
    contest = create_contest()
    db.query(Contest).filter(Contest.id == UUID(contest["id"])).update({Contest.is_active: False})
    db.commit()
    headers, _ = register_user("Alice")

    response = client.get(f"/api/contest/{contest['id']}/attempt", headers=headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Contest is not active"


def test_attempt_rejects_second_attempt_and_full_contest(client, register_user, create_contest):
    contest = create_contest(maxParticipants=1)
    alice, _ = register_user("Alice")
    bob, _ = register_user("Bob")
    submit(client, contest, alice, all_correct())

    again = client.get(f"/api/contest/{contest['id']}/attempt", headers=alice)
    assert again.json()["message"] == "You have already attempted this contest"

    full = client.get(f"/api/contest/{contest['id']}/attempt", headers=bob)
    assert full.status_code == 400
    assert full.json()["message"] == "Contest has reached maximum participants"


def test_attempt_unknown_contest(client, register_user):
    headers, _ = register_user("Alice")

    response = client.get("/api/contest/00000000-0000-0000-0000-000000000000/attempt", headers=headers)

    assert response.status_code == 404


# ---------- submission ----------

def test_submit_scores_every_contest_question(client, db, register_user, create_contest):
    contest = create_contest()
    headers, _ = register_user("Alice")

    response = submit(client, contest, headers, [{"questionIndex": 0, "selectedOption": 0}], seconds_ago=90)

    assert response.status_code == 200
    result = response.json()["result"]
    assert result["score"] == 1
    assert result["totalQuestions"] == 3
    assert result["percentage"] == 33
    assert 89 <= result["timeTaken"] <= 92
    assert "rank" not in result

    stored = db.query(ContestResult).one()
    assert [a["selected_option"] for a in stored.answers] == [0, None, None]
    assert [a["is_correct"] for a in stored.answers] == [True, False, False]


def test_submit_ten_questions_rounds_to_whole_percent(client, register_user, create_contest):
    questions = [
        {"questionText": f"Q{i}", "options": ["a", "b"], "correctOption": 0} for i in range(10)
    ]
    contest = create_contest(questions=questions)
    headers, _ = register_user("Alice")
    answers = [{"questionIndex": i, "selectedOption": 0 if i < 7 else 1} for i in range(10)]

    response = submit(client, contest, headers, answers)

    assert response.json()["result"]["percentage"] == 70


def test_second_submission_is_rejected(client, db, register_user, create_contest):
    contest = create_contest()
    headers, _ = register_user("Alice")

    assert submit(client, contest, headers, all_correct()).status_code == 200
    second = submit(client, contest, headers, [])

    assert second.status_code == 400
    assert second.json() == {"message": "You have already submitted this contest", "kind": "conflict"}
    assert db.query(ContestResult).count() == 1


def test_racing_submission_hits_unique_constraint(client, db, register_user, create_contest, monkeypatch):
    contest = create_contest()
    headers, _ = register_user("Alice")
    assert submit(client, contest, headers, all_correct()).status_code == 200

    # simulate a request that passed the existence check before the first write landed
    monkeypatch.setattr(contest_crud, "_find_result", lambda *args: None)
    second = submit(client, contest, headers, [])

    assert second.status_code == 400
    assert second.json()["message"] == "You have already submitted this contest"
    assert db.query(ContestResult).count() == 1


# ---------- leaderboard ----------

def test_leaderboard_end_to_end(client, admin_headers, register_user, create_contest):
    contest = create_contest(duration=5)
    alice, alice_user = register_user("Alice")
    bob, _ = register_user("Bob")

    assert submit(client, contest, alice, all_correct(), seconds_ago=60).status_code == 200

    before_bob = client.get(f"/api/contest/{contest['id']}/leaderboard", headers=bob).json()
    assert before_bob["totalParticipants"] == 1
    assert before_bob["userRank"] is None
    assert before_bob["leaderboard"][0]["user"]["name"] == "Alice"

    bob_answers = [{"questionIndex": 0, "selectedOption": 0, "timeSpent": 30}]
    assert submit(client, contest, bob, bob_answers, seconds_ago=200).status_code == 200

    board = client.get(f"/api/contest/{contest['id']}/leaderboard", headers=bob).json()
    assert board["contest"]["isLive"] is True
    assert board["contest"]["hasEnded"] is False
    assert board["userRank"] == 2
    assert [(e["rank"], e["user"]["name"], e["percentage"]) for e in board["leaderboard"]] == [
        (1, "Alice", 100),
        (2, "Bob", 33),
    ]
    for row in board["leaderboard"]:
        assert "answers" not in row
        assert "email" not in row["user"]

    admin_board = client.get(f"/api/contest/admin/{contest['id']}/leaderboard", headers=admin_headers).json()
    assert admin_board["leaderboard"][0]["user"]["email"] == alice_user["email"]
    assert admin_board["leaderboard"][0]["submittedAt"]


def test_equal_scores_rank_faster_first(client, register_user, create_contest):
    contest = create_contest()
    slow, _ = register_user("Slow")
    fast, _ = register_user("Fast")

    submit(client, contest, slow, all_correct(), seconds_ago=300)
    submit(client, contest, fast, all_correct(), seconds_ago=30)

    board = client.get(f"/api/contest/{contest['id']}/leaderboard", headers=fast).json()
    assert [e["user"]["name"] for e in board["leaderboard"]] == ["Fast", "Slow"]
    assert board["userRank"] == 1


def test_deleting_contest_removes_results(client, db, admin_headers, register_user, create_contest):
    contest = create_contest()
    headers, _ = register_user("Alice")
    submit(client, contest, headers, all_correct())

    response = client.delete(f"/api/contest/admin/{contest['id']}", headers=admin_headers)

    assert response.status_code == 200
    assert db.query(ContestResult).count() == 0
    assert client.get(f"/api/contest/{contest['id']}/leaderboard", headers=headers).status_code == 404


# ---------- results & history ----------

def test_result_details_hidden_until_contest_ends(client, db, register_user, create_contest):
    contest = create_contest()
    alice, _ = register_user("Alice")
    bob, _ = register_user("Bob")
    result = submit(client, contest, alice, all_correct()).json()["result"]

    early = client.get(f"/api/contest/result/{result['id']}", headers=alice)
    assert early.status_code == 403
    assert "not ended" in early.json()["message"]
    assert client.get(f"/api/contest/result/{result['id']}", headers=bob).status_code == 403

    end_contest(db, contest)

    assert client.get(f"/api/contest/result/{result['id']}", headers=bob).status_code == 403
    details = client.get(f"/api/contest/result/{result['id']}", headers=alice)
    assert details.status_code == 200
    body = details.json()["result"]
    assert body["rank"] == 1
    assert body["totalParticipants"] == 1
    assert body["avgTimePerQuestion"] == 20
    assert [a["correctOption"] for a in body["detailedAnswers"]] == [0, 1, 2]
    assert all(a["isCorrect"] for a in body["detailedAnswers"])


def test_history_and_stats_include_fresh_ranks(client, db, register_user, create_contest):
    contest = create_contest()
    alice, _ = register_user("Alice")
    bob, _ = register_user("Bob")
    submit(client, contest, alice, all_correct(), seconds_ago=100)
    submit(client, contest, bob, all_correct(), seconds_ago=50)

    [entry] = client.get("/api/contest/history", headers=alice).json()["history"]
    assert entry["rank"] == 2
    assert entry["totalParticipants"] == 2
    assert entry["hasEnded"] is False
    assert entry["contest"]["title"] == "Weekly Contest"

    stats = client.get("/api/auth/stats", headers=bob).json()["stats"]
    assert stats["totalContests"] == 1
    assert stats["bestContestRank"] == 1
    assert stats["avgRankPercentile"] == 50
    assert stats["totalQuizzes"] == 0
