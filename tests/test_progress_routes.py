import pytest
from fastapi.testclient import TestClient

from app.core.security import create_access_token
from app.main import app


@pytest.fixture
def client(db, user):
    token = create_access_token({"sub": user.username})
    return TestClient(app, headers={"Authorization": f"Bearer {token}"})


def _stage(client, stage, xp):
    return client.post(
        "/progress/complete-stage",
        json={"courseId": "C1", "lessonId": "L1", "stage": stage, "xp": xp},
    )


def test_requires_authentication(db):
    resp = TestClient(app).post(
        "/progress/complete-stage",
        json={"courseId": "C1", "lessonId": "L1", "stage": "read", "xp": 20},
    )
    assert resp.status_code == 401


def test_three_stage_scenario(client):
    read = _stage(client, "read", 20)
    assert read.status_code == 200
    body = read.json()
    assert body["earnedXP"] == 20
    assert body["leveledUp"] is False
    assert body["newLevel"] is None
    assert body["allStagesComplete"] is False
    assert body["user"]["streak"] == 1
    assert "password_hash" not in body["user"]

    _stage(client, "practice", 50)
    notes = _stage(client, "notes", 30).json()
    assert notes["user"]["xp"] == 100
    assert notes["allStagesComplete"] is True
    assert notes["user"]["completedLessons"] == ["C1-L1"]
    assert [a["id"] for a in notes["newAchievements"]] == ["first-lesson"]

    repeat = _stage(client, "notes", 30).json()
    assert repeat["earnedXP"] == 0
    assert repeat["newAchievements"] == []
    assert repeat["user"]["xp"] == 100


def test_complete_lesson_bonus(client):
    resp = client.post(
        "/progress/complete-lesson",
        json={"courseId": "C1", "lessonId": "L1", "xp": 100, "quizScore": 85},
    )
    assert resp.status_code == 200
    assert resp.json()["earnedXP"] == 110
    assert "allStagesComplete" not in resp.json()


def test_error_mapping(client):
    missing = _stage(client, "read", 20)
    assert missing.status_code == 200

    resp = client.post(
        "/progress/complete-stage",
        json={"courseId": "C1", "lessonId": "L9", "stage": "read", "xp": 20},
    )
    assert resp.status_code == 404
    assert resp.json()["error"] == "NotFoundError"

    resp = _stage(client, "quiz", 20)
    assert resp.status_code == 400
    assert resp.json()["error"] == "ValidationError"

    resp = client.post(
        "/progress/complete-lesson",
        json={"courseId": "C1", "lessonId": "L1", "xp": 100, "quizScore": 140},
    )
    assert resp.status_code == 400


def test_submit_quiz(client):
    resp = client.post("/lessons/C1/L1/submit-quiz", json={"answers": [1, 1, 1, 1]})
    assert resp.status_code == 200
    body = resp.json()
    assert body["score"] == 25
    assert body["passed"] is False
    assert body["correctCount"] == 1
    assert body["totalQuestions"] == 4
    assert [r["correctAnswer"] for r in body["results"]] == [0, 1, 2, 3]

    resp = client.post("/lessons/C1/L1/submit-quiz", json={"answers": ["a"]})
    assert resp.status_code == 400


def test_lesson_fetch_hides_answers(client):
    resp = client.get("/lessons/C1/L1")
    assert resp.status_code == 200
    questions = resp.json()["lesson"]["stages"]["practice"]["questions"]
    assert len(questions) == 4
    assert all("correctAnswer" not in q and "explanation" not in q for q in questions)


def test_me_endpoints(client):
    _stage(client, "read", 20)
    stats = client.get("/api/me/progress").json()
    assert stats["xp"] == 20
    assert stats["streakBroken"] is False
    assert stats["daysSinceLastActivity"] == 0

    badges = client.get("/api/me/achievements").json()["achievements"]
    assert badges[0]["key"] == "first-lesson"
    assert badges[0]["earned"] is False


def test_course_progress_route(client):
    _stage(client, "read", 20)
    body = client.get("/progress/course/C1").json()
    assert body["lessons"][0]["stages"] == {"read": True, "practice": False, "notes": False}
    assert body["lessons"][0]["unlockedStages"]["practice"] is True
    assert client.get("/progress/course/unknown").status_code == 404


def test_debug_diagnostics_router(db, user):
    from fastapi import FastAPI
    from app.web.debug_routes import router

    debug_app = FastAPI()
    debug_app.include_router(router)
    debug_client = TestClient(debug_app)

    assert debug_client.get("/debug/diagnostics/db").json()["backend"] == "sqlite"
    users = debug_client.get("/debug/users").json()
    assert [u["username"] for u in users] == ["learner"]


def test_submit_quiz_rejects_non_list_answers(client):
    resp = client.post("/lessons/C1/L1/submit-quiz", json={"answers": 5})
    assert resp.status_code == 400
    assert resp.json()["error"] == "ValidationError"


def test_course_catalog_is_public(db):
    anonymous = TestClient(app)
    courses = anonymous.get("/courses").json()["courses"]
    assert [c["id"] for c in courses] == ["C1"]
    assert [lesson["id"] for lesson in courses[0]["lessons"]] == ["L1", "L2", "L3"]
    assert courses[0]["totalXP"] == 200

    course = anonymous.get("/courses/C1").json()["course"]
    assert [lesson["position"] for lesson in course["lessons"]] == [1, 2, 3]
    assert course["lessons"][0]["stageXP"] == {"read": 20, "practice": 50, "notes": 30}
    assert course["lessons"][0]["questionCount"] == 4

    assert anonymous.get("/courses/unknown").status_code == 404


def test_history_favorites_and_notes(client):
    assert client.post("/progress/history", json={"courseId": "C1"}).json() == {"history": ["C1"]}
    assert client.post("/progress/history", json={"courseId": "nope"}).status_code == 404

    assert client.post("/progress/favorite", json={"courseId": "C1"}).json() == {"favorites": ["C1"]}
    assert client.post("/progress/favorite", json={"courseId": "C1"}).json() == {"favorites": []}

    added = client.post("/progress/notes", json={"dateKey": "2026-06-01", "note": "loops"})
    assert added.json() == {"calendarNotes": {"2026-06-01": ["loops"]}}
    assert client.post("/progress/notes", json={"dateKey": "soon", "note": "x"}).status_code == 400

    missing = client.request("DELETE", "/progress/notes", json={"dateKey": "2026-06-01", "noteIndex": 4})
    assert missing.status_code == 404
    removed = client.request("DELETE", "/progress/notes", json={"dateKey": "2026-06-01", "noteIndex": 0})
    assert removed.json() == {"calendarNotes": {}}

    me = client.get("/api/me/progress").json()
    assert me["history"] == ["C1"]
    assert me["favorites"] == []
