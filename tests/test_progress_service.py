import gc
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.core.errors import NotFoundError, PersistenceError, ValidationError
from app.db.base import SessionLocal
from app.progress import engine, service
from app.users.models import User

DAY1 = datetime(2026, 6, 1, 8, 0, tzinfo=timezone.utc)


def test_stage_xp_defaults_to_catalog_reward(db, user):
    _, result = service.complete_stage(db, user.id, "C1", "L1", "practice", now=DAY1)
    assert result.earned_xp == 50

    _, result = service.complete_stage(db, user.id, "C1", "L2", "read", now=DAY1)
    assert result.earned_xp == 10


def test_progress_is_persisted(db, user):
    for stage in ("read", "practice", "notes"):
        service.complete_stage(db, user.id, "C1", "L1", stage, now=DAY1)

    fresh = SessionLocal()
    try:
        stored = fresh.get(User, user.id)
        assert stored.xp == 100
        assert stored.level == 1
        assert stored.streak == 1
        assert [(c.course_id, c.lesson_id) for c in stored.completed_lessons] == [("C1", "L1")]
        assert [a.key for a in stored.achievements] == ["first-lesson"]
        row = stored.stage_progress[0]
        assert (row.read, row.practice, row.notes) == (True, True, True)
    finally:
        fresh.close()


def test_unknown_lesson_and_course(db, user):
    with pytest.raises(NotFoundError):
        service.complete_stage(db, user.id, "C1", "nope", "read", now=DAY1)
    with pytest.raises(NotFoundError):
        service.complete_lesson(db, user.id, "missing", "L1", 100, 90, now=DAY1)
    with pytest.raises(NotFoundError):
        service.submit_quiz(db, "C1", "nope", [0])


def test_unknown_user(db):
    with pytest.raises(NotFoundError):
        service.complete_stage(db, 9999, "C1", "L1", "read", now=DAY1)


def test_bad_stage_name(db, user):
    with pytest.raises(ValidationError):
        service.complete_stage(db, user.id, "C1", "L1", "review", now=DAY1)


def test_failed_write_awards_nothing_and_retry_succeeds(db, user, monkeypatch):
    def broken_commit():
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(db, "commit", broken_commit)
    with pytest.raises(PersistenceError):
        service.complete_stage(db, user.id, "C1", "L1", "read", xp=20, now=DAY1)
    monkeypatch.undo()

    fresh = SessionLocal()
    try:
        stored = fresh.get(User, user.id)
        assert stored.xp == 0
        assert stored.stage_progress == []
    finally:
        fresh.close()

    _, result = service.complete_stage(db, user.id, "C1", "L1", "read", xp=20, now=DAY1)
    assert result.earned_xp == 20


def test_request_authenticated_before_another_write_sees_it(db, user):
    request_b = SessionLocal()
    try:
        # Both requests resolve the current user before either writes
        request_b.query(User).filter(User.username == "learner").first()
        db.query(User).filter(User.username == "learner").first()

        service.complete_stage(db, user.id, "C1", "L1", "read", xp=20, now=DAY1)

        _, result = service.complete_stage(request_b, user.id, "C1", "L1", "practice", xp=50, now=DAY1)
        assert result.earned_xp == 50
    finally:
        request_b.close()

    fresh = SessionLocal()
    try:
        stored = fresh.get(User, user.id)
        assert stored.xp == 70
        row = stored.stage_progress[0]
        assert (row.read, row.practice, row.notes) == (True, True, False)
    finally:
        fresh.close()


def test_write_from_another_process_between_load_and_commit(db, user, monkeypatch):
    real_complete_stage = engine.complete_stage

    def racing_complete_stage(*args, **kwargs):
        other = SessionLocal()
        try:
            other.get(User, user.id).xp += 5
            other.commit()
        finally:
            other.close()
        return real_complete_stage(*args, **kwargs)

    monkeypatch.setattr(engine, "complete_stage", racing_complete_stage)
    with pytest.raises(PersistenceError):
        service.complete_stage(db, user.id, "C1", "L1", "read", xp=20, now=DAY1)

    fresh = SessionLocal()
    try:
        stored = fresh.get(User, user.id)
        assert stored.xp == 5
        assert stored.stage_progress == []
    finally:
        fresh.close()


def test_user_locks_are_released_when_idle(db, user):
    held = service._user_lock(user.id)
    assert service._user_lock(user.id) is held
    del held
    gc.collect()
    assert user.id not in service._locks

    service.complete_stage(db, user.id, "C1", "L1", "read", now=DAY1)
    gc.collect()
    assert user.id not in service._locks


def test_stats_lazily_reset_broken_streak(db, user):
    service.complete_stage(db, user.id, "C1", "L1", "read", now=DAY1)
    service.complete_stage(db, user.id, "C1", "L1", "practice", now=DAY1 + timedelta(days=1))

    alive = service.get_stats(db, user.id, now=DAY1 + timedelta(days=2))
    assert alive["streak"] == 2
    assert alive["streakBroken"] is False
    assert alive["daysSinceLastActivity"] == 1

    broken = service.get_stats(db, user.id, now=DAY1 + timedelta(days=5))
    assert broken["streak"] == 0
    assert broken["streakBroken"] is True
    assert broken["longestStreak"] == 2
    assert broken["daysSinceLastActivity"] == 4

    # Activity date untouched; the next activity starts over at 1
    _, result = service.complete_stage(db, user.id, "C1", "L1", "notes", now=DAY1 + timedelta(days=5))
    assert result.earned_xp == 30
    assert db.get(User, user.id).streak == 1


def test_course_progress_view(db, user):
    service.complete_lesson(db, user.id, "C1", "L1", 100, 95, now=DAY1)
    view = service.course_progress(db, user.id, "C1")
    assert view["completedLessons"] == ["L1"]
    assert [row["lessonId"] for row in view["lessons"]] == ["L1", "L2", "L3"]
    assert [row["unlocked"] for row in view["lessons"]] == [True, True, False]


def test_achievement_listing(db, user):
    service.complete_lesson(db, user.id, "C1", "L1", 100, 95, now=DAY1)
    listing = service.get_achievements(db, user.id)
    assert [a["key"] for a in listing if a["earned"]] == ["first-lesson"]


def test_course_history_and_favorites(db, user):
    assert service.record_course_visit(db, user.id, "C1") == ["C1"]
    assert service.record_course_visit(db, user.id, "C1") == ["C1"]
    with pytest.raises(NotFoundError):
        service.record_course_visit(db, user.id, "missing")

    assert service.toggle_favorite(db, user.id, "C1") == ["C1"]
    assert service.toggle_favorite(db, user.id, "C1") == []

    stats = service.get_stats(db, user.id, now=DAY1)
    assert stats["history"] == ["C1"]
    assert stats["favorites"] == []


def test_calendar_notes_are_persisted(db, user):
    service.add_calendar_note(db, user.id, "2026-06-01", "review loops")
    notes = service.add_calendar_note(db, user.id, "2026-06-01", "read chapter 3")
    assert notes == {"2026-06-01": ["review loops", "read chapter 3"]}

    assert service.remove_calendar_note(db, user.id, "2026-06-01", 0) == {"2026-06-01": ["read chapter 3"]}
    assert service.remove_calendar_note(db, user.id, "2026-06-01", 0) == {}

    fresh = SessionLocal()
    try:
        assert fresh.get(User, user.id).calendar_notes == {}
    finally:
        fresh.close()
