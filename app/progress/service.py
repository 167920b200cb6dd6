"""
Transactional wrapper around the progression engine.

Each mutating call is one read-modify-write of a single user's record:
  1. take the per-user lock
  2. load the User row and copy it into a UserProgress snapshot
  3. run the engine on the snapshot
  4. copy the snapshot back onto the ORM rows and commit
If the commit fails (including a stale version from another process) the
session is rolled back and PersistenceError is raised; nothing counts as
awarded until the write is durable.
"""
import logging
import threading
import weakref
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, PersistenceError
from app.courses import catalog
from app.progress import engine, preferences
from app.progress import streak as streak_tracker
from app.progress.achievements import list_achievements
from app.progress.quiz import score_quiz
from app.progress.types import (
    LessonKey, ProgressResult, QuizResult, Stage, StageState, UserProgress,
)
from app.users.models import CompletedLesson, LessonStageProgress, User, UserAchievement

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Per-user serialisation
# ---------------------------------------------------------------------------

# Entries disappear once no request holds the lock
_locks: "weakref.WeakValueDictionary[int, threading.Lock]" = weakref.WeakValueDictionary()
_locks_guard = threading.Lock()


def _user_lock(user_id: int) -> threading.Lock:
    with _locks_guard:
        lock = _locks.get(user_id)
        if lock is None:
            lock = _locks[user_id] = threading.Lock()
        return lock


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything is stored as UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# ORM <-> snapshot
# ---------------------------------------------------------------------------

def load_user(db: Session, user_id: int) -> User:
    """
    Re-read the user row and its collections. The request's session may
    already hold a copy loaded during authentication, before the lock was
    taken; that copy must not be reused.
    """
    try:
        user = db.get(User, user_id, populate_existing=True)
    except SQLAlchemyError as e:
        raise PersistenceError(f"Failed to load progress: {type(e).__name__}") from e
    if not user:
        raise NotFoundError("User not found")
    return user


def to_snapshot(user: User) -> UserProgress:
    return UserProgress(
        xp=user.xp or 0,
        level=user.level or 1,
        streak=user.streak or 0,
        longest_streak=user.longest_streak or 0,
        last_activity_date=_utc(user.last_activity_date),
        completed_lessons=[LessonKey(c.course_id, c.lesson_id) for c in user.completed_lessons],
        stage_progress={
            LessonKey(row.course_id, row.lesson_id): StageState(
                read=bool(row.read),
                practice=bool(row.practice),
                notes=bool(row.notes),
                user_notes=row.user_notes or "",
            )
            for row in user.stage_progress
        },
        achievements={a.key: _utc(a.earned_at) for a in user.achievements},
    )


def apply_snapshot(user: User, progress: UserProgress) -> None:
    user.xp = progress.xp
    user.level = progress.level
    user.streak = progress.streak
    user.longest_streak = progress.longest_streak
    user.last_activity_date = progress.last_activity_date

    rows = {LessonKey(r.course_id, r.lesson_id): r for r in user.stage_progress}
    for key, state in progress.stage_progress.items():
        row = rows.get(key)
        if row is None:
            row = LessonStageProgress(course_id=key.course_id, lesson_id=key.lesson_id)
            user.stage_progress.append(row)
        row.read = state.read
        row.practice = state.practice
        row.notes = state.notes
        row.user_notes = state.user_notes

    done = {LessonKey(c.course_id, c.lesson_id) for c in user.completed_lessons}
    for key in progress.completed_lessons:
        if key not in done:
            user.completed_lessons.append(CompletedLesson(course_id=key.course_id, lesson_id=key.lesson_id))

    have = {a.key for a in user.achievements}
    for key, earned_at in progress.achievements.items():
        if key not in have:
            user.achievements.append(UserAchievement(key=key, earned_at=earned_at))


def _commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"[PROGRESS] commit failed: {type(e).__name__}: {e}")
        raise PersistenceError("Failed to save progress; nothing was applied, retry is safe") from e


# ---------------------------------------------------------------------------
# Serialisation for API responses
# ---------------------------------------------------------------------------

def public_user(user: User) -> dict:
    """User progress without credentials."""
    progress = to_snapshot(user)
    return {
        "id": user.id,
        "username": user.username,
        "xp": progress.xp,
        "level": progress.level,
        "streak": progress.streak,
        "longestStreak": progress.longest_streak,
        "lastActivityDate": progress.last_activity_date.isoformat() if progress.last_activity_date else None,
        "completedLessons": [str(k) for k in progress.completed_lessons],
        "stageProgress": {str(k): s.as_dict() for k, s in progress.stage_progress.items()},
        "achievements": [
            {"id": key, "unlockedAt": at.isoformat()} for key, at in progress.achievements.items()
        ],
        "history": list(user.course_history or []),
        "favorites": list(user.favorites or []),
        "calendarNotes": dict(user.calendar_notes or {}),
    }


def result_dict(user: User, result: ProgressResult) -> dict:
    body = {
        "user": public_user(user),
        "earnedXP": result.earned_xp,
        "leveledUp": result.leveled_up,
        "newLevel": result.new_level,
        "newAchievements": [a.as_dict() for a in result.new_achievements],
    }
    if result.all_stages_complete is not None:
        body["allStagesComplete"] = result.all_stages_complete
    return body


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

def complete_stage(
    db: Session,
    user_id: int,
    course_id: str,
    lesson_id: str,
    stage,
    xp: Optional[int] = None,
    notes_text: Optional[str] = None,
    now: Optional[datetime] = None,
) -> tuple[User, ProgressResult]:
    stage = Stage.parse(stage)
    lesson = catalog.get_lesson(db, course_id, lesson_id)
    if xp is None:
        xp = catalog.stage_xp(lesson, stage)

    with _user_lock(user_id):
        user = load_user(db, user_id)
        progress = to_snapshot(user)
        result = engine.complete_stage(
            progress, LessonKey(course_id, lesson_id), stage, xp, now or _now(), notes_text,
        )
        apply_snapshot(user, progress)
        _commit(db)
    return user, result


def complete_lesson(
    db: Session,
    user_id: int,
    course_id: str,
    lesson_id: str,
    xp: int,
    quiz_score: int,
    now: Optional[datetime] = None,
) -> tuple[User, ProgressResult]:
    catalog.get_lesson(db, course_id, lesson_id)

    with _user_lock(user_id):
        user = load_user(db, user_id)
        progress = to_snapshot(user)
        result = engine.complete_lesson(
            progress, LessonKey(course_id, lesson_id), xp, quiz_score, now or _now(),
        )
        apply_snapshot(user, progress)
        _commit(db)
    return user, result


def submit_quiz(db: Session, course_id: str, lesson_id: str, answers) -> QuizResult:
    lesson = catalog.get_lesson(db, course_id, lesson_id)
    return score_quiz(catalog.quiz_questions(lesson), answers)


def get_stats(db: Session, user_id: int, now: Optional[datetime] = None) -> dict:
    """
    Stats for display. A broken streak is lazily written back as 0; the
    last activity date is not touched.
    """
    now = now or _now()
    with _user_lock(user_id):
        user = load_user(db, user_id)
        check = streak_tracker.check_streak_status(now, _utc(user.last_activity_date), user.streak or 0)
        if check.broken and user.streak:
            logger.info(f"[STREAK] user={user_id} streak broken ({check.previous_streak} -> 0)")
            user.streak = 0
            _commit(db)

    body = public_user(user)
    body["streakBroken"] = check.broken
    body["daysSinceLastActivity"] = streak_tracker.days_since_last_activity(
        now, _utc(user.last_activity_date),
    )
    return body


def get_achievements(db: Session, user_id: int) -> list[dict]:
    user = load_user(db, user_id)
    return list_achievements(to_snapshot(user).achievements)


def course_progress(db: Session, user_id: int, course_id: str) -> dict:
    ids = catalog.lesson_ids(db, course_id)
    progress = to_snapshot(load_user(db, user_id))
    return {
        "courseId": course_id,
        "completedLessons": [k.lesson_id for k in progress.completed_lessons if k.course_id == course_id],
        "lessons": engine.lesson_unlock_map(progress, course_id, ids),
    }


# ---------------------------------------------------------------------------
# Course history, favourites, calendar notes
# ---------------------------------------------------------------------------

def record_course_visit(db: Session, user_id: int, course_id: str) -> list[str]:
    catalog.get_course(db, course_id)
    with _user_lock(user_id):
        user = load_user(db, user_id)
        user.course_history = preferences.push_history(user.course_history, course_id)
        _commit(db)
        return list(user.course_history)


def toggle_favorite(db: Session, user_id: int, course_id: str) -> list[str]:
    catalog.get_course(db, course_id)
    with _user_lock(user_id):
        user = load_user(db, user_id)
        user.favorites = preferences.toggle_favorite(user.favorites, course_id)
        _commit(db)
        return list(user.favorites)


def add_calendar_note(db: Session, user_id: int, date_key: str, note: str) -> dict:
    with _user_lock(user_id):
        user = load_user(db, user_id)
        user.calendar_notes = preferences.add_calendar_note(user.calendar_notes, date_key, note)
        _commit(db)
        return dict(user.calendar_notes)


def remove_calendar_note(db: Session, user_id: int, date_key: str, index: int) -> dict:
    with _user_lock(user_id):
        user = load_user(db, user_id)
        user.calendar_notes = preferences.remove_calendar_note(user.calendar_notes, date_key, index)
        _commit(db)
        return dict(user.calendar_notes)
