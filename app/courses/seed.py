"""
Catalog seeding from plain dicts (the JSON format exported by the content pipeline).

Course dict shape:
    {"id", "title", "description", "category", "difficulty",
     "lessons": [{"id", "title", "xp", "difficulty",
                  "stages": {"read": {"xp", ...}, "practice": {"xp", "questions": [...]},
                             "notes": {"xp", ...}}}]}

Existing courses (matched by id) are replaced, so the seed is safe to re-run.
"""
from sqlalchemy.orm import Session

from app.core.config import DEFAULT_QUESTION_XP, DEFAULT_STAGE_XP
from app.courses.models import Course, Lesson, Question


def _capitalize(value: str | None, default: str) -> str:
    return value.capitalize() if value else default


def _build_lesson(data: dict, position: int) -> Lesson:
    stages = data.get("stages") or {}
    read = stages.get("read") or {}
    practice = stages.get("practice") or {}
    notes = stages.get("notes") or {}

    lesson = Lesson(
        slug=data["id"],
        position=position,
        title=data.get("title", data["id"]),
        difficulty=_capitalize(data.get("difficulty"), "Easy"),
        xp=data.get("totalXP") or data.get("xp") or 0,
        read_xp=read.get("xp") or DEFAULT_STAGE_XP["read"],
        practice_xp=practice.get("xp") or DEFAULT_STAGE_XP["practice"],
        notes_xp=notes.get("xp") or DEFAULT_STAGE_XP["notes"],
        read_content={k: v for k, v in read.items() if k != "xp"} or None,
        notes_content={k: v for k, v in notes.items() if k != "xp"} or None,
    )
    for i, q in enumerate(practice.get("questions") or [], start=1):
        lesson.questions.append(Question(
            slug=q.get("id") or f"q{i}",
            position=i,
            prompt=q.get("question", ""),
            options=q.get("options") or [],
            correct_answer=q["correctAnswer"],
            explanation=q.get("explanation", ""),
            difficulty=_capitalize(q.get("difficulty"), "Easy"),
            xp_reward=q.get("xpReward") or DEFAULT_QUESTION_XP,
        ))
    return lesson


def upsert_courses(db: Session, courses: list[dict]) -> tuple[int, int]:
    """Insert or replace each course. Returns (created, replaced)."""
    created = replaced = 0
    for data in courses:
        existing = db.query(Course).filter(Course.slug == data["id"]).first()
        if existing:
            db.delete(existing)
            db.flush()
            replaced += 1
        else:
            created += 1

        course = Course(
            slug=data["id"],
            title=data.get("title", data["id"]),
            description=data.get("description", ""),
            category=data.get("category", ""),
            difficulty=data.get("difficulty"),
        )
        for position, lesson in enumerate(data.get("lessons") or [], start=1):
            course.lessons.append(_build_lesson(lesson, position))
        db.add(course)

    db.commit()
    return created, replaced
