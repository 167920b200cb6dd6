from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.core.deps import get_current_user
from app.courses import catalog
from app.db.session import get_db
from app.progress import service
from app.users.models import User

router = APIRouter(prefix="/lessons", tags=["lessons"])
courses_router = APIRouter(prefix="/courses", tags=["courses"])


class SubmitQuizBody(BaseModel):
    # Any shape is accepted here; the scorer rejects a non-list or a
    # non-integer entry with a 400 instead of pydantic's 422
    answers: Any


# =========================
# COURSE CATALOG (public)
# =========================
@courses_router.get("")
def list_courses(db: Session = Depends(get_db)):
    return {"courses": [catalog.course_summary_dict(c) for c in catalog.list_courses(db)]}


@courses_router.get("/{course_id}")
def get_course(course_id: str, db: Session = Depends(get_db)):
    return {"course": catalog.course_detail_dict(catalog.get_course(db, course_id))}


# =========================
# LESSONS
# =========================
@router.get("/{course_id}/{lesson_id}")
def get_lesson(
    course_id: str,
    lesson_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    lesson = catalog.get_lesson(db, course_id, lesson_id)
    return {"lesson": catalog.lesson_public_dict(lesson)}


@router.post("/{course_id}/{lesson_id}/submit-quiz")
def submit_quiz(
    course_id: str,
    lesson_id: str,
    body: SubmitQuizBody,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Grade practice answers. Does not award XP; completing the stage does."""
    return service.submit_quiz(db, course_id, lesson_id, body.answers).as_dict()
