from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from app.core.deps import get_current_user
from app.db.session import get_db
from app.progress import service
from app.users.models import User

router = APIRouter(prefix="/progress", tags=["progress"])


class CompleteStageBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    course_id: str = Field(alias="courseId")
    lesson_id: str = Field(alias="lessonId")
    stage: str
    # Defaults to the lesson's stage reward from the catalog
    xp: Optional[int] = None
    # Free-text notes, only meaningful for the notes stage
    content: Optional[str] = None


class CompleteLessonBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    course_id: str = Field(alias="courseId")
    lesson_id: str = Field(alias="lessonId")
    xp: int
    quiz_score: int = Field(alias="quizScore")


class CourseRefBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    course_id: str = Field(alias="courseId")


class AddNoteBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date_key: str = Field(alias="dateKey")
    note: str


class DeleteNoteBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date_key: str = Field(alias="dateKey")
    note_index: int = Field(alias="noteIndex")


# =========================
# COMPLETE A STAGE
# =========================
@router.post("/complete-stage")
def complete_stage(
    body: CompleteStageBody,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    user, result = service.complete_stage(
        db, user.id, body.course_id, body.lesson_id, body.stage,
        xp=body.xp, notes_text=body.content,
    )
    return service.result_dict(user, result)


# =========================
# COMPLETE A WHOLE LESSON
# =========================
@router.post("/complete-lesson")
def complete_lesson(
    body: CompleteLessonBody,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    user, result = service.complete_lesson(
        db, user.id, body.course_id, body.lesson_id, body.xp, body.quiz_score,
    )
    return service.result_dict(user, result)


@router.get("/course/{course_id}")
def get_course_progress(
    course_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Completed lessons plus per-lesson stage flags and unlock state, in course order."""
    return service.course_progress(db, user.id, course_id)


# =========================
# HISTORY / FAVORITES
# =========================
@router.post("/history")
def record_history(
    body: CourseRefBody,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Move the course to the front of the recently opened list."""
    return {"history": service.record_course_visit(db, user.id, body.course_id)}


@router.post("/favorite")
def toggle_favorite(
    body: CourseRefBody,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return {"favorites": service.toggle_favorite(db, user.id, body.course_id)}


# =========================
# CALENDAR NOTES
# =========================
@router.post("/notes")
def add_note(
    body: AddNoteBody,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return {"calendarNotes": service.add_calendar_note(db, user.id, body.date_key, body.note)}


@router.delete("/notes")
def delete_note(
    body: DeleteNoteBody,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return {"calendarNotes": service.remove_calendar_note(db, user.id, body.date_key, body.note_index)}
