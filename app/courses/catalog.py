"""
Read-only course/lesson catalog lookups.
"""
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, PersistenceError
from app.courses.models import Course, Lesson
from app.progress.quiz import QuizQuestion
from app.progress.types import Stage


def get_course(db: Session, course_id: str) -> Course:
    try:
        course = db.query(Course).filter(Course.slug == course_id).first()
    except SQLAlchemyError as e:
        raise PersistenceError(f"Failed to load course: {type(e).__name__}") from e
    if not course:
        raise NotFoundError("Course not found")
    return course


def list_courses(db: Session) -> list[Course]:
    """Newest first; a title already listed is skipped so re-imported copies don't show twice."""
    try:
        courses = db.query(Course).order_by(Course.id.desc()).all()
    except SQLAlchemyError as e:
        raise PersistenceError(f"Failed to load courses: {type(e).__name__}") from e
    seen = set()
    unique = []
    for course in courses:
        if course.title in seen:
            continue
        seen.add(course.title)
        unique.append(course)
    return unique


def get_lesson(db: Session, course_id: str, lesson_id: str) -> Lesson:
    course = get_course(db, course_id)
    for lesson in course.lessons:
        if lesson.slug == lesson_id:
            return lesson
    raise NotFoundError("Lesson not found")


def lesson_ids(db: Session, course_id: str) -> list[str]:
    """Lesson ids of a course in unlock order."""
    return [lesson.slug for lesson in get_course(db, course_id).lessons]


def stage_xp(lesson: Lesson, stage: Stage) -> int:
    return {
        Stage.READ: lesson.read_xp,
        Stage.PRACTICE: lesson.practice_xp,
        Stage.NOTES: lesson.notes_xp,
    }[stage]


def quiz_questions(lesson: Lesson) -> list[QuizQuestion]:
    return [
        QuizQuestion(
            question_id=q.slug,
            correct_answer=q.correct_answer,
            explanation=q.explanation or "",
            difficulty=q.difficulty,
            xp_reward=q.xp_reward,
        )
        for q in lesson.questions
    ]


def lesson_public_dict(lesson: Lesson) -> dict:
    """Lesson content for the learner; correct answers and explanations stay server-side."""
    return {
        "id": lesson.slug,
        "courseId": lesson.course.slug,
        "title": lesson.title,
        "position": lesson.position,
        "difficulty": lesson.difficulty,
        "xp": lesson.xp,
        "stages": {
            "read": {"xp": lesson.read_xp, "content": lesson.read_content},
            "practice": {
                "xp": lesson.practice_xp,
                "questions": [
                    {
                        "id": q.slug,
                        "question": q.prompt,
                        "options": q.options or [],
                        "difficulty": q.difficulty,
                        "xpReward": q.xp_reward,
                    }
                    for q in lesson.questions
                ],
            },
            "notes": {"xp": lesson.notes_xp, "content": lesson.notes_content},
        },
    }


def course_summary_dict(course: Course) -> dict:
    return {
        "id": course.slug,
        "title": course.title,
        "description": course.description or "",
        "category": course.category or "",
        "difficulty": course.difficulty,
        "totalXP": sum(lesson.xp or 0 for lesson in course.lessons),
        "lessons": [
            {"id": lesson.slug, "title": lesson.title, "xp": lesson.xp}
            for lesson in course.lessons
        ],
    }


def course_detail_dict(course: Course) -> dict:
    """Summary plus lesson order and stage rewards; no lesson content."""
    body = course_summary_dict(course)
    body["lessons"] = [
        {
            "id": lesson.slug,
            "title": lesson.title,
            "position": lesson.position,
            "difficulty": lesson.difficulty,
            "xp": lesson.xp,
            "stageXP": {
                "read": lesson.read_xp,
                "practice": lesson.practice_xp,
                "notes": lesson.notes_xp,
            },
            "questionCount": len(lesson.questions),
        }
        for lesson in course.lessons
    ]
    return body
