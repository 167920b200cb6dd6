from sqlalchemy import Column, Integer, String, Text, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from app.db.base import Base


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)

    # Public, human-readable id, e.g. "python-basics"
    slug = Column(String(255), unique=True, index=True, nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    category = Column(String(255), nullable=True, default="")
    difficulty = Column(String(32), nullable=True)  # Beginner | Intermediate | Advanced

    lessons = relationship(
        "Lesson", back_populates="course", order_by="Lesson.position",
        cascade="all, delete-orphan",
    )


class Lesson(Base):
    """
    A lesson inside a course. position defines unlock order:
    lesson N+1 opens once lesson N has all three stages done.
    """
    __tablename__ = "lessons"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)

    slug = Column(String(255), nullable=False)
    position = Column(Integer, nullable=False, default=1)
    title = Column(String(255), nullable=False)
    difficulty = Column(String(32), nullable=True)

    # Whole-lesson reward used by complete-lesson
    xp = Column(Integer, nullable=False, default=0)

    # Per-stage rewards
    read_xp = Column(Integer, nullable=False, default=10)
    practice_xp = Column(Integer, nullable=False, default=30)
    notes_xp = Column(Integer, nullable=False, default=10)

    # Read sections / notes summary as stored by the content pipeline
    read_content = Column(JSON, nullable=True)
    notes_content = Column(JSON, nullable=True)

    course = relationship("Course", back_populates="lessons")
    questions = relationship(
        "Question", back_populates="lesson", order_by="Question.position",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("course_id", "slug", name="uq_course_lesson"),
    )


class Question(Base):
    """Practice-stage question; correct_answer is an index into options."""
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=False, index=True)

    slug = Column(String(64), nullable=False)  # e.g. "q1"
    position = Column(Integer, nullable=False, default=1)
    prompt = Column(Text, nullable=False)
    options = Column(JSON, nullable=False, default=list)
    correct_answer = Column(Integer, nullable=False)
    explanation = Column(Text, nullable=False, default="")
    difficulty = Column(String(16), nullable=False, default="Easy")  # Easy | Medium | Hard
    xp_reward = Column(Integer, nullable=False, default=10)

    lesson = relationship("Lesson", back_populates="questions")
