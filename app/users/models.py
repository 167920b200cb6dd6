from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.base import Base


class User(Base):
    """
    One progress record per user.

    level is derived from xp and rewritten on every xp change; it is stored
    only so the UI can read it without recomputing.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    email = Column(String, unique=True, index=True, nullable=False)
    username = Column(String, unique=True, index=True, nullable=False)

    # Credentials are owned by the auth service; never serialised by this app
    password_hash = Column(String, nullable=True)

    xp = Column(Integer, nullable=False, default=0)
    level = Column(Integer, nullable=False, default=1)
    streak = Column(Integer, nullable=False, default=0)
    longest_streak = Column(Integer, nullable=False, default=0)
    last_activity_date = Column(DateTime(timezone=True), nullable=True)

    # Course ids, most recent first (capped), and starred course ids
    course_history = Column(JSON, nullable=True, default=list)
    favorites = Column(JSON, nullable=True, default=list)
    # {"YYYY-MM-DD": ["note", ...]}
    calendar_notes = Column(JSON, nullable=True, default=dict)

    # Optimistic concurrency: a stale copy fails to commit instead of overwriting
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    stage_progress = relationship(
        "LessonStageProgress", cascade="all, delete-orphan", lazy="selectin",
    )
    completed_lessons = relationship(
        "CompletedLesson", cascade="all, delete-orphan", lazy="selectin",
        order_by="CompletedLesson.id",
    )
    achievements = relationship(
        "UserAchievement", cascade="all, delete-orphan", lazy="selectin",
        order_by="UserAchievement.id",
    )

    __mapper_args__ = {"version_id_col": version}


# ======================================================
# PER-LESSON STAGE FLAGS (read -> practice -> notes)
# ======================================================
class LessonStageProgress(Base):
    __tablename__ = "lesson_stage_progress"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    course_id = Column(String(255), nullable=False)
    lesson_id = Column(String(255), nullable=False)

    read = Column(Boolean, nullable=False, default=False)
    practice = Column(Boolean, nullable=False, default=False)
    notes = Column(Boolean, nullable=False, default=False)

    user_notes = Column(Text, nullable=False, default="")

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "course_id", "lesson_id", name="uq_user_lesson_stage"),
    )


class CompletedLesson(Base):
    __tablename__ = "completed_lessons"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    course_id = Column(String(255), nullable=False)
    lesson_id = Column(String(255), nullable=False)
    completed_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "course_id", "lesson_id", name="uq_user_completed_lesson"),
    )


# ======================================================
# USER ACHIEVEMENTS (write-once)
# ======================================================
class UserAchievement(Base):
    __tablename__ = "user_achievements"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    key = Column(String(64), nullable=False)  # e.g. "first-lesson", "level-5", "7-day-streak"
    earned_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "key", name="uq_user_achievement"),
    )
