"""
Plain value types shared by the progression engine.

The engine never touches the ORM: the service layer copies a User row into
a UserProgress snapshot, runs the engine on it, and copies it back only if
the whole operation succeeded.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import NamedTuple, Optional

from app.core.errors import ValidationError


class Stage(str, Enum):
    READ = "read"
    PRACTICE = "practice"
    NOTES = "notes"

    @classmethod
    def parse(cls, value) -> "Stage":
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(f"Unknown stage '{value}' (expected read, practice or notes)")


# Unlock order inside a lesson
STAGE_ORDER = (Stage.READ, Stage.PRACTICE, Stage.NOTES)


class LessonKey(NamedTuple):
    """Composite (course, lesson) key. Ids may contain '-' without colliding."""
    course_id: str
    lesson_id: str

    def __str__(self) -> str:
        return f"{self.course_id}-{self.lesson_id}"


@dataclass
class StageState:
    read: bool = False
    practice: bool = False
    notes: bool = False
    user_notes: str = ""

    def is_done(self, stage: Stage) -> bool:
        return getattr(self, stage.value)

    def mark_done(self, stage: Stage) -> None:
        # Flags only ever go False -> True
        setattr(self, stage.value, True)

    @property
    def all_complete(self) -> bool:
        return self.read and self.practice and self.notes

    def as_dict(self) -> dict:
        return {"read": self.read, "practice": self.practice, "notes": self.notes}


@dataclass
class UnlockedAchievement:
    id: str
    name: str
    icon: str
    description: str
    unlocked_at: datetime

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "description": self.description,
            "unlockedAt": self.unlocked_at.isoformat(),
        }


@dataclass
class UserProgress:
    xp: int = 0
    level: int = 1
    streak: int = 0
    longest_streak: int = 0
    last_activity_date: Optional[datetime] = None
    completed_lessons: list[LessonKey] = field(default_factory=list)
    stage_progress: dict[LessonKey, StageState] = field(default_factory=dict)
    achievements: dict[str, datetime] = field(default_factory=dict)

    def stage_state(self, key: LessonKey) -> StageState:
        """Return the lesson's StageState, creating the all-false default."""
        if key not in self.stage_progress:
            self.stage_progress[key] = StageState()
        return self.stage_progress[key]

    def peek_stage_state(self, key: LessonKey) -> StageState:
        """Read-only variant of stage_state(): does not insert the default."""
        return self.stage_progress.get(key) or StageState()


@dataclass
class ProgressResult:
    earned_xp: int = 0
    leveled_up: bool = False
    new_level: Optional[int] = None
    new_achievements: list[UnlockedAchievement] = field(default_factory=list)
    all_stages_complete: Optional[bool] = None


@dataclass
class QuestionResult:
    question_id: str
    is_correct: bool
    correct_answer: int
    explanation: str

    def as_dict(self) -> dict:
        return {
            "questionId": self.question_id,
            "isCorrect": self.is_correct,
            "correctAnswer": self.correct_answer,
            "explanation": self.explanation,
        }


@dataclass
class QuizResult:
    score: int
    passed: bool
    correct_count: int
    total_questions: int
    results: list[QuestionResult]

    def as_dict(self) -> dict:
        return {
            "score": self.score,
            "passed": self.passed,
            "correctCount": self.correct_count,
            "totalQuestions": self.total_questions,
            "results": [r.as_dict() for r in self.results],
        }
