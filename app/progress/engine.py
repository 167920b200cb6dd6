"""
Stage / lesson progression state machine.

Core rules:
  - A lesson has three ordered stages: read -> practice -> notes
  - Stage flags are monotonic; completing a done stage is a zero-effect no-op
  - A lesson is in completed_lessons iff all three flags are set
  - XP changes always recompute level, then the streak is applied, then
    achievements are evaluated against the updated stats
  - Ordering (practice after read, lesson N+1 after lesson N) is gated by the
    caller; the engine only exposes the unlock data

Functions here mutate a UserProgress snapshot and never do I/O.
"""
import logging
from datetime import datetime
from typing import Optional, Sequence

from app.core.config import LESSON_BONUS_TIERS
from app.core.errors import ValidationError
from app.progress import streak as streak_tracker
from app.progress.achievements import Stats, evaluate_achievements
from app.progress.leveling import level_for_xp
from app.progress.types import (
    STAGE_ORDER, LessonKey, ProgressResult, Stage, UserProgress,
)

logger = logging.getLogger(__name__)


def _check_xp(xp) -> int:
    if isinstance(xp, bool) or not isinstance(xp, int) or xp < 0:
        raise ValidationError("xp must be a non-negative integer")
    return xp


def lesson_bonus_xp(base_xp: int, quiz_score: int) -> int:
    """Base XP scaled by quiz score tier (>=90 x1.2, >=80 x1.1), halves rounded up."""
    for min_score, tenths in LESSON_BONUS_TIERS:
        if quiz_score >= min_score:
            return (base_xp * tenths + 5) // 10
    return base_xp


def _award(progress: UserProgress, amount: int, now: datetime, result: ProgressResult) -> None:
    """XP, derived level and streak for one qualifying activity."""
    previous_level = progress.level
    progress.xp += amount
    progress.level = level_for_xp(progress.xp)
    result.earned_xp = amount
    result.leveled_up = progress.level > previous_level
    result.new_level = progress.level if result.leveled_up else None
    if result.leveled_up:
        logger.info(f"[LEVEL-UP] {previous_level} -> {progress.level} (xp={progress.xp})")

    update = streak_tracker.evaluate(
        now, progress.last_activity_date, progress.streak, progress.longest_streak,
    )
    progress.streak = update.streak
    progress.longest_streak = update.longest_streak
    progress.last_activity_date = update.last_activity_date


def _evaluate_achievements(progress: UserProgress, now: datetime, result: ProgressResult) -> None:
    stats = Stats(
        completed_lesson_count=len(progress.completed_lessons),
        level=progress.level,
        streak=progress.streak,
        xp=progress.xp,
    )
    result.new_achievements = evaluate_achievements(stats, progress.achievements, now)


def _mark_lesson_complete(progress: UserProgress, key: LessonKey) -> None:
    if key not in progress.completed_lessons:
        progress.completed_lessons.append(key)
        logger.info(f"[PROGRESS] lesson complete {key}")


# ---------------------------------------------------------------------------
# ENTRY POINT A: complete one stage
# ---------------------------------------------------------------------------

def complete_stage(
    progress: UserProgress,
    key: LessonKey,
    stage: Stage,
    xp: int,
    now: datetime,
    notes_text: Optional[str] = None,
) -> ProgressResult:
    stage = Stage.parse(stage)
    xp = _check_xp(xp)
    state = progress.stage_state(key)

    if notes_text is not None and stage is Stage.NOTES:
        state.user_notes = notes_text

    if state.is_done(stage):
        return ProgressResult(all_stages_complete=state.all_complete)

    state.mark_done(stage)
    result = ProgressResult()
    _award(progress, xp, now, result)

    result.all_stages_complete = state.all_complete
    if state.all_complete:
        _mark_lesson_complete(progress, key)

    _evaluate_achievements(progress, now, result)
    logger.info(
        f"[PROGRESS] {key} stage={stage.value} earned={result.earned_xp} "
        f"xp={progress.xp} level={progress.level} streak={progress.streak}"
    )
    return result


# ---------------------------------------------------------------------------
# ENTRY POINT B: complete a whole lesson
# ---------------------------------------------------------------------------

def complete_lesson(
    progress: UserProgress,
    key: LessonKey,
    base_xp: int,
    quiz_score: int,
    now: datetime,
) -> ProgressResult:
    base_xp = _check_xp(base_xp)
    if isinstance(quiz_score, bool) or not isinstance(quiz_score, int) or not 0 <= quiz_score <= 100:
        raise ValidationError("quizScore must be an integer between 0 and 100")

    if key in progress.completed_lessons:
        return ProgressResult()

    # Keep completed_lessons and the stage flags in agreement
    state = progress.stage_state(key)
    for stage in STAGE_ORDER:
        state.mark_done(stage)
    _mark_lesson_complete(progress, key)

    result = ProgressResult()
    _award(progress, lesson_bonus_xp(base_xp, quiz_score), now, result)
    _evaluate_achievements(progress, now, result)
    logger.info(
        f"[PROGRESS] {key} lesson quiz={quiz_score} earned={result.earned_xp} "
        f"xp={progress.xp} level={progress.level}"
    )
    return result


# ---------------------------------------------------------------------------
# UNLOCKING (data for the caller to gate access)
# ---------------------------------------------------------------------------

def is_stage_unlocked(progress: UserProgress, key: LessonKey, stage: Stage) -> bool:
    """A stage opens once the previous stage of the same lesson is done."""
    stage = Stage.parse(stage)
    index = STAGE_ORDER.index(stage)
    if index == 0:
        return True
    return progress.peek_stage_state(key).is_done(STAGE_ORDER[index - 1])


def lesson_unlock_map(
    progress: UserProgress, course_id: str, lesson_ids: Sequence[str],
) -> list[dict]:
    """
    Per lesson, in course order: stage flags, whether the lesson is open
    (first lesson, or previous lesson fully complete) and which stages are open.
    """
    rows = []
    previous_complete = True
    for lesson_id in lesson_ids:
        key = LessonKey(course_id, lesson_id)
        state = progress.peek_stage_state(key)
        lesson_open = previous_complete
        rows.append({
            "lessonId": lesson_id,
            "unlocked": lesson_open,
            "completed": key in progress.completed_lessons,
            "stages": state.as_dict(),
            "unlockedStages": {
                stage.value: lesson_open and is_stage_unlocked(progress, key, stage)
                for stage in STAGE_ORDER
            },
        })
        previous_complete = state.all_complete
    return rows
