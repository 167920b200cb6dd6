"""
Achievement system.

Badges are defined once, in display order, as (id, predicate) pairs over
aggregate stats. Each is awarded at most once: a predicate is only looked
at while the user does not have the id yet, and thresholds use >= so a jump
past a milestone (bulk XP grant, streak correction) still awards it.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, Optional

from app.progress.types import UnlockedAchievement

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stats:
    completed_lesson_count: int
    level: int
    streak: int
    xp: int


@dataclass(frozen=True)
class AchievementDefinition:
    id: str
    name: str
    icon: str
    description: str
    predicate: Callable[[Stats], bool]


def _lessons(n: int) -> Callable[[Stats], bool]:
    return lambda s: s.completed_lesson_count >= n


def _level(n: int) -> Callable[[Stats], bool]:
    return lambda s: s.level >= n


def _streak(n: int) -> Callable[[Stats], bool]:
    return lambda s: s.streak >= n


def _xp(n: int) -> Callable[[Stats], bool]:
    return lambda s: s.xp >= n


ACHIEVEMENT_CATALOG: tuple[AchievementDefinition, ...] = (
    # Lesson milestones
    AchievementDefinition("first-lesson", "First Steps", "🎯", "Complete your first lesson", _lessons(1)),
    AchievementDefinition("5-lessons", "Getting Started", "🌱", "Complete 5 lessons", _lessons(5)),
    AchievementDefinition("10-lessons", "Dedicated Learner", "📚", "Complete 10 lessons", _lessons(10)),
    AchievementDefinition("25-lessons", "Knowledge Seeker", "🔍", "Complete 25 lessons", _lessons(25)),
    AchievementDefinition("50-lessons", "Master Student", "🎓", "Complete 50 lessons", _lessons(50)),
    # Level milestones
    AchievementDefinition("level-3", "Novice", "🥉", "Reach level 3", _level(3)),
    AchievementDefinition("level-5", "Rising Star", "⭐", "Reach level 5", _level(5)),
    AchievementDefinition("level-10", "Expert", "💎", "Reach level 10", _level(10)),
    # Streak milestones
    AchievementDefinition("3-day-streak", "Consistency", "🔥", "Maintain a 3-day streak", _streak(3)),
    AchievementDefinition("7-day-streak", "Week Warrior", "🔥", "Maintain a 7-day streak", _streak(7)),
    AchievementDefinition("30-day-streak", "Unstoppable", "🚀", "Maintain a 30-day streak", _streak(30)),
    # XP milestones
    AchievementDefinition("1000-xp", "XP Hunter", "⚡", "Earn 1000 XP", _xp(1000)),
    AchievementDefinition("5000-xp", "XP Master", "⚡", "Earn 5000 XP", _xp(5000)),
)

_BY_ID = {a.id: a for a in ACHIEVEMENT_CATALOG}


def get_definition(achievement_id: str) -> Optional[AchievementDefinition]:
    return _BY_ID.get(achievement_id)


def evaluate_achievements(
    stats: Stats,
    unlocked: dict[str, datetime],
    now: datetime,
    catalog: Iterable[AchievementDefinition] = ACHIEVEMENT_CATALOG,
) -> list[UnlockedAchievement]:
    """
    Award every catalog entry whose predicate now holds and that *unlocked*
    does not contain yet. *unlocked* is updated in place; the newly awarded
    entries are returned in catalog order.
    """
    awarded = []
    for definition in catalog:
        if definition.id in unlocked:
            continue
        if not definition.predicate(stats):
            continue
        unlocked[definition.id] = now
        awarded.append(UnlockedAchievement(
            id=definition.id,
            name=definition.name,
            icon=definition.icon,
            description=definition.description,
            unlocked_at=now,
        ))
        logger.info(f"[ACHIEVEMENT] earned '{definition.id}'")
    return awarded


def list_achievements(unlocked: dict[str, datetime]) -> list[dict]:
    """Whole catalog with earned/earned_at metadata for display."""
    result = []
    for definition in ACHIEVEMENT_CATALOG:
        entry = {
            "key": definition.id,
            "icon": definition.icon,
            "label": definition.name,
            "desc": definition.description,
            "earned": definition.id in unlocked,
        }
        if definition.id in unlocked:
            entry["earned_at"] = unlocked[definition.id].isoformat()
        result.append(entry)
    return result
