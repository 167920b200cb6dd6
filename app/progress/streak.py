"""
Daily streak rules.

Streaks are counted in calendar days in STREAK_TIMEZONE, never by comparing
exact timestamps:
  - same day as the last activity   -> unchanged
  - exactly the next day            -> streak + 1
  - anything else (gap, first time) -> streak = 1
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

from app.core.config import STREAK_TIMEZONE

logger = logging.getLogger(__name__)


def _zone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


STREAK_TZ = _zone(STREAK_TIMEZONE)


@dataclass
class StreakUpdate:
    streak: int
    longest_streak: int
    last_activity_date: Optional[datetime]
    changed: bool


@dataclass
class StreakCheck:
    broken: bool
    streak: int
    previous_streak: Optional[int] = None


def calendar_day(moment: datetime, tz: Optional[tzinfo] = None) -> date:
    """Date-only value of *moment* in the streak zone. Naive datetimes are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz or STREAK_TZ).date()


def days_between(earlier: datetime, later: datetime, tz: Optional[tzinfo] = None) -> int:
    return (calendar_day(later, tz) - calendar_day(earlier, tz)).days


def evaluate(
    now: datetime,
    last_activity_date: Optional[datetime],
    current_streak: int,
    longest_streak: int,
    tz: Optional[tzinfo] = None,
) -> StreakUpdate:
    """Apply one qualifying activity at *now*."""
    if last_activity_date is not None and days_between(last_activity_date, now, tz) == 0:
        return StreakUpdate(
            streak=current_streak,
            longest_streak=max(longest_streak, current_streak),
            last_activity_date=last_activity_date,
            changed=False,
        )

    if last_activity_date is not None and days_between(last_activity_date, now, tz) == 1:
        streak = current_streak + 1
    else:
        streak = 1

    longest = max(longest_streak, streak)
    logger.info(f"[STREAK] {current_streak} -> {streak} (longest={longest})")
    return StreakUpdate(
        streak=streak,
        longest_streak=longest,
        last_activity_date=now,
        changed=True,
    )


def check_streak_status(
    now: datetime,
    last_activity_date: Optional[datetime],
    streak: int,
    tz: Optional[tzinfo] = None,
) -> StreakCheck:
    """
    Read-path check used before showing stats.

    A streak is still alive if the last activity was today or yesterday (the
    user has the rest of today to extend it). Older than that it is broken and
    reported as 0; the stored activity date is left alone so the next activity
    simply starts again at 1.
    """
    if last_activity_date is None:
        return StreakCheck(broken=False, streak=streak)

    if days_between(last_activity_date, now, tz) <= 1:
        return StreakCheck(broken=False, streak=streak)

    return StreakCheck(broken=True, streak=0, previous_streak=streak)


def days_since_last_activity(
    now: datetime,
    last_activity_date: Optional[datetime],
    tz: Optional[tzinfo] = None,
) -> Optional[int]:
    """Whole calendar days since the last activity, or None if there never was one."""
    if last_activity_date is None:
        return None
    return max(days_between(last_activity_date, now, tz), 0)
