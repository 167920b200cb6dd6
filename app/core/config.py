"""
Configuration constants for the application.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file if it exists
env_path = Path(__file__).resolve().parent.parent.parent / '.env'
load_dotenv(dotenv_path=env_path)

# Calendar days for streaks are computed in this zone.
STREAK_TIMEZONE = os.getenv("STREAK_TIMEZONE", "UTC").strip() or "UTC"

# Expose /debug/* routes only when explicitly enabled.
ENABLE_DEBUG_ROUTES = os.getenv("ENABLE_DEBUG_ROUTES", "0") == "1"

# ---------------------------------------------------------------------------
# Progression rules (fixed, not environment-tunable)
# ---------------------------------------------------------------------------

XP_PER_LEVEL = 1000

QUIZ_PASSING_SCORE = 70

# (minimum quiz score, multiplier in tenths of base XP), checked in order
LESSON_BONUS_TIERS = (
    (90, 12),
    (80, 11),
)

# Catalog defaults used when seeding lessons that omit rewards
DEFAULT_STAGE_XP = {"read": 10, "practice": 30, "notes": 10}
DEFAULT_QUESTION_XP = 10

# Recently opened courses kept per user, most recent first
COURSE_HISTORY_LIMIT = 10
