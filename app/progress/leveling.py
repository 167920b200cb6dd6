from app.core.config import XP_PER_LEVEL


def level_for_xp(xp: int) -> int:
    """Level N covers [(N-1)*1000, N*1000). Always recomputed from xp, never incremented."""
    return max(xp, 0) // XP_PER_LEVEL + 1
