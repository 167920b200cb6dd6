"""
API routes for the current user's stats and badges.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.users.models import User
from app.core.deps import get_current_user
from app.db.session import get_db
from app.progress import service

router = APIRouter(prefix="/api", tags=["api"])


@router.get("/me/progress")
def get_me_progress(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """
    Return public progress for UI display. A streak that lapsed while the user
    was away is reported (and stored) as 0 here.
    """
    return service.get_stats(db, user.id)


@router.get("/me/achievements")
def get_me_achievements(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return {"achievements": service.get_achievements(db, user.id)}
