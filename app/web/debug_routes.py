from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pathlib import Path

from app.db.session import get_db
from app.users.models import User
from app.db.base import engine

router = APIRouter(prefix="/debug", tags=["debug"])


@router.get("/users")
def debug_users(db: Session = Depends(get_db)):
    users = db.query(User).order_by(User.id.asc()).all()
    return [
        {
            "id": u.id,
            "username": u.username,
            "xp": u.xp,
            "level": u.level,
            "streak": u.streak,
            "longest_streak": u.longest_streak,
            "last_activity_date": str(u.last_activity_date or ""),
            "version": u.version,
        }
        for u in users
    ]


@router.get("/diagnostics/db")
def db_diagnostics():
    """
    Lightweight DB diagnostics for debugging deployments.

    Only mounted when ENABLE_DEBUG_ROUTES=1. Never includes the password.
    """
    url = engine.url
    backend = url.get_backend_name()

    info = {
        "backend": backend,
        "url": url.render_as_string(hide_password=True),
    }

    if backend == "sqlite":
        db_path = Path(url.database or "").resolve()
        exists = db_path.exists()
        info.update(
            {
                "sqlite_path": str(db_path),
                "sqlite_exists": exists,
                "sqlite_size_bytes": db_path.stat().st_size if exists else 0,
            }
        )
    else:
        info.update(
            {
                "database": url.database,
                "host": url.host,
                "port": url.port,
                "drivername": url.drivername,
            }
        )

    return info
