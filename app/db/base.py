"""
Engine, session factory and declarative base for the progress store.

Writes to one user's record are serialised by a per-user lock in
app.progress.service, but requests still run on FastAPI's threadpool, so a
session's SQLite connection may be used from a different thread than the one
that opened it. Conflicts between processes are caught by the version column
on User, not here.
"""
import os
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker


def _build_database_url() -> str:
    """
    DATABASE_URL from the environment, else a local SQLite file.
    Legacy postgres:// URLs are rewritten to postgresql+psycopg2://.
    """
    url = os.getenv("DATABASE_URL", "sqlite:///./local.db").strip()

    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+psycopg2://", 1)

    return url


DATABASE_URL = _build_database_url()
IS_SQLITE = DATABASE_URL.startswith("sqlite")

connect_args = {}
if IS_SQLITE:
    # Threadpool requests share connections across threads; a writer waiting
    # on another process's transaction blocks up to `timeout` seconds
    connect_args = {"check_same_thread": False, "timeout": 15}

engine = create_engine(DATABASE_URL, connect_args=connect_args, future=True)

# Objects expire on commit so a response built after a write shows stored values
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def _log_backend() -> None:
    url_safe = engine.url.render_as_string(hide_password=True)
    print(f"[DB] progress store backend={engine.url.get_backend_name()} url={url_safe}", flush=True)
    if IS_SQLITE:
        db_path = Path(engine.url.database or "").resolve()
        print(f"[DB] SQLite path={db_path} exists={db_path.exists()}", flush=True)


try:
    _log_backend()
except Exception as exc:
    # Diagnostics only; startup continues
    print("[DB] Failed to log DB diagnostics:", repr(exc), flush=True)
