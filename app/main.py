import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core.config import ENABLE_DEBUG_ROUTES
from app.core.errors import ProgressError
from app.db.base import Base, engine
from app.users.models import User, LessonStageProgress, CompletedLesson, UserAchievement  # noqa: F401 (create_all)
from app.courses.models import Course, Lesson, Question  # noqa: F401 (create_all)

from app.api.routes import router as api_router
from app.courses.routes import courses_router, router as lessons_router
from app.progress.routes import router as progress_router
from app.web.debug_routes import router as debug_router

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(name)s %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="LearnQuest", version="0.1.0")

# Only expose debug routes (including diagnostics) when explicitly enabled.
if ENABLE_DEBUG_ROUTES:
    app.include_router(debug_router)

# Create database tables (still useful in dev; in production prefer Alembic)
Base.metadata.create_all(bind=engine)


@app.exception_handler(ProgressError)
def progress_error_handler(request: Request, exc: ProgressError):
    if exc.status_code >= 500:
        logger.error(f"[API] {request.url.path} {type(exc).__name__}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error": type(exc).__name__},
    )


# Include routers
app.include_router(progress_router)
app.include_router(courses_router)
app.include_router(lessons_router)
app.include_router(api_router)


@app.get("/health", include_in_schema=False)
def health():
    return {"status": "ok"}
