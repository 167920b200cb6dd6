import os
import tempfile

# Point the app at a throwaway SQLite file before anything imports app.db.base.
_tmp_dir = tempfile.mkdtemp(prefix="learnquest-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmp_dir, 'test.db')}"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest  # noqa: E402

from app.db.base import Base, SessionLocal, engine  # noqa: E402
from app.courses.seed import upsert_courses  # noqa: E402
from app.users.models import User  # noqa: E402
import app.courses.models  # noqa: E402,F401


def _questions(correct):
    return [
        {
            "id": f"q{i + 1}",
            "question": f"Question {i + 1}?",
            "options": ["A", "B", "C", "D"],
            "correctAnswer": answer,
            "explanation": f"Option {answer} is right.",
            "difficulty": "easy",
        }
        for i, answer in enumerate(correct)
    ]


COURSES = [
    {
        "id": "C1",
        "title": "Course One",
        "lessons": [
            {
                "id": "L1",
                "title": "Lesson One",
                "xp": 100,
                "stages": {
                    "read": {"xp": 20},
                    "practice": {"xp": 50, "questions": _questions([0, 1, 2, 3])},
                    "notes": {"xp": 30},
                },
            },
            {
                "id": "L2",
                "title": "Lesson Two",
                "xp": 100,
                "stages": {
                    "read": {},
                    "practice": {"questions": _questions([1])},
                    "notes": {},
                },
            },
            {"id": "L3", "title": "Lesson Three", "stages": {}},
        ],
    },
]


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    upsert_courses(session, COURSES)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user(db):
    u = User(email="learner@example.com", username="learner")
    db.add(u)
    db.commit()
    db.refresh(u)
    return u
