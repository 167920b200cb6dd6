"""
Seed the course catalog from a JSON file.

Usage:
    python scripts/seed_courses.py [path/to/courses.json]

- Defaults to data/courses.json
- SAFE to run multiple times (courses are replaced by id, never duplicated)
- Does NOT touch any user progress
"""
import json
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from app.db.base import Base, engine  # noqa: E402
from app.db.session import SessionLocal  # noqa: E402
from app.courses.seed import upsert_courses  # noqa: E402
import app.users.models  # noqa: E402,F401


def seed_courses(path: Path):
    courses = json.loads(path.read_text(encoding="utf-8"))
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        created, replaced = upsert_courses(db, courses)
        print("✅ Course seeding complete")
        print(f"   Created: {created}")
        print(f"   Replaced: {replaced}")
    except Exception as e:
        db.rollback()
        print("❌ Error while seeding courses")
        print(str(e))
        raise
    finally:
        db.close()


if __name__ == "__main__":
    target = Path(sys.argv[1]) if len(sys.argv) > 1 else project_root / "data" / "courses.json"
    seed_courses(target)
