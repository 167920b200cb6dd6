"""
Per-user course history, favourites and calendar notes.

These are plain list/dict values stored as JSON on the user row. Every
helper returns a new value instead of mutating its argument, so the ORM
sees an assignment and writes the column.
"""
from datetime import date
from typing import Optional

from app.core.config import COURSE_HISTORY_LIMIT
from app.core.errors import NotFoundError, ValidationError


def push_history(history: Optional[list], course_id: str, limit: int = COURSE_HISTORY_LIMIT) -> list[str]:
    """Most recent first, no duplicates, at most `limit` entries."""
    rest = [c for c in (history or []) if c != course_id]
    return [course_id, *rest][:limit]


def toggle_favorite(favorites: Optional[list], course_id: str) -> list[str]:
    favorites = list(favorites or [])
    if course_id in favorites:
        favorites.remove(course_id)
    else:
        favorites.append(course_id)
    return favorites


def _check_date_key(date_key) -> str:
    try:
        date.fromisoformat(date_key)
    except (TypeError, ValueError):
        raise ValidationError("dateKey must be a YYYY-MM-DD date")
    return date_key


def add_calendar_note(notes: Optional[dict], date_key: str, note: str) -> dict[str, list[str]]:
    date_key = _check_date_key(date_key)
    if not isinstance(note, str) or not note.strip():
        raise ValidationError("note must be non-empty text")
    notes = {k: list(v) for k, v in (notes or {}).items()}
    notes.setdefault(date_key, []).append(note)
    return notes


def remove_calendar_note(notes: Optional[dict], date_key: str, index: int) -> dict[str, list[str]]:
    """Drop one note; a day left with no notes is removed entirely."""
    date_key = _check_date_key(date_key)
    notes = {k: list(v) for k, v in (notes or {}).items()}
    day = notes.get(date_key)
    if isinstance(index, bool) or not isinstance(index, int) or not day or not 0 <= index < len(day):
        raise NotFoundError("Note not found")
    del day[index]
    if not day:
        del notes[date_key]
    return notes
