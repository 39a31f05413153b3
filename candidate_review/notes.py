from __future__ import annotations  # Admin rating notes and score aggregation

import datetime as dt
import sqlite3
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from interview_answers import Section
from observability import log_event
from storage.migrate import migrate
from storage.sqlite import get_conn

_COLUMNS = "id, candidate_id, admin_id, section, rating, notes, created_at, updated_at"


class NoteRecord(BaseModel):  # Admin note, optionally rating one section
    id: int
    candidate_id: str
    admin_id: str
    section: Optional[Section] = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    notes: Optional[str] = None
    created_at: str
    updated_at: str


class NoteRequest(BaseModel):  # Admin note payload
    section: Optional[Section] = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    notes: Optional[str] = Field(default=None, max_length=5000)


def _record(row: sqlite3.Row) -> NoteRecord:
    return NoteRecord(**{key: row[key] for key in row.keys()})


def overall_score(notes: Iterable[NoteRecord]) -> Optional[float]:
    """Arithmetic mean of every non-null rating; ``None`` when nothing is rated."""

    ratings = [note.rating for note in notes if note.rating is not None]
    if not ratings:
        return None
    return sum(ratings) / len(ratings)


def section_scores(notes: Iterable[NoteRecord]) -> Dict[str, Optional[int]]:  # Latest rating per section
    scores: Dict[str, Optional[int]] = {section.value: None for section in Section}
    ordered = sorted(notes, key=lambda note: (note.created_at, note.id))
    for note in ordered:
        if note.section is not None and note.rating is not None:
            scores[note.section.value] = note.rating
    return scores


class NoteStore:  # SQLite-backed admin notes
    def __init__(self, path: Path) -> None:
        self._path = path
        migrate(str(path))

    def add_note(
        self,
        candidate_id: str,
        admin_id: str,
        *,
        section: Optional[Section] = None,
        rating: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> NoteRecord:
        payload = NoteRequest(section=section, rating=rating, notes=notes)
        now = dt.datetime.now(dt.timezone.utc).isoformat()
        with get_conn(self._path, operation="add_note") as conn:
            cur = conn.execute(
                """
                INSERT INTO admin_notes (candidate_id, admin_id, section, rating, notes, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    candidate_id,
                    admin_id,
                    payload.section.value if payload.section else None,
                    payload.rating,
                    payload.notes,
                    now,
                    now,
                ),
            )
            note_id = int(cur.lastrowid)
        log_event("note_added", candidate_id, section=payload.section.value if payload.section else None)
        return NoteRecord(
            id=note_id,
            candidate_id=candidate_id,
            admin_id=admin_id,
            section=payload.section,
            rating=payload.rating,
            notes=payload.notes,
            created_at=now,
            updated_at=now,
        )

    def list_notes(self, candidate_id: str) -> List[NoteRecord]:
        with get_conn(self._path, operation="list_notes") as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM admin_notes WHERE candidate_id = ? ORDER BY id ASC",
                (candidate_id,),
            ).fetchall()
        return [_record(row) for row in rows]

    def list_all_notes(self) -> List[NoteRecord]:
        with get_conn(self._path, operation="list_all_notes") as conn:
            rows = conn.execute(f"SELECT {_COLUMNS} FROM admin_notes ORDER BY id ASC").fetchall()
        return [_record(row) for row in rows]


__all__ = ["NoteRecord", "NoteRequest", "NoteStore", "overall_score", "section_scores"]
