from __future__ import annotations  # Progress persistence keyed by identifier

import datetime as dt
import json
import sqlite3
from pathlib import Path
from typing import List, Mapping, Optional, Tuple

from identity import Identifier, identifier_from_parts
from observability import log_event
from storage.migrate import migrate
from storage.sqlite import get_conn

from .models import FINAL_STEP, ProgressRecord, derive_submission


def _record_from_row(row: sqlite3.Row) -> ProgressRecord:
    sections = json.loads(row["completed_sections"]) if row["completed_sections"] else {}
    return ProgressRecord(
        current_step=row["current_step"],
        completed_sections={str(key): bool(flag) for key, flag in sections.items()},
        submission_status=row["submission_status"],
        submitted_at=row["submitted_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class ProgressStore:  # SQLite-backed progress tracker
    def __init__(self, path: Path) -> None:
        self._path = path
        migrate(str(path))

    def load_progress(self, identifier: Identifier) -> Optional[ProgressRecord]:  # None when no record exists yet
        with get_conn(self._path, operation="load_progress") as conn:
            row = conn.execute(
                """
                SELECT current_step, completed_sections, submission_status, submitted_at, created_at, updated_at
                FROM interview_progress
                WHERE identifier_kind = ? AND identifier_value = ?
                """,
                (identifier.kind, identifier.value),
            ).fetchone()
        return _record_from_row(row) if row is not None else None

    def update_progress(
        self,
        identifier: Identifier,
        step: int,
        completed_sections: Optional[Mapping[str, bool]] = None,
    ) -> ProgressRecord:
        """Upsert the progress record for ``identifier``.

        Status is derived from ``step`` and ``completed_sections`` alone. When
        no section map is given the previously stored map is kept. A completed
        record is terminal and is returned unchanged.
        """

        if not 1 <= step <= FINAL_STEP:
            raise ValueError(f"Step must be between 1 and {FINAL_STEP}, got {step}")
        now = dt.datetime.now(dt.timezone.utc).isoformat()
        status, submitted_at = derive_submission(step, completed_sections, now)
        with get_conn(self._path, operation="update_progress") as conn:
            existing = conn.execute(
                """
                SELECT current_step, completed_sections, submission_status, submitted_at, created_at, updated_at
                FROM interview_progress
                WHERE identifier_kind = ? AND identifier_value = ?
                """,
                (identifier.kind, identifier.value),
            ).fetchone()
            if existing is not None and existing["submission_status"] == "completed":
                locked = _record_from_row(existing)
            else:
                locked = None
                if completed_sections is not None:
                    sections_json = json.dumps({str(k): bool(v) for k, v in completed_sections.items()})
                elif existing is not None:
                    sections_json = existing["completed_sections"] or "{}"
                else:
                    sections_json = "{}"
                conn.execute(
                    """
                    INSERT INTO interview_progress (
                        identifier_kind, identifier_value, current_step, completed_sections,
                        submission_status, submitted_at, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT (identifier_kind, identifier_value)
                    DO UPDATE SET current_step = excluded.current_step,
                                  completed_sections = excluded.completed_sections,
                                  submission_status = excluded.submission_status,
                                  submitted_at = excluded.submitted_at,
                                  updated_at = excluded.updated_at
                    """,
                    (
                        identifier.kind,
                        identifier.value,
                        step,
                        sections_json,
                        status,
                        submitted_at,
                        now,
                        now,
                    ),
                )
                row = conn.execute(
                    """
                    SELECT current_step, completed_sections, submission_status, submitted_at, created_at, updated_at
                    FROM interview_progress
                    WHERE identifier_kind = ? AND identifier_value = ?
                    """,
                    (identifier.kind, identifier.value),
                ).fetchone()
        if locked is not None:
            log_event("progress_locked", identifier.key, step=step, status=locked.submission_status)
            return locked
        record = _record_from_row(row)
        log_event("progress_updated", identifier.key, step=record.current_step, status=record.submission_status)
        return record

    def list_progress(self) -> List[Tuple[Identifier, ProgressRecord]]:  # Every record, newest activity first
        with get_conn(self._path, operation="list_progress") as conn:
            rows = conn.execute(
                """
                SELECT identifier_kind, identifier_value, current_step, completed_sections,
                       submission_status, submitted_at, created_at, updated_at
                FROM interview_progress
                ORDER BY datetime(updated_at) DESC, id DESC
                """
            ).fetchall()
        return [
            (identifier_from_parts(row["identifier_kind"], row["identifier_value"]), _record_from_row(row))
            for row in rows
        ]

    def delete_progress(self, identifier: Identifier) -> int:
        with get_conn(self._path, operation="delete_progress") as conn:
            cur = conn.execute(
                "DELETE FROM interview_progress WHERE identifier_kind = ? AND identifier_value = ?",
                (identifier.kind, identifier.value),
            )
            return int(cur.rowcount)


__all__ = ["ProgressStore"]
