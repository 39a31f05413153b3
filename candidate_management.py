from __future__ import annotations  # Candidate account storage helpers

import datetime as dt
import sqlite3
from pathlib import Path
from typing import List, Literal, Optional
from uuid import uuid4

from pydantic import BaseModel

from identity import AccountIdentifier
from observability import log_event
from storage.migrate import migrate
from storage.sqlite import get_conn

Role = Literal["candidate", "admin"]


class AccountRecord(BaseModel):  # Stored account profile
    id: str
    email: str
    full_name: str
    role: Role = "candidate"
    phone: Optional[str] = None
    linkedin_url: Optional[str] = None
    created_at: str
    updated_at: str

    @property
    def identifier(self) -> AccountIdentifier:
        return AccountIdentifier(user_id=self.id)

    @property
    def display_name(self) -> str:
        return self.full_name or self.email


class DeletionSummary(BaseModel):  # Rows removed by a candidate deletion
    answers: int = 0
    progress: int = 0
    notes: int = 0
    accounts: int = 0


_COLUMNS = "id, email, full_name, role, phone, linkedin_url, created_at, updated_at"


def _record(row: sqlite3.Row) -> AccountRecord:
    return AccountRecord(**{key: row[key] for key in row.keys()})


class CandidateStore:  # SQLite-backed account storage
    def __init__(self, path: Path) -> None:  # Initialize store and schema
        self._path = path
        migrate(str(path))

    def list_candidates(self) -> List[AccountRecord]:  # Candidate accounts ordered by recency
        with get_conn(self._path, operation="list_candidates") as conn:
            rows = conn.execute(
                f"""
                SELECT {_COLUMNS}
                FROM accounts
                WHERE role = 'candidate'
                ORDER BY datetime(created_at) DESC, id DESC
                """
            ).fetchall()
        return [_record(row) for row in rows]

    def get_account(self, account_id: str) -> AccountRecord:
        with get_conn(self._path, operation="get_account") as conn:
            row = conn.execute(f"SELECT {_COLUMNS} FROM accounts WHERE id = ?", (account_id,)).fetchone()
        if row is None:
            raise KeyError(f"Account '{account_id}' not found")
        return _record(row)

    def find_by_email(self, email: str) -> Optional[AccountRecord]:  # Case-insensitive exact match
        with get_conn(self._path, operation="find_account") as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM accounts WHERE lower(email) = lower(?)",
                (email.strip(),),
            ).fetchone()
        return _record(row) if row is not None else None

    def create_account(
        self,
        *,
        email: str,
        full_name: str,
        role: Role = "candidate",
        phone: Optional[str] = None,
        linkedin_url: Optional[str] = None,
        account_id: Optional[str] = None,
    ) -> AccountRecord:  # Persist a new account profile
        record_id = account_id or uuid4().hex
        now = dt.datetime.now(dt.timezone.utc).isoformat()
        normalized = email.strip().lower()
        with get_conn(self._path, operation="create_account") as conn:
            conn.execute(
                f"""
                INSERT INTO accounts ({_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (record_id, normalized, full_name.strip(), role, phone, linkedin_url, now, now),
            )
        return AccountRecord(
            id=record_id,
            email=normalized,
            full_name=full_name.strip(),
            role=role,
            phone=phone,
            linkedin_url=linkedin_url,
            created_at=now,
            updated_at=now,
        )

    def delete_candidate(self, account_id: str) -> DeletionSummary:
        """Remove answers, progress, admin notes and the account in one transaction."""

        identifier = AccountIdentifier(user_id=account_id)
        with get_conn(self._path, operation="delete_candidate") as conn:
            exists = conn.execute("SELECT 1 FROM accounts WHERE id = ?", (account_id,)).fetchone()
            if exists is None:
                raise KeyError(f"Account '{account_id}' not found")
            answers = conn.execute(
                "DELETE FROM interview_answers WHERE identifier_kind = ? AND identifier_value = ?",
                (identifier.kind, identifier.value),
            ).rowcount
            progress = conn.execute(
                "DELETE FROM interview_progress WHERE identifier_kind = ? AND identifier_value = ?",
                (identifier.kind, identifier.value),
            ).rowcount
            notes = conn.execute("DELETE FROM admin_notes WHERE candidate_id = ?", (account_id,)).rowcount
            accounts = conn.execute("DELETE FROM accounts WHERE id = ?", (account_id,)).rowcount
        summary = DeletionSummary(answers=answers, progress=progress, notes=notes, accounts=accounts)
        log_event("candidate_deleted", identifier.key, outcome="account", **summary.model_dump())
        return summary


__all__ = ["AccountRecord", "CandidateStore", "DeletionSummary", "Role"]
