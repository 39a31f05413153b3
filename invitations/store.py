from __future__ import annotations  # Invitation persistence layer

import datetime as dt
import secrets
import sqlite3
from pathlib import Path
from typing import List, Optional
from uuid import uuid4

from storage.migrate import migrate
from storage.sqlite import get_conn

from .models import InvitationRecord, InvitationStatus

_COLUMNS = (
    "id, candidate_email, candidate_name, invitation_token, status, sent_by, "
    "sent_at, expires_at, created_at, updated_at"
)


class InvitationNotFound(KeyError):  # Raised when an invitation id is unknown
    pass


def _record(row: sqlite3.Row) -> InvitationRecord:
    return InvitationRecord(
        id=row["id"],
        candidate_email=row["candidate_email"],
        candidate_name=row["candidate_name"],
        token=row["invitation_token"],
        status=row["status"],
        sent_by=row["sent_by"],
        sent_at=row["sent_at"],
        expires_at=row["expires_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class InvitationStore:  # SQLite-backed invitation storage
    def __init__(self, path: Path) -> None:
        self._path = path
        migrate(str(path))

    def create_invitation(
        self,
        *,
        candidate_email: str,
        candidate_name: Optional[str],
        sent_by: str,
        ttl_days: int,
        status: InvitationStatus = "pending",
    ) -> InvitationRecord:  # Insert a new invitation with a fresh token
        now = dt.datetime.now(dt.timezone.utc)
        stamp = now.isoformat()
        record = InvitationRecord(
            id=uuid4().hex,
            candidate_email=candidate_email.strip().lower(),
            candidate_name=(candidate_name or "").strip() or None,
            token=secrets.token_urlsafe(24),
            status=status,
            sent_by=sent_by,
            sent_at=stamp,
            expires_at=(now + dt.timedelta(days=ttl_days)).isoformat(),
            created_at=stamp,
            updated_at=stamp,
        )
        with get_conn(self._path, operation="create_invitation") as conn:
            conn.execute(
                f"INSERT INTO interview_invitations ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    record.id,
                    record.candidate_email,
                    record.candidate_name,
                    record.token,
                    record.status,
                    record.sent_by,
                    record.sent_at,
                    record.expires_at,
                    record.created_at,
                    record.updated_at,
                ),
            )
        return record

    def list_invitations(self) -> List[InvitationRecord]:  # Newest first
        with get_conn(self._path, operation="list_invitations") as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM interview_invitations ORDER BY datetime(created_at) DESC, id DESC"
            ).fetchall()
        return [_record(row) for row in rows]

    def get_invitation(self, invitation_id: str) -> InvitationRecord:
        with get_conn(self._path, operation="get_invitation") as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM interview_invitations WHERE id = ?",
                (invitation_id,),
            ).fetchone()
        if row is None:
            raise InvitationNotFound(invitation_id)
        return _record(row)

    def find_by_email(self, email: str) -> Optional[InvitationRecord]:  # Most recent invitation for the email
        with get_conn(self._path, operation="find_invitation") as conn:
            row = conn.execute(
                f"""
                SELECT {_COLUMNS} FROM interview_invitations
                WHERE lower(candidate_email) = lower(?)
                ORDER BY datetime(created_at) DESC, id DESC
                LIMIT 1
                """,
                (email.strip(),),
            ).fetchone()
        return _record(row) if row is not None else None

    def find_by_token(self, token: str, *, now: Optional[dt.datetime] = None) -> Optional[InvitationRecord]:
        """Return the invitation for ``token`` unless it is unknown or expired."""

        with get_conn(self._path, operation="find_invitation_token") as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM interview_invitations WHERE invitation_token = ?",
                (token,),
            ).fetchone()
        if row is None:
            return None
        record = _record(row)
        if record.is_expired(now):
            return None
        return record

    def mark_sent(self, invitation_id: str, *, ttl_days: Optional[int] = None) -> InvitationRecord:
        """Stamp a (re)send: status ``sent``, new ``sent_at`` and optionally a fresh expiry."""

        now = dt.datetime.now(dt.timezone.utc)
        stamp = now.isoformat()
        with get_conn(self._path, operation="mark_invitation_sent") as conn:
            if ttl_days is None:
                cur = conn.execute(
                    "UPDATE interview_invitations SET status = 'sent', sent_at = ?, updated_at = ? WHERE id = ?",
                    (stamp, stamp, invitation_id),
                )
            else:
                cur = conn.execute(
                    """
                    UPDATE interview_invitations
                    SET status = 'sent', sent_at = ?, expires_at = ?, updated_at = ?
                    WHERE id = ?
                    """,
                    (stamp, (now + dt.timedelta(days=ttl_days)).isoformat(), stamp, invitation_id),
                )
            if cur.rowcount == 0:
                raise InvitationNotFound(invitation_id)
        return self.get_invitation(invitation_id)

    def delete_invitation(self, invitation_id: str) -> None:
        with get_conn(self._path, operation="delete_invitation") as conn:
            cur = conn.execute("DELETE FROM interview_invitations WHERE id = ?", (invitation_id,))
            if cur.rowcount == 0:
                raise InvitationNotFound(invitation_id)


__all__ = ["InvitationNotFound", "InvitationStore"]
