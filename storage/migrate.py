"""SQLite schema migrations."""
from __future__ import annotations

from typing import Iterable, Optional

from .sqlite import PathLike, get_conn

SCHEMA: Iterable[str] = [
    """
CREATE TABLE IF NOT EXISTS accounts (
  id TEXT PRIMARY KEY,
  email TEXT NOT NULL,
  full_name TEXT NOT NULL,
  role TEXT NOT NULL DEFAULT 'candidate',
  phone TEXT,
  linkedin_url TEXT,
  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL
);
""",
    """
CREATE UNIQUE INDEX IF NOT EXISTS accounts_email_idx ON accounts (lower(email));
""",
    """
CREATE TABLE IF NOT EXISTS interview_answers (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  identifier_kind TEXT NOT NULL,
  identifier_value TEXT NOT NULL,
  section TEXT NOT NULL,
  question_key TEXT NOT NULL,
  answer TEXT,
  metadata TEXT NOT NULL DEFAULT '{}',
  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL,
  UNIQUE (identifier_kind, identifier_value, section, question_key)
);
""",
    """
CREATE TABLE IF NOT EXISTS interview_progress (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  identifier_kind TEXT NOT NULL,
  identifier_value TEXT NOT NULL,
  current_step INTEGER NOT NULL,
  completed_sections TEXT NOT NULL DEFAULT '{}',
  submission_status TEXT NOT NULL,
  submitted_at TEXT,
  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL,
  UNIQUE (identifier_kind, identifier_value)
);
""",
    """
CREATE TABLE IF NOT EXISTS interview_invitations (
  id TEXT PRIMARY KEY,
  candidate_email TEXT NOT NULL,
  candidate_name TEXT,
  invitation_token TEXT NOT NULL UNIQUE,
  status TEXT NOT NULL,
  sent_by TEXT NOT NULL,
  sent_at TEXT NOT NULL,
  expires_at TEXT NOT NULL,
  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL
);
""",
    """
CREATE TABLE IF NOT EXISTS admin_notes (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  candidate_id TEXT NOT NULL,
  admin_id TEXT NOT NULL,
  section TEXT,
  rating INTEGER,
  notes TEXT,
  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL
);
""",
]


def migrate(db_path: Optional[PathLike] = None) -> None:
    """Apply schema migrations to the SQLite database."""

    with get_conn(db_path, operation="migrate") as conn:
        for stmt in SCHEMA:
            conn.execute(stmt)


if __name__ == "__main__":
    migrate()
