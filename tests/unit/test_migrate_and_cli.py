"""Schema migration and the admin inspection CLI."""
from __future__ import annotations

import sqlite3

from candidate_management import CandidateStore
from config.settings import Settings, settings
from identity import AccountIdentifier
from interview_answers import AnswerStore
from interview_progress import ProgressStore
from invitations import InvitationStore
from observability import admin_cli
from storage.migrate import migrate


def test_migrate_creates_tables_and_is_idempotent(tmp_db):
    migrate(tmp_db)
    conn = sqlite3.connect(str(tmp_db))
    try:
        names = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
    finally:
        conn.close()
    assert {"accounts", "interview_answers", "interview_progress", "interview_invitations", "admin_notes"} <= names


def test_settings_defaults_and_override(tmp_db):
    assert settings.DB_PATH == str(tmp_db)
    fresh = Settings(SUBMISSION_THRESHOLD=90)
    assert fresh.SUBMISSION_THRESHOLD == 90.0
    assert Settings().DEBOUNCE_SECONDS > 0


def test_admin_cli_prints_roster_and_tails(tmp_db, capsys):
    CandidateStore(tmp_db).create_account(email="kim@example.com", full_name="Kim", account_id="kim")
    InvitationStore(tmp_db).create_invitation(
        candidate_email="lee@example.com", candidate_name="Lee", sent_by="admin", ttl_days=7
    )
    who = AccountIdentifier(user_id="kim")
    ProgressStore(tmp_db).update_progress(who, 2)
    AnswerStore(tmp_db).save_answer(who, "general", "agile", "Scrum with two week sprints")

    admin_cli.main(["--roster", "--tail-progress", "5", "--tail-answers", "5"])
    out = capsys.readouterr().out

    assert "account:kim Kim <kim@example.com> in-progress" in out
    assert "invitation:" in out and "Lee <lee@example.com> invited" in out
    assert "total=2 completed=0 in_progress=1 invited=1" in out
    assert "account:kim step=2 status=in-progress" in out
    assert "general/agile = 'Scrum with two week sprints'" in out
