"""Accounts, admin notes, detail report and exports."""
from __future__ import annotations

import datetime as dt
import sqlite3

import pytest
from pydantic import ValidationError

from candidate_management import CandidateStore
from candidate_review import (
    ExportNotAllowed,
    NoteStore,
    build_candidate_report,
    export_filename,
    export_payload,
    generate_candidate_report_pdf,
    overall_score,
)
from identity import AccountIdentifier
from interview_answers import AnswerStore
from interview_progress import ProgressStore


def _count(db_path, table: str) -> int:
    conn = sqlite3.connect(str(db_path))
    try:
        return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
    finally:
        conn.close()


@pytest.fixture
def candidate(tmp_db):
    account = CandidateStore(tmp_db).create_account(
        email="Jo.Tester@Example.com",
        full_name="Jo Tester",
        phone="+1 555 0100",
        account_id="jo",
    )
    who = AccountIdentifier(user_id="jo")
    answers = AnswerStore(tmp_db)
    answers.save_answer(who, "general", "experience", "Eight years shipping patient-facing apps.")
    answers.save_answer(who, "technicalExercises", "auth", {"files": [{"name": "auth.md"}]})
    ProgressStore(tmp_db).update_progress(who, 3)
    return account


def test_accounts_are_listed_and_found_case_insensitively(tmp_db, candidate):
    store = CandidateStore(tmp_db)
    assert candidate.email == "jo.tester@example.com"
    assert [record.id for record in store.list_candidates()] == ["jo"]
    assert store.find_by_email("JO.TESTER@example.com").id == "jo"
    assert store.find_by_email("nobody@example.com") is None
    with pytest.raises(KeyError):
        store.get_account("missing")


def test_notes_validate_rating_range(tmp_db, candidate):
    notes = NoteStore(tmp_db)
    with pytest.raises(ValidationError):
        notes.add_note("jo", "admin", section="general", rating=6)
    stored = notes.add_note("jo", "admin", section="general", rating=4, notes="Strong")
    assert stored.id > 0
    notes.add_note("jo", "admin", notes="Follow up on mobile experience")
    assert [note.rating for note in notes.list_notes("jo")] == [4, None]
    assert overall_score(notes.list_notes("jo")) == 4.0
    assert overall_score([]) is None


def test_report_groups_answers_and_scores(tmp_db, candidate):
    NoteStore(tmp_db).add_note("jo", "admin", section="general", rating=5)
    report = build_candidate_report("jo", tmp_db)

    assert report.name == "Jo Tester"
    assert report.phone == "+1 555 0100"
    assert report.submission_status == "in-progress"
    assert report.overall_score == 5.0
    general = next(section for section in report.sections if section.section == "general")
    assert general.alias == "generalQuestions"
    assert general.score == 5
    assert [answer.question_key for answer in general.answers] == ["experience"]
    exercises = next(section for section in report.sections if section.section == "technical_exercises")
    assert exercises.answers[0].value == {"files": [{"name": "auth.md"}]}


def test_report_for_unknown_candidate_raises(tmp_db):
    with pytest.raises(KeyError):
        build_candidate_report("ghost", tmp_db)


def test_export_payload_and_filename(tmp_db, candidate):
    report = build_candidate_report("jo", tmp_db)
    payload = export_payload(report)
    assert payload["name"] == "Jo Tester"
    assert payload["status"] == "in-progress"
    assert payload["sections"]["generalQuestions"]["answers"] == {
        "experience": "Eight years shipping patient-facing apps."
    }
    assert export_filename(report, dt.date(2024, 3, 9)) == "candidate-jo-tester-2024-03-09.json"


def test_export_requires_started_interview(tmp_db):
    CandidateStore(tmp_db).create_account(email="new@example.com", full_name="New Person", account_id="new")
    report = build_candidate_report("new", tmp_db)
    assert report.submission_status == "not-started"
    assert report.can_export is False
    with pytest.raises(ExportNotAllowed):
        export_payload(report)


def test_pdf_report_renders(tmp_db, candidate):
    payload = generate_candidate_report_pdf(build_candidate_report("jo", tmp_db))
    assert payload.startswith(b"%PDF")


def test_delete_candidate_removes_everything(tmp_db, candidate):
    NoteStore(tmp_db).add_note("jo", "admin", section="culture", rating=3)
    summary = CandidateStore(tmp_db).delete_candidate("jo")

    assert summary.model_dump() == {"answers": 2, "progress": 1, "notes": 1, "accounts": 1}
    for table in ("accounts", "interview_answers", "interview_progress", "admin_notes"):
        assert _count(tmp_db, table) == 0
    with pytest.raises(KeyError):
        CandidateStore(tmp_db).delete_candidate("jo")
