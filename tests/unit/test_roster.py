"""Roster merge, degradation and ordering."""
from __future__ import annotations

from typing import List

from candidate_management import AccountRecord
from candidate_review import NoteRecord
from identity import AccountIdentifier, AnonymousIdentifier
from interview_progress import ProgressRecord
from invitations import InvitationRecord
from roster import (
    AccountRow,
    PendingInvitationRow,
    RosterSources,
    build_roster,
    filter_roster,
    roster_stats,
    sources_for,
)


def account(account_id: str, email: str, name: str, created: str) -> AccountRecord:
    return AccountRecord(id=account_id, email=email, full_name=name, created_at=created, updated_at=created)


def invitation(invitation_id: str, email: str, sent: str, name: str = "") -> InvitationRecord:
    return InvitationRecord(
        id=invitation_id,
        candidate_email=email,
        candidate_name=name or None,
        token=f"tok-{invitation_id}",
        status="sent",
        sent_by="admin",
        sent_at=sent,
        expires_at="2099-01-01T00:00:00+00:00",
        created_at=sent,
        updated_at=sent,
    )


def note(note_id: int, candidate_id: str, section, rating: int, created: str) -> NoteRecord:
    return NoteRecord(
        id=note_id,
        candidate_id=candidate_id,
        admin_id="admin",
        section=section,
        rating=rating,
        created_at=created,
        updated_at=created,
    )


ACCOUNTS = [
    account("a1", "alice@example.com", "Alice", "2024-01-01T09:00:00+00:00"),
    account("a2", "bob@example.com", "Bob", "2024-01-02T09:00:00+00:00"),
]
INVITATIONS = [
    invitation("i1", "ALICE@example.com", "2024-01-05T09:00:00+00:00"),
    invitation("i2", "carol@example.com", "2024-01-03T09:00:00+00:00", name="Carol"),
    invitation("i3", "dave@example.com", "2024-01-04T09:00:00+00:00"),
]
PROGRESS = [
    (
        AccountIdentifier(user_id="a1"),
        ProgressRecord(
            current_step=5,
            completed_sections={"general": True},
            submission_status="completed",
            submitted_at="2024-01-10T09:00:00+00:00",
            updated_at="2024-01-10T09:00:00+00:00",
        ),
    ),
    (
        AnonymousIdentifier(email="dave@example.com"),
        ProgressRecord(current_step=2, submission_status="in-progress", updated_at="2024-01-06T09:00:00+00:00"),
    ),
]
NOTES = [
    note(1, "a1", "general", 4, "2024-01-11T09:00:00+00:00"),
    note(2, "a1", "general", 2, "2024-01-12T09:00:00+00:00"),
    note(3, "a1", "culture", 3, "2024-01-12T10:00:00+00:00"),
]


def _sources(**overrides) -> RosterSources:
    fetchers = {
        "accounts": lambda: ACCOUNTS,
        "invitations": lambda: INVITATIONS,
        "progress": lambda: PROGRESS,
        "ratings": lambda: NOTES,
    }
    fetchers.update(overrides)
    return RosterSources(**fetchers)


def test_account_suppresses_invitation_with_same_email():
    result = build_roster(_sources())
    emails = [row.email.lower() for row in result.rows]
    assert emails.count("alice@example.com") == 1
    alice = next(row for row in result.rows if row.email == "alice@example.com")
    assert isinstance(alice, AccountRow)
    assert result.complete


def test_rows_are_typed_and_statused():
    rows = {row.id: row for row in build_roster(_sources()).rows}
    assert rows["a1"].submission_status == "completed"
    assert rows["a2"].submission_status == "not-started"
    assert isinstance(rows["i2"], PendingInvitationRow)
    assert rows["i2"].submission_status == "invited"
    assert rows["i2"].name == "Carol"
    assert rows["i3"].submission_status == "in-progress"
    assert rows["i3"].date_submitted == "2024-01-06T09:00:00+00:00"


def test_rows_sorted_by_date_descending():
    ids = [row.id for row in build_roster(_sources()).rows]
    assert ids == ["a1", "i3", "i2", "a2"]


def test_scores_come_from_admin_notes():
    alice = next(row for row in build_roster(_sources()).rows if row.id == "a1")
    assert alice.overall_score == 3.0
    assert alice.section_scores["general"] == 2
    assert alice.section_scores["culture"] == 3
    assert alice.section_scores["technical_scenarios"] is None


def test_failing_ratings_source_degrades_to_unscored_rows():
    def broken() -> List[NoteRecord]:
        raise RuntimeError("ratings service down")

    result = build_roster(_sources(ratings=broken))
    assert not result.complete
    assert [failure.source for failure in result.failures] == ["ratings"]
    assert len(result.rows) == 4
    assert all(row.overall_score is None for row in result.rows)
    assert result.warnings()[0].source == "ratings"


def test_failing_accounts_source_still_lists_invitations():
    def broken():
        raise RuntimeError("accounts offline")

    result = build_roster(_sources(accounts=broken))
    assert {row.id for row in result.rows} == {"i1", "i2", "i3"}
    assert all(isinstance(row, PendingInvitationRow) for row in result.rows)


def test_duplicate_invitations_collapse_to_one_row():
    extra = INVITATIONS + [invitation("i4", "Carol@Example.com", "2024-01-01T00:00:00+00:00")]
    result = build_roster(_sources(invitations=lambda: extra))
    assert sum(1 for row in result.rows if row.email.lower() == "carol@example.com") == 1


def test_filters_and_stats():
    rows = build_roster(_sources()).rows
    assert [row.id for row in filter_roster(rows, search="CAROL")] == ["i2"]
    assert [row.id for row in filter_roster(rows, search="bob@")] == ["a2"]
    assert [row.id for row in filter_roster(rows, status="completed")] == ["a1"]
    assert filter_roster(rows, search="  ", status="all") == rows
    stats = roster_stats(rows)
    assert (stats.total_candidates, stats.completed_count, stats.in_progress_count, stats.invited_count) == (4, 1, 1, 1)


def test_sources_for_reads_sqlite_stores(tmp_db):
    from candidate_management import CandidateStore
    from invitations import InvitationStore

    CandidateStore(tmp_db).create_account(email="erin@example.com", full_name="Erin", account_id="e1")
    InvitationStore(tmp_db).create_invitation(
        candidate_email="erin@example.com", candidate_name="Erin", sent_by="admin", ttl_days=7
    )
    InvitationStore(tmp_db).create_invitation(
        candidate_email="frank@example.com", candidate_name=None, sent_by="admin", ttl_days=7
    )
    result = build_roster(sources_for(tmp_db))
    assert result.complete
    kinds = sorted((row.kind, row.email) for row in result.rows)
    assert kinds == [("account", "erin@example.com"), ("invitation", "frank@example.com")]
