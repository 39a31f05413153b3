"""Merge candidate accounts, invitations and progress into the admin roster."""
from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar, Union

from candidate_management import AccountRecord, CandidateStore
from candidate_review.notes import NoteRecord, NoteStore, overall_score, section_scores
from identity import AccountIdentifier, AnonymousIdentifier, Identifier
from interview_progress import ProgressRecord, ProgressStore
from invitations import InvitationRecord, InvitationStore, parse_timestamp
from observability import log_event

from .models import AccountRow, PendingInvitationRow, RosterStats, RosterWarning

logger = logging.getLogger(__name__)

T = TypeVar("T")
Row = Union[AccountRow, PendingInvitationRow]

_EPOCH = dt.datetime.min.replace(tzinfo=dt.timezone.utc)


class AggregationPartialFailure(Exception):
    """One roster source failed; the roster is built from the others."""

    def __init__(self, source: str, cause: BaseException) -> None:
        super().__init__(f"Failed to load {source}: {cause}")
        self.source = source
        self.cause = cause

    def as_warning(self) -> RosterWarning:
        return RosterWarning(source=self.source, message=str(self))


@dataclass
class RosterSources:  # Fetchers for each independent source
    accounts: Callable[[], Iterable[AccountRecord]]
    invitations: Callable[[], Iterable[InvitationRecord]]
    progress: Callable[[], Iterable[Tuple[Identifier, ProgressRecord]]]
    ratings: Optional[Callable[[], Iterable[NoteRecord]]] = None


@dataclass
class RosterResult:
    rows: List[Row] = field(default_factory=list)
    failures: List[AggregationPartialFailure] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failures

    def warnings(self) -> List[RosterWarning]:
        return [failure.as_warning() for failure in self.failures]


def sources_for(db_path: Path) -> RosterSources:  # Wire the SQLite stores as roster sources
    return RosterSources(
        accounts=lambda: CandidateStore(db_path).list_candidates(),
        invitations=lambda: InvitationStore(db_path).list_invitations(),
        progress=lambda: ProgressStore(db_path).list_progress(),
        ratings=lambda: NoteStore(db_path).list_all_notes(),
    )


def _fetch(name: str, fetcher: Optional[Callable[[], Iterable[T]]], failures: List[AggregationPartialFailure]) -> List[T]:
    if fetcher is None:
        return []
    try:
        return list(fetcher())
    except Exception as exc:  # noqa: BLE001
        logger.warning("Roster source %s failed: %s", name, exc)
        log_event("roster_source_failed", name, source=name, error=str(exc))
        failures.append(AggregationPartialFailure(name, exc))
        return []


def _sort_key(row: Row) -> dt.datetime:
    return parse_timestamp(row.date_submitted) or _EPOCH


def build_roster(sources: RosterSources) -> RosterResult:
    """Produce one row per distinct candidate, newest activity first.

    An account always represents its email; invitations sharing that email
    (case-insensitive) are suppressed. Invitation-only candidates appear as
    ``PendingInvitationRow`` with status ``invited`` unless anonymous progress
    already exists for their email.
    """

    failures: List[AggregationPartialFailure] = []
    accounts = _fetch("accounts", sources.accounts, failures)
    invitations = _fetch("invitations", sources.invitations, failures)
    progress_rows = _fetch("progress", sources.progress, failures)
    notes = _fetch("ratings", sources.ratings, failures)

    account_progress: Dict[str, ProgressRecord] = {}
    email_progress: Dict[str, ProgressRecord] = {}
    for identifier, record in progress_rows:
        if isinstance(identifier, AccountIdentifier):
            account_progress[identifier.user_id] = record
        elif isinstance(identifier, AnonymousIdentifier):
            email_progress[identifier.email] = record

    notes_by_candidate: Dict[str, List[NoteRecord]] = {}
    for note in notes:
        notes_by_candidate.setdefault(note.candidate_id, []).append(note)

    rows: List[Row] = []
    account_emails = set()
    for account in accounts:
        account_emails.add(account.email.strip().lower())
        progress = account_progress.get(account.id)
        status = "not-started"
        date_submitted: Optional[str] = account.created_at
        if progress is not None:
            status = progress.submission_status or "not-started"
            date_submitted = progress.last_activity() or account.created_at
        candidate_notes = notes_by_candidate.get(account.id, [])
        rows.append(
            AccountRow(
                id=account.id,
                name=account.display_name,
                email=account.email,
                submission_status=status,
                date_submitted=date_submitted,
                overall_score=overall_score(candidate_notes),
                section_scores=section_scores(candidate_notes),
            )
        )

    seen_invitation_emails = set()
    for invitation in invitations:
        email = invitation.candidate_email.strip().lower()
        if email in account_emails or email in seen_invitation_emails:
            continue
        seen_invitation_emails.add(email)
        progress = email_progress.get(email)
        rows.append(
            PendingInvitationRow(
                id=invitation.id,
                name=invitation.display_name,
                email=invitation.candidate_email,
                submission_status=progress.submission_status if progress else "invited",
                date_submitted=(progress.last_activity() if progress else None) or invitation.sent_at,
            )
        )

    rows.sort(key=_sort_key, reverse=True)
    log_event(
        "roster_built",
        "admin",
        outcome="partial" if failures else "complete",
        rows=len(rows),
        failed_sources=[failure.source for failure in failures],
    )
    return RosterResult(rows=rows, failures=failures)


def filter_roster(rows: Sequence[Row], search: str = "", status: str = "all") -> List[Row]:
    needle = search.strip().lower()
    return [
        row
        for row in rows
        if (not needle or needle in row.name.lower() or needle in row.email.lower())
        and (status == "all" or row.submission_status == status)
    ]


def roster_stats(rows: Sequence[Row]) -> RosterStats:
    return RosterStats(
        total_candidates=len(rows),
        completed_count=sum(1 for row in rows if row.submission_status == "completed"),
        in_progress_count=sum(1 for row in rows if row.submission_status == "in-progress"),
        invited_count=sum(1 for row in rows if row.submission_status == "invited"),
    )


__all__ = [
    "AggregationPartialFailure",
    "RosterResult",
    "RosterSources",
    "build_roster",
    "filter_roster",
    "roster_stats",
    "sources_for",
]
