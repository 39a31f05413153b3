"""Candidate detail report and JSON export for the admin review screen."""
from __future__ import annotations

import datetime as dt
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from candidate_management import AccountRecord, CandidateStore
from interview_answers import AnswerStore, Section
from interview_progress import ProgressRecord, ProgressStore

from .notes import NoteRecord, NoteStore, overall_score, section_scores

EXPORTABLE_STATUSES = ("completed", "in-progress")


class ReportAnswer(BaseModel):  # One stored answer in display form
    question_key: str
    value: Any = None
    updated_at: Optional[str] = None


class ReportSection(BaseModel):
    section: str
    alias: str
    score: Optional[int] = None
    answers: List[ReportAnswer] = Field(default_factory=list)


class CandidateReport(BaseModel):  # Everything the admin detail view shows
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    linkedin_url: Optional[str] = None
    submission_status: str = "not-started"
    date_submitted: Optional[str] = None
    overall_score: Optional[float] = None
    sections: List[ReportSection] = Field(default_factory=list)
    notes: List[NoteRecord] = Field(default_factory=list)

    @property
    def can_export(self) -> bool:
        return self.submission_status in EXPORTABLE_STATUSES


class ExportNotAllowed(ValueError):  # Export requested for a candidate without answers
    pass


def _assemble(
    account: AccountRecord,
    progress: Optional[ProgressRecord],
    answer_rows: List[Dict[str, Any]],
    notes: List[NoteRecord],
) -> CandidateReport:
    scores = section_scores(notes)
    grouped: Dict[str, List[ReportAnswer]] = {section.value: [] for section in Section}
    for row in answer_rows:
        bucket = grouped.get(row["section"])
        if bucket is None:
            continue
        bucket.append(
            ReportAnswer(question_key=row["question_key"], value=row["value"].raw(), updated_at=row["updated_at"])
        )
    status = progress.submission_status if progress else "not-started"
    date_submitted = (progress.last_activity() if progress else None) or account.created_at
    return CandidateReport(
        id=account.id,
        name=account.display_name,
        email=account.email,
        phone=account.phone,
        linkedin_url=account.linkedin_url,
        submission_status=status,
        date_submitted=date_submitted,
        overall_score=overall_score(notes),
        sections=[
            ReportSection(section=section.value, alias=section.alias, score=scores[section.value], answers=grouped[section.value])
            for section in Section
        ],
        notes=notes,
    )


def build_candidate_report(candidate_id: str, db_path: Path) -> CandidateReport:
    """Load account, progress, answers and notes for one candidate.

    Raises:
        KeyError: No account with ``candidate_id``.
    """

    account = CandidateStore(db_path).get_account(candidate_id)
    identifier = account.identifier
    progress = ProgressStore(db_path).load_progress(identifier)
    answer_rows = AnswerStore(db_path).list_answers(identifier)
    notes = NoteStore(db_path).list_notes(candidate_id)
    return _assemble(account, progress, answer_rows, notes)


def _slug(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.strip().lower()).strip("-")
    return slug or "candidate"


def export_filename(report: CandidateReport, today: Optional[dt.date] = None) -> str:
    day = today or dt.date.today()
    return f"candidate-{_slug(report.name)}-{day.isoformat()}.json"


def export_payload(report: CandidateReport) -> Dict[str, Any]:
    """JSON document offered for download from the detail view."""

    if not report.can_export:
        raise ExportNotAllowed(f"Export is unavailable for status '{report.submission_status}'")
    return {
        "name": report.name,
        "email": report.email,
        "status": report.submission_status,
        "dateSubmitted": report.date_submitted,
        "overallScore": report.overall_score,
        "sections": {
            section.alias: {
                "score": section.score,
                "answers": {answer.question_key: answer.value for answer in section.answers},
            }
            for section in report.sections
        },
    }


__all__ = [
    "CandidateReport",
    "EXPORTABLE_STATUSES",
    "ExportNotAllowed",
    "ReportAnswer",
    "ReportSection",
    "build_candidate_report",
    "export_filename",
    "export_payload",
]
