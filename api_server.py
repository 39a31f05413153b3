from __future__ import annotations  # FastAPI server exposing the interview portal

import json
import logging
from contextlib import asynccontextmanager
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

from fastapi import FastAPI, Header, HTTPException, Query, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from api.routes import router as interview_router
from candidate_management import AccountRecord, CandidateStore
from candidate_review import (
    CandidateReport,
    ExportNotAllowed,
    NoteRecord,
    NoteRequest,
    NoteStore,
    build_candidate_report,
    export_filename,
    export_payload,
    generate_candidate_report_pdf,
)
from config.settings import settings
from interview_progress import ProgressStore
from invitations import (
    InvitationNotFound,
    InvitationOutcome,
    InvitationStore,
    InviteRequest,
    Notifier,
    SmtpNotifier,
    add_candidate_manually,
    invite_candidate,
    resend_invitation,
)
from identity import AnonymousIdentifier
from roster import RosterResponse, build_roster, filter_roster, roster_stats, sources_for
from services.sessions import SessionRegistry
from storage.errors import PersistenceError


logger = logging.getLogger(__name__)

RESENDABLE_STATUSES = ("invited", "not-started")


def _db_path() -> Path:  # Resolved per request so settings overrides apply
    return Path(settings.DB_PATH)


def _notifier() -> Notifier:  # Construct invitation sender
    return SmtpNotifier(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    app.state.sessions.close_all()


app = FastAPI(title="Interview Portal API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"]
)
app.state.sessions = SessionRegistry.for_database(_db_path)
app.include_router(interview_router)


class RowKind(str, Enum):  # Roster row variant addressed by admin actions
    ACCOUNT = "account"
    INVITATION = "invitation"


class CreateCandidateRequest(BaseModel):  # Account profile handed over after registration
    email: str = Field(min_length=3, max_length=320)
    full_name: str = Field(min_length=1, max_length=200)
    phone: Optional[str] = None
    linkedin_url: Optional[str] = None
    user_id: Optional[str] = None


class ManualCandidateRequest(BaseModel):  # Admin "add manually" payload
    candidate_email: str = Field(min_length=3, max_length=320)
    candidate_name: str = Field(min_length=1, max_length=200)


class DeleteRowResponse(BaseModel):  # Rows removed for one roster entry
    kind: RowKind
    id: str
    removed: Dict[str, int] = Field(default_factory=dict)


@app.post("/api/candidates", response_model=AccountRecord, status_code=201)
def create_candidate(payload: CreateCandidateRequest) -> AccountRecord:  # Persist a new candidate account
    store = CandidateStore(_db_path())
    if store.find_by_email(payload.email) is not None:
        raise HTTPException(status_code=409, detail="An account already exists for this email")
    try:
        return store.create_account(
            email=payload.email,
            full_name=payload.full_name,
            phone=payload.phone,
            linkedin_url=payload.linkedin_url,
            account_id=payload.user_id,
        )
    except PersistenceError as exc:
        logger.exception("Unable to create candidate")
        raise HTTPException(status_code=503, detail="Unable to create candidate") from exc


@app.get("/api/admin/roster", response_model=RosterResponse)
def fetch_roster(
    search: str = Query(default=""),
    status: str = Query(default="all"),
) -> RosterResponse:  # Merged candidate list with partial-failure warnings
    result = build_roster(sources_for(_db_path()))
    return RosterResponse(
        rows=filter_roster(result.rows, search, status),
        stats=roster_stats(result.rows),
        warnings=result.warnings(),
    )


@app.post("/api/admin/invitations", response_model=InvitationOutcome, status_code=201)
def send_invitation(
    payload: InviteRequest,
    x_admin_id: str = Header(default="admin"),
) -> InvitationOutcome:  # Create an invitation and email it once
    try:
        return invite_candidate(
            InvitationStore(_db_path()),
            _notifier(),
            candidate_email=payload.candidate_email,
            candidate_name=payload.candidate_name,
            sent_by=x_admin_id,
            base_url=settings.PORTAL_BASE_URL,
            ttl_days=settings.INVITATION_TTL_DAYS,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except PersistenceError as exc:
        logger.exception("Unable to create invitation")
        raise HTTPException(status_code=503, detail="Unable to create invitation") from exc


@app.post("/api/admin/invitations/manual", response_model=InvitationOutcome)
def add_manual_candidate(
    payload: ManualCandidateRequest,
    x_admin_id: str = Header(default="admin"),
) -> InvitationOutcome:  # Produce an interview link without sending email
    try:
        return add_candidate_manually(
            InvitationStore(_db_path()),
            candidate_email=payload.candidate_email,
            candidate_name=payload.candidate_name,
            sent_by=x_admin_id,
            base_url=settings.PORTAL_BASE_URL,
            ttl_days=settings.INVITATION_TTL_DAYS,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except PersistenceError as exc:
        logger.exception("Unable to add candidate manually")
        raise HTTPException(status_code=503, detail="Unable to add candidate") from exc


@app.post("/api/admin/roster/{kind}/{row_id}/resend", response_model=InvitationOutcome)
def resend_row_invitation(kind: RowKind, row_id: str) -> InvitationOutcome:  # Re-invite an outstanding candidate
    path = _db_path()
    invitations = InvitationStore(path)
    try:
        if kind is RowKind.ACCOUNT:
            account = CandidateStore(path).get_account(row_id)
            progress = ProgressStore(path).load_progress(account.identifier)
            invitation = invitations.find_by_email(account.email)
            if invitation is None:
                raise HTTPException(status_code=404, detail="No invitation on record for this candidate")
        else:
            invitation = invitations.get_invitation(row_id)
            progress = ProgressStore(path).load_progress(AnonymousIdentifier(email=invitation.candidate_email))
        if progress is not None and progress.submission_status not in RESENDABLE_STATUSES:
            raise HTTPException(status_code=409, detail="Candidate has already started the interview")
        return resend_invitation(
            invitations,
            _notifier(),
            invitation.id,
            base_url=settings.PORTAL_BASE_URL,
            ttl_days=settings.INVITATION_TTL_DAYS,
        )
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Candidate not found") from exc
    except PersistenceError as exc:
        logger.exception("Unable to resend invitation")
        raise HTTPException(status_code=503, detail="Unable to resend invitation") from exc


@app.delete("/api/admin/roster/{kind}/{row_id}", response_model=DeleteRowResponse)
def delete_roster_row(kind: RowKind, row_id: str) -> DeleteRowResponse:  # Remove a candidate or an invitation
    path = _db_path()
    try:
        if kind is RowKind.ACCOUNT:
            store = CandidateStore(path)
            app.state.sessions.discard(store.get_account(row_id).identifier)
            summary = store.delete_candidate(row_id)
            return DeleteRowResponse(kind=kind, id=row_id, removed=summary.model_dump())
        InvitationStore(path).delete_invitation(row_id)
        return DeleteRowResponse(kind=kind, id=row_id, removed={"invitations": 1})
    except InvitationNotFound as exc:
        raise HTTPException(status_code=404, detail="Invitation not found") from exc
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Candidate not found") from exc
    except PersistenceError as exc:
        logger.exception("Unable to delete roster row %s/%s", kind.value, row_id)
        raise HTTPException(status_code=503, detail="Unable to delete candidate") from exc


@app.post("/api/admin/candidates/{candidate_id}/notes", response_model=NoteRecord, status_code=201)
def add_candidate_note(
    candidate_id: str,
    payload: NoteRequest,
    x_admin_id: str = Header(default="admin"),
) -> NoteRecord:  # Attach an admin rating or note
    path = _db_path()
    try:
        CandidateStore(path).get_account(candidate_id)
        return NoteStore(path).add_note(
            candidate_id,
            x_admin_id,
            section=payload.section,
            rating=payload.rating,
            notes=payload.notes,
        )
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Candidate not found") from exc
    except PersistenceError as exc:
        logger.exception("Unable to save note for %s", candidate_id)
        raise HTTPException(status_code=503, detail="Unable to save note") from exc


@app.get("/api/admin/candidates/{candidate_id}", response_model=CandidateReport)
def fetch_candidate(candidate_id: str) -> CandidateReport:  # Candidate detail view
    return _load_report(candidate_id)


@app.get("/api/admin/candidates/{candidate_id}/export")
def export_candidate(candidate_id: str) -> Response:  # JSON download of one candidate
    report = _load_report(candidate_id)
    try:
        payload = export_payload(report)
    except ExportNotAllowed as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    headers = {"Content-Disposition": f"attachment; filename=\"{export_filename(report)}\""}
    return Response(content=_dump_json(payload), media_type="application/json", headers=headers)


@app.get("/api/admin/candidates/{candidate_id}/report.pdf")
def fetch_candidate_report_pdf(candidate_id: str) -> Response:
    report = _load_report(candidate_id)
    payload = generate_candidate_report_pdf(report)
    filename = export_filename(report).replace(".json", ".pdf")
    headers = {"Content-Disposition": f"attachment; filename=\"{filename}\""}
    return Response(content=payload, media_type="application/pdf", headers=headers)


def _load_report(candidate_id: str) -> CandidateReport:  # Map lookup failures to HTTP errors
    try:
        return build_candidate_report(candidate_id, _db_path())
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Candidate not found") from exc
    except PersistenceError as exc:
        logger.exception("Unable to load candidate %s", candidate_id)
        raise HTTPException(status_code=503, detail="Candidate data is unavailable") from exc


def _dump_json(payload: Dict) -> str:
    return json.dumps(payload, indent=2)


__all__ = ["app"]
