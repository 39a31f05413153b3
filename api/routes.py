"""FastAPI routes for the candidate interview wizard."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request

from api.schemas import AnswerReq, AnswerResp, NavigateReq, SignOutResp, StateResp, SubmitDenied, SubmitReq
from config.settings import settings
from flow_manager import InterviewLockedError, SubmissionValidationError
from identity import AuthSession, IdentityUnresolved, resolve_identity
from invitations import InvitationStore, email_for_token
from services.sessions import PortalSession, SessionRegistry
from storage.errors import PersistenceError


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/interview")


def _db_path() -> Path:
    return Path(settings.DB_PATH)


def _registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def current_session(
    request: Request,
    x_user_id: Optional[str] = Header(default=None),
    x_user_email: Optional[str] = Header(default=None),
    x_user_name: Optional[str] = Header(default=None),
    token: Optional[str] = Query(default=None),
) -> PortalSession:
    """Resolve the caller and return its live portal session.

    ``X-User-Id`` comes from the identity provider in front of the API; the
    ``token`` query parameter carries an invitation link for visitors without
    an account.
    """

    auth: Optional[AuthSession] = None
    if x_user_id and x_user_id.strip():
        auth = AuthSession(user_id=x_user_id.strip(), email=x_user_email, full_name=x_user_name)
    invitation_email: Optional[str] = None
    try:
        if auth is None:
            invitation_email = email_for_token(InvitationStore(_db_path()), token)
        identifier = resolve_identity(auth, invitation_email)
        display_name = (auth.full_name or auth.email) if auth else invitation_email
        return _registry(request).open(identifier, display_name)
    except IdentityUnresolved as exc:
        raise HTTPException(status_code=401, detail="Sign in or use a valid invitation link") from exc
    except PersistenceError as exc:
        logger.exception("Unable to open interview session")
        raise HTTPException(status_code=503, detail="Interview storage is unavailable") from exc


@router.get("/state", response_model=StateResp)
def get_state(session: PortalSession = Depends(current_session)) -> StateResp:
    return session.controller.snapshot()


@router.put("/answers/{section}/{question_key}", response_model=AnswerResp)
def put_answer(
    section: str,
    question_key: str,
    req: AnswerReq,
    session: PortalSession = Depends(current_session),
) -> AnswerResp:
    controller = session.controller
    try:
        edit = controller.field_edit(section, question_key, req.value)
    except InterviewLockedError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return AnswerResp(edit=edit, completion=controller.completion(), notices=controller.drain_notices())


@router.post("/navigate", response_model=StateResp)
def navigate(req: NavigateReq, session: PortalSession = Depends(current_session)) -> StateResp:
    controller = session.controller
    try:
        if req.action == "next":
            controller.next()
        elif req.action == "previous":
            controller.previous()
        else:
            if req.step is None:
                raise HTTPException(status_code=400, detail="A step is required to jump")
            controller.jump_to(req.step)
    except InterviewLockedError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return controller.snapshot()


@router.post("/submit", response_model=StateResp)
def submit(request: Request, req: SubmitReq, session: PortalSession = Depends(current_session)) -> StateResp:
    controller = session.controller
    try:
        controller.submit(req.confirmed)
    except InterviewLockedError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except SubmissionValidationError as exc:
        denied = SubmitDenied(reasons=exc.reasons, completion=exc.summary)
        raise HTTPException(status_code=422, detail=denied.model_dump(mode="json")) from exc
    except PersistenceError as exc:
        logger.exception("Unable to record submission")
        raise HTTPException(status_code=503, detail="Unable to submit interview, please retry") from exc
    snapshot = controller.snapshot()
    _registry(request).close(session.identifier, reason="submitted")
    return snapshot


@router.post("/sign-out", response_model=SignOutResp)
def sign_out(request: Request, session: PortalSession = Depends(current_session)) -> SignOutResp:
    flushed = _registry(request).close(session.identifier)
    return SignOutResp(flushed=flushed)


__all__ = ["current_session", "router"]
