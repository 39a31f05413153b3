from __future__ import annotations  # Invitation workflows used by the admin surface

import datetime as dt
from typing import Optional

from observability import log_event

from .models import InvitationOutcome, InvitationRecord
from .notifier import Notifier
from .store import InvitationStore


def interview_link(base_url: str, token: str) -> str:  # Registration link carrying the invitation token
    return f"{base_url.rstrip('/')}/register?token={token}"


def _validate_email(candidate_email: str) -> str:
    email = candidate_email.strip().lower()
    if not email:
        raise ValueError("Candidate email is required")
    local, _, domain = email.partition("@")
    if not local or "." not in domain:
        raise ValueError(f"Invalid candidate email '{candidate_email}'")
    return email


def _deliver(
    store: InvitationStore,
    notifier: Notifier,
    invitation: InvitationRecord,
    link: str,
    *,
    ttl_days: Optional[int] = None,
) -> InvitationOutcome:
    result = notifier.send_invitation(invitation.candidate_email, invitation.candidate_name, link)
    if not result.delivered:
        log_event("invitation_failed", invitation.candidate_email, outcome="failed", error=result.error)
        return InvitationOutcome(invitation=invitation, interview_link=link, delivered=False, error=result.error)
    sent = store.mark_sent(invitation.id, ttl_days=ttl_days)
    log_event("invitation_sent", sent.candidate_email, status=sent.status, outcome="delivered")
    return InvitationOutcome(invitation=sent, interview_link=link, delivered=True)


def invite_candidate(
    store: InvitationStore,
    notifier: Notifier,
    *,
    candidate_email: str,
    candidate_name: Optional[str],
    sent_by: str,
    base_url: str,
    ttl_days: int,
) -> InvitationOutcome:
    """Create an invitation and email its link once; delivery failures are reported, not retried."""

    email = _validate_email(candidate_email)
    invitation = store.create_invitation(
        candidate_email=email,
        candidate_name=candidate_name,
        sent_by=sent_by,
        ttl_days=ttl_days,
    )
    log_event("invitation_created", email, status=invitation.status)
    return _deliver(store, notifier, invitation, interview_link(base_url, invitation.token))


def add_candidate_manually(
    store: InvitationStore,
    *,
    candidate_email: str,
    candidate_name: str,
    sent_by: str,
    base_url: str,
    ttl_days: int,
) -> InvitationOutcome:
    """Return an interview link without sending email, reusing an existing invitation for the email."""

    email = _validate_email(candidate_email)
    if not candidate_name.strip():
        raise ValueError("Candidate name is required")
    existing = store.find_by_email(email)
    if existing is not None:
        return InvitationOutcome(
            invitation=existing,
            interview_link=interview_link(base_url, existing.token),
            reused=True,
        )
    invitation = store.create_invitation(
        candidate_email=email,
        candidate_name=candidate_name,
        sent_by=sent_by,
        ttl_days=ttl_days,
        status="created",
    )
    log_event("invitation_created", email, status=invitation.status, outcome="manual")
    return InvitationOutcome(invitation=invitation, interview_link=interview_link(base_url, invitation.token))


def resend_invitation(
    store: InvitationStore,
    notifier: Notifier,
    invitation_id: str,
    *,
    base_url: str,
    ttl_days: int,
) -> InvitationOutcome:  # Re-send an outstanding invitation and extend its expiry
    invitation = store.get_invitation(invitation_id)
    return _deliver(store, notifier, invitation, interview_link(base_url, invitation.token), ttl_days=ttl_days)


def email_for_token(
    store: InvitationStore,
    token: Optional[str],
    *,
    now: Optional[dt.datetime] = None,
) -> Optional[str]:  # Map an invitation token to its candidate email
    if not token or not token.strip():
        return None
    invitation = store.find_by_token(token.strip(), now=now)
    return invitation.candidate_email if invitation else None


__all__ = [
    "add_candidate_manually",
    "email_for_token",
    "interview_link",
    "invite_candidate",
    "resend_invitation",
]
