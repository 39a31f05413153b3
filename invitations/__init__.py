from __future__ import annotations  # Invitation package exports

from .models import InvitationOutcome, InvitationRecord, InviteRequest, NotificationResult, parse_timestamp
from .notifier import Notifier, SmtpNotifier, render_invitation
from .service import add_candidate_manually, email_for_token, interview_link, invite_candidate, resend_invitation
from .store import InvitationNotFound, InvitationStore

__all__ = [
    "InvitationNotFound",
    "InvitationOutcome",
    "InvitationRecord",
    "InvitationStore",
    "InviteRequest",
    "NotificationResult",
    "Notifier",
    "SmtpNotifier",
    "add_candidate_manually",
    "email_for_token",
    "interview_link",
    "invite_candidate",
    "parse_timestamp",
    "render_invitation",
    "resend_invitation",
]
