"""Invitation workflows with a recording notifier."""
from __future__ import annotations

import datetime as dt
import smtplib
from typing import List, Optional, Tuple

import pytest

from config.settings import Settings
from invitations import (
    InvitationNotFound,
    InvitationStore,
    NotificationResult,
    SmtpNotifier,
    add_candidate_manually,
    email_for_token,
    interview_link,
    invite_candidate,
    render_invitation,
    resend_invitation,
)

BASE = "https://portal.example.com/"


class RecordingNotifier:
    def __init__(self, delivered: bool = True, error: Optional[str] = None) -> None:
        self.sent: List[Tuple[str, Optional[str], str]] = []
        self._result = NotificationResult(delivered=delivered, error=error)

    def send_invitation(self, candidate_email, candidate_name, link) -> NotificationResult:
        self.sent.append((candidate_email, candidate_name, link))
        return self._result


def test_interview_link_carries_token():
    assert interview_link(BASE, "abc") == "https://portal.example.com/register?token=abc"


def test_invite_creates_and_sends_once(tmp_db):
    store = InvitationStore(tmp_db)
    notifier = RecordingNotifier()
    outcome = invite_candidate(
        store,
        notifier,
        candidate_email=" Carol@Example.com ",
        candidate_name="Carol",
        sent_by="admin-1",
        base_url=BASE,
        ttl_days=7,
    )

    assert outcome.delivered is True
    assert outcome.invitation.status == "sent"
    assert outcome.invitation.candidate_email == "carol@example.com"
    assert notifier.sent == [("carol@example.com", "Carol", outcome.interview_link)]
    assert outcome.interview_link.endswith(outcome.invitation.token)


def test_failed_delivery_is_reported_not_retried(tmp_db):
    store = InvitationStore(tmp_db)
    notifier = RecordingNotifier(delivered=False, error="SMTP network error.")
    outcome = invite_candidate(
        store,
        notifier,
        candidate_email="dave@example.com",
        candidate_name=None,
        sent_by="admin-1",
        base_url=BASE,
        ttl_days=7,
    )

    assert outcome.delivered is False
    assert outcome.error == "SMTP network error."
    assert len(notifier.sent) == 1
    assert store.get_invitation(outcome.invitation.id).status == "pending"


def test_invalid_email_is_rejected(tmp_db):
    with pytest.raises(ValueError):
        invite_candidate(
            InvitationStore(tmp_db),
            RecordingNotifier(),
            candidate_email="not-an-email",
            candidate_name=None,
            sent_by="admin",
            base_url=BASE,
            ttl_days=7,
        )


def test_manual_add_reuses_existing_invitation(tmp_db):
    store = InvitationStore(tmp_db)
    first = add_candidate_manually(
        store, candidate_email="erin@example.com", candidate_name="Erin", sent_by="admin", base_url=BASE, ttl_days=7
    )
    second = add_candidate_manually(
        store, candidate_email="ERIN@example.com", candidate_name="Erin", sent_by="admin", base_url=BASE, ttl_days=7
    )

    assert first.invitation.status == "created"
    assert first.reused is False
    assert second.reused is True
    assert second.interview_link == first.interview_link
    assert len(store.list_invitations()) == 1


def test_resend_marks_sent_and_extends_expiry(tmp_db):
    store = InvitationStore(tmp_db)
    created = store.create_invitation(
        candidate_email="frank@example.com", candidate_name="Frank", sent_by="admin", ttl_days=1
    )
    notifier = RecordingNotifier()
    outcome = resend_invitation(store, notifier, created.id, base_url=BASE, ttl_days=7)

    assert outcome.delivered is True
    assert outcome.invitation.status == "sent"
    assert outcome.invitation.expires_at > created.expires_at
    with pytest.raises(InvitationNotFound):
        resend_invitation(store, notifier, "missing", base_url=BASE, ttl_days=7)


def test_token_lookup_honours_expiry(tmp_db):
    store = InvitationStore(tmp_db)
    created = store.create_invitation(
        candidate_email="gina@example.com", candidate_name=None, sent_by="admin", ttl_days=7
    )
    assert email_for_token(store, created.token) == "gina@example.com"
    assert email_for_token(store, "unknown") is None
    assert email_for_token(store, None) is None
    later = dt.datetime.now(dt.timezone.utc) + dt.timedelta(days=8)
    assert email_for_token(store, created.token, now=later) is None


def test_delete_invitation(tmp_db):
    store = InvitationStore(tmp_db)
    created = store.create_invitation(candidate_email="h@example.com", candidate_name=None, sent_by="a", ttl_days=7)
    store.delete_invitation(created.id)
    assert store.list_invitations() == []
    with pytest.raises(InvitationNotFound):
        store.delete_invitation(created.id)


def test_render_invitation_mentions_link():
    subject, body = render_invitation("Ivy", "https://x/register?token=t")
    assert subject
    assert body.startswith("Hi Ivy,")
    assert "https://x/register?token=t" in body


def test_smtp_notifier_without_settings_reports_missing_config():
    notifier = SmtpNotifier(Settings(SMTP_HOST="", SMTP_FROM=""))
    result = notifier.send_invitation("a@example.com", None, "https://x")
    assert result.delivered is False
    assert result.error == "SMTP email settings are missing."


def test_smtp_network_failure_is_reported(monkeypatch):
    def refuse(*args, **kwargs):
        raise ConnectionRefusedError("connection refused")

    monkeypatch.setattr(smtplib, "SMTP", refuse)
    notifier = SmtpNotifier(Settings(SMTP_HOST="smtp.example.com", SMTP_PORT=587, SMTP_FROM="hr@example.com"))
    result = notifier.send_invitation("a@example.com", "A", "https://x")
    assert result.delivered is False
    assert result.error == "SMTP network error."
