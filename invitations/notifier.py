"""Transactional email delivery for interview invitations."""
from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Optional, Protocol

from config.settings import Settings, settings as default_settings

from .models import NotificationResult

logger = logging.getLogger(__name__)


class Notifier(Protocol):  # Fire-and-forget invitation sender
    def send_invitation(
        self,
        candidate_email: str,
        candidate_name: Optional[str],
        interview_link: str,
    ) -> NotificationResult: ...


def render_invitation(candidate_name: Optional[str], interview_link: str) -> tuple[str, str]:
    """Return ``(subject, body)`` for the invitation email."""

    greeting = f"Hi {candidate_name}," if candidate_name else "Hello,"
    subject = "Your developer interview invitation"
    body = (
        f"{greeting}\n\n"
        "You have been invited to complete our developer interview. The interview has four\n"
        "sections (general questions, technical scenarios, technical exercises and culture fit)\n"
        "followed by a short review. Your answers are saved automatically, so you can stop and\n"
        "come back at any time.\n\n"
        f"Start your interview here:\n{interview_link}\n\n"
        "This link is personal, please do not share it.\n"
    )
    return subject, body


class SmtpNotifier:
    """Send invitations through an SMTP relay configured in settings."""

    def __init__(self, config: Optional[Settings] = None) -> None:
        self._config = config or default_settings

    @property
    def enabled(self) -> bool:
        cfg = self._config
        return bool(cfg.SMTP_HOST and cfg.SMTP_PORT and cfg.SMTP_FROM)

    def send_invitation(
        self,
        candidate_email: str,
        candidate_name: Optional[str],
        interview_link: str,
    ) -> NotificationResult:
        cfg = self._config
        if not self.enabled:
            return NotificationResult(delivered=False, error="SMTP email settings are missing.")
        subject, body = render_invitation(candidate_name, interview_link)
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = f"{cfg.SMTP_FROM_NAME} <{cfg.SMTP_FROM}>"
        msg["To"] = candidate_email
        msg.set_content(body)
        try:
            if cfg.SMTP_PORT == 465:
                with smtplib.SMTP_SSL(cfg.SMTP_HOST, cfg.SMTP_PORT, timeout=cfg.SMTP_TIMEOUT_SECONDS) as server:
                    if cfg.SMTP_USERNAME:
                        server.login(cfg.SMTP_USERNAME, cfg.SMTP_PASSWORD)
                    server.send_message(msg)
            else:
                with smtplib.SMTP(cfg.SMTP_HOST, cfg.SMTP_PORT, timeout=cfg.SMTP_TIMEOUT_SECONDS) as server:
                    if cfg.SMTP_USE_TLS:
                        server.starttls()
                    if cfg.SMTP_USERNAME:
                        server.login(cfg.SMTP_USERNAME, cfg.SMTP_PASSWORD)
                    server.send_message(msg)
        except smtplib.SMTPAuthenticationError:
            logger.exception("SMTP auth failed for %s", cfg.SMTP_USERNAME)
            return NotificationResult(delivered=False, error="SMTP authentication failed.")
        except smtplib.SMTPException:
            logger.exception("SMTP error while sending invitation to %s", candidate_email)
            return NotificationResult(delivered=False, error="SMTP rejected the invitation email.")
        except OSError:
            logger.exception("SMTP network error while sending invitation to %s", candidate_email)
            return NotificationResult(delivered=False, error="SMTP network error.")
        return NotificationResult(delivered=True)


__all__ = ["Notifier", "SmtpNotifier", "render_invitation"]
