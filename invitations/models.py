from __future__ import annotations  # Invitation domain models

import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, Field

InvitationStatus = Literal["pending", "created", "sent"]


def parse_timestamp(value: Optional[str]) -> Optional[dt.datetime]:  # Parse ISO timestamp as UTC
    if not value:
        return None
    try:
        normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
        parsed = dt.datetime.fromisoformat(normalized)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=dt.timezone.utc)
    return parsed.astimezone(dt.timezone.utc)


class InvitationRecord(BaseModel):  # Stored interview invitation
    id: str
    candidate_email: str
    candidate_name: Optional[str] = None
    token: str
    status: InvitationStatus = "pending"
    sent_by: str
    sent_at: str
    expires_at: str
    created_at: str
    updated_at: str

    @property
    def display_name(self) -> str:
        return self.candidate_name or self.candidate_email

    def is_expired(self, now: Optional[dt.datetime] = None) -> bool:  # Advisory; only checked on read
        expires = parse_timestamp(self.expires_at)
        if expires is None:
            return False
        current = now or dt.datetime.now(dt.timezone.utc)
        if current.tzinfo is None:
            current = current.replace(tzinfo=dt.timezone.utc)
        return current >= expires


class NotificationResult(BaseModel):  # Delivery outcome reported back to the admin UI
    delivered: bool
    error: Optional[str] = None


class InvitationOutcome(BaseModel):  # Result of invite, resend or manual add
    invitation: InvitationRecord
    interview_link: str
    delivered: bool = False
    error: Optional[str] = None
    reused: bool = False


class InviteRequest(BaseModel):  # Admin invite payload
    candidate_email: str = Field(min_length=3, max_length=320)
    candidate_name: Optional[str] = Field(default=None, max_length=200)


__all__ = [
    "InvitationOutcome",
    "InvitationRecord",
    "InvitationStatus",
    "InviteRequest",
    "NotificationResult",
    "parse_timestamp",
]
