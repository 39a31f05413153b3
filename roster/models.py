from __future__ import annotations  # Roster row variants and summaries

from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

RosterStatus = Literal["invited", "not-started", "draft", "in-progress", "completed"]


class AccountRow(BaseModel):  # Registered candidate account
    kind: Literal["account"] = "account"
    id: str
    name: str
    email: str
    submission_status: RosterStatus
    date_submitted: Optional[str] = None
    overall_score: Optional[float] = None
    section_scores: Dict[str, Optional[int]] = Field(default_factory=dict)


class PendingInvitationRow(BaseModel):  # Invitation with no matching account yet
    kind: Literal["invitation"] = "invitation"
    id: str
    name: str
    email: str
    submission_status: RosterStatus = "invited"
    date_submitted: Optional[str] = None
    overall_score: Optional[float] = None
    section_scores: Dict[str, Optional[int]] = Field(default_factory=dict)


RosterRow = Annotated[Union[AccountRow, PendingInvitationRow], Field(discriminator="kind")]


class RosterStats(BaseModel):  # Dashboard counters
    total_candidates: int = 0
    completed_count: int = 0
    in_progress_count: int = 0
    invited_count: int = 0


class RosterWarning(BaseModel):  # Non-blocking warning for a failed source
    source: str
    message: str


class RosterResponse(BaseModel):  # Admin roster payload
    rows: List[RosterRow] = Field(default_factory=list)
    stats: RosterStats = Field(default_factory=RosterStats)
    warnings: List[RosterWarning] = Field(default_factory=list)


__all__ = [
    "AccountRow",
    "PendingInvitationRow",
    "RosterResponse",
    "RosterRow",
    "RosterStats",
    "RosterStatus",
    "RosterWarning",
]
