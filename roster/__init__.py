from __future__ import annotations  # Roster package exports

from .aggregator import (
    AggregationPartialFailure,
    RosterResult,
    RosterSources,
    build_roster,
    filter_roster,
    roster_stats,
    sources_for,
)
from .models import (
    AccountRow,
    PendingInvitationRow,
    RosterResponse,
    RosterRow,
    RosterStats,
    RosterStatus,
    RosterWarning,
)

__all__ = [
    "AccountRow",
    "AggregationPartialFailure",
    "PendingInvitationRow",
    "RosterResponse",
    "RosterResult",
    "RosterRow",
    "RosterSources",
    "RosterStats",
    "RosterStatus",
    "RosterWarning",
    "build_roster",
    "filter_roster",
    "roster_stats",
    "sources_for",
]
