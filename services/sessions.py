"""Per-session portal context: one flow controller per signed-in identifier."""
from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from threading import RLock
from typing import Callable, Dict, List, Optional

from config.settings import settings
from flow_manager import InterviewFlowController
from identity import Identifier
from interview_answers import AnswerStore, DebouncedWriter, TimerFactory
from interview_progress import ProgressStore
from observability import log_event


@dataclass
class PortalSession:  # Explicit context handed to candidate handlers
    identifier: Identifier
    display_name: Optional[str]
    controller: InterviewFlowController
    last_seen: float = 0.0

    @property
    def writer(self) -> DebouncedWriter:
        return self.controller.writer


ControllerFactory = Callable[[Identifier], InterviewFlowController]


class SessionRegistry:
    """Thread-safe registry keyed by identifier.

    Sessions untouched for ``idle_ttl_s`` are flushed and dropped the next
    time any session is opened. A controller is registered only after it
    loaded cleanly; a failed load raises and the next request tries again.
    """

    def __init__(
        self,
        factory: ControllerFactory,
        *,
        idle_ttl_s: Optional[float] = None,
        now: Callable[[], float] = time.monotonic,
    ) -> None:
        self._factory = factory
        self._idle_ttl_s = settings.SESSION_IDLE_SECONDS if idle_ttl_s is None else idle_ttl_s
        self._now = now
        self._sessions: Dict[str, PortalSession] = {}
        self._lock = RLock()

    @classmethod
    def for_database(
        cls,
        db_path: Callable[[], Path],
        *,
        timer_factory: Optional[TimerFactory] = None,
        idle_ttl_s: Optional[float] = None,
        now: Callable[[], float] = time.monotonic,
    ) -> "SessionRegistry":
        """Registry whose controllers use the SQLite stores at ``db_path()``.

        The path is resolved when a session opens so settings changes apply to
        new sessions.
        """

        def factory(identifier: Identifier) -> InterviewFlowController:
            path = db_path()
            return InterviewFlowController(
                identifier,
                answers=AnswerStore(path),
                progress=ProgressStore(path),
                timer_factory=timer_factory,
            )

        return cls(factory, idle_ttl_s=idle_ttl_s, now=now)

    def open(self, identifier: Identifier, display_name: Optional[str] = None) -> PortalSession:
        """Return the live session for ``identifier``, loading a new one if needed.

        Raises:
            PersistenceError: Stored progress or answers could not be read.
        """

        self.evict_idle()
        with self._lock:
            existing = self._sessions.get(identifier.key)
            if existing is not None:
                existing.last_seen = self._now()
                return existing
            controller = self._factory(identifier).load()
            session = PortalSession(
                identifier=identifier,
                display_name=display_name,
                controller=controller,
                last_seen=self._now(),
            )
            self._sessions[identifier.key] = session
        log_event("session_opened", identifier.key, step=controller.current_step)
        return session

    def get(self, identifier: Identifier) -> PortalSession:
        with self._lock:
            stored = self._sessions.get(identifier.key)
        if stored is None:
            raise KeyError(identifier.key)
        return stored

    def close(self, identifier: Identifier, *, reason: str = "sign_out") -> int:
        """Flush pending answer writes and drop the session.

        Returns the number of writes flushed; zero when no session was open.
        """

        with self._lock:
            session = self._sessions.pop(identifier.key, None)
        if session is None:
            return 0
        flushed = session.controller.close()
        log_event("session_closed", identifier.key, flushed=flushed, outcome=reason)
        return flushed

    def discard(self, identifier: Identifier) -> int:
        """Drop the session without persisting its pending writes.

        Used when the candidate's rows are being deleted. Returns the number
        of pending writes cancelled.
        """

        with self._lock:
            session = self._sessions.pop(identifier.key, None)
        if session is None:
            return 0
        cancelled = session.writer.cancel_all()
        log_event("session_discarded", identifier.key, cancelled=cancelled)
        return cancelled

    def evict_idle(self) -> int:  # Returns the number of sessions closed
        cutoff = self._now() - self._idle_ttl_s
        with self._lock:
            stale: List[Identifier] = [
                session.identifier for session in self._sessions.values() if session.last_seen <= cutoff
            ]
        for identifier in stale:
            self.close(identifier, reason="idle")
        return len(stale)

    def close_all(self) -> int:  # Application shutdown
        with self._lock:
            identifiers = [session.identifier for session in self._sessions.values()]
        return sum(self.close(identifier, reason="shutdown") for identifier in identifiers)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


__all__ = ["ControllerFactory", "PortalSession", "SessionRegistry"]
