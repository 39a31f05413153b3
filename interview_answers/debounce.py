"""Per-field debounced persistence for autosaved answers.

Every ``(identifier, section, question_key)`` owns at most one pending timer.
A new edit cancels and replaces the pending timer for its key, so a burst of
edits to one field produces a single write carrying the last value. Edits to
different fields are timed independently.
"""
from __future__ import annotations

import logging
import threading
from functools import partial
from typing import Any, Callable, Dict, NamedTuple, Optional, Protocol

from identity import Identifier
from storage.errors import PersistenceError

from .models import AnswerValue, Section

logger = logging.getLogger(__name__)


class AnswerKey(NamedTuple):
    identifier: Identifier
    section: Section
    question_key: str


class TimerHandle(Protocol):  # Subset of threading.Timer used by the writer
    daemon: bool

    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]
WriteFn = Callable[[AnswerKey, AnswerValue], Any]
ErrorFn = Callable[[AnswerKey, AnswerValue, PersistenceError], None]


class _Pending(NamedTuple):
    timer: TimerHandle
    value: AnswerValue
    generation: int


class DebouncedWriter:
    """Timer table mapping answer keys to their pending write."""

    def __init__(
        self,
        write: WriteFn,
        *,
        window_s: float,
        timer_factory: Optional[TimerFactory] = None,
        on_error: Optional[ErrorFn] = None,
    ) -> None:
        self._write = write
        self._window_s = window_s
        self._timer_factory: TimerFactory = timer_factory or threading.Timer
        self._on_error = on_error
        self._pending: Dict[AnswerKey, _Pending] = {}
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def window_s(self) -> float:
        return self._window_s

    def schedule(self, key: AnswerKey, value: AnswerValue) -> None:
        """Replace any pending write for ``key`` with ``value`` and restart its quiet period."""

        with self._lock:
            previous = self._pending.get(key)
            if previous is not None:
                previous.timer.cancel()
            self._generation += 1
            generation = self._generation
            timer = self._timer_factory(self._window_s, partial(self._fire, key, generation))
            timer.daemon = True
            self._pending[key] = _Pending(timer=timer, value=value, generation=generation)
        timer.start()

    def pending_keys(self) -> list[AnswerKey]:
        with self._lock:
            return list(self._pending)

    def pending_value(self, key: AnswerKey) -> Optional[AnswerValue]:
        with self._lock:
            entry = self._pending.get(key)
        return entry.value if entry else None

    def discard(self, key: AnswerKey) -> bool:  # Cancel the pending write for one key
        with self._lock:
            entry = self._pending.pop(key, None)
        if entry is None:
            return False
        entry.timer.cancel()
        return True

    def flush(self, *, keep_failed: bool = False) -> int:
        """Write every pending value immediately; returns the number of writes attempted.

        With ``keep_failed`` a value whose write fails goes back into the table
        under a fresh timer, unless a newer edit for the same key arrived
        meanwhile.
        """

        with self._lock:
            entries = list(self._pending.items())
            self._pending.clear()
        for _, entry in entries:
            entry.timer.cancel()
        for key, entry in entries:
            if not self._persist(key, entry.value) and keep_failed:
                self._requeue(key, entry.value)
        return len(entries)

    def cancel_all(self) -> int:  # Drop pending writes without persisting them
        with self._lock:
            entries = list(self._pending.values())
            self._pending.clear()
        for entry in entries:
            entry.timer.cancel()
        return len(entries)

    def _fire(self, key: AnswerKey, generation: int) -> None:
        with self._lock:
            entry = self._pending.get(key)
            if entry is None or entry.generation != generation:
                return  # superseded by a newer edit
            del self._pending[key]
        self._persist(key, entry.value)

    def _requeue(self, key: AnswerKey, value: AnswerValue) -> None:
        with self._lock:
            if key in self._pending:
                return
        self.schedule(key, value)

    def _persist(self, key: AnswerKey, value: AnswerValue) -> bool:
        try:
            self._write(key, value)
        except PersistenceError as exc:
            logger.warning("Debounced save failed for %s/%s: %s", key.section.value, key.question_key, exc)
            if self._on_error is not None:
                self._on_error(key, value, exc)
            return False
        return True


__all__ = ["AnswerKey", "DebouncedWriter", "TimerFactory", "TimerHandle"]
