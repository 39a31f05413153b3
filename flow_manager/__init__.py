from __future__ import annotations  # Interview wizard state machine with autosave

import threading
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from config.settings import settings
from identity import Identifier
from interview_answers import (
    AnswerKey,
    AnswerStore,
    AnswerValue,
    DebouncedWriter,
    PlainAnswer,
    TimerFactory,
    as_answer_value,
    empty_answer_map,
    to_section,
)
from interview_progress import ProgressRecord, ProgressStore
from observability import log_event
from storage.errors import PersistenceError

from .models import (
    INTERVIEW_STEPS,
    SECTION_REQUIREMENTS,
    CompletionSummary,
    InterviewStep,
    Notice,
    SectionCompletion,
    SectionRequirement,
)
from .submission import SubmissionValidationError, check_submission, compute_completion
from .validation import character_count_message, field_validation_message


class InterviewLockedError(RuntimeError):  # Raised on edits or navigation after submission
    pass


class FieldEditResult(BaseModel):  # Outcome of a single field edit
    section: str
    question_key: str
    scheduled: bool
    hint: Optional[str] = None
    counter: Optional[str] = None


class FlowSnapshot(BaseModel):  # Wizard state returned to the client
    identifier: str
    current_step: int
    total_steps: int
    step_title: str
    step_percentage: float
    submission_status: str
    submitted_at: Optional[str] = None
    completion: CompletionSummary
    answers: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    notices: List[Notice] = Field(default_factory=list)


class InterviewFlowController:
    """Stateful wizard for one identifier.

    In-memory answers are authoritative for display; persistence happens
    through a per-field debounced writer. Navigation persists the new step
    immediately and never flushes pending answer writes.
    """

    def __init__(
        self,
        identifier: Identifier,
        *,
        answers: AnswerStore,
        progress: ProgressStore,
        steps: Sequence[InterviewStep] = INTERVIEW_STEPS,
        requirements: Sequence[SectionRequirement] = SECTION_REQUIREMENTS,
        window_s: Optional[float] = None,
        timer_factory: Optional[TimerFactory] = None,
        threshold: Optional[float] = None,
        min_answer_length: Optional[int] = None,
    ) -> None:
        self._identifier = identifier
        self._answer_store = answers
        self._progress_store = progress
        self._steps = list(steps)
        self._requirements = list(requirements)
        self._threshold = settings.SUBMISSION_THRESHOLD if threshold is None else threshold
        self._min_length = settings.MIN_ANSWER_LENGTH if min_answer_length is None else min_answer_length
        self._writer = DebouncedWriter(
            self._persist_answer,
            window_s=settings.DEBOUNCE_SECONDS if window_s is None else window_s,
            timer_factory=timer_factory,
            on_error=self._on_save_failed,
        )
        self._answers: Dict[str, Dict[str, AnswerValue]] = empty_answer_map()
        self._progress: Optional[ProgressRecord] = None
        self._current_step = 1
        self._notices: List[Notice] = []
        self._lock = threading.Lock()

    @property
    def identifier(self) -> Identifier:
        return self._identifier

    @property
    def writer(self) -> DebouncedWriter:
        return self._writer

    @property
    def total_steps(self) -> int:
        return len(self._steps)

    @property
    def current_step(self) -> int:
        return self._current_step

    @property
    def progress(self) -> Optional[ProgressRecord]:
        return self._progress

    @property
    def is_completed(self) -> bool:
        return self._progress is not None and self._progress.is_completed

    def load(self) -> "InterviewFlowController":
        """Resume from stored progress and answers.

        Read failures propagate as ``PersistenceError`` so a half-loaded
        controller never replaces the stored step.
        """

        self._progress = self._progress_store.load_progress(self._identifier)
        stored = self._answer_store.load_answers(self._identifier)
        with self._lock:
            for alias, bucket in stored.items():
                self._answers.setdefault(alias, {}).update(bucket)
        if self._progress is not None:
            self._current_step = min(max(self._progress.current_step, 1), self.total_steps)
        else:
            self._current_step = 1
        return self

    def step(self, step_id: Optional[int] = None) -> InterviewStep:
        target = self._current_step if step_id is None else step_id
        return self._steps[target - 1]

    def step_percentage(self) -> float:
        return (self._current_step / self.total_steps) * 100

    def next(self) -> int:
        self._ensure_open()
        if self._current_step < self.total_steps:
            self._move_to(self._current_step + 1)
        return self._current_step

    def previous(self) -> int:
        self._ensure_open()
        if self._current_step > 1:
            self._move_to(self._current_step - 1)
        return self._current_step

    def jump_to(self, step: int) -> int:  # Sidebar navigation, no linear gating
        self._ensure_open()
        if not 1 <= step <= self.total_steps:
            raise ValueError(f"Step must be between 1 and {self.total_steps}, got {step}")
        self._move_to(step)
        return self._current_step

    def field_edit(self, section: str, question_key: str, value: Any) -> FieldEditResult:
        """Record an edit in memory and schedule its debounced write.

        Blank text is kept in memory but never persisted; it also discards a
        pending write for the same field so the last edit wins.
        """

        self._ensure_open()
        stored_section = to_section(section)
        key = question_key.strip()
        if not key:
            raise ValueError("Question key is required")
        answer = as_answer_value(value)
        with self._lock:
            self._answers.setdefault(stored_section.alias, {})[key] = answer
        answer_key = AnswerKey(self._identifier, stored_section, key)
        hint: Optional[str] = None
        counter: Optional[str] = None
        if isinstance(answer, PlainAnswer):
            hint = field_validation_message(key, answer.text, self._min_length)
            counter = character_count_message(len(answer.text.strip()), self._min_length)
        scheduled = not answer.is_blank()
        if scheduled:
            self._writer.schedule(answer_key, answer)
        else:
            self._writer.discard(answer_key)
        return FieldEditResult(
            section=stored_section.alias,
            question_key=key,
            scheduled=scheduled,
            hint=hint,
            counter=counter,
        )

    def answers(self) -> Dict[str, Dict[str, AnswerValue]]:
        with self._lock:
            return {alias: dict(bucket) for alias, bucket in self._answers.items()}

    def raw_answers(self) -> Dict[str, Dict[str, Any]]:  # Untagged values for display
        return {alias: {key: value.raw() for key, value in bucket.items()} for alias, bucket in self.answers().items()}

    def completion(self) -> CompletionSummary:
        return compute_completion(self.answers(), self._requirements)

    def can_submit(self, confirmed: bool) -> bool:
        try:
            check_submission(self.answers(), confirmed=confirmed, threshold=self._threshold, requirements=self._requirements)
        except SubmissionValidationError:
            return False
        return True

    def submit(self, confirmed: bool) -> ProgressRecord:
        """Apply the submission gate and mark the interview completed.

        Raises:
            SubmissionValidationError: Gate denied; no store call is made.
            PersistenceError: A pending answer or the progress record could
                not be written. Unsaved answers stay queued and the interview
                stays open for another attempt.
        """

        self._ensure_open()
        try:
            completed_sections = check_submission(
                self.answers(),
                confirmed=confirmed,
                threshold=self._threshold,
                requirements=self._requirements,
            )
        except SubmissionValidationError as exc:
            log_event(
                "submission_denied",
                self._identifier.key,
                outcome="denied",
                percentage=round(exc.summary.percentage, 1),
                confirmed=confirmed,
            )
            raise
        self._writer.flush(keep_failed=True)
        unsaved = self._writer.pending_keys()
        if unsaved:
            log_event("submission_failed", self._identifier.key, outcome="unsaved", unsaved=len(unsaved))
            raise PersistenceError(f"{len(unsaved)} answer(s) could not be saved", operation="submit")
        record = self._progress_store.update_progress(self._identifier, self.total_steps, completed_sections)
        self._progress = record
        self._current_step = self.total_steps
        log_event("submission_completed", self._identifier.key, status=record.submission_status, outcome="completed")
        return record

    def drain_notices(self) -> List[Notice]:
        with self._lock:
            notices, self._notices = self._notices, []
        return notices

    def snapshot(self, *, drain: bool = True) -> FlowSnapshot:
        notices = self.drain_notices() if drain else list(self._notices)
        progress = self._progress
        return FlowSnapshot(
            identifier=self._identifier.key,
            current_step=self._current_step,
            total_steps=self.total_steps,
            step_title=self.step().title,
            step_percentage=self.step_percentage(),
            submission_status=progress.submission_status if progress else "not-started",
            submitted_at=progress.submitted_at if progress else None,
            completion=self.completion(),
            answers=self.raw_answers(),
            notices=notices,
        )

    def close(self) -> int:  # Session teardown; persists pending edits
        return self._writer.flush()

    def _ensure_open(self) -> None:
        if self.is_completed:
            raise InterviewLockedError("Interview has already been submitted")

    def _move_to(self, step: int) -> None:
        self._current_step = step
        try:
            self._progress = self._progress_store.update_progress(self._identifier, step)
        except PersistenceError as exc:
            self._add_notice("progress_failed", f"Unable to save your position: {exc}")

    def _persist_answer(self, key: AnswerKey, value: AnswerValue) -> None:
        self._answer_store.save_answer(key.identifier, key.section, key.question_key, value)

    def _on_save_failed(self, key: AnswerKey, value: AnswerValue, exc: PersistenceError) -> None:
        log_event(
            "answer_save_failed",
            key.identifier.key,
            section=key.section.value,
            question_key=key.question_key,
            error=str(exc),
        )
        self._add_notice(
            "save_failed",
            "Failed to save your answer. Please try again.",
            section=key.section.alias,
            question_key=key.question_key,
        )

    def _add_notice(self, kind: str, message: str, **fields: Any) -> None:
        with self._lock:
            self._notices.append(Notice(kind=kind, message=message, **fields))


__all__ = [
    "CompletionSummary",
    "FieldEditResult",
    "FlowSnapshot",
    "INTERVIEW_STEPS",
    "InterviewFlowController",
    "InterviewLockedError",
    "InterviewStep",
    "Notice",
    "SECTION_REQUIREMENTS",
    "SectionCompletion",
    "SectionRequirement",
    "SubmissionValidationError",
    "character_count_message",
    "check_submission",
    "compute_completion",
    "field_validation_message",
]
