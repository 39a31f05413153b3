from __future__ import annotations  # Progress record models and status derivation

from typing import Dict, Literal, Mapping, Optional, Tuple

from pydantic import BaseModel, Field

SubmissionStatus = Literal["not-started", "draft", "in-progress", "completed"]

FINAL_STEP = 5


class ProgressRecord(BaseModel):  # Wizard position and submission state for one identifier
    current_step: int = Field(ge=1, le=FINAL_STEP)
    completed_sections: Dict[str, bool] = Field(default_factory=dict)
    submission_status: SubmissionStatus = "in-progress"
    submitted_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def is_completed(self) -> bool:
        return self.submission_status == "completed"

    def last_activity(self) -> Optional[str]:  # Timestamp shown on the admin roster
        return self.submitted_at or self.updated_at or self.created_at


def derive_submission(
    step: int,
    completed_sections: Optional[Mapping[str, bool]],
    now: str,
) -> Tuple[SubmissionStatus, Optional[str]]:
    """Completed iff the final step is reached with a section map; otherwise in progress."""

    if step == FINAL_STEP and completed_sections is not None:
        return "completed", now
    return "in-progress", None


__all__ = ["FINAL_STEP", "ProgressRecord", "SubmissionStatus", "derive_submission"]
