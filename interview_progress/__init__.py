from __future__ import annotations  # Progress tracker package exports

from .models import FINAL_STEP, ProgressRecord, SubmissionStatus, derive_submission
from .store import ProgressStore

__all__ = ["FINAL_STEP", "ProgressRecord", "ProgressStore", "SubmissionStatus", "derive_submission"]
