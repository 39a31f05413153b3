"""Completion tally and the threshold check guarding final submission."""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from interview_answers import as_answer_value

from .models import SECTION_REQUIREMENTS, CompletionSummary, SectionCompletion, SectionRequirement


class SubmissionValidationError(ValueError):
    """Submission attempted below the completion threshold or without confirmation."""

    def __init__(self, reasons: List[str], summary: CompletionSummary) -> None:
        super().__init__("; ".join(reasons))
        self.reasons = reasons
        self.summary = summary


def _is_answered(value: Any) -> bool:
    if value is None:
        return False
    return not as_answer_value(value).is_blank()


def _section_bucket(answers: Mapping[str, Mapping[str, Any]], requirement: SectionRequirement) -> Mapping[str, Any]:
    bucket = answers.get(requirement.section.alias)
    if bucket is None:
        bucket = answers.get(requirement.section.value, {})
    return bucket


def compute_completion(
    answers: Mapping[str, Mapping[str, Any]],
    requirements: Sequence[SectionRequirement] = SECTION_REQUIREMENTS,
) -> CompletionSummary:
    """Count non-empty answers among each section's required question keys."""

    sections: List[SectionCompletion] = []
    for requirement in requirements:
        bucket = _section_bucket(answers, requirement)
        answered = sum(1 for key in requirement.required_keys if _is_answered(bucket.get(key)))
        required = requirement.required
        sections.append(
            SectionCompletion(
                section=requirement.section,
                alias=requirement.section.alias,
                title=requirement.title,
                answered=answered,
                required=required,
                percentage=(answered / required) * 100 if required else 100.0,
            )
        )
    total_answered = sum(item.answered for item in sections)
    total_required = sum(item.required for item in sections)
    percentage = (total_answered / total_required) * 100 if total_required else 0.0
    return CompletionSummary(
        sections=sections,
        answered=total_answered,
        required=total_required,
        percentage=percentage,
    )


def submission_blockers(summary: CompletionSummary, confirmed: bool, threshold: float) -> List[str]:
    reasons: List[str] = []
    if summary.percentage < threshold:
        reasons.append(
            f"Interview is {round(summary.percentage)}% complete; at least {threshold:g}% is required to submit."
        )
    if not confirmed:
        reasons.append("Please confirm that you want to submit your interview.")
    return reasons


def check_submission(
    answers: Mapping[str, Mapping[str, Any]],
    *,
    confirmed: bool,
    threshold: float,
    requirements: Optional[Sequence[SectionRequirement]] = None,
) -> Dict[str, bool]:
    """Return the completed-sections map when submission is permitted.

    Raises:
        SubmissionValidationError: If completion is below ``threshold`` or the
            confirmation flag is not set.
    """

    summary = compute_completion(answers, requirements or SECTION_REQUIREMENTS)
    reasons = submission_blockers(summary, confirmed, threshold)
    if reasons:
        raise SubmissionValidationError(reasons, summary)
    return summary.completed_sections()


__all__ = [
    "SubmissionValidationError",
    "check_submission",
    "compute_completion",
    "submission_blockers",
]
