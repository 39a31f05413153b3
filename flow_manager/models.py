from __future__ import annotations  # Interview wizard models and question catalogue

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from interview_answers import Section
from interview_progress import FINAL_STEP


class InterviewStep(BaseModel):  # One page of the wizard
    id: int = Field(ge=1)
    title: str
    section: Optional[Section] = None


class SectionRequirement(BaseModel):  # Questions a section must answer before submission
    section: Section
    title: str
    required_keys: List[str]
    optional_keys: List[str] = Field(default_factory=list)

    @property
    def required(self) -> int:
        return len(self.required_keys)


class SectionCompletion(BaseModel):  # Answered/required tally for one section
    section: Section
    alias: str
    title: str
    answered: int = Field(ge=0)
    required: int = Field(ge=0)
    percentage: float = Field(ge=0.0, le=100.0)

    @property
    def complete(self) -> bool:
        return self.answered >= self.required


class CompletionSummary(BaseModel):  # Overall completion across required questions
    sections: List[SectionCompletion] = Field(default_factory=list)
    answered: int = 0
    required: int = 0
    percentage: float = 0.0

    def completed_sections(self) -> Dict[str, bool]:  # Boolean completeness map persisted on submit
        return {item.section.value: item.complete for item in self.sections}


class Notice(BaseModel):  # Transient, non-fatal message surfaced to the candidate
    kind: str
    message: str
    section: Optional[str] = None
    question_key: Optional[str] = None


INTERVIEW_STEPS: List[InterviewStep] = [
    InterviewStep(id=1, title="General Questions", section=Section.GENERAL),
    InterviewStep(id=2, title="Technical Scenarios", section=Section.TECHNICAL_SCENARIOS),
    InterviewStep(id=3, title="Technical Exercises", section=Section.TECHNICAL_EXERCISES),
    InterviewStep(id=4, title="Culture & Team Fit", section=Section.CULTURE),
    InterviewStep(id=FINAL_STEP, title="Review & Submit"),
]

SECTION_REQUIREMENTS: List[SectionRequirement] = [
    SectionRequirement(
        section=Section.GENERAL,
        title="General Questions",
        required_keys=[
            "experience",
            "healthcare",
            "security",
            "ehr",
            "scalability",
            "mobile",
            "apis",
            "agile",
            "uiux",
            "cloud",
        ],
    ),
    SectionRequirement(
        section=Section.TECHNICAL_SCENARIOS,
        title="Technical Scenarios",
        required_keys=["multitenancy", "userExperience", "apiIntegration", "rbac", "notifications"],
    ),
    SectionRequirement(
        section=Section.TECHNICAL_EXERCISES,
        title="Technical Exercises",
        required_keys=["auth", "sessionNotes", "scheduling", "messaging", "mobile"],
        optional_keys=["dashboard"],
    ),
    SectionRequirement(
        section=Section.CULTURE,
        title="Culture & Team Fit",
        required_keys=["motivation", "feedback", "pressure"],
    ),
]


__all__ = [
    "CompletionSummary",
    "INTERVIEW_STEPS",
    "InterviewStep",
    "Notice",
    "SECTION_REQUIREMENTS",
    "SectionCompletion",
    "SectionRequirement",
]
