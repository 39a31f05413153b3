from __future__ import annotations  # Answer domain models and section mapping

from enum import Enum
from typing import Annotated, Any, Dict, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class Section(str, Enum):  # Stored interview sections
    GENERAL = "general"
    TECHNICAL_SCENARIOS = "technical_scenarios"
    TECHNICAL_EXERCISES = "technical_exercises"
    CULTURE = "culture"

    @property
    def alias(self) -> str:  # Client-facing name used in answer maps
        return SECTION_ALIASES[self]


SECTION_ALIASES: Dict[Section, str] = {
    Section.GENERAL: "generalQuestions",
    Section.TECHNICAL_SCENARIOS: "technicalScenarios",
    Section.TECHNICAL_EXERCISES: "technicalExercises",
    Section.CULTURE: "cultureQuestions",
}

_ALIAS_LOOKUP: Dict[str, Section] = {alias: section for section, alias in SECTION_ALIASES.items()}


def to_section(name: Union[str, Section]) -> Section:  # Accept stored names or client aliases
    if isinstance(name, Section):
        return name
    if name in _ALIAS_LOOKUP:
        return _ALIAS_LOOKUP[name]
    try:
        return Section(name)
    except ValueError as exc:
        raise ValueError(f"Unknown interview section '{name}'") from exc


def empty_answer_map() -> Dict[str, Dict[str, "AnswerValue"]]:  # One bucket per section alias
    return {alias: {} for alias in SECTION_ALIASES.values()}


class PlainAnswer(BaseModel):  # Free-text answer
    model_config = ConfigDict(frozen=True)

    kind: Literal["plain"] = "plain"
    text: str

    def raw(self) -> Any:
        return self.text

    def is_blank(self) -> bool:
        return not self.text.strip()


class StructuredAnswer(BaseModel):  # File metadata or nested sub-answers
    kind: Literal["structured"] = "structured"
    payload: Any = None

    def raw(self) -> Any:
        return self.payload

    def is_blank(self) -> bool:
        return self.payload is None or self.payload in ("", [], {})


AnswerValue = Annotated[Union[PlainAnswer, StructuredAnswer], Field(discriminator="kind")]


def as_answer_value(value: Any) -> Union[PlainAnswer, StructuredAnswer]:  # Wrap raw client values in the tagged union
    if isinstance(value, (PlainAnswer, StructuredAnswer)):
        return value
    if isinstance(value, str):
        return PlainAnswer(text=value)
    return StructuredAnswer(payload=value)


__all__ = [
    "AnswerValue",
    "PlainAnswer",
    "SECTION_ALIASES",
    "Section",
    "StructuredAnswer",
    "as_answer_value",
    "empty_answer_map",
    "to_section",
]
