from __future__ import annotations  # Answer store package exports

from .debounce import AnswerKey, DebouncedWriter, TimerFactory, TimerHandle
from .models import (
    SECTION_ALIASES,
    AnswerValue,
    PlainAnswer,
    Section,
    StructuredAnswer,
    as_answer_value,
    empty_answer_map,
    to_section,
)
from .store import AnswerStore

__all__ = [
    "AnswerKey",
    "AnswerStore",
    "AnswerValue",
    "DebouncedWriter",
    "PlainAnswer",
    "SECTION_ALIASES",
    "Section",
    "StructuredAnswer",
    "TimerFactory",
    "TimerHandle",
    "as_answer_value",
    "empty_answer_map",
    "to_section",
]
