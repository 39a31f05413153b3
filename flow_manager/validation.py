"""Advisory presence and length hints for free-text answers."""
from __future__ import annotations

from typing import Optional


def field_validation_message(field: str, value: Optional[str], min_length: int = 50) -> Optional[str]:
    if not value or not value.strip():
        return f"Please provide an answer for {field.lower()}"
    length = len(value.strip())
    if length < min_length:
        return f"Please provide a more detailed answer (minimum {min_length} characters, current: {length})"
    return None


def character_count_message(length: int, min_length: int = 50) -> str:
    if length == 0:
        return "Start typing your answer..."
    if length < min_length:
        return f"{min_length - length} more characters recommended"
    return "Great! Detailed answer provided"


__all__ = ["character_count_message", "field_validation_message"]
