from __future__ import annotations  # Answer persistence keyed by identifier, section and question

import datetime as dt
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from identity import Identifier
from observability import log_event
from storage.migrate import migrate
from storage.sqlite import get_conn

from .models import (
    AnswerValue,
    PlainAnswer,
    Section,
    StructuredAnswer,
    as_answer_value,
    empty_answer_map,
    to_section,
)

_COMPLEX_TAG = "complex"


def _encode(value: Union[PlainAnswer, StructuredAnswer]) -> tuple[Optional[str], str]:  # Split value into answer/metadata columns
    if isinstance(value, PlainAnswer):
        return value.text, "{}"
    return None, json.dumps({"type": _COMPLEX_TAG, "value": value.payload})


def _decode(answer: Optional[str], metadata: Optional[str]) -> Union[PlainAnswer, StructuredAnswer]:  # Inverse of _encode
    envelope: Any = json.loads(metadata) if metadata else {}
    if isinstance(envelope, dict) and envelope.get("type") == _COMPLEX_TAG and "value" in envelope:
        return StructuredAnswer(payload=envelope["value"])
    return PlainAnswer(text=answer or "")


class AnswerStore:  # SQLite-backed answer storage with upsert semantics
    def __init__(self, path: Path) -> None:
        self._path = path
        migrate(str(path))

    def save_answer(
        self,
        identifier: Identifier,
        section: Union[str, Section],
        question_key: str,
        value: Any,
    ) -> AnswerValue:  # Upsert one answer, last write wins
        stored_section = to_section(section)
        answer_value = as_answer_value(value)
        if isinstance(answer_value, PlainAnswer) and answer_value.is_blank():
            raise ValueError("Blank answers are not persisted")
        if not question_key.strip():
            raise ValueError("Question key is required")
        answer_text, metadata = _encode(answer_value)
        now = dt.datetime.now(dt.timezone.utc).isoformat()
        with get_conn(self._path, operation="save_answer") as conn:
            conn.execute(
                """
                INSERT INTO interview_answers (
                    identifier_kind, identifier_value, section, question_key,
                    answer, metadata, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (identifier_kind, identifier_value, section, question_key)
                DO UPDATE SET answer = excluded.answer,
                              metadata = excluded.metadata,
                              updated_at = excluded.updated_at
                """,
                (
                    identifier.kind,
                    identifier.value,
                    stored_section.value,
                    question_key,
                    answer_text,
                    metadata,
                    now,
                    now,
                ),
            )
        log_event(
            "answer_saved",
            identifier.key,
            section=stored_section.value,
            question_key=question_key,
            value_kind=answer_value.kind,
        )
        return answer_value

    def load_answers(self, identifier: Identifier) -> Dict[str, Dict[str, AnswerValue]]:
        """Return every answer for ``identifier`` keyed by section alias then question key."""

        with get_conn(self._path, operation="load_answers") as conn:
            rows = conn.execute(
                """
                SELECT section, question_key, answer, metadata
                FROM interview_answers
                WHERE identifier_kind = ? AND identifier_value = ?
                """,
                (identifier.kind, identifier.value),
            ).fetchall()
        answers = empty_answer_map()
        for row in rows:
            try:
                alias = Section(row["section"]).alias
            except ValueError:
                continue
            answers[alias][row["question_key"]] = _decode(row["answer"], row["metadata"])
        return answers

    def list_answers(self, identifier: Identifier) -> List[Dict[str, Any]]:  # Flat rows for reporting, oldest first
        with get_conn(self._path, operation="list_answers") as conn:
            rows = conn.execute(
                """
                SELECT section, question_key, answer, metadata, updated_at
                FROM interview_answers
                WHERE identifier_kind = ? AND identifier_value = ?
                ORDER BY id ASC
                """,
                (identifier.kind, identifier.value),
            ).fetchall()
        return [
            {
                "section": row["section"],
                "question_key": row["question_key"],
                "value": _decode(row["answer"], row["metadata"]),
                "updated_at": row["updated_at"],
            }
            for row in rows
        ]

    def recent_answers(self, limit: int = 20) -> List[Dict[str, Any]]:  # Latest writes across all identifiers
        with get_conn(self._path, operation="recent_answers") as conn:
            rows = conn.execute(
                """
                SELECT identifier_kind, identifier_value, section, question_key, answer, metadata, updated_at
                FROM interview_answers
                ORDER BY datetime(updated_at) DESC, id DESC
                LIMIT ?
                """,
                (limit,),
            ).fetchall()
        return [dict(row) for row in rows]

    def delete_answers(self, identifier: Identifier) -> int:  # Bulk removal used by candidate deletion
        with get_conn(self._path, operation="delete_answers") as conn:
            cur = conn.execute(
                "DELETE FROM interview_answers WHERE identifier_kind = ? AND identifier_value = ?",
                (identifier.kind, identifier.value),
            )
            return int(cur.rowcount)


__all__ = ["AnswerStore"]
