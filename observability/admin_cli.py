"""Lightweight CLI helpers for inspecting the portal tables."""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional, Sequence

from config.settings import settings
from interview_answers import AnswerStore
from interview_progress import ProgressStore
from roster import build_roster, roster_stats, sources_for


def show_roster(db_path: Path) -> None:
    result = build_roster(sources_for(db_path))
    for row in result.rows:
        score = "-" if row.overall_score is None else f"{row.overall_score:.1f}"
        print(f"[{row.date_submitted or '-'}] {row.kind}:{row.id} {row.name} <{row.email}> {row.submission_status} score={score}")
    stats = roster_stats(result.rows)
    print(
        f"total={stats.total_candidates} completed={stats.completed_count} "
        f"in_progress={stats.in_progress_count} invited={stats.invited_count}"
    )
    for warning in result.warnings():
        print(f"warning: {warning.message}")


def tail_progress(db_path: Path, limit: int = 20) -> None:
    for identifier, record in ProgressStore(db_path).list_progress()[:limit]:
        print(
            f"[{record.last_activity() or '-'}] {identifier.key} step={record.current_step} "
            f"status={record.submission_status} sections={record.completed_sections}"
        )


def tail_answers(db_path: Path, limit: int = 20) -> None:
    for row in AnswerStore(db_path).recent_answers(limit):
        text = row["answer"] if row["answer"] is not None else row["metadata"]
        print(
            f"[{row['updated_at']}] {row['identifier_kind']}:{row['identifier_value']} "
            f"{row['section']}/{row['question_key']} = {(text or '')[:60]!r}"
        )


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--db", default=None, help="Database path (defaults to settings.DB_PATH)")
    parser.add_argument("--roster", action="store_true", help="Print the merged candidate roster")
    parser.add_argument("--tail-progress", type=int, help="Show the latest progress records")
    parser.add_argument("--tail-answers", type=int, help="Show the latest saved answers")
    args = parser.parse_args(argv)

    db_path = Path(args.db or settings.DB_PATH)
    if args.roster:
        show_roster(db_path)
    if args.tail_progress:
        tail_progress(db_path, args.tail_progress)
    if args.tail_answers:
        tail_answers(db_path, args.tail_answers)


if __name__ == "__main__":
    main()
