"""Structured logging for portal domain events.

Each event prints one human line to stdout and, when ``settings.LOG_FILE`` is
set, appends one JSON object to a rotating file.
"""
from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
import time
from typing import Any

from config.settings import settings

_logger = logging.getLogger("portal")
_logger.propagate = False


def _ensure_handlers() -> None:
    if _logger.handlers:
        return
    _logger.setLevel(settings.LOG_LEVEL.upper())

    console = logging.StreamHandler(stream=sys.stdout)
    console.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s %(name)s :: %(message)s", datefmt="%Y-%m-%d %H:%M:%S"))
    console.addFilter(lambda record: not getattr(record, "is_json", False))
    _logger.addHandler(console)

    if not settings.LOG_FILE:
        return
    log_dir = os.path.dirname(settings.LOG_FILE)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    json_file = logging.handlers.RotatingFileHandler(
        settings.LOG_FILE,
        maxBytes=settings.LOG_MAX_BYTES,
        backupCount=settings.LOG_BACKUP_COUNT,
    )
    json_file.setFormatter(logging.Formatter("%(message)s"))
    json_file.addFilter(lambda record: getattr(record, "is_json", False))
    _logger.addHandler(json_file)


def _format_human(evt: dict[str, Any]) -> str:  # kind first, then subject, then the event's own fields
    extras = " ".join(f"{key}={value}" for key, value in evt.items() if key not in ("ts", "kind", "subject"))
    line = f"{evt['kind']} subject={evt['subject']}"
    return f"{line} {extras}" if extras else line


def _emit(message: str, *, is_json: bool) -> None:
    record = _logger.makeRecord(_logger.name, logging.INFO, fn="", lno=0, msg=message, args=(), exc_info=None)
    record.is_json = is_json  # type: ignore[attr-defined]
    _logger.handle(record)


def log_event(kind: str, subject: str, **fields: Any) -> None:
    _ensure_handlers()
    payload: dict[str, Any] = {"ts": time.time(), "kind": kind, "subject": subject, **fields}
    _emit(_format_human(payload), is_json=False)
    if settings.LOG_FILE:
        _emit(json.dumps(payload, ensure_ascii=False, default=str), is_json=True)


__all__ = ["log_event"]
