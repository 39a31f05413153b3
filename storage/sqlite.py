"""SQLite helpers for the persistence layer."""
from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from config.settings import settings

from .errors import PersistenceError

PathLike = Union[str, Path]


@contextmanager
def get_conn(path: Optional[PathLike] = None, *, operation: str = "") -> Iterator[sqlite3.Connection]:
    """Yield a SQLite connection, ensuring the data directory exists.

    Any ``sqlite3.Error`` raised while connecting or inside the block is
    re-raised as :class:`PersistenceError`; the transaction is rolled back.
    """

    db_path = str(path if path is not None else settings.DB_PATH)
    directory = os.path.dirname(db_path) or "."
    try:
        os.makedirs(directory, exist_ok=True)
        conn = sqlite3.connect(db_path)
    except (OSError, sqlite3.Error) as exc:
        raise PersistenceError(f"Unable to open database '{db_path}': {exc}", operation=operation) from exc
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    try:
        yield conn
        conn.commit()
    except sqlite3.Error as exc:
        conn.rollback()
        raise PersistenceError(f"{operation or 'database operation'} failed: {exc}", operation=operation) from exc
    finally:
        conn.close()


__all__ = ["get_conn", "PathLike"]
