"""SQLite persistence helpers for the interview portal."""
from .errors import PersistenceError
from .migrate import migrate
from .sqlite import get_conn

__all__ = ["PersistenceError", "get_conn", "migrate"]
