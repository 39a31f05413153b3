"""Errors raised by the persistence layer."""
from __future__ import annotations


class PersistenceError(RuntimeError):  # Raised when a read or write against the store fails
    def __init__(self, message: str, *, operation: str = "") -> None:
        super().__init__(message)
        self.operation = operation


__all__ = ["PersistenceError"]
