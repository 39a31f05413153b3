"""Observability utilities for the interview portal."""
from .logger import log_event

__all__ = ["log_event"]
