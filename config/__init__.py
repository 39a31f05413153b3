"""Configuration package for the interview portal."""
from .settings import Settings, settings

__all__ = ["Settings", "settings"]
