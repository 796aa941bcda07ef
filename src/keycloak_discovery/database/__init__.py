"""Database utilities for the shared directory."""

from .connection import DatabaseManager

__all__ = ["DatabaseManager"]
