"""Directory entities and protocols."""

from .directory_entry import DirectoryEntry
from .protocols import DirectoryStore

__all__ = ["DirectoryEntry", "DirectoryStore"]
