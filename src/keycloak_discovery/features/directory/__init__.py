"""Directory feature: the shared table nodes use as a rendezvous point.

Feature-First layout:
- entities/: DirectoryEntry and the DirectoryStore protocol
- repositories/: PostgreSQL and in-memory stores
- utils/: SQL statements, identifier validation and error translation
"""

from .entities import DirectoryEntry, DirectoryStore
from .repositories import InMemoryDirectoryStore, PostgresDirectoryStore

__all__ = [
    "DirectoryEntry",
    "DirectoryStore",
    "InMemoryDirectoryStore",
    "PostgresDirectoryStore",
]
