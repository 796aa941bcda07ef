"""Directory store implementations."""

from .in_memory_directory_store import InMemoryDirectoryStore
from .postgres_directory_store import PostgresDirectoryStore

__all__ = ["InMemoryDirectoryStore", "PostgresDirectoryStore"]
