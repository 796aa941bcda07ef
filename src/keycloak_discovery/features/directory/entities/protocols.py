"""Directory store protocol."""

from abc import abstractmethod
from typing import List, Optional, Protocol, runtime_checkable

from .directory_entry import DirectoryEntry


@runtime_checkable
class DirectoryStore(Protocol):
    """Shared persistent table used as the discovery rendezvous point.

    Each node only writes rows keyed by its own (node_id, incarnation);
    deletes of other nodes' rows are condition-checked and idempotent.
    Implementations raise DirectoryError subclasses and never retry
    internally.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare the store (create the table if needed)."""
        ...

    @abstractmethod
    async def upsert(self, entry: DirectoryEntry) -> DirectoryEntry:
        """Insert or refresh the row keyed by (node_id, incarnation).

        Returns the stored entry, with last_seen_at stamped by the store.
        """
        ...

    @abstractmethod
    async def scan_live(self, staleness_window: float) -> List[DirectoryEntry]:
        """All entries seen within the window, across nodes and incarnations."""
        ...

    @abstractmethod
    async def delete_stale(self, staleness_window: float) -> int:
        """Remove entries older than the window. Returns the number removed."""
        ...

    @abstractmethod
    async def delete_entry(self, node_id: str, incarnation: int,
                           older_than: Optional[float] = None) -> bool:
        """Remove one row, optionally only if it is older than ``older_than`` seconds."""
        ...

    @abstractmethod
    async def next_incarnation(self, node_id: str) -> int:
        """Incarnation for a fresh start of ``node_id``.

        Strictly above every incarnation previously allocated to or stored
        for the node, even after its rows were deregistered or pruned.
        """
        ...

    @abstractmethod
    async def scan_all(self) -> List[DirectoryEntry]:
        """Every row including stale ones."""
        ...

    @abstractmethod
    async def reset(self) -> int:
        """Operator reset: remove every row, keeping incarnation history."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release resources held by the store."""
        ...
